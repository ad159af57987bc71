"""
Result Cache — last fresh PSI result per (subject, disease).

Only consulted when the exchange itself fails with NetworkError. Entries
hold derived results (matched markers, score); never secrets or blinded
values. Entries older than the TTL are not served.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from app.core.config import settings
from app.core.psi.models import MatchResult, RiskScore


@dataclass(frozen=True)
class CachedEntry:
    match: MatchResult
    risk: RiskScore
    cached_at: float

    def age_seconds(self, now: float) -> float:
        return max(0.0, now - self.cached_at)


class ResultCache:
    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.RESULT_CACHE_TTL_SECONDS
        self._clock = clock
        self._entries: Dict[Tuple[str, str], CachedEntry] = {}
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def put(self, subject_id: str, disease_id: str, match: MatchResult, risk: RiskScore) -> CachedEntry:
        entry = CachedEntry(match=match, risk=risk, cached_at=self._clock())
        with self._lock:
            self._entries[(subject_id, disease_id)] = entry
        return entry

    def get(self, subject_id: str, disease_id: str) -> Optional[CachedEntry]:
        """Entry if present and within TTL. Expired entries are evicted."""
        key = (subject_id, disease_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.age_seconds(self._clock()) > self.ttl_seconds:
                del self._entries[key]
                return None
            return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
