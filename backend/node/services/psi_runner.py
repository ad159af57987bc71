"""
Patient PSI Runner — drives one protocol run from the patient node.

Run flow:
    1. Blind the patient's markers with a fresh secret a.
    2. Single exchange with the hospital (one request, one response).
    3. Finalize: re-blind disease values with a, intersect, drop a.
    4. Score with the disease's calibration constant; if it cannot be
       fetched, fall back to the uncalibrated formula, flagged degraded.
    5. Persist the result (failure logged, never fatal to the score).

Outcomes are tagged:
    FreshPSIOutcome   — computed by this run.
    CachedPSIOutcome  — the exchange failed and a previous fresh result for
                        the same (subject, disease) was served instead, with
                        StalenessInfo. Never presented as a fresh computation.

If the exchange fails and nothing is cached, NetworkError propagates.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, Optional, Sequence, Union

from app.core.crypto.group import GroupParameters, get_group
from app.core.errors import CalibrationUnavailableError, NetworkError
from app.core.psi.client import blind_markers
from app.core.psi.models import MatchResult, RiskScore
from app.core.psi.scoring import score
from app.schemas.psi import RiskAssessmentIn
from node.infrastructure.psi_transport import PSITransport
from node.services.result_cache import ResultCache

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# OUTCOME TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StalenessInfo:
    cached_at: datetime
    age_seconds: float
    reason: str


@dataclass(frozen=True)
class FreshPSIOutcome:
    subject_id: str
    disease_id: str
    match: MatchResult
    risk: RiskScore
    computed_at: datetime
    record_id: Optional[str] = None
    kind: Literal["fresh"] = "fresh"

    @property
    def is_degraded(self) -> bool:
        return self.risk.degraded

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "subject_id": self.subject_id,
            "disease_id": self.disease_id,
            **self.match.to_dict(),
            "risk": self.risk.to_dict(),
            "computed_at": self.computed_at.isoformat(),
            "record_id": self.record_id,
        }


@dataclass(frozen=True)
class CachedPSIOutcome:
    subject_id: str
    disease_id: str
    match: MatchResult
    risk: RiskScore
    staleness: StalenessInfo
    kind: Literal["cached"] = "cached"

    @property
    def is_degraded(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "subject_id": self.subject_id,
            "disease_id": self.disease_id,
            **self.match.to_dict(),
            "risk": self.risk.to_dict(),
            "staleness": {
                "cached_at": self.staleness.cached_at.isoformat(),
                "age_seconds": round(self.staleness.age_seconds, 2),
                "reason": self.staleness.reason,
            },
        }


PSIOutcome = Union[FreshPSIOutcome, CachedPSIOutcome]


# ═══════════════════════════════════════════════════════════════════════════════
# RUNNER
# ═══════════════════════════════════════════════════════════════════════════════

class PatientPSIRunner:
    """
    Runs PSI for one patient node.

    Usage:
        async with HttpPSITransport(url) as transport:
            runner = PatientPSIRunner(transport)
            outcome = await runner.run("patient-1", ["BRCA1", "TP53"], "breast-cancer")
    """

    def __init__(
        self,
        transport: PSITransport,
        group: Optional[GroupParameters] = None,
        cache: Optional[ResultCache] = None,
    ) -> None:
        self.transport = transport
        self.group = group or get_group()
        self.cache = cache if cache is not None else ResultCache()

    async def run(
        self,
        subject_id: str,
        markers: Sequence[str],
        disease_id: str,
        persist: bool = True,
    ) -> PSIOutcome:
        """
        Execute one PSI run.

        Raises:
            EmptyInputError: no markers supplied.
            DiseaseNotFoundError: the hospital does not know disease_id.
            RandomSourceUnavailableError: no secret could be drawn.
            NetworkError: exchange failed and no usable cached result exists.
        """
        t_start = time.perf_counter()
        state = blind_markers(markers, self.group)

        try:
            response = await self.transport.exchange(state.to_request(disease_id))
        except NetworkError as exc:
            state.discard()
            return self._serve_cached(subject_id, disease_id, exc)
        except BaseException:
            state.discard()
            raise

        match = state.finalize(response)
        risk = await self._score(disease_id, match)

        record_id = None
        if persist:
            record_id = await self._persist(subject_id, disease_id, match, risk)

        self.cache.put(subject_id, disease_id, match, risk)
        elapsed = (time.perf_counter() - t_start) * 1000
        logger.info(
            f"[NODE] PSI run complete | disease={disease_id} | "
            f"{match.match_count}/{match.total_disease_markers} | "
            f"{risk.percentage:.2f}%{' (degraded)' if risk.degraded else ''} | {elapsed:.1f}ms"
        )
        return FreshPSIOutcome(
            subject_id=subject_id,
            disease_id=disease_id,
            match=match,
            risk=risk,
            computed_at=datetime.now(timezone.utc),
            record_id=record_id,
        )

    async def _score(self, disease_id: str, match: MatchResult) -> RiskScore:
        try:
            constant = await self.transport.get_calibration_constant(disease_id)
        except CalibrationUnavailableError as exc:
            return score(match.match_count, match.total_disease_markers, None, reason=exc.message)
        return score(match.match_count, match.total_disease_markers, constant)

    async def _persist(
        self, subject_id: str, disease_id: str, match: MatchResult, risk: RiskScore
    ) -> Optional[str]:
        assessment = RiskAssessmentIn(
            subject_id=subject_id,
            disease_id=disease_id,
            match_count=match.match_count,
            matched_markers=list(match.matched_markers),
            risk_percentage=risk.percentage,
            degraded=risk.degraded,
        )
        try:
            return await self.transport.persist_assessment(assessment)
        except NetworkError as exc:
            logger.warning(f"[NODE] Result not persisted, score still returned: {exc.message}")
            return None

    def _serve_cached(self, subject_id: str, disease_id: str, error: NetworkError) -> CachedPSIOutcome:
        entry = self.cache.get(subject_id, disease_id)
        if entry is None:
            logger.error(f"[NODE] PSI exchange failed and no cached result: {error.message}")
            raise error

        age = entry.age_seconds(self.cache.now())
        logger.warning(
            f"[NODE] PSI exchange failed; serving cached result ({age:.0f}s old): {error.message}"
        )
        return CachedPSIOutcome(
            subject_id=subject_id,
            disease_id=disease_id,
            match=entry.match,
            risk=entry.risk,
            staleness=StalenessInfo(
                cached_at=datetime.fromtimestamp(entry.cached_at, tz=timezone.utc),
                age_seconds=age,
                reason=error.message,
            ),
        )
