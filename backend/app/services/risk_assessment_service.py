"""
Risk Assessment Store — persistence collaborator for finished PSI results.

Stores what the patient chose to keep (match count, matched markers,
percentage, degraded flag) keyed by an opaque id. Nothing blinded and no
secret ever reaches this store.
"""

import logging
import secrets
import threading
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.schemas.psi import RiskAssessmentIn, RiskAssessmentOut

logger = logging.getLogger(__name__)


def _new_assessment_id() -> str:
    return f"risk_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


class RiskAssessmentStore:
    """In-memory assessment store, newest-first reads per subject."""

    def __init__(self) -> None:
        self._records: Dict[str, RiskAssessmentOut] = {}
        self._lock = threading.Lock()

    def create_assessment(self, data: RiskAssessmentIn) -> RiskAssessmentOut:
        record = RiskAssessmentOut(
            **data.model_dump(),
            id=_new_assessment_id(),
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._records[record.id] = record
        logger.info(
            f"[ASSESSMENT] Stored {record.id} | disease={record.disease_id} | "
            f"matches={record.match_count} | degraded={record.degraded}"
        )
        return record

    def get_assessments_by_subject(self, subject_id: str) -> List[RiskAssessmentOut]:
        with self._lock:
            records = [r for r in self._records.values() if r.subject_id == subject_id]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def get_assessment_by_id(self, assessment_id: str) -> Optional[RiskAssessmentOut]:
        return self._records.get(assessment_id)

    def get_latest_assessment(self, subject_id: str) -> Optional[RiskAssessmentOut]:
        records = self.get_assessments_by_subject(subject_id)
        return records[0] if records else None

    def delete_assessment(self, assessment_id: str) -> bool:
        with self._lock:
            return self._records.pop(assessment_id, None) is not None


_store: Optional[RiskAssessmentStore] = None


def get_assessment_store() -> RiskAssessmentStore:
    global _store
    if _store is None:
        _store = RiskAssessmentStore()
    return _store
