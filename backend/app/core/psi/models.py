"""
In-process data models for one PSI run.

These are the algorithmic shapes (big ints, not strings). The wire
shapes with decimal-string encoding live in app.schemas.psi.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(frozen=True)
class PSIRequest:
    """
    Client → server message.

    Position i of blinded_patient_markers corresponds to position i of the
    client's original (unblinded) marker list.
    """

    blinded_patient_markers: Tuple[int, ...]
    disease_id: str


@dataclass(frozen=True)
class PSIResponse:
    """
    Server → client message.

    blinded_disease_markers carries no cross-reference meaning.
    double_blinded_patient_markers[i] still lines up with the client's marker i.
    """

    blinded_disease_markers: Tuple[int, ...]
    double_blinded_patient_markers: Tuple[int, ...]


@dataclass(frozen=True)
class MatchResult:
    """Markers found in both sets, in the client's original order."""

    matched_markers: Tuple[str, ...] = ()
    total_disease_markers: int = 0

    @property
    def match_count(self) -> int:
        return len(self.matched_markers)

    @property
    def matched_set(self) -> frozenset:
        return frozenset(self.matched_markers)

    def to_dict(self) -> dict:
        return {
            "match_count": self.match_count,
            "matched_markers": list(self.matched_markers),
            "total_disease_markers": self.total_disease_markers,
        }


@dataclass(frozen=True)
class RiskScore:
    """
    Risk percentage in [0, 100].

    degraded is True when the calibration constant could not be retrieved
    and the uncalibrated formula (k = 100) was used instead.
    """

    percentage: float
    calibration_constant: float
    degraded: bool = False
    notes: List[str] = field(default_factory=list, compare=False)

    def to_dict(self) -> dict:
        return {
            "percentage": self.percentage,
            "calibration_constant": self.calibration_constant,
            "degraded": self.degraded,
            "notes": list(self.notes),
        }
