"""
PRIVAGENE Private Set Intersection core.

Two-message commutative-blinding PSI over a large prime field, plus the
risk score computed from its output.

Public API:
    - blind_markers:      Client stage — H(g_i)^a mod P, keeps a.
    - server_blind:       Server stage — H(d_j)^b and (H(g_i)^a)^b under one b.
    - intersect:          Exact-value matching of doubly-blinded sets.
    - compute_risk:       Calibrated percentage; score() adds the fallback.
"""

from app.core.psi.models import PSIRequest, PSIResponse, MatchResult, RiskScore
from app.core.psi.client import ClientBlindingState, blind_markers
from app.core.psi.server import server_blind
from app.core.psi.matching import finalize_disease_markers, intersect
from app.core.psi.scoring import compute_risk, compute_uncalibrated_risk, score

__all__ = [
    "PSIRequest",
    "PSIResponse",
    "MatchResult",
    "RiskScore",
    "ClientBlindingState",
    "blind_markers",
    "server_blind",
    "finalize_disease_markers",
    "intersect",
    "compute_risk",
    "compute_uncalibrated_risk",
    "score",
]
