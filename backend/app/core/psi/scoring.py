"""
Risk Scoring — match ratio scaled by a per-disease calibration constant.

Formulas:
    calibrated:    (matchCount / totalMarkers) × k,    k ∈ (0, 100]
    uncalibrated:  (matchCount / totalMarkers) × 100   (degraded fallback)

totalMarkers = 0 always scores 0. The result is clamped to [0, 100].
The constant itself is validated where it is set (the disease registry),
not here.
"""

from __future__ import annotations

import logging
from typing import Optional

from app.core.psi.models import RiskScore

logger = logging.getLogger(__name__)

UNCALIBRATED_CONSTANT: float = 100.0
MIN_PERCENTAGE: float = 0.0
MAX_PERCENTAGE: float = 100.0


def _clamp(value: float) -> float:
    return max(MIN_PERCENTAGE, min(MAX_PERCENTAGE, value))


def _match_ratio(match_count: int, total_markers: int) -> float:
    if match_count < 0:
        raise ValueError("match_count must be non-negative")
    if total_markers < 0:
        raise ValueError("total_markers must be non-negative")
    if total_markers == 0:
        return 0.0
    return match_count / total_markers


def compute_risk(match_count: int, total_markers: int, constant: float) -> RiskScore:
    """Calibrated risk percentage."""
    ratio = _match_ratio(match_count, total_markers)
    return RiskScore(percentage=_clamp(ratio * constant), calibration_constant=constant)


def compute_uncalibrated_risk(match_count: int, total_markers: int, reason: str = "") -> RiskScore:
    """
    Degraded risk percentage with k implicitly 100.

    Scores from this path are on a different scale than calibrated ones and
    are always flagged degraded.
    """
    ratio = _match_ratio(match_count, total_markers)
    notes = ["Calibration constant unavailable; uncalibrated formula used."]
    if reason:
        notes.append(reason)
    logger.warning(f"[RISK] Falling back to uncalibrated scoring{': ' + reason if reason else ''}")
    return RiskScore(
        percentage=_clamp(ratio * UNCALIBRATED_CONSTANT),
        calibration_constant=UNCALIBRATED_CONSTANT,
        degraded=True,
        notes=notes,
    )


def score(
    match_count: int,
    total_markers: int,
    constant: Optional[float],
    reason: str = "",
) -> RiskScore:
    """Calibrated when a constant is available, degraded fallback otherwise."""
    if constant is None:
        return compute_uncalibrated_risk(match_count, total_markers, reason)
    return compute_risk(match_count, total_markers, constant)
