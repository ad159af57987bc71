"""
Intersection & Matching.

For any marker x held by both sides,
    (H(x)^a)^b = H(x)^(ab) = (H(x)^b)^a   (mod P)
so a true match always produces an exact value collision. Equality is
exact over the full integers; there is no fuzzy matching.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Set

from app.core.crypto.group import GroupParameters
from app.core.crypto.modular import mod_pow
from app.core.psi.models import MatchResult


def finalize_disease_markers(
    blinded_disease: Iterable[int], secret: int, group: GroupParameters
) -> Set[int]:
    """Raise each H(d_j)^b to the client's secret and collect into a lookup set."""
    return {mod_pow(value, secret, group.p) for value in blinded_disease}


def intersect(
    final_disease: Set[int],
    double_blinded_patient: Sequence[int],
    markers: Sequence[str],
    total_disease_markers: int = 0,
) -> MatchResult:
    """
    Recover matched markers by position.

    double_blinded_patient[i] corresponds to markers[i]. A marker listed
    twice by the client is reported once.
    """
    matches: List[str] = []
    seen: Set[str] = set()
    for marker, value in zip(markers, double_blinded_patient):
        if value in final_disease and marker not in seen:
            matches.append(marker)
            seen.add(marker)
    return MatchResult(
        matched_markers=tuple(matches),
        total_disease_markers=total_disease_markers,
    )
