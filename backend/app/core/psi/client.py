"""
Client Blinding Stage and client-side finalize (patient side).

Run lifecycle:
    1. blind_markers()  → ClientBlindingState (blinded list + secret a)
    2. send state.to_request(disease_id) to the hospital
    3. state.finalize(response) → MatchResult; the secret is dropped here

A fresh secret is drawn on every call to blind_markers(), so blinding the
same marker list twice gives two unrelated transcripts. The secret is
excluded from repr() and never leaves this object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from app.core.crypto.group import GroupParameters
from app.core.crypto.modular import (
    canonicalize_marker,
    hash_to_group,
    mod_pow,
    random_secret,
)
from app.core.errors import EmptyInputError, ProtocolStateError
from app.core.psi.matching import finalize_disease_markers, intersect
from app.core.psi.models import MatchResult, PSIRequest, PSIResponse

logger = logging.getLogger(__name__)


@dataclass
class ClientBlindingState:
    """Everything the client keeps between the request and the response."""

    markers: Tuple[str, ...]
    blinded: Tuple[int, ...]
    group: GroupParameters
    _secret: Optional[int] = field(default=None, repr=False, compare=False)

    @property
    def is_consumed(self) -> bool:
        return self._secret is None

    def to_request(self, disease_id: str) -> PSIRequest:
        return PSIRequest(blinded_patient_markers=self.blinded, disease_id=disease_id)

    def finalize(self, response: PSIResponse) -> MatchResult:
        """
        Re-blind the server's disease markers with a and intersect.

        The secret is discarded whether or not matching succeeds.
        """
        if self._secret is None:
            raise ProtocolStateError("Client secret already consumed; start a new run")
        secret, self._secret = self._secret, None

        if len(response.double_blinded_patient_markers) != len(self.markers):
            raise ProtocolStateError(
                f"Server returned {len(response.double_blinded_patient_markers)} "
                f"double-blinded values for {len(self.markers)} markers"
            )

        final_disease = finalize_disease_markers(
            response.blinded_disease_markers, secret, self.group
        )
        result = intersect(
            final_disease,
            response.double_blinded_patient_markers,
            self.markers,
            total_disease_markers=len(response.blinded_disease_markers),
        )
        logger.info(
            f"[PSI-CLIENT] Finalized run | {result.match_count} match(es) "
            f"against {result.total_disease_markers} disease marker(s)"
        )
        return result

    def discard(self) -> None:
        """Abandon the run without finalizing."""
        self._secret = None


def blind_markers(markers: Sequence[str], group: GroupParameters) -> ClientBlindingState:
    """
    Blind the patient's markers: blinded_i = H(g_i)^a mod P.

    Args:
        markers: The patient's marker identifiers, in order. Case-insensitive.
        group: Shared group parameters.

    Returns:
        ClientBlindingState holding the ordered blinded values and secret a.

    Raises:
        EmptyInputError: if markers is empty.
        RandomSourceUnavailableError: if no secret can be drawn.
    """
    canonical = tuple(canonicalize_marker(m) for m in markers)
    if not canonical:
        raise EmptyInputError("No markers supplied; there is nothing to intersect")
    if any(not m for m in canonical):
        raise EmptyInputError("Marker identifiers must be non-empty")

    a = random_secret(group.q)
    blinded = tuple(mod_pow(hash_to_group(m, group.q), a, group.p) for m in canonical)

    logger.info(f"[PSI-CLIENT] Blinded {len(blinded)} marker(s)")
    return ClientBlindingState(markers=canonical, blinded=blinded, group=group, _secret=a)
