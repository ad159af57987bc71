"""
Server Blinding & Double-Blinding Stage (hospital side).

One call does both jobs under a single fresh secret b:
    blindedDisease_j       = H(d_j)^b mod P
    doubleBlindedPatient_i = (H(g_i)^a)^b mod P

b lives only inside server_blind(); nothing about it survives the call.
Using two different secrets for the two lists would break the equality
the client relies on.
"""

from __future__ import annotations

import logging
import time
from typing import Sequence

from app.core.crypto.group import GroupParameters
from app.core.crypto.modular import hash_to_group, mod_pow, random_secret
from app.core.psi.models import PSIResponse

logger = logging.getLogger(__name__)


def server_blind(
    disease_markers: Sequence[str],
    blinded_patient: Sequence[int],
    group: GroupParameters,
) -> PSIResponse:
    """
    Blind the disease set and double-blind the caller's values.

    Index order of blinded_patient is preserved in the output.

    Raises:
        RandomSourceUnavailableError: if no secret can be drawn.
    """
    t_start = time.perf_counter()
    b = random_secret(group.q)

    blinded_disease = tuple(
        mod_pow(hash_to_group(marker, group.q), b, group.p) for marker in disease_markers
    )
    double_blinded = tuple(mod_pow(value, b, group.p) for value in blinded_patient)
    del b

    elapsed = (time.perf_counter() - t_start) * 1000
    logger.info(
        f"[PSI-SERVER] Blinded {len(blinded_disease)} disease marker(s), "
        f"double-blinded {len(double_blinded)} patient value(s) | {elapsed:.1f}ms"
    )
    return PSIResponse(
        blinded_disease_markers=blinded_disease,
        double_blinded_patient_markers=double_blinded,
    )
