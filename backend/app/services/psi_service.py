"""
PSI Service — hospital-side handling of one PSI request.

Flow for compute():
    1. Resolve the disease marker set (DiseaseNotFoundError → no secret drawn).
    2. Range-check every incoming blinded value against P.
    3. server_blind(): fresh b, blind disease set, double-blind patient list.
    4. Return the response; b is already gone.

No session state is kept between calls; concurrent requests each draw
their own secret.
"""

import logging
from typing import Optional, Sequence

from app.core.config import settings
from app.core.crypto.group import GroupParameters, get_group
from app.core.errors import InvalidBlindedElementError
from app.core.psi.models import PSIRequest, PSIResponse, RiskScore
from app.core.psi.scoring import compute_risk
from app.core.psi.server import server_blind
from app.services.disease_registry import DiseaseRegistry, get_registry

logger = logging.getLogger(__name__)


class PSIService:
    """Binds the server blinding stage to the disease registry."""

    def __init__(
        self,
        registry: Optional[DiseaseRegistry] = None,
        group: Optional[GroupParameters] = None,
        max_markers: Optional[int] = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.group = group or get_group()
        self.max_markers = (
            max_markers if max_markers is not None else settings.MAX_MARKERS_PER_REQUEST
        )

    def _validate_blinded(self, values: Sequence[int]) -> None:
        if len(values) > self.max_markers:
            raise InvalidBlindedElementError(
                f"Too many blinded markers: {len(values)} > {self.max_markers}"
            )
        for i, v in enumerate(values):
            if not 0 <= v < self.group.p:
                raise InvalidBlindedElementError(
                    f"Blinded element {i} is outside the group range [0, P)"
                )

    def compute(self, request: PSIRequest) -> PSIResponse:
        """
        Answer one PSI request.

        Raises:
            DiseaseNotFoundError: unknown disease id.
            InvalidBlindedElementError: a value outside [0, P) or too many values.
            RandomSourceUnavailableError: no secret could be drawn.
        """
        disease_markers = self.registry.get_markers(request.disease_id)
        self._validate_blinded(request.blinded_patient_markers)

        logger.info(
            f"[PSI-SERVER] compute() | disease={request.disease_id} | "
            f"{len(request.blinded_patient_markers)} blinded value(s) received"
        )
        return server_blind(disease_markers, request.blinded_patient_markers, self.group)

    def calibration_constant(self, disease_id: str) -> float:
        return self.registry.get_calibration_constant(disease_id)

    def calculate_risk(
        self, disease_id: str, matched_count: int, total_disease_markers: int
    ) -> RiskScore:
        """Calibrated percentage using the disease's registered constant."""
        constant = self.registry.get_calibration_constant(disease_id)
        risk = compute_risk(matched_count, total_disease_markers, constant)
        logger.info(
            f"[RISK] disease={disease_id} | {matched_count}/{total_disease_markers} "
            f"× k={constant} → {risk.percentage:.2f}%"
        )
        return risk


_service: Optional[PSIService] = None


def get_psi_service() -> PSIService:
    global _service
    if _service is None:
        _service = PSIService()
    return _service
