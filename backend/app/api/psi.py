"""
PSI API — Private Set Intersection exchange and disease calibration.

Endpoints:
    POST /psi/compute                       one blinded exchange (single round)
    POST /psi/calculate-risk                calibrated percentage for a match count
    GET  /diseases                          catalogue, WITHOUT marker sets
    GET  /diseases/{disease_id}/calibration calibration constant alone

The compute endpoint never returns raw disease markers, only their
blinded derivatives. Handlers are plain def so the modular
exponentiation runs in the threadpool, off the event loop.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.errors import (
    DiseaseNotFoundError,
    InvalidBlindedElementError,
    RandomSourceUnavailableError,
)
from app.schemas.psi import (
    CalibrationOut,
    DiseaseCategoryOut,
    PSIRequestSchema,
    PSIResponseSchema,
    RiskCalculationRequest,
    RiskCalculationResponse,
)
from app.services.disease_registry import DiseaseRegistry, get_registry
from app.services.psi_service import PSIService, get_psi_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["PSI"])


def _not_found(exc: DiseaseNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.to_dict())


# ═══════════════════════════════════════════════════════════════════════════════
# PSI EXCHANGE
# ═══════════════════════════════════════════════════════════════════════════════

@router.post(
    "/psi/compute",
    response_model=PSIResponseSchema,
    summary="Blind the disease set and double-blind the patient's values",
)
def compute_psi(
    request: PSIRequestSchema,
    service: PSIService = Depends(get_psi_service),
) -> PSIResponseSchema:
    """
    Single-round server step of the PSI protocol.

    A fresh server secret is drawn for this call only and discarded
    before the response is returned.
    """
    try:
        response = service.compute(request.to_request())
    except DiseaseNotFoundError as exc:
        logger.warning(f"[PSI-API] Unknown disease requested: {exc.disease_id}")
        raise _not_found(exc)
    except InvalidBlindedElementError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict())
    except RandomSourceUnavailableError as exc:
        logger.error(f"[PSI-API] {exc.message}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.to_dict()
        )
    return PSIResponseSchema.from_response(response)


@router.post(
    "/psi/calculate-risk",
    response_model=RiskCalculationResponse,
    summary="Calibrated risk percentage for a finished intersection",
)
def calculate_risk(
    request: RiskCalculationRequest,
    service: PSIService = Depends(get_psi_service),
) -> RiskCalculationResponse:
    try:
        risk = service.calculate_risk(
            request.disease_id, request.matched_count, request.total_disease_markers
        )
    except DiseaseNotFoundError as exc:
        raise _not_found(exc)
    return RiskCalculationResponse(
        disease_id=request.disease_id,
        constant=risk.calibration_constant,
        matched_count=request.matched_count,
        total_disease_markers=request.total_disease_markers,
        risk_percentage=risk.percentage,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# DISEASE CATALOGUE
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("/diseases", response_model=List[DiseaseCategoryOut])
def list_diseases(registry: DiseaseRegistry = Depends(get_registry)) -> List[DiseaseCategoryOut]:
    """Public catalogue. Marker sets are stripped: they are only used inside PSI."""
    return [DiseaseCategoryOut(**entry) for entry in registry.list_categories()]


@router.get("/diseases/{disease_id}/calibration", response_model=CalibrationOut)
def get_calibration(
    disease_id: str,
    registry: DiseaseRegistry = Depends(get_registry),
) -> CalibrationOut:
    try:
        constant = registry.get_calibration_constant(disease_id)
    except DiseaseNotFoundError as exc:
        raise _not_found(exc)
    return CalibrationOut(disease_id=disease_id, constant=constant)
