"""
Pydantic schemas for the PSI exchange and its satellite endpoints.

Big integers travel as decimal strings so that no JSON parser along the
way rounds them to a float. Field names are snake_case in Python and
camelCase on the wire:

    request   { blindedPatientMarkers: [str...], diseaseId: str }
    response  { blindedDiseaseMarkers: [str...], doubleBlindedPatientMarkers: [str...] }

Range checks against P happen in the PSI service, which owns the group.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import settings
from app.core.crypto.group import get_group
from app.core.psi.models import PSIRequest, PSIResponse

_DECIMAL_RE = re.compile(r"^[0-9]+$")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class WireModel(BaseModel):
    """Base for every wire model: camelCase aliases, snake_case attributes."""
    model_config = ConfigDict(alias_generator=_camel, populate_by_name=True)


def _check_decimal_strings(values: List[str]) -> List[str]:
    # No group element has more digits than P.
    max_digits = len(str(get_group().p))
    for i, v in enumerate(values):
        if len(v) > max_digits:
            raise ValueError(f"Element {i} has more than {max_digits} digits")
        if not _DECIMAL_RE.match(v):
            raise ValueError(f"Element {i} is not a non-negative decimal integer string")
    return values


# ═══════════════════════════════════════════════════════════════════════════════
# PSI EXCHANGE
# ═══════════════════════════════════════════════════════════════════════════════

class PSIRequestSchema(WireModel):
    """Blinded patient markers H(g_i)^a mod P, in the patient's marker order."""
    blinded_patient_markers: List[str] = Field(
        ...,
        max_length=settings.MAX_MARKERS_PER_REQUEST,
        description="Decimal-string big integers; position i ↔ patient marker i",
    )
    disease_id: str = Field(..., min_length=1, max_length=128)

    @field_validator("blinded_patient_markers")
    @classmethod
    def validate_decimal(cls, v: List[str]) -> List[str]:
        return _check_decimal_strings(v)

    @classmethod
    def from_request(cls, request: PSIRequest) -> "PSIRequestSchema":
        return cls(
            blinded_patient_markers=[str(x) for x in request.blinded_patient_markers],
            disease_id=request.disease_id,
        )

    def to_request(self) -> PSIRequest:
        return PSIRequest(
            blinded_patient_markers=tuple(int(x) for x in self.blinded_patient_markers),
            disease_id=self.disease_id,
        )


class PSIResponseSchema(WireModel):
    """Server's single reply: its own blinded set plus the re-blinded patient list."""
    blinded_disease_markers: List[str] = Field(default_factory=list)
    double_blinded_patient_markers: List[str] = Field(default_factory=list)

    @field_validator("blinded_disease_markers", "double_blinded_patient_markers")
    @classmethod
    def validate_decimal(cls, v: List[str]) -> List[str]:
        return _check_decimal_strings(v)

    @classmethod
    def from_response(cls, response: PSIResponse) -> "PSIResponseSchema":
        return cls(
            blinded_disease_markers=[str(x) for x in response.blinded_disease_markers],
            double_blinded_patient_markers=[
                str(x) for x in response.double_blinded_patient_markers
            ],
        )

    def to_response(self) -> PSIResponse:
        return PSIResponse(
            blinded_disease_markers=tuple(int(x) for x in self.blinded_disease_markers),
            double_blinded_patient_markers=tuple(
                int(x) for x in self.double_blinded_patient_markers
            ),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# DISEASE CATALOGUE & CALIBRATION
# ═══════════════════════════════════════════════════════════════════════════════

class DiseaseCategoryOut(WireModel):
    """Public view of a disease. The marker set is never included."""
    id: str
    name: str
    description: str = ""
    marker_count: int = Field(..., ge=0)


class CalibrationOut(WireModel):
    disease_id: str
    constant: float = Field(..., gt=0.0, le=100.0)


class RiskCalculationRequest(WireModel):
    disease_id: str = Field(..., min_length=1)
    matched_count: int = Field(..., ge=0)
    total_disease_markers: int = Field(..., ge=0)


class RiskCalculationResponse(WireModel):
    success: bool = True
    disease_id: str
    constant: float
    matched_count: int
    total_disease_markers: int
    risk_percentage: float = Field(..., ge=0.0, le=100.0)


# ═══════════════════════════════════════════════════════════════════════════════
# RISK ASSESSMENT PERSISTENCE
# ═══════════════════════════════════════════════════════════════════════════════

class RiskAssessmentIn(WireModel):
    """A finished PSI result handed to the persistence collaborator."""
    subject_id: str = Field(..., min_length=1, max_length=128)
    disease_id: str = Field(..., min_length=1, max_length=128)
    disease_name: Optional[str] = None
    match_count: int = Field(..., ge=0)
    matched_markers: List[str] = Field(default_factory=list)
    risk_percentage: float = Field(..., ge=0.0, le=100.0)
    degraded: bool = False
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("matched_markers")
    @classmethod
    def normalize_markers(cls, v: List[str]) -> List[str]:
        return [m.strip().upper() for m in v]


class RiskAssessmentOut(RiskAssessmentIn):
    id: str
    created_at: datetime


class RiskAssessmentCreated(WireModel):
    id: str
    created_at: datetime
