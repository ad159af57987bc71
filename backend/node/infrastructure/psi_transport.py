"""
PSI Transport — the patient node's HTTP link to the hospital backend.

Three calls, each with its own timeout:
    exchange()                 the single PSI request/response
    get_calibration_constant() per-disease k for risk scoring
    persist_assessment()       hand the finished result to storage

Failures are translated into the PSI error taxonomy so the runner can
decide between failing, degrading, or serving a cached result:
    exchange      → NetworkError (DISEASE_NOT_FOUND body → DiseaseNotFoundError)
    calibration   → CalibrationUnavailableError
    persistence   → NetworkError
"""

import logging
from typing import Optional, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import CalibrationUnavailableError, DiseaseNotFoundError, NetworkError
from app.core.psi.models import PSIRequest, PSIResponse
from app.schemas.psi import (
    CalibrationOut,
    PSIRequestSchema,
    PSIResponseSchema,
    RiskAssessmentCreated,
    RiskAssessmentIn,
)

logger = logging.getLogger(__name__)


def _error_code(resp: httpx.Response) -> Optional[str]:
    """The `error` code of a FastAPI `detail` body, if the response carries one."""
    try:
        detail = resp.json().get("detail")
    except (ValueError, AttributeError):
        return None
    if isinstance(detail, dict):
        return detail.get("error")
    return None


class PSITransport(Protocol):
    """What the PSI runner needs from the network."""

    async def exchange(self, request: PSIRequest) -> PSIResponse:
        ...

    async def get_calibration_constant(self, disease_id: str) -> float:
        ...

    async def persist_assessment(self, assessment: RiskAssessmentIn) -> str:
        ...


class HttpPSITransport:
    """
    httpx-based transport.

    Usage:
        async with HttpPSITransport("http://localhost:8000") as transport:
            response = await transport.exchange(request)

    A pre-built httpx.AsyncClient may be injected (tests use
    httpx.MockTransport or httpx.ASGITransport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        calibration_timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or settings.PSI_SERVER_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.PSI_REQUEST_TIMEOUT_SECONDS
        self.calibration_timeout = (
            calibration_timeout
            if calibration_timeout is not None
            else settings.CALIBRATION_TIMEOUT_SECONDS
        )
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)

    async def __aenter__(self) -> "HttpPSITransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def exchange(self, request: PSIRequest) -> PSIResponse:
        payload = PSIRequestSchema.from_request(request).model_dump(by_alias=True)
        try:
            resp = await self._client.post("/psi/compute", json=payload, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"PSI exchange timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"PSI exchange failed: {exc}") from exc

        if resp.status_code == 404 and _error_code(resp) == DiseaseNotFoundError.code:
            raise DiseaseNotFoundError(request.disease_id)
        if resp.status_code != 200:
            raise NetworkError(f"PSI exchange rejected with HTTP {resp.status_code}")

        try:
            return PSIResponseSchema.model_validate(resp.json()).to_response()
        except (ValueError, ValidationError) as exc:
            raise NetworkError(f"Malformed PSI response: {exc}") from exc

    async def get_calibration_constant(self, disease_id: str) -> float:
        try:
            path = f"/diseases/{quote(disease_id, safe='')}/calibration"
            resp = await self._client.get(path, timeout=self.calibration_timeout)
            resp.raise_for_status()
            return CalibrationOut.model_validate(resp.json()).constant
        except httpx.HTTPError as exc:
            raise CalibrationUnavailableError(
                f"Calibration for {disease_id} unavailable: {exc}"
            ) from exc
        except (ValueError, ValidationError) as exc:
            raise CalibrationUnavailableError(
                f"Malformed calibration response for {disease_id}"
            ) from exc

    async def persist_assessment(self, assessment: RiskAssessmentIn) -> str:
        try:
            resp = await self._client.post(
                "/risk-assessments",
                json=assessment.model_dump(by_alias=True, mode="json"),
            )
            resp.raise_for_status()
            return RiskAssessmentCreated.model_validate(resp.json()).id
        except httpx.HTTPError as exc:
            raise NetworkError(f"Persisting assessment failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise NetworkError("Malformed persistence response") from exc
