"""
PRIVAGENE-PSI — Hospital Backend API Entry Point.

Privacy-preserving disease risk assessment. A patient learns how many of
their genetic markers overlap with the hospital's registered marker set
for a disease; neither side discloses its full set to the other.

Routers:
    /psi/*               PSI exchange and server-side risk calculation
    /diseases            public catalogue (no marker sets)
    /risk-assessments    persistence of finished results
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.assessments import router as assessments_router
from app.api.psi import router as psi_router
from app.core.config import settings
from app.core.crypto.group import get_group
from app.core.errors import (
    DiseaseNotFoundError,
    EmptyInputError,
    InvalidBlindedElementError,
    InvalidCalibrationConstantError,
    PSIError,
    RandomSourceUnavailableError,
)

logger = logging.getLogger(__name__)

# --- Application boot timestamp for uptime tracking ---
_BOOT_TIME: float = time.time()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Private Set Intersection backend for genetic disease risk assessment",
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

# --- CORS Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(psi_router)
app.include_router(assessments_router)


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR MAPPING
# ═══════════════════════════════════════════════════════════════════════════════

_STATUS_BY_ERROR = {
    DiseaseNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidBlindedElementError: status.HTTP_400_BAD_REQUEST,
    EmptyInputError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    RandomSourceUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@app.exception_handler(PSIError)
async def psi_error_handler(request: Request, exc: PSIError) -> JSONResponse:
    """Protocol errors that escape a router keep their code; never a zero score."""
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning(f"[MAIN] {exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


@app.exception_handler(InvalidCalibrationConstantError)
async def calibration_error_handler(
    request: Request, exc: InvalidCalibrationConstantError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": {"error": "INVALID_CALIBRATION_CONSTANT", "message": str(exc)}},
    )


# ═══════════════════════════════════════════════════════════════════════════════
# SYSTEM ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════════

@app.get("/")
def root() -> dict:
    """Root endpoint — confirms the API process is alive."""
    return {"message": "PRIVAGENE-PSI API is operational", "status": "online"}


@app.get("/health", tags=["System"])
def health_check() -> dict:
    """
    Health check endpoint for orchestration and monitoring.

    Reports uptime, version and the size of the PSI modulus. Never exposes
    secrets or registered marker sets.
    """
    return {
        "status": "operational",
        "uptime_seconds": round(time.time() - _BOOT_TIME, 2),
        "version": settings.VERSION,
        "psi_modulus_bits": get_group().bit_length,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn
    import os
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    port = int(os.environ.get("PORT", settings.PORT))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=True)
