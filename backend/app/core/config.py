from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

# 768-bit prime shared by the patient node and the hospital backend.
DEFAULT_PSI_MODULUS_HEX = (
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD1"
    "29024E088A67CC74020BBEA63B139B22514A08798E3404DD"
    "EF9519B3CD3A431B302B0A6DF25F14374FE1356D6D51C245"
    "E485B576625E7EC6F44C42E9A63A36210000000000090563"
)


class Settings(BaseSettings):
    PROJECT_NAME: str = "PRIVAGENE-PSI"
    API_V1_STR: str = "/api/v1"
    VERSION: str = "0.1.0"

    # Deployment
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # PSI group & protocol
    PSI_MODULUS_HEX: str = DEFAULT_PSI_MODULUS_HEX
    MAX_MARKERS_PER_REQUEST: int = 700

    # Patient node → hospital backend
    PSI_SERVER_URL: str = "http://localhost:8000"
    PSI_REQUEST_TIMEOUT_SECONDS: float = 10.0
    CALIBRATION_TIMEOUT_SECONDS: float = 5.0
    RESULT_CACHE_TTL_SECONDS: int = 86400

    # Disease registry
    DEFAULT_CALIBRATION_CONSTANT: float = 50.0

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env")


settings = Settings()
