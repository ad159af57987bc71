"""
Disease Registry — the hospital's registered marker sets and calibration constants.

The marker set of a disease is only ever consumed server-side by the PSI
stage; public listings strip it. Calibration constants are validated
here, at the point they are set, to lie in (0, 100].

In development the registry is seeded in memory with the default catalogue.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from app.core.config import settings
from app.core.crypto.modular import canonicalize_marker
from app.core.errors import DiseaseNotFoundError, InvalidCalibrationConstantError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULT CATALOGUE
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_CATALOGUE: List[Dict] = [
    {
        "id": "breast-cancer",
        "name": "Breast Cancer",
        "description": "Risk assessment based on hereditary and molecular markers associated with breast cancer.",
        "markers": ["BRCA1", "BRCA2", "TP53", "ERBB2"],
    },
    {
        "id": "alzheimers-disease",
        "name": "Alzheimer's Disease",
        "description": "Risk evaluation based on genetic indicators linked to neurodegenerative conditions.",
        "markers": ["APOE", "ABCA7", "CLU", "PICALM"],
    },
    {
        "id": "type-2-diabetes",
        "name": "Type 2 Diabetes",
        "description": "Risk assessment based on inherited factors influencing insulin regulation and metabolism.",
        "markers": ["TCF7L2", "FTO", "SLC30A8", "KCNJ11"],
    },
    {
        "id": "cardiovascular-disease",
        "name": "Cardiovascular Disease",
        "description": "Risk evaluation using genetic markers associated with lipid processing and vascular health.",
        "markers": ["LDLR", "PCSK9", "CETP", "IL6"],
    },
]


def validate_constant(constant: float) -> float:
    """Return constant as float if it lies in (0, 100], raise otherwise."""
    try:
        value = float(constant)
    except (TypeError, ValueError) as exc:
        raise InvalidCalibrationConstantError(
            f"Calibration constant must be a number, got {constant!r}"
        ) from exc
    if not (0.0 < value <= 100.0):
        raise InvalidCalibrationConstantError(
            "Calibration constant must be greater than 0 and less than or equal to 100"
        )
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# DATA MODEL
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class DiseaseRecord:
    id: str
    name: str
    markers: Tuple[str, ...]
    constant: float
    description: str = ""

    @property
    def marker_count(self) -> int:
        return len(self.markers)

    def public_view(self) -> Dict:
        """Listing-safe view without the marker set."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "marker_count": self.marker_count,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# REGISTRY
# ═══════════════════════════════════════════════════════════════════════════════

class DiseaseRegistry:
    """
    In-memory disease registry.

    Reads hand out immutable tuples, so PSI runs never observe a marker set
    mid-update. Writes are serialized by a lock.
    """

    def __init__(self, seed: bool = True) -> None:
        self._diseases: Dict[str, DiseaseRecord] = {}
        self._lock = threading.Lock()
        if seed:
            for entry in DEFAULT_CATALOGUE:
                self.register_disease(
                    name=entry["name"],
                    markers=entry["markers"],
                    description=entry["description"],
                    disease_id=entry["id"],
                )

    def register_disease(
        self,
        name: str,
        markers: Sequence[str],
        constant: Optional[float] = None,
        description: str = "",
        disease_id: Optional[str] = None,
    ) -> DiseaseRecord:
        """
        Register a disease with its marker set.

        Markers are canonicalized and de-duplicated in first-seen order.
        A missing constant defaults to settings.DEFAULT_CALIBRATION_CONSTANT.
        """
        if not name or not name.strip():
            raise ValueError("Disease name must be non-empty")
        value = validate_constant(
            settings.DEFAULT_CALIBRATION_CONSTANT if constant is None else constant
        )
        canonical: List[str] = []
        for m in markers:
            c = canonicalize_marker(m)
            if c and c not in canonical:
                canonical.append(c)

        record = DiseaseRecord(
            id=disease_id or str(uuid.uuid4()),
            name=name.strip(),
            markers=tuple(canonical),
            constant=value,
            description=description,
        )
        with self._lock:
            if record.id in self._diseases:
                raise ValueError(f"Disease id already registered: {record.id}")
            self._diseases[record.id] = record
        logger.info(
            f"[REGISTRY] Registered '{record.name}' ({record.id}) | "
            f"{record.marker_count} markers | k={record.constant}"
        )
        return record

    def set_calibration_constant(self, disease_id: str, constant: float) -> float:
        value = validate_constant(constant)
        with self._lock:
            record = self._diseases.get(disease_id)
            if record is None:
                raise DiseaseNotFoundError(disease_id)
            record.constant = value
        logger.info(f"[REGISTRY] Calibration for {disease_id} set to {value}")
        return value

    def get(self, disease_id: str) -> DiseaseRecord:
        record = self._diseases.get(disease_id)
        if record is None:
            raise DiseaseNotFoundError(disease_id)
        return record

    def get_markers(self, disease_id: str) -> Tuple[str, ...]:
        """Registered marker set for a disease. Never returned to API callers."""
        return self.get(disease_id).markers

    def get_calibration_constant(self, disease_id: str) -> float:
        return self.get(disease_id).constant

    def list_categories(self) -> List[Dict]:
        return [record.public_view() for record in self._diseases.values()]

    def __len__(self) -> int:
        return len(self._diseases)


_registry: Optional[DiseaseRegistry] = None


def get_registry() -> DiseaseRegistry:
    """Lazy-initialize the process-wide registry."""
    global _registry
    if _registry is None:
        _registry = DiseaseRegistry()
    return _registry
