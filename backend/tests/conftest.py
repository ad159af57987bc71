import pytest

from app.core.crypto.group import GroupParameters, get_group
from app.services.disease_registry import DiseaseRegistry


@pytest.fixture
def group() -> GroupParameters:
    return get_group()


@pytest.fixture
def registry() -> DiseaseRegistry:
    reg = DiseaseRegistry(seed=True)
    reg.register_disease(
        name="Scenario Disease",
        markers=["BRCA1", "TP53", "ERBB2"],
        constant=75.0,
        disease_id="scenario",
    )
    reg.register_disease(name="Empty Disease", markers=[], constant=40.0, disease_id="empty")
    return reg
