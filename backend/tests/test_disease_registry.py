import pytest

from app.core.errors import (
    DiseaseNotFoundError,
    InvalidBlindedElementError,
    InvalidCalibrationConstantError,
)
from app.core.psi import blind_markers
from app.schemas.psi import RiskAssessmentIn
from app.services.disease_registry import DEFAULT_CATALOGUE, DiseaseRegistry, validate_constant
from app.services.psi_service import PSIService
from app.services.risk_assessment_service import RiskAssessmentStore

# ═══════════════════════════════════════════════════════════════════════════════
# DISEASE REGISTRY
# ═══════════════════════════════════════════════════════════════════════════════

def test_seeded_catalogue():
    reg = DiseaseRegistry()
    assert len(reg) == len(DEFAULT_CATALOGUE)
    assert reg.get_markers("breast-cancer") == ("BRCA1", "BRCA2", "TP53", "ERBB2")
    assert reg.get_calibration_constant("breast-cancer") == 50.0


def test_unseeded_registry_is_empty():
    assert len(DiseaseRegistry(seed=False)) == 0


def test_register_canonicalizes_and_dedupes():
    reg = DiseaseRegistry(seed=False)
    record = reg.register_disease("Test", ["brca1", " BRCA1 ", "tp53", ""], constant=20)
    assert record.markers == ("BRCA1", "TP53")
    assert record.constant == 20.0


def test_register_duplicate_id_rejected(registry):
    with pytest.raises(ValueError):
        registry.register_disease("Again", ["X"], disease_id="scenario")


@pytest.mark.parametrize("bad", [0, -5, 100.5, "abc"])
def test_invalid_constant_rejected(bad):
    with pytest.raises(InvalidCalibrationConstantError):
        validate_constant(bad)


def test_constant_upper_bound_inclusive():
    assert validate_constant(100) == 100.0


def test_set_calibration_constant(registry):
    registry.set_calibration_constant("scenario", 60)
    assert registry.get_calibration_constant("scenario") == 60.0
    with pytest.raises(InvalidCalibrationConstantError):
        registry.set_calibration_constant("scenario", 0)
    with pytest.raises(DiseaseNotFoundError):
        registry.set_calibration_constant("nope", 10)


def test_unknown_disease(registry):
    with pytest.raises(DiseaseNotFoundError) as info:
        registry.get_markers("unknown-disease")
    assert info.value.disease_id == "unknown-disease"


def test_listing_hides_markers(registry):
    for entry in registry.list_categories():
        assert "markers" not in entry
        assert "BRCA1" not in str(entry)

# ═══════════════════════════════════════════════════════════════════════════════
# PSI SERVICE
# ═══════════════════════════════════════════════════════════════════════════════

def test_service_compute_scenario(registry, group):
    service = PSIService(registry=registry, group=group)
    state = blind_markers(["BRCA1", "BRCA2", "TP53"], group)
    response = service.compute(state.to_request("scenario"))
    result = state.finalize(response)
    assert result.match_count == 2
    assert result.matched_set == {"BRCA1", "TP53"}
    assert result.total_disease_markers == 3

    risk = service.calculate_risk("scenario", result.match_count, result.total_disease_markers)
    assert risk.percentage == pytest.approx(50.0)


def test_service_unknown_disease_draws_no_secret(registry, group, monkeypatch):
    from app.core.psi import server

    def fail(*args, **kwargs):
        raise AssertionError("secret drawn for unknown disease")

    monkeypatch.setattr(server, "random_secret", fail)
    service = PSIService(registry=registry, group=group)
    state = blind_markers(["BRCA1"], group)
    with pytest.raises(DiseaseNotFoundError):
        service.compute(state.to_request("unknown"))


def test_service_rejects_out_of_range_value(registry, group):
    from app.core.psi import PSIRequest

    service = PSIService(registry=registry, group=group)
    with pytest.raises(InvalidBlindedElementError):
        service.compute(PSIRequest(blinded_patient_markers=(group.p,), disease_id="scenario"))


def test_service_rejects_too_many_values(registry, group):
    from app.core.psi import PSIRequest

    service = PSIService(registry=registry, group=group, max_markers=2)
    with pytest.raises(InvalidBlindedElementError):
        service.compute(PSIRequest(blinded_patient_markers=(1, 2, 3), disease_id="scenario"))


def test_service_zero_limit_is_respected(registry, group):
    from app.core.psi import PSIRequest

    service = PSIService(registry=registry, group=group, max_markers=0)
    assert service.max_markers == 0
    with pytest.raises(InvalidBlindedElementError):
        service.compute(PSIRequest(blinded_patient_markers=(1,), disease_id="scenario"))


def test_service_calculate_risk(registry, group):
    service = PSIService(registry=registry, group=group)
    risk = service.calculate_risk("scenario", 2, 3)
    assert risk.percentage == pytest.approx(50.0)

# ═══════════════════════════════════════════════════════════════════════════════
# ASSESSMENT STORE
# ═══════════════════════════════════════════════════════════════════════════════

def _assessment(subject="patient-1", pct=30.0):
    return RiskAssessmentIn(
        subject_id=subject,
        disease_id="breast-cancer",
        match_count=2,
        matched_markers=["brca1", "tp53"],
        risk_percentage=pct,
    )


def test_store_create_and_read():
    store = RiskAssessmentStore()
    record = store.create_assessment(_assessment())
    assert record.id.startswith("risk_")
    assert record.matched_markers == ["BRCA1", "TP53"]
    assert store.get_assessment_by_id(record.id) == record


def test_store_latest_and_delete():
    store = RiskAssessmentStore()
    store.create_assessment(_assessment(pct=10.0))
    second = store.create_assessment(_assessment(pct=20.0))
    store.create_assessment(_assessment(subject="other"))

    assert len(store.get_assessments_by_subject("patient-1")) == 2
    assert store.get_latest_assessment("patient-1").created_at == second.created_at
    assert store.get_latest_assessment("nobody") is None

    assert store.delete_assessment(second.id)
    assert not store.delete_assessment(second.id)
