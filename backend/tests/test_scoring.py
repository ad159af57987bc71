import pytest

from app.core.psi.scoring import compute_risk, compute_uncalibrated_risk, score


def test_calibrated_two_of_four():
    risk = compute_risk(2, 4, 60.0)
    assert risk.percentage == pytest.approx(30.0)
    assert risk.calibration_constant == 60.0
    assert not risk.degraded


def test_zero_matches_scores_zero():
    assert compute_risk(0, 4, 80.0).percentage == 0.0


def test_zero_total_scores_zero():
    assert compute_risk(0, 0, 80.0).percentage == 0.0
    assert compute_uncalibrated_risk(0, 0).percentage == 0.0


def test_full_match_equals_constant():
    assert compute_risk(4, 4, 75.0).percentage == pytest.approx(75.0)


def test_result_is_clamped():
    assert compute_risk(5, 4, 100.0).percentage == 100.0


def test_negative_counts_rejected():
    with pytest.raises(ValueError):
        compute_risk(-1, 4, 50.0)
    with pytest.raises(ValueError):
        compute_risk(1, -4, 50.0)


def test_uncalibrated_fallback_is_flagged():
    risk = score(2, 4, None, reason="calibration timed out")
    assert risk.percentage == pytest.approx(50.0)
    assert risk.degraded
    assert risk.calibration_constant == 100.0
    assert "calibration timed out" in risk.notes


def test_score_uses_constant_when_available():
    risk = score(1, 4, 40.0)
    assert risk.percentage == pytest.approx(10.0)
    assert not risk.degraded
    assert risk.notes == []
