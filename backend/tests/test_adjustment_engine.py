"""
Tests pour la regle de decision des ajustements live.
"""
import pytest
from uuid import uuid4
from pydantic import ValidationError

from app.domain.entities.adjustment import AdjustmentDecision, AdjustSetRequest, LiveMetric, LiveMetricSample
from app.domain.services.adjustment_engine import (
    evaluate,
    build_prompt_text,
    LOAD_REDUCTION_DELTA,
)


def _sample(metric, value):
    return LiveMetricSample(session_id=uuid4(), athlete_id=uuid4(), metric=metric, value=value)


class TestEvaluate:

    def test_velocity_loss_at_threshold_no_decision(self):
        """Seuil exclusif : 0.15 ne declenche pas."""
        assert evaluate(_sample("velocity_loss", 0.15)) is None

    def test_velocity_loss_above_threshold(self):
        decision = evaluate(_sample("velocity_loss", 0.16))
        assert decision is not None
        assert decision.delta == -0.05
        assert decision.metric == LiveMetric.VELOCITY_LOSS
        assert decision.trigger_value == 0.16

    def test_hr_drift_at_threshold_no_decision(self):
        assert evaluate(_sample("hr_drift", 0.10)) is None

    def test_hr_drift_above_threshold(self):
        decision = evaluate(_sample("hr_drift", 0.25))
        assert decision == AdjustmentDecision(LiveMetric.HR_DRIFT, 0.25, LOAD_REDUCTION_DELTA)

    def test_hr_drift_value_between_thresholds(self):
        """0.12 declenche sur la derive cardiaque mais pas sur la perte de vitesse."""
        assert evaluate(_sample("hr_drift", 0.12)) is not None
        assert evaluate(_sample("velocity_loss", 0.12)) is None

    def test_negative_value(self):
        assert evaluate(_sample("velocity_loss", -0.3)) is None

    def test_unknown_metric_rejected(self):
        with pytest.raises(ValidationError):
            _sample("power_drop", 0.5)

    def test_non_finite_value_rejected(self):
        with pytest.raises(ValidationError):
            _sample("hr_drift", float("nan"))


class TestBuildPromptText:

    def test_velocity_loss_text(self):
        text = build_prompt_text(AdjustmentDecision(LiveMetric.VELOCITY_LOSS, 0.183, -0.05))
        assert text == (
            "Detected high velocity loss (18.3%). Automatically reduced target load by 5% "
            "to optimize performance and prevent overexertion."
        )

    def test_hr_drift_text(self):
        text = build_prompt_text(AdjustmentDecision(LiveMetric.HR_DRIFT, 0.25, -0.05))
        assert "heart rate drift (25.0%)" in text
        assert "by 5%" in text


class TestAdjustSetRequest:

    def test_non_finite_value_rejected(self):
        with pytest.raises(ValidationError):
            AdjustSetRequest(athlete_id=uuid4(), metric="hr_drift", value=float("inf"))

    def test_valid_request(self):
        request = AdjustSetRequest(athlete_id=uuid4(), metric="hr_drift", value=0.2)
        assert request.metric == LiveMetric.HR_DRIFT
