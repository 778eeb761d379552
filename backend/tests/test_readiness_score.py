"""
Tests pour le score de forme (readiness).
Couvre : compute_readiness_score (fonction pure), ReadinessService (lecture en base).
"""
import pytest
from datetime import date, datetime, timedelta
from uuid import uuid4

from app.domain.entities.readiness import DailyMetric, SorenessEntry, JumpTest, MetricSnapshot
from app.domain.services.readiness_service import (
    compute_readiness_score,
    score_snapshot,
    clamp,
    ReadinessService,
)


class TestClamp:
    def test_inside(self):
        assert clamp(0.5, 0, 1) == 0.5

    def test_bounds(self):
        assert clamp(-2, 0, 1) == 0
        assert clamp(3, 0, 1) == 1


class TestComputeReadinessScore:
    """Tests pour compute_readiness_score."""

    def test_all_saturated(self):
        assert compute_readiness_score(100, 480, 0, 50) == 100

    def test_above_saturation_is_capped(self):
        assert compute_readiness_score(250, 900, 0, 80) == 100

    def test_all_missing(self):
        """Toutes les entrees absentes -> 0 (courbatures absentes = pire cas)."""
        assert compute_readiness_score() == 0
        assert score_snapshot(MetricSnapshot()) == 0

    def test_missing_soreness_is_worst_case(self):
        """Courbatures absentes -> norme 0, pas une valeur moyenne."""
        assert compute_readiness_score(100, 480, None, 50) == 75

    def test_soreness_one_is_full_norm(self):
        # (10 - 1) / 9 = 1
        assert compute_readiness_score(0, 0, 1, 0) == 25

    def test_soreness_ten_is_zero(self):
        assert compute_readiness_score(100, 480, 10, 50) == 75

    def test_half_values(self):
        # 0.5 * 0.25 * 3 + soreness (10-5.5)/9 = 0.5 -> 0.5 au total
        assert compute_readiness_score(50, 240, 5.5, 25) == 50

    def test_rounding_half_up(self):
        # hrv 2 -> 0.02 * 0.25 = 0.005 -> 0.5 -> arrondi a 1
        assert compute_readiness_score(2, None, 10, None) == 1

    def test_negative_inputs_treated_as_missing(self):
        assert compute_readiness_score(-30, -10, None, -5) == 0

    def test_non_finite_inputs_never_raise(self):
        assert compute_readiness_score(float("nan"), float("inf"), float("nan"), None) == 0

    @pytest.mark.parametrize("hrv,sleep,soreness,jump", [
        (0, 0, 0, 0),
        (35.2, 410, 3, 31.5),
        (120, 600, 10, 70),
        (None, 300, 7, None),
        (80, None, 0, 45),
    ])
    def test_always_in_range(self, hrv, sleep, soreness, jump):
        score = compute_readiness_score(hrv, sleep, soreness, jump)
        assert isinstance(score, int)
        assert 0 <= score <= 100


class TestReadinessService:
    """Tests pour ReadinessService.get_readiness."""

    def test_no_data_returns_defaults(self, session):
        athlete_id = uuid4()
        result = ReadinessService().get_readiness(session, athlete_id, date(2026, 3, 2))

        assert result.readiness_score == 0
        assert result.hrv_rmssd == 0
        assert result.sleep_min == 0
        assert result.soreness_score == 10
        assert result.jump_cm == 0

    def test_full_day(self, session):
        athlete_id = uuid4()
        day = date(2026, 3, 2)
        session.add(DailyMetric(athlete_id=athlete_id, date=day, hrv_rmssd=100, sleep_minutes=480))
        session.add(SorenessEntry(athlete_id=athlete_id, date=day, score=1))
        session.add(JumpTest(athlete_id=athlete_id, date=day, height_cm=50))
        session.commit()

        result = ReadinessService().get_readiness(session, athlete_id, day)
        assert result.readiness_score == 100
        assert result.sleep_min == 480
        assert result.soreness_score == 1

    def test_latest_metric_row_wins(self, session):
        athlete_id = uuid4()
        day = date(2026, 3, 2)
        base = datetime(2026, 3, 2, 6, 0)
        session.add(DailyMetric(athlete_id=athlete_id, date=day, hrv_rmssd=20, sleep_minutes=100, created_at=base))
        session.add(DailyMetric(
            athlete_id=athlete_id, date=day, hrv_rmssd=100, sleep_minutes=480,
            created_at=base + timedelta(hours=1),
        ))
        session.commit()

        result = ReadinessService().get_readiness(session, athlete_id, day)
        assert result.hrv_rmssd == 100
        # HRV + sommeil satures, courbatures et saut absents
        assert result.readiness_score == 50

    def test_other_day_and_athlete_ignored(self, session):
        athlete_id = uuid4()
        day = date(2026, 3, 2)
        session.add(DailyMetric(athlete_id=athlete_id, date=day - timedelta(days=1), hrv_rmssd=100))
        session.add(JumpTest(athlete_id=uuid4(), date=day, height_cm=50))
        session.commit()

        result = ReadinessService().get_readiness(session, athlete_id, day)
        assert result.readiness_score == 0
