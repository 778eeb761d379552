"""
Score de forme quotidien (readiness) à partir des entrées biométriques.

Composite à poids égaux (0.25 chacun) de quatre entrées normalisées sur [0, 1] :
  - HRV (rMSSD)        : hrv / 100
  - Sommeil            : minutes / 480
  - Courbatures        : (10 - score) / 9   (plus de courbatures = moins de forme)
  - Détente verticale  : cm / 50

Une entrée absente vaut 0 avant normalisation ; des courbatures absentes valent
10 (pire cas). Le score ne surestime donc jamais la forme faute de données.
"""
import logging
import math
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from app.domain.entities.readiness import (
    DailyMetric, SorenessEntry, JumpTest, MetricSnapshot, ReadinessRead,
)

logger = logging.getLogger(__name__)

HRV_SATURATION = 100.0
SLEEP_SATURATION_MIN = 480.0
SORENESS_MAX = 10
SORENESS_SPAN = 9.0
JUMP_SATURATION_CM = 50.0

WEIGHT = 0.25


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _as_input(value: Optional[float]) -> float:
    """Entrée absente, négative ou non finie → 0."""
    if value is None:
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_readiness_score(
    hrv_rmssd: Optional[float] = None,
    sleep_minutes: Optional[float] = None,
    soreness_score: Optional[float] = None,
    jump_height_cm: Optional[float] = None,
) -> int:
    """Calcule le score de forme (entier 0-100). Fonction pure, ne lève jamais."""
    norm_hrv = clamp(_as_input(hrv_rmssd) / HRV_SATURATION, 0, 1)
    norm_sleep = clamp(_as_input(sleep_minutes) / SLEEP_SATURATION_MIN, 0, 1)

    if soreness_score is None:
        soreness = float(SORENESS_MAX)
    else:
        try:
            soreness = float(soreness_score)
        except (TypeError, ValueError):
            soreness = float(SORENESS_MAX)
        if not math.isfinite(soreness):
            soreness = float(SORENESS_MAX)
    norm_soreness = clamp((SORENESS_MAX - soreness) / SORENESS_SPAN, 0, 1)

    norm_jump = clamp(_as_input(jump_height_cm) / JUMP_SATURATION_CM, 0, 1)

    composite = (norm_hrv + norm_sleep + norm_soreness + norm_jump) * WEIGHT
    return int(clamp(_round_half_up(composite * 100), 0, 100))


def score_snapshot(snapshot: MetricSnapshot) -> int:
    return compute_readiness_score(
        snapshot.hrv_rmssd,
        snapshot.sleep_minutes,
        snapshot.soreness_score,
        snapshot.jump_height_cm,
    )


class ReadinessService:
    """Assemble l'instantané du jour depuis la base puis calcule le score."""

    def load_snapshot(self, session: Session, athlete_id: UUID, day: date) -> MetricSnapshot:
        """Dernière ligne du jour pour chaque entrée ; None si absente."""
        metric = session.exec(
            select(DailyMetric)
            .where(DailyMetric.athlete_id == athlete_id, DailyMetric.date == day)
            .order_by(DailyMetric.created_at.desc())
        ).first()
        soreness = session.exec(
            select(SorenessEntry)
            .where(SorenessEntry.athlete_id == athlete_id, SorenessEntry.date == day)
            .order_by(SorenessEntry.created_at.desc())
        ).first()
        jump = session.exec(
            select(JumpTest)
            .where(JumpTest.athlete_id == athlete_id, JumpTest.date == day)
            .order_by(JumpTest.created_at.desc())
        ).first()

        return MetricSnapshot(
            hrv_rmssd=metric.hrv_rmssd if metric else None,
            sleep_minutes=metric.sleep_minutes if metric else None,
            soreness_score=soreness.score if soreness else None,
            jump_height_cm=jump.height_cm if jump else None,
        )

    def get_readiness(
        self, session: Session, athlete_id: UUID, day: Optional[date] = None
    ) -> ReadinessRead:
        day = day or datetime.utcnow().date()
        snapshot = self.load_snapshot(session, athlete_id, day)
        score = score_snapshot(snapshot)

        hrv = snapshot.hrv_rmssd if snapshot.hrv_rmssd is not None else 0.0
        sleep = snapshot.sleep_minutes if snapshot.sleep_minutes is not None else 0
        soreness = snapshot.soreness_score if snapshot.soreness_score is not None else SORENESS_MAX
        jump = snapshot.jump_height_cm if snapshot.jump_height_cm is not None else 0.0

        logger.debug(f"Readiness athlete={athlete_id} date={day}: {score}")
        return ReadinessRead(
            athlete_id=athlete_id,
            date=day,
            readiness_score=score,
            hrv_rmssd=float(hrv),
            sleep_min=int(sleep),
            soreness_score=int(soreness),
            jump_cm=float(jump),
        )


readiness_service = ReadinessService()
