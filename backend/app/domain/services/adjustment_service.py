"""
Service d'ajustement live : applique les effets d'une décision de l'AdjustmentEngine.

Sur déclenchement :
  1. réécrit les charges cibles du programme actif de l'athlète (× (1 + delta), plancher 0)
  2. ajoute une ligne au journal AdjustmentEvent
  3. publie la décision sur le canal de la séance

1 et 2 sont validés dans la même transaction ; la publication n'a lieu
qu'après le commit, pour qu'un abonné retrouve toujours l'événement en base.
Un échantillon portant un sample_id déjà journalisé n'est pas réappliqué :
l'événement existant est republié.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.domain.entities.adjustment import (
    AdjustmentDecision, AdjustmentEvent, LiveMetricSample,
)
from app.domain.entities.load_plan import LoadPlan
from app.domain.entities.training_session import TrainingSession
from app.domain.services.adjustment_engine import evaluate, build_prompt_text
from app.domain.services.broadcast_channel import (
    ADJUSTMENT_EVENT, BroadcastChannel, BroadcastError, session_channel_key,
)
from app.domain.services.load_plan_walker import scale_target_loads

logger = logging.getLogger(__name__)


class SessionNotFoundError(ValueError):
    """La séance de l'échantillon n'existe pas."""


@dataclass
class AdjustmentOutcome:
    event: AdjustmentEvent
    broadcast_delivered: bool
    replayed: bool = False


class AdjustmentService:

    def __init__(self, broadcaster: BroadcastChannel):
        self.broadcaster = broadcaster

    def adjust_set(self, session: Session, sample: LiveMetricSample) -> Optional[AdjustmentOutcome]:
        """Évalue l'échantillon ; None si aucun ajustement n'est nécessaire."""
        decision = evaluate(sample)
        if decision is None:
            logger.info(f"Pas d'ajustement: {sample.metric} = {sample.value} (seance {sample.session_id})")
            return None
        return self.apply(session, sample, decision)

    def apply(
        self, session: Session, sample: LiveMetricSample, decision: AdjustmentDecision
    ) -> AdjustmentOutcome:
        training_session = session.get(TrainingSession, sample.session_id)
        if not training_session:
            raise SessionNotFoundError(f"Session {sample.session_id} not found")

        if sample.sample_id:
            existing = self._find_by_sample_id(session, sample.sample_id)
            if existing:
                logger.info(f"Echantillon {sample.sample_id} deja applique, republication de l'evenement {existing.id}")
                return AdjustmentOutcome(existing, self._broadcast(existing), replayed=True)

        try:
            plans_updated = self._rescale_active_plans(session, sample.athlete_id, decision.delta)
            event = AdjustmentEvent(
                session_id=sample.session_id,
                athlete_id=sample.athlete_id,
                coach_id=training_session.coach_id,
                metric=decision.metric.value,
                trigger_value=decision.trigger_value,
                delta=decision.delta,
                prompt_text=build_prompt_text(decision),
                sample_id=sample.sample_id,
            )
            session.add(event)
            session.commit()
        except IntegrityError:
            # Course sur le meme sample_id : l'autre requete a deja applique l'ajustement
            session.rollback()
            existing = self._find_by_sample_id(session, sample.sample_id) if sample.sample_id else None
            if existing is None:
                raise
            return AdjustmentOutcome(existing, self._broadcast(existing), replayed=True)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Ajustement non applique (seance {sample.session_id}): {e}")
            raise

        session.refresh(event)
        logger.info(
            f"Ajustement {event.id}: {decision.metric.value}={decision.trigger_value:.3f}, "
            f"delta={decision.delta}, {plans_updated} programme(s) mis a jour"
        )
        return AdjustmentOutcome(event, self._broadcast(event))

    def list_adjustments(self, session: Session, session_id: UUID) -> List[AdjustmentEvent]:
        """Historique des ajustements d'une séance, du plus ancien au plus récent."""
        return session.exec(
            select(AdjustmentEvent)
            .where(AdjustmentEvent.session_id == session_id)
            .order_by(AdjustmentEvent.created_at)
        ).all()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find_by_sample_id(self, session: Session, sample_id: str) -> Optional[AdjustmentEvent]:
        return session.exec(
            select(AdjustmentEvent).where(AdjustmentEvent.sample_id == sample_id)
        ).first()

    def _rescale_active_plans(self, session: Session, athlete_id: UUID, delta: float) -> int:
        """Réécrit les arbres des programmes actifs (sans commit). Un arbre illisible est laissé tel quel."""
        plans = session.exec(
            select(LoadPlan).where(LoadPlan.athlete_id == athlete_id, LoadPlan.is_active == True)  # noqa: E712
        ).all()
        if not plans:
            logger.info(f"Aucun programme actif pour l'athlete {athlete_id}")
        updated = 0
        for plan in plans:
            try:
                plan.tree = scale_target_loads(plan.tree, delta)
            except ValidationError as e:
                logger.error(f"Programme {plan.id} illisible, charges non modifiees: {e}")
                continue
            plan.updated_at = datetime.utcnow()
            session.add(plan)
            updated += 1
        return updated

    def _broadcast(self, event: AdjustmentEvent) -> bool:
        """Publie l'ajustement ; un échec est journalisé et signalé, jamais annulé."""
        payload = {
            "event_id": str(event.id),
            "session_id": str(event.session_id),
            "athlete_id": str(event.athlete_id),
            "metric": event.metric,
            "value": event.trigger_value,
            "delta": event.delta,
            "prompt_text": event.prompt_text,
            "created_at": event.created_at.isoformat(),
        }
        try:
            self.broadcaster.publish(session_channel_key(event.session_id), ADJUSTMENT_EVENT, payload)
            return True
        except BroadcastError as e:
            logger.warning(f"Diffusion de l'ajustement {event.id} echouee: {e}")
            return False
