"""
Entités d'ajustement en séance - Domain Layer
Échantillons live (perte de vitesse, dérive cardiaque), décision d'ajustement
et journal append-only des ajustements appliqués.
"""
from dataclasses import dataclass
from sqlmodel import SQLModel, Field
from pydantic import field_validator
from typing import Optional, Union
from datetime import datetime
from uuid import UUID, uuid4
from enum import Enum
import math


def _require_finite(v: float) -> float:
    if not math.isfinite(v):
        raise ValueError("value doit etre un nombre fini")
    return v


class LiveMetric(str, Enum):
    """Métriques live pouvant déclencher un ajustement"""
    VELOCITY_LOSS = "velocity_loss"
    HR_DRIFT = "hr_drift"


class LiveMetricSample(SQLModel):
    """Échantillon live transitoire, consommé immédiatement (jamais persisté)."""
    session_id: UUID
    athlete_id: UUID
    metric: LiveMetric
    value: float
    observed_at: datetime = Field(default_factory=datetime.utcnow)
    # Clé d'idempotence optionnelle générée par le client
    sample_id: Optional[str] = Field(default=None, max_length=64)

    _finite_value = field_validator("value")(_require_finite)


@dataclass(frozen=True)
class AdjustmentDecision:
    """Décision de réduction de charge (delta négatif, ex: -0.05 = -5%)."""
    metric: LiveMetric
    trigger_value: float
    delta: float


class AdjustmentEvent(SQLModel, table=True):
    """Journal append-only : une ligne par ajustement déclenché, jamais modifiée."""
    __tablename__ = "adjustment_event"

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    session_id: UUID = Field(index=True)
    athlete_id: UUID = Field(index=True)
    coach_id: Optional[UUID] = Field(default=None)
    metric: str
    trigger_value: float
    delta: float
    prompt_text: str
    sample_id: Optional[str] = Field(default=None, unique=True, max_length=64)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class AdjustmentEventRead(SQLModel):
    """Schéma pour lire un ajustement (historique)."""
    id: UUID
    session_id: UUID
    athlete_id: UUID
    coach_id: Optional[UUID]
    metric: str
    trigger_value: float
    delta: float
    prompt_text: str
    created_at: datetime


class AdjustSetRequest(SQLModel):
    """Corps de requête de l'ajustement live."""
    athlete_id: UUID
    metric: LiveMetric
    value: float
    sample_id: Optional[str] = Field(default=None, max_length=64)
    observed_at: Optional[datetime] = None

    _finite_value = field_validator("value")(_require_finite)


class NoAdjustment(SQLModel):
    """Échantillon évalué, aucune action."""
    adjusted: bool = False


class AppliedAdjustment(SQLModel):
    """Échantillon évalué, charge réduite."""
    adjusted: bool = True
    delta: float
    prompt_text: str
    event_id: UUID
    broadcast_delivered: bool = True


AdjustSetResponse = Union[AppliedAdjustment, NoAdjustment]
