"""
Entités de séries - Domain Layer
PendingSet : série saisie sur l'appareil, en attente de synchronisation.
SetLog : série persistée côté serveur, clé = id généré par le client.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4


class SetLogBase(SQLModel):
    """Champs communs d'une série"""
    session_id: UUID
    exercise: str = Field(min_length=1)
    weight: float = Field(ge=0)
    reps: int = Field(ge=0)
    rpe: Optional[float] = Field(default=None, ge=0, le=10)
    tempo: Optional[str] = None
    velocity: Optional[float] = Field(default=None, ge=0)  # m/s


class PendingSet(SetLogBase):
    """Série en attente ; l'id (uuid4) est généré sur l'appareil pour un upsert idempotent."""
    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class SetLog(SetLogBase, table=True):
    """Série persistée (système de référence une fois synchronisée)."""
    __tablename__ = "set_log"

    id: UUID = Field(primary_key=True)
    session_id: UUID = Field(index=True)
    created_at: datetime
    received_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class SetLogUpsert(SetLogBase):
    """Corps du PUT idempotent /set-logs/{id}."""
    created_at: datetime


class SetLogRead(SetLogBase):
    """Schéma pour lire une série (réponse API)."""
    id: UUID
    created_at: datetime
    received_at: datetime
