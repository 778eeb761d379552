"""
Entité TrainingSession - Domain Layer
Séance d'entraînement en cours, rattachée à un athlète et éventuellement à un coach.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID, uuid4
from datetime import datetime


class TrainingSession(SQLModel, table=True):
    __tablename__ = "training_session"

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    athlete_id: UUID = Field(index=True)
    coach_id: Optional[UUID] = Field(default=None, index=True)
    name: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    ended_at: Optional[datetime] = None
