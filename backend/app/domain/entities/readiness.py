"""
Entités Readiness - Domain Layer
Entrées biométriques quotidiennes (HRV, sommeil, courbatures, saut) et
schéma de réponse du score de forme.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID, uuid4
from datetime import date as date_type, datetime


class DailyMetric(SQLModel, table=True):
    """Métriques santé quotidiennes issues des wearables (une ou plusieurs lignes par jour)."""
    __tablename__ = "daily_metric"

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    athlete_id: UUID = Field(index=True)
    date: date_type = Field(index=True)

    hrv_rmssd: Optional[float] = Field(default=None, ge=0)
    sleep_minutes: Optional[int] = Field(default=None, ge=0)

    created_at: datetime = Field(default_factory=datetime.utcnow)


class SorenessEntry(SQLModel, table=True):
    """Score de courbatures déclaré par l'athlète (0 = aucune, 10 = maximale)."""
    __tablename__ = "soreness_entry"

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    athlete_id: UUID = Field(index=True)
    date: date_type = Field(index=True)
    score: int = Field(ge=0, le=10)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class JumpTest(SQLModel, table=True):
    """Test de détente verticale (CMJ) du jour."""
    __tablename__ = "jump_test"

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    athlete_id: UUID = Field(index=True)
    date: date_type = Field(index=True)
    height_cm: float = Field(ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class MetricSnapshot(SQLModel):
    """Instantané des entrées du score pour un athlète et une date. None = donnée absente."""
    hrv_rmssd: Optional[float] = None
    sleep_minutes: Optional[int] = None
    soreness_score: Optional[int] = None
    jump_height_cm: Optional[float] = None


class ReadinessRead(SQLModel):
    """Réponse API du score de forme (valeurs par défaut appliquées)."""
    athlete_id: UUID
    date: date_type
    readiness_score: int
    hrv_rmssd: float
    sleep_min: int
    soreness_score: int
    jump_cm: float
