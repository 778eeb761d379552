"""
Routes du score de forme (readiness).
Routes = validation + delegation au service. Pas de logique metier ici.
"""
import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.database import get_session
from app.domain.entities import ReadinessRead
from app.domain.services.readiness_service import readiness_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/athletes/{athlete_id}/readiness", response_model=ReadinessRead)
async def get_readiness(
    athlete_id: UUID,
    day: Optional[date] = Query(default=None, alias="date"),
    session: Session = Depends(get_session),
):
    """Score de forme du jour ; valeurs par defaut (pas d'erreur) si des entrees manquent"""
    return readiness_service.get_readiness(session, athlete_id, day)
