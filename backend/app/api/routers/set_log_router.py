"""
Routes des series : upsert idempotent (cible de la file hors-ligne), lecture par seance.
Routes = validation + delegation au service. Pas de logique metier ici.
"""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from app.core.database import get_session
from app.domain.entities import SetLogRead, SetLogUpsert
from app.domain.services.set_log_service import set_log_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put("/set-logs/{set_id}", response_model=SetLogRead)
async def upsert_set_log(
    set_id: UUID,
    body: SetLogUpsert,
    response: Response,
    session: Session = Depends(get_session),
):
    """Enregistre une serie ; renvoyer le meme id ne cree pas de doublon"""
    record, created = set_log_service.upsert(session, set_id, body)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return record


@router.get("/sessions/{session_id}/set-logs", response_model=List[SetLogRead])
async def list_set_logs(
    session_id: UUID,
    session: Session = Depends(get_session),
):
    """Series synchronisees d'une seance"""
    return set_log_service.list_for_session(session, session_id)
