"""
Routes d'ajustement live : evaluation d'un echantillon, historique, flux WebSocket.
Routes = validation + delegation au service. Pas de logique metier ici.
"""
import asyncio
import logging
from typing import List, Union
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, WebSocket, WebSocketDisconnect, status
from sqlmodel import Session

from app.core.database import get_session
from app.domain.entities import (
    AdjustSetRequest, AdjustmentEventRead, AppliedAdjustment, LiveMetricSample, NoAdjustment,
)
from app.domain.services.adjustment_service import AdjustmentService, SessionNotFoundError
from app.domain.services.broadcast_channel import ADJUSTMENT_EVENT, session_channel_key
from app.api.routers._shared import get_adjustment_service, get_broadcast_channel, limiter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sessions/{session_id}/adjust-set", response_model=Union[AppliedAdjustment, NoAdjustment])
@limiter.limit("120/minute")
async def adjust_set(
    request: Request,
    response: Response,
    session_id: UUID,
    body: AdjustSetRequest,
    session: Session = Depends(get_session),
    service: AdjustmentService = Depends(get_adjustment_service),
):
    """Evalue un echantillon live ; {adjusted: false} si aucun seuil n'est depasse"""
    sample_data = body.model_dump(exclude_none=True)
    sample = LiveMetricSample(session_id=session_id, **sample_data)
    try:
        outcome = service.adjust_set(session, sample)
    except SessionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

    if outcome is None:
        return NoAdjustment()
    return AppliedAdjustment(
        delta=outcome.event.delta,
        prompt_text=outcome.event.prompt_text,
        event_id=outcome.event.id,
        broadcast_delivered=outcome.broadcast_delivered,
    )


@router.get("/sessions/{session_id}/adjustments", response_model=List[AdjustmentEventRead])
async def list_adjustments(
    session_id: UUID,
    session: Session = Depends(get_session),
    service: AdjustmentService = Depends(get_adjustment_service),
):
    """Historique des ajustements de la seance (ordre chronologique)"""
    return service.list_adjustments(session, session_id)


# ============ FLUX TEMPS REEL ============

@router.websocket("/ws/sessions/{session_id}")
async def session_adjustments_stream(websocket: WebSocket, session_id: UUID):
    """Relaie les ajustements publies sur le canal de la seance vers l'UI connectee."""
    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def _forward(payload: dict) -> None:
        # Appele depuis le thread d'ecoute Redis ou depuis la boucle
        loop.call_soon_threadsafe(queue.put_nowait, payload)

    channel = get_broadcast_channel(websocket)
    unsubscribe = channel.subscribe(session_channel_key(session_id), ADJUSTMENT_EVENT, _forward)
    # Les messages du client sont ignores ; on ecoute seulement la deconnexion
    receive_task = asyncio.ensure_future(websocket.receive())
    try:
        while True:
            get_task = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({get_task, receive_task}, return_when=asyncio.FIRST_COMPLETED)
            if receive_task in done:
                if receive_task.result()["type"] == "websocket.disconnect":
                    get_task.cancel()
                    break
                receive_task = asyncio.ensure_future(websocket.receive())
            if get_task in done:
                await websocket.send_json({"event": ADJUSTMENT_EVENT, "payload": get_task.result()})
            else:
                get_task.cancel()
    except WebSocketDisconnect:
        pass
    finally:
        receive_task.cancel()
        unsubscribe()
        logger.info(f"Abonne deconnecte de la seance {session_id}")
