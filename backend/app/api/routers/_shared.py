"""
Utilitaires partages entre les routers API.
"""
import logging
from fastapi import Request
from starlette.requests import HTTPConnection
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.domain.services.adjustment_service import AdjustmentService
from app.domain.services.broadcast_channel import BroadcastChannel, create_broadcast_channel

logger = logging.getLogger(__name__)


limiter = Limiter(key_func=get_remote_address, default_limits=["300/minute"], headers_enabled=True)


def get_broadcast_channel(conn: HTTPConnection) -> BroadcastChannel:
    """Canal de diffusion partage (cree au demarrage dans app.state). Requete HTTP ou WebSocket."""
    channel = getattr(conn.app.state, "broadcast", None)
    if channel is None:
        channel = create_broadcast_channel()
        conn.app.state.broadcast = channel
    return channel


def get_adjustment_service(request: Request) -> AdjustmentService:
    return AdjustmentService(get_broadcast_channel(request))
