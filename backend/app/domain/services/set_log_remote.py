"""
Écriture distante des séries (client HTTP de l'API AdaptIQ).
PUT /api/v1/set-logs/{id} est un upsert idempotent : renvoyer une série
dont la réponse a été perdue ne crée pas de doublon.
"""
import logging
from typing import Optional

import httpx

from app.domain.entities.set_log import PendingSet

logger = logging.getLogger(__name__)


class RemoteWriteError(Exception):
    """Échec d'écriture distante (réseau, timeout, validation côté serveur)."""


class SetLogRemote:
    """Interface du store distant utilisé par la file hors-ligne."""

    async def write(self, pending_set: PendingSet) -> None:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


class HttpSetLogRemote(SetLogRemote):

    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def write(self, pending_set: PendingSet) -> None:
        body = pending_set.model_dump(mode="json", exclude={"id"})
        try:
            response = await self._client.put(f"/api/v1/set-logs/{pending_set.id}", json=body)
        except httpx.HTTPError as exc:
            raise RemoteWriteError(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code >= 300:
            raise RemoteWriteError(f"HTTP {response.status_code}: {response.text[:200]}")

    async def aclose(self) -> None:
        await self._client.aclose()
