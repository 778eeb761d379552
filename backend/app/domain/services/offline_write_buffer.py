"""
File d'écriture hors-ligne des séries (côté appareil).

Garantit qu'une série saisie sans réseau n'est pas perdue et finit écrite une
seule fois côté serveur, dans l'ordre chronologique d'origine :
  - enqueue()      : persistance locale uniquement, jamais d'appel réseau
  - drain()        : envoi FIFO, arrêt au premier échec (l'ordre est préservé)
  - list_pending() : instantané en lecture seule (badge UI, diagnostic)
  - clear()        : purge administrative (déconnexion / reset de compte)

Si le stockage local est indisponible (à l'ouverture ou en cours de route), la
série passe en mode dégradé : elle est écrite immédiatement ou abandonnée
avec un avertissement.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from app.core.settings import Settings, get_settings
from app.domain.entities.set_log import PendingSet
from app.domain.services.pending_set_store import SqlitePendingSetStore, StoreUnavailableError
from app.domain.services.set_log_remote import HttpSetLogRemote, RemoteWriteError, SetLogRemote

logger = logging.getLogger(__name__)

DROPPED_WARNING = "Stockage local indisponible et serveur injoignable : la serie n'a pas ete enregistree."
DEGRADED_WARNING = "Stockage local indisponible : la serie a ete envoyee directement au serveur."


class EnqueueStatus(str, Enum):
    QUEUED = "queued"
    WRITTEN = "written"
    DROPPED = "dropped"


@dataclass
class EnqueueAck:
    set_id: UUID
    status: EnqueueStatus
    warning: Optional[str] = None


@dataclass
class DrainResult:
    flushed: List[UUID] = field(default_factory=list)
    failed_id: Optional[UUID] = None
    error: Optional[str] = None
    remaining: int = 0

    @property
    def completed(self) -> bool:
        return self.failed_id is None and self.error is None


class OfflineWriteBuffer:

    def __init__(self, store: SqlitePendingSetStore, remote: SetLogRemote):
        self.store = store
        self.remote = remote
        self.degraded = False
        self._drain_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        try:
            self.store.open()
            self.degraded = False
        except StoreUnavailableError as e:
            self.degraded = True
            logger.error(f"File hors-ligne en mode degrade (ecriture directe ou abandon): {e}")

    def close(self) -> None:
        self.store.close()

    async def aclose(self) -> None:
        self.close()
        await self.remote.aclose()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def enqueue(self, pending_set: Union[PendingSet, Dict[str, Any]]) -> EnqueueAck:
        """Ajoute une série à la file locale. Lève ValidationError si la série est invalide."""
        if not isinstance(pending_set, PendingSet):
            pending_set = PendingSet.model_validate(pending_set)

        if self.degraded or not self.store.is_open:
            return await self._write_through(pending_set)

        try:
            inserted = self.store.insert(pending_set)
        except StoreUnavailableError as e:
            logger.error(f"Serie {pending_set.id} non stockee localement, ecriture directe: {e}")
            return await self._write_through(pending_set)

        if not inserted:
            logger.debug(f"Serie {pending_set.id} deja en file, ignoree")
        else:
            logger.info(f"Serie {pending_set.id} ajoutee a la file locale")
        return EnqueueAck(set_id=pending_set.id, status=EnqueueStatus.QUEUED)

    async def drain(self) -> DrainResult:
        """Vide la file dans l'ordre d'insertion ; s'arrête au premier échec.

        La tête de file est relue avant chaque envoi : une série purgée par
        clear() pendant une écriture en cours n'est jamais envoyée.
        """
        async with self._drain_lock:
            result = DrainResult()
            if self.degraded or not self.store.is_open:
                return result

            try:
                while True:
                    pending_set = self.store.first()
                    if pending_set is None:
                        break
                    try:
                        await self.remote.write(pending_set)
                    except RemoteWriteError as e:
                        result.failed_id = pending_set.id
                        result.error = str(e)
                        result.remaining = self.store.count()
                        logger.warning(
                            f"Synchronisation interrompue sur la serie {pending_set.id} "
                            f"({result.remaining} en attente): {e}"
                        )
                        return result

                    self.store.delete(pending_set.id)
                    result.flushed.append(pending_set.id)
            except StoreUnavailableError as e:
                result.error = str(e)
                logger.error(f"Synchronisation interrompue, stockage local en erreur: {e}")
                return result

            if result.flushed:
                logger.info(f"{len(result.flushed)} serie(s) synchronisee(s)")
            return result

    def list_pending(self) -> List[PendingSet]:
        if self.degraded or not self.store.is_open:
            return []
        return self.store.list_all()

    def pending_count(self) -> int:
        if self.degraded or not self.store.is_open:
            return 0
        return self.store.count()

    def clear(self) -> int:
        """Supprime toutes les séries en attente SANS les envoyer. Prévenir l'utilisateur avant."""
        if self.degraded or not self.store.is_open:
            return 0
        dropped = self.store.clear()
        logger.warning(f"File hors-ligne purgee: {dropped} serie(s) non synchronisee(s) supprimee(s)")
        return dropped

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _write_through(self, pending_set: PendingSet) -> EnqueueAck:
        """Mode dégradé : écriture immédiate, sinon abandon signalé."""
        try:
            await self.remote.write(pending_set)
        except RemoteWriteError as e:
            logger.error(f"Serie {pending_set.id} abandonnee (pas de stockage local, ecriture echouee): {e}")
            return EnqueueAck(set_id=pending_set.id, status=EnqueueStatus.DROPPED, warning=DROPPED_WARNING)
        logger.warning(f"Serie {pending_set.id} ecrite directement (stockage local indisponible)")
        return EnqueueAck(set_id=pending_set.id, status=EnqueueStatus.WRITTEN, warning=DEGRADED_WARNING)


def create_offline_buffer(settings: Optional[Settings] = None) -> OfflineWriteBuffer:
    """Construit la file à partir de la configuration (store SQLite + client HTTP)."""
    settings = settings or get_settings()
    store = SqlitePendingSetStore(settings.OFFLINE_BUFFER_PATH)
    remote = HttpSetLogRemote(settings.REMOTE_API_URL, timeout=settings.REMOTE_WRITE_TIMEOUT_S)
    return OfflineWriteBuffer(store, remote)
