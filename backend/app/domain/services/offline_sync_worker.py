"""
Worker de synchronisation en arrière-plan de la file hors-ligne.

Tourne en continu (asyncio.Task) : vide la file à chaque tick, ou dès que le
retour du réseau est signalé via notify_connectivity_restored().
"""
import asyncio
import logging
from typing import Optional

from app.core.settings import Settings, get_settings
from app.domain.services.offline_write_buffer import DrainResult, OfflineWriteBuffer

logger = logging.getLogger(__name__)

# Intervalle entre deux tentatives (secondes)
SYNC_INTERVAL = 60
# Pause apres une erreur inattendue (secondes)
ERROR_WAIT = 30


class OfflineSyncWorker:
    """Déclenche drain() sur tick ou sur retour de connectivité."""

    def __init__(self, buffer: OfflineWriteBuffer, interval: float = SYNC_INTERVAL):
        self.buffer = buffer
        self.interval = interval
        self.is_running = False
        self.last_result: Optional[DrainResult] = None
        self._task: Optional[asyncio.Task] = None
        self._wake_event = asyncio.Event()

    # ------------------------------------------------------------------
    # Lifecycle du worker
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Demarre le worker. Idempotent : si le worker tourne deja, ne fait rien."""
        if self._task and not self._task.done():
            return
        self._task = asyncio.get_event_loop().create_task(self._run_loop())
        logger.info("Worker de synchronisation demarre")

    def stop(self) -> None:
        self.is_running = False
        self._wake_event.set()
        if self._task and not self._task.done():
            self._task.cancel()
        logger.info("Worker de synchronisation arrete")

    def notify_connectivity_restored(self) -> None:
        """Reveille le worker quand le reseau revient."""
        self._wake_event.set()

    # ------------------------------------------------------------------
    # Boucle principale
    # ------------------------------------------------------------------

    async def run_once(self) -> DrainResult:
        self.last_result = await self.buffer.drain()
        return self.last_result

    async def _run_loop(self) -> None:
        self.is_running = True
        while self.is_running:
            try:
                self._wake_event.clear()
                await self.run_once()
                try:
                    await asyncio.wait_for(self._wake_event.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass  # Tick, on re-tente
            except asyncio.CancelledError:
                logger.info("Worker de synchronisation annule")
                break
            except Exception as e:
                logger.error(f"Erreur dans le worker de synchronisation: {e}")
                await asyncio.sleep(ERROR_WAIT)

        self.is_running = False


def create_sync_worker(buffer: OfflineWriteBuffer, settings: Optional[Settings] = None) -> OfflineSyncWorker:
    settings = settings or get_settings()
    return OfflineSyncWorker(buffer, interval=settings.SYNC_INTERVAL_S)
