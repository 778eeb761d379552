"""
Tests pour le worker de synchronisation de la file hors-ligne.
"""
import asyncio
from uuid import uuid4

from app.domain.entities.set_log import PendingSet
from app.core.settings import Settings
from app.domain.services.offline_sync_worker import OfflineSyncWorker, SYNC_INTERVAL, create_sync_worker
from app.domain.services.offline_write_buffer import OfflineWriteBuffer
from app.domain.services.pending_set_store import SqlitePendingSetStore
from app.domain.services.set_log_remote import RemoteWriteError, SetLogRemote


class ToggleRemote(SetLogRemote):
    def __init__(self):
        self.online = False
        self.writes = []

    async def write(self, pending_set):
        if not self.online:
            raise RemoteWriteError("offline")
        self.writes.append(pending_set.id)


def _buffer():
    remote = ToggleRemote()
    buffer = OfflineWriteBuffer(SqlitePendingSetStore(":memory:"), remote)
    buffer.open()
    return buffer, remote


def _pending():
    return PendingSet(session_id=uuid4(), exercise="Squat", weight=120, reps=3)


class TestOfflineSyncWorker:

    def test_run_once_records_result(self):
        buffer, remote = _buffer()
        remote.online = True
        worker = OfflineSyncWorker(buffer)

        async def scenario():
            await buffer.enqueue(_pending())
            return await worker.run_once()

        result = asyncio.run(scenario())

        assert result.completed
        assert len(result.flushed) == 1
        assert worker.last_result is result
        buffer.close()

    def test_connectivity_restored_triggers_drain(self):
        buffer, remote = _buffer()
        worker = OfflineSyncWorker(buffer, interval=3600)
        pending = _pending()

        async def scenario():
            await buffer.enqueue(pending)
            worker.start()
            # Premier passage hors-ligne : la serie reste en file
            for _ in range(50):
                if worker.last_result is not None:
                    break
                await asyncio.sleep(0.01)
            assert buffer.pending_count() == 1

            remote.online = True
            worker.notify_connectivity_restored()
            for _ in range(100):
                if buffer.pending_count() == 0:
                    break
                await asyncio.sleep(0.01)
            worker.stop()
            await asyncio.sleep(0)

        asyncio.run(scenario())

        assert remote.writes == [pending.id]
        assert worker.is_running is False
        buffer.close()

    def test_start_is_idempotent(self):
        buffer, _ = _buffer()
        worker = OfflineSyncWorker(buffer, interval=3600)

        async def scenario():
            worker.start()
            task = worker._task
            worker.start()
            assert worker._task is task
            worker.stop()
            await asyncio.sleep(0)

        asyncio.run(scenario())
        buffer.close()

    def test_interval_from_settings(self):
        buffer, _ = _buffer()
        assert OfflineSyncWorker(buffer).interval == SYNC_INTERVAL
        assert create_sync_worker(buffer, Settings(SYNC_INTERVAL_S=5)).interval == 5
        buffer.close()
