"""
Diffusion temps réel des ajustements (pub/sub, au plus une fois).

Un abonné non connecté au moment de la publication ne reçoit rien
rétroactivement : le journal AdjustmentEvent reste la source de vérité.
L'ordre des publications est conservé par canal, pas entre canaux.

Deux backends exposent la même interface :
  - RedisBroadcastChannel    : Redis PUBLISH / SUBSCRIBE (multi-process)
  - InMemoryBroadcastChannel : dispatch synchrone dans le process (tests, dev)
"""
import json
import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple

import redis

from app.core.redis import get_redis_client
from app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]
Unsubscribe = Callable[[], None]

ADJUSTMENT_EVENT = "adjustment"


def session_channel_key(session_id: Any) -> str:
    """Canal d'une séance live : coach et athlète s'y abonnent."""
    return f"session:{session_id}"


class BroadcastError(Exception):
    """Échec transitoire de publication (le journal durable n'est pas affecté)."""


class BroadcastChannel:
    """Interface commune des backends de diffusion."""

    def publish(self, channel_key: str, event_name: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    def subscribe(self, channel_key: str, event_name: str, handler: Handler) -> Unsubscribe:
        raise NotImplementedError

    def close(self) -> None:
        pass


def _call_handler(handler: Handler, channel_key: str, event_name: str, payload: Dict[str, Any]) -> None:
    """Un abonné en erreur n'empêche pas la livraison aux autres."""
    try:
        handler(payload)
    except Exception as exc:
        logger.error(f"Abonne en erreur sur {channel_key}/{event_name}: {exc}", exc_info=True)


class InMemoryBroadcastChannel(BroadcastChannel):
    """Fan-out synchrone en mémoire ; un verrou par canal garantit l'ordre FIFO."""

    def __init__(self):
        self._subscribers: Dict[str, List[Tuple[str, Handler]]] = defaultdict(list)
        self._registry_lock = threading.Lock()
        self._channel_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)

    def publish(self, channel_key: str, event_name: str, payload: Dict[str, Any]) -> None:
        with self._registry_lock:
            targets = [h for (name, h) in self._subscribers.get(channel_key, []) if name == event_name]
            channel_lock = self._channel_locks[channel_key]
        with channel_lock:
            for handler in targets:
                _call_handler(handler, channel_key, event_name, payload)
        logger.debug(f"Publie {event_name} sur {channel_key} ({len(targets)} abonnes)")

    def subscribe(self, channel_key: str, event_name: str, handler: Handler) -> Unsubscribe:
        entry = (event_name, handler)
        with self._registry_lock:
            self._subscribers[channel_key].append(entry)

        def unsubscribe() -> None:
            with self._registry_lock:
                subscribers = self._subscribers.get(channel_key, [])
                if entry in subscribers:
                    subscribers.remove(entry)
                if not subscribers:
                    self._subscribers.pop(channel_key, None)

        return unsubscribe

    def subscriber_count(self, channel_key: str) -> int:
        with self._registry_lock:
            return len(self._subscribers.get(channel_key, []))

    def close(self) -> None:
        with self._registry_lock:
            self._subscribers.clear()


class RedisBroadcastChannel(BroadcastChannel):
    """Fan-out via Redis pub/sub. Un thread d'écoute dispatche vers les handlers locaux."""

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        self._redis: Optional[redis.Redis] = redis_client
        self._pubsub = None
        self._thread = None
        self._handlers: Dict[str, List[Tuple[str, Handler]]] = defaultdict(list)
        self._lock = threading.Lock()

    def _get_redis(self) -> redis.Redis:
        """Retourne le client Redis (lazy init)."""
        if self._redis is None:
            self._redis = get_redis_client()
        return self._redis

    def publish(self, channel_key: str, event_name: str, payload: Dict[str, Any]) -> None:
        message = json.dumps({"event": event_name, "payload": payload}, default=str)
        try:
            receivers = self._get_redis().publish(channel_key, message)
        except redis.RedisError as exc:
            logger.warning(f"Redis indisponible (publish {channel_key}): {exc}")
            raise BroadcastError(str(exc)) from exc
        logger.debug(f"Publie {event_name} sur {channel_key} ({receivers} recepteurs)")

    def subscribe(self, channel_key: str, event_name: str, handler: Handler) -> Unsubscribe:
        entry = (event_name, handler)
        with self._lock:
            first_for_channel = not self._handlers[channel_key]
            self._handlers[channel_key].append(entry)
            if first_for_channel:
                if self._pubsub is None:
                    self._pubsub = self._get_redis().pubsub(ignore_subscribe_messages=True)
                self._pubsub.subscribe(**{channel_key: self._dispatch})
                if self._thread is None:
                    self._thread = self._pubsub.run_in_thread(sleep_time=0.1, daemon=True)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(channel_key, [])
                if entry in handlers:
                    handlers.remove(entry)
                if not handlers and channel_key in self._handlers:
                    del self._handlers[channel_key]
                    if self._pubsub is not None:
                        self._pubsub.unsubscribe(channel_key)

        return unsubscribe

    def _dispatch(self, message: Dict[str, Any]) -> None:
        """Callback du thread d'écoute Redis."""
        channel_key = message.get("channel")
        if isinstance(channel_key, bytes):
            channel_key = channel_key.decode()
        try:
            envelope = json.loads(message.get("data"))
            event_name = envelope["event"]
            payload = envelope.get("payload") or {}
        except (TypeError, ValueError, KeyError) as exc:
            logger.warning(f"Message pub/sub invalide sur {channel_key}: {exc}")
            return

        with self._lock:
            targets = [h for (name, h) in self._handlers.get(channel_key, []) if name == event_name]
        for handler in targets:
            _call_handler(handler, channel_key, event_name, payload)

    def close(self) -> None:
        with self._lock:
            if self._thread is not None:
                self._thread.stop()
                self._thread = None
            if self._pubsub is not None:
                self._pubsub.close()
                self._pubsub = None
            self._handlers.clear()


def create_broadcast_channel(settings: Optional[Settings] = None) -> BroadcastChannel:
    """Instancie le backend configuré (BROADCAST_BACKEND)."""
    settings = settings or get_settings()
    if settings.BROADCAST_BACKEND == "memory":
        logger.info("Diffusion des ajustements en memoire (mono-process)")
        return InMemoryBroadcastChannel()
    return RedisBroadcastChannel()
