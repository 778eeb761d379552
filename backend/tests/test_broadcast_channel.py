"""
Tests pour les canaux de diffusion (memoire et Redis mocke).
"""
import json
import pytest
from unittest.mock import MagicMock

import redis

from app.core.settings import Settings
from app.domain.services.broadcast_channel import (
    ADJUSTMENT_EVENT,
    BroadcastError,
    InMemoryBroadcastChannel,
    RedisBroadcastChannel,
    create_broadcast_channel,
    session_channel_key,
)


class TestSessionChannelKey:
    def test_format(self):
        assert session_channel_key("abc") == "session:abc"


class TestInMemoryBroadcastChannel:

    def test_fifo_per_channel(self, broadcaster):
        received = []
        broadcaster.subscribe("session:1", ADJUSTMENT_EVENT, received.append)

        for i in range(5):
            broadcaster.publish("session:1", ADJUSTMENT_EVENT, {"n": i})

        assert [p["n"] for p in received] == [0, 1, 2, 3, 4]

    def test_fan_out_to_all_subscribers(self, broadcaster):
        coach, athlete = [], []
        broadcaster.subscribe("session:1", ADJUSTMENT_EVENT, coach.append)
        broadcaster.subscribe("session:1", ADJUSTMENT_EVENT, athlete.append)

        broadcaster.publish("session:1", ADJUSTMENT_EVENT, {"n": 1})

        assert coach == athlete == [{"n": 1}]

    def test_channels_are_isolated(self, broadcaster):
        received = []
        broadcaster.subscribe("session:1", ADJUSTMENT_EVENT, received.append)

        broadcaster.publish("session:2", ADJUSTMENT_EVENT, {"n": 1})

        assert received == []

    def test_event_name_filter(self, broadcaster):
        received = []
        broadcaster.subscribe("session:1", ADJUSTMENT_EVENT, received.append)

        broadcaster.publish("session:1", "chat", {"n": 1})

        assert received == []

    def test_no_retroactive_delivery(self, broadcaster):
        broadcaster.publish("session:1", ADJUSTMENT_EVENT, {"n": 1})
        received = []
        broadcaster.subscribe("session:1", ADJUSTMENT_EVENT, received.append)
        assert received == []

    def test_unsubscribe(self, broadcaster):
        received = []
        unsubscribe = broadcaster.subscribe("session:1", ADJUSTMENT_EVENT, received.append)
        unsubscribe()
        unsubscribe()  # idempotent

        broadcaster.publish("session:1", ADJUSTMENT_EVENT, {"n": 1})

        assert received == []
        assert broadcaster.subscriber_count("session:1") == 0

    def test_failing_handler_does_not_block_others(self, broadcaster):
        received = []

        def broken(payload):
            raise RuntimeError("ui crashed")

        broadcaster.subscribe("session:1", ADJUSTMENT_EVENT, broken)
        broadcaster.subscribe("session:1", ADJUSTMENT_EVENT, received.append)

        broadcaster.publish("session:1", ADJUSTMENT_EVENT, {"n": 1})

        assert received == [{"n": 1}]


class TestRedisBroadcastChannel:

    def test_publish_json_envelope(self):
        client = MagicMock()
        channel = RedisBroadcastChannel(client)

        channel.publish("session:1", ADJUSTMENT_EVENT, {"delta": -0.05})

        key, message = client.publish.call_args[0]
        assert key == "session:1"
        assert json.loads(message) == {"event": "adjustment", "payload": {"delta": -0.05}}

    def test_publish_redis_error_raises_broadcast_error(self):
        client = MagicMock()
        client.publish.side_effect = redis.ConnectionError("refused")
        channel = RedisBroadcastChannel(client)

        with pytest.raises(BroadcastError):
            channel.publish("session:1", ADJUSTMENT_EVENT, {})

    def test_subscribe_starts_single_listener(self):
        client = MagicMock()
        pubsub = client.pubsub.return_value
        channel = RedisBroadcastChannel(client)

        channel.subscribe("session:1", ADJUSTMENT_EVENT, lambda p: None)
        channel.subscribe("session:1", ADJUSTMENT_EVENT, lambda p: None)
        channel.subscribe("session:2", ADJUSTMENT_EVENT, lambda p: None)

        client.pubsub.assert_called_once_with(ignore_subscribe_messages=True)
        assert pubsub.subscribe.call_count == 2
        pubsub.run_in_thread.assert_called_once()

    def test_last_unsubscribe_releases_redis_channel(self):
        client = MagicMock()
        pubsub = client.pubsub.return_value
        channel = RedisBroadcastChannel(client)

        first = channel.subscribe("session:1", ADJUSTMENT_EVENT, lambda p: None)
        second = channel.subscribe("session:1", ADJUSTMENT_EVENT, lambda p: None)
        first()
        pubsub.unsubscribe.assert_not_called()
        second()
        pubsub.unsubscribe.assert_called_once_with("session:1")

    def test_dispatch_routes_to_handlers(self):
        channel = RedisBroadcastChannel(MagicMock())
        received, other = [], []
        channel.subscribe("session:1", ADJUSTMENT_EVENT, received.append)
        channel.subscribe("session:1", "chat", other.append)

        channel._dispatch({
            "type": "message",
            "channel": "session:1",
            "data": json.dumps({"event": "adjustment", "payload": {"n": 1}}),
        })

        assert received == [{"n": 1}]
        assert other == []

    def test_dispatch_ignores_invalid_message(self):
        channel = RedisBroadcastChannel(MagicMock())
        received = []
        channel.subscribe("session:1", ADJUSTMENT_EVENT, received.append)

        channel._dispatch({"type": "message", "channel": b"session:1", "data": "not json"})
        channel._dispatch({"type": "message", "channel": "session:1", "data": json.dumps({"payload": {}})})

        assert received == []

    def test_close_stops_listener(self):
        client = MagicMock()
        pubsub = client.pubsub.return_value
        channel = RedisBroadcastChannel(client)
        channel.subscribe("session:1", ADJUSTMENT_EVENT, lambda p: None)

        channel.close()

        pubsub.run_in_thread.return_value.stop.assert_called_once()
        pubsub.close.assert_called_once()


class TestCreateBroadcastChannel:

    def test_memory_backend(self):
        assert isinstance(create_broadcast_channel(Settings(BROADCAST_BACKEND="memory")), InMemoryBroadcastChannel)

    def test_redis_backend(self):
        assert isinstance(create_broadcast_channel(Settings(BROADCAST_BACKEND="REDIS")), RedisBroadcastChannel)

    def test_invalid_backend(self):
        with pytest.raises(ValueError):
            Settings(BROADCAST_BACKEND="kafka")
