"""
Unit Tests: RealtimeHub (services/realtime.py)

Presence bookkeeping in Redis and delivery to locally connected sockets.
Uses fakeredis, no real Redis or WebSocket server needed.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from services.realtime import BROADCAST_CHANNEL, ONLINE_USERS_KEY, USER_CHANNEL_PREFIX, RealtimeHub


def fake_socket():
    websocket = MagicMock()
    websocket.send_text = AsyncMock()
    return websocket


class TestPresence:

    @pytest.mark.asyncio
    async def test_connect_and_disconnect(self, redis_client):
        hub = RealtimeHub(redis_client)
        first, second = fake_socket(), fake_socket()

        await hub.connect(7, first)
        await hub.connect(7, second)
        await hub.connect(9, fake_socket())
        assert await hub.online_users() == [7, 9]
        assert await redis_client.hget(ONLINE_USERS_KEY, "7") == "2"

        await hub.disconnect(7, first)
        assert await hub.online_users() == [7, 9]

        await hub.disconnect(7, second)
        assert await hub.online_users() == [9]
        assert await redis_client.hget(ONLINE_USERS_KEY, "7") is None

    @pytest.mark.asyncio
    async def test_disconnect_of_unknown_socket_is_noop(self, redis_client):
        hub = RealtimeHub(redis_client)
        await hub.connect(7, fake_socket())

        await hub.disconnect(7, fake_socket())

        assert await hub.online_users() == [7]


class TestDelivery:

    @pytest.mark.asyncio
    async def test_user_channel_reaches_only_that_user(self, redis_client):
        hub = RealtimeHub(redis_client)
        alice, bob = fake_socket(), fake_socket()
        hub.connections = {1: {alice}, 2: {bob}}

        await hub._dispatch(f"{USER_CHANNEL_PREFIX}1", '{"event": "newMessage"}')

        alice.send_text.assert_awaited_once_with('{"event": "newMessage"}')
        bob.send_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_broadcast_reaches_everyone(self, redis_client):
        hub = RealtimeHub(redis_client)
        alice, bob = fake_socket(), fake_socket()
        hub.connections = {1: {alice}, 2: {bob}}

        await hub._dispatch(BROADCAST_CHANNEL, "[]")

        alice.send_text.assert_awaited_once()
        bob.send_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dead_socket_is_dropped(self, redis_client):
        hub = RealtimeHub(redis_client)
        dead = fake_socket()
        dead.send_text.side_effect = RuntimeError("WebSocket is not connected")
        hub.connections = {1: {dead}}

        await hub._dispatch(f"{USER_CHANNEL_PREFIX}1", "{}")

        assert hub.connections[1] == set()

    @pytest.mark.asyncio
    async def test_publish_goes_through_redis(self, redis_client):
        hub = RealtimeHub(redis_client)
        pubsub = redis_client.pubsub()
        await pubsub.subscribe(f"{USER_CHANNEL_PREFIX}5")
        await pubsub.get_message(timeout=1.0)  # subscribe confirmation

        await hub.publish(5, "notification", {"title": "New order"})

        message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
        assert json.loads(message["data"]) == {"event": "notification", "data": {"title": "New order"}}
        await pubsub.aclose()
