"""
Realtime hub for chat and notifications.

Every API process keeps its own WebSocket connections. Events are published to
Redis channel chat:user:{id} (or chat:broadcast) and every process forwards
the ones addressed to users connected locally, so presence and delivery work
with several workers. Delivery is at-most-once; REST stays the source of truth.
"""

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket
from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

USER_CHANNEL_PREFIX = "chat:user:"
BROADCAST_CHANNEL = "chat:broadcast"
ONLINE_USERS_KEY = "chat:online"


class RealtimeHub:

    def __init__(self, redis: Redis):
        self.redis = redis
        self.connections: dict[int, set[WebSocket]] = {}
        self._listener_task: asyncio.Task | None = None
        self._pubsub = None

    async def start(self) -> None:
        self._pubsub = self.redis.pubsub()
        await self._pubsub.psubscribe(f"{USER_CHANNEL_PREFIX}*")
        await self._pubsub.subscribe(BROADCAST_CHANNEL)
        self._listener_task = asyncio.create_task(self._listen())
        logger.info("📡 Realtime hub started")

    async def stop(self) -> None:
        if self._listener_task is not None:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None
        if self._pubsub is not None:
            await self._pubsub.aclose()
            self._pubsub = None
        # Presence of this process' sockets
        for user_id, sockets in list(self.connections.items()):
            try:
                await self.redis.hincrby(ONLINE_USERS_KEY, str(user_id), -len(sockets))
            except RedisError as e:
                logger.error(f"Failed to clear presence of user {user_id}: {e}")
        self.connections.clear()
        logger.info("📡 Realtime hub stopped")

    async def _listen(self) -> None:
        while True:
            try:
                message = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message is None:
                    continue
                await self._dispatch(message["channel"], message["data"])
            except asyncio.CancelledError:
                raise
            except (RedisError, OSError) as e:
                logger.error(f"Realtime listener error: {e}")
                await asyncio.sleep(1)

    async def _dispatch(self, channel: str, data: str) -> None:
        if channel == BROADCAST_CHANNEL:
            targets = list(self.connections.keys())
        elif channel.startswith(USER_CHANNEL_PREFIX):
            try:
                targets = [int(channel[len(USER_CHANNEL_PREFIX):])]
            except ValueError:
                return
        else:
            return
        for user_id in targets:
            for websocket in list(self.connections.get(user_id, ())):
                try:
                    await websocket.send_text(data)
                except (RuntimeError, OSError) as e:
                    logger.warning(f"Dropping dead socket of user {user_id}: {e}")
                    self.connections.get(user_id, set()).discard(websocket)

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        self.connections.setdefault(user_id, set()).add(websocket)
        try:
            await self.redis.hincrby(ONLINE_USERS_KEY, str(user_id), 1)
        except RedisError as e:
            logger.error(f"Failed to register presence of user {user_id}: {e}")
        await self.broadcast_online_users()

    async def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        sockets = self.connections.get(user_id)
        if sockets is None or websocket not in sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            self.connections.pop(user_id, None)
        try:
            remaining = await self.redis.hincrby(ONLINE_USERS_KEY, str(user_id), -1)
            if remaining <= 0:
                await self.redis.hdel(ONLINE_USERS_KEY, str(user_id))
        except RedisError as e:
            logger.error(f"Failed to clear presence of user {user_id}: {e}")
        await self.broadcast_online_users()

    async def online_users(self) -> list[int]:
        try:
            counts = await self.redis.hgetall(ONLINE_USERS_KEY)
        except RedisError as e:
            logger.error(f"Failed to read online users: {e}")
            return sorted(self.connections.keys())
        return sorted(int(user_id) for user_id, count in counts.items() if int(count) > 0)

    async def publish(self, user_id: int, event: str, data: Any) -> None:
        await self._publish(f"{USER_CHANNEL_PREFIX}{user_id}", event, data)

    async def broadcast_online_users(self) -> None:
        await self._publish(BROADCAST_CHANNEL, "onlineUsers", await self.online_users())

    async def _publish(self, channel: str, event: str, data: Any) -> None:
        payload = json.dumps({"event": event, "data": data}, default=str)
        try:
            await self.redis.publish(channel, payload)
        except RedisError as e:
            # Push is best effort, the message is already persisted
            logger.error(f"Failed to publish {event} on {channel}: {e}")


_hub_instance: RealtimeHub | None = None


def get_realtime_hub() -> RealtimeHub | None:
    """The process-wide hub, None until the application lifespan started it."""
    return _hub_instance


async def start_realtime_hub(redis: Redis) -> RealtimeHub:
    global _hub_instance
    if _hub_instance is None:
        _hub_instance = RealtimeHub(redis)
        await _hub_instance.start()
    return _hub_instance


async def close_realtime_hub() -> None:
    global _hub_instance
    if _hub_instance is not None:
        await _hub_instance.stop()
        _hub_instance = None
