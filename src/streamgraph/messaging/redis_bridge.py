"""
Redis Pub/Sub relay into an in-process EventEmitter.

Lets a subscription in one process consume events published by another:
messages arriving on a Redis channel are JSON-decoded and emitted on the
emitter under the channel name.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Iterable, Optional

import redis.asyncio as aioredis

from ..config import RedisConfig
from ..logs import EVENT_TRAFFIC
from .emitter import EventEmitter

logger = logging.getLogger(__name__)


class RedisEventBridge:
    """
    Relay Redis channels into an EventEmitter.

    Usage:
        pubsub = EventEmitter()
        bridge = RedisEventBridge(pubsub, "redis://redis:6379", ["importantEmail"])
        await bridge.start()

        # Subscriptions pull from pubsub.stream("importantEmail")
        await bridge.publish("importantEmail", {"subject": "Hello"})

        await bridge.stop()
    """

    def __init__(
        self,
        emitter: EventEmitter,
        redis_url: Optional[str] = None,
        channels: Iterable[str] = (),
        *,
        client: Optional[aioredis.Redis] = None,
        poll_timeout: float = 1.0,
    ):
        """
        Initialize bridge.

        Args:
            emitter: Emitter receiving relayed payloads
            redis_url: Redis URL (ignored when client is given)
            channels: Channels to relay
            client: Existing redis.asyncio client
            poll_timeout: Seconds to wait for a message per poll
        """
        if client is None and redis_url is None:
            raise ValueError("redis_url or client is required")

        self.emitter = emitter
        self.redis_url = redis_url
        self.channels = list(channels)
        self.poll_timeout = poll_timeout
        self._redis: Optional[aioredis.Redis] = client
        self._owns_client = client is None
        self._pubsub = None
        self._listener_task: Optional[asyncio.Task] = None
        self._running = False

    @classmethod
    def from_config(cls, emitter: EventEmitter, config: RedisConfig) -> RedisEventBridge:
        """Create bridge from RedisConfig."""
        return cls(
            emitter,
            config.url,
            config.channels,
            poll_timeout=config.poll_timeout,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self):
        """Subscribe to channels and start relaying messages"""
        if self._running:
            logger.warning("Redis bridge already running")
            return

        if not self.channels:
            logger.warning("No channels configured, Redis bridge not started")
            return

        if self._redis is None:
            logger.info(f"Redis bridge connecting to Redis: {self.redis_url}")
            self._redis = await aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True
            )

        self._pubsub = self._redis.pubsub()
        await self._pubsub.subscribe(*self.channels)
        logger.info(f"Subscribed to Redis channels: {self.channels}")

        self._running = True
        self._listener_task = asyncio.create_task(self._listen())
        logger.info("Redis bridge started")

    async def stop(self):
        """Stop relaying and release the Redis connection"""
        self._running = False

        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None

        try:
            if self._pubsub:
                pubsub, self._pubsub = self._pubsub, None
                try:
                    await pubsub.unsubscribe()
                finally:
                    await pubsub.aclose()
        finally:
            if self._redis is not None and self._owns_client:
                redis, self._redis = self._redis, None
                await redis.aclose()

        logger.info("Redis bridge stopped")

    async def publish(self, channel: str, data: Dict[str, Any]) -> int:
        """
        Publish event to channel.

        Args:
            channel: Channel name (e.g., "importantEmail")
            data: Event data (will be JSON serialized)

        Returns:
            Number of Redis subscribers that received the message
        """
        if self._redis is None:
            raise RuntimeError("Redis bridge not connected. Call await bridge.start() first.")

        payload = json.dumps(data, ensure_ascii=False)
        count = await self._redis.publish(channel, payload)
        logger.debug(f"Published to {channel}: {count} subscribers received", extra=EVENT_TRAFFIC)
        return count

    async def _listen(self):
        """Poll Redis and relay messages to the emitter"""
        logger.info("Redis listener started")
        try:
            while self._running:
                try:
                    message = await self._pubsub.get_message(
                        ignore_subscribe_messages=True,
                        timeout=self.poll_timeout
                    )

                    if message and message["type"] == "message":
                        self._relay(message["channel"], message["data"])

                except Exception as e:
                    logger.error(f"Redis listener error: {e}", exc_info=True)
                    await asyncio.sleep(self.poll_timeout)

        except asyncio.CancelledError:
            logger.info("Redis listener cancelled")
            raise

    def _relay(self, channel: Any, raw_data: Any) -> bool:
        """Decode a message and emit it; returns whether anyone consumed it"""
        if isinstance(channel, bytes):
            channel = channel.decode("utf-8")

        try:
            data = json.loads(raw_data) if isinstance(raw_data, (str, bytes)) else raw_data
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON in message from {channel}: {str(raw_data)[:100]}")
            return False

        logger.debug(f"Received message on {channel}", extra=EVENT_TRAFFIC)
        return self.emitter.emit(channel, data)
