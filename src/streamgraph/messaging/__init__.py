"""
Messaging module - event producers for subscriptions.

Provides:
- EventEmitter: In-process named-topic publish/subscribe bus
- RedisEventBridge: Relay of Redis Pub/Sub channels into an EventEmitter

Usage:
    from streamgraph.messaging import EventEmitter, RedisEventBridge

    pubsub = EventEmitter()
    bridge = RedisEventBridge(pubsub, "redis://redis:6379", ["importantEmail"])
    await bridge.start()

    stream = pubsub.stream("importantEmail")
    payload = await stream.next()
"""

from __future__ import annotations

from .emitter import EventEmitter, Listener
from .redis_bridge import RedisEventBridge

__all__ = [
    "EventEmitter",
    "Listener",
    "RedisEventBridge",
]
