"""
Push-to-pull adapter over an EventEmitter topic.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import TYPE_CHECKING, Any, Deque

from .base import PullStream

if TYPE_CHECKING:
    from ..messaging.emitter import EventEmitter

logger = logging.getLogger(__name__)

# Resolves pending waiters when the stream is terminated
_DONE = object()


class EventEmitterStream(PullStream[Any]):
    """
    Pull stream of payloads emitted on one emitter topic.

    Payloads emitted while nobody is waiting are buffered in an unbounded
    FIFO queue; nothing is dropped. Concurrent callers wait in call order
    and each receives its own payload.

    Usage:
        stream = EventEmitterStream(pubsub, "importantEmail")
        pubsub.emit("importantEmail", {"subject": "Hello"})
        payload = await stream.next()
        await stream.terminate()
    """

    def __init__(self, emitter: EventEmitter, topic: str):
        """
        Attach to emitter.

        Args:
            emitter: Producer to listen on
            topic: Topic name to pull payloads from
        """
        self.emitter = emitter
        self.topic = topic
        self._queue: Deque[Any] = deque()
        self._waiters: Deque[asyncio.Future] = deque()
        self._listening = True

        emitter.on(topic, self._push)
        logger.info(f"Event stream attached to topic: {topic}")

    def _push(self, payload: Any) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(payload)
                return
        self._queue.append(payload)

    async def next(self) -> Any:
        if self._queue:
            return self._queue.popleft()
        if not self._listening:
            raise StopAsyncIteration

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            payload = await waiter
        except asyncio.CancelledError:
            # Payload handed over just before cancellation goes back in front
            if waiter.done() and not waiter.cancelled() and waiter.result() is not _DONE:
                self._queue.appendleft(waiter.result())
            raise
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

        if payload is _DONE:
            raise StopAsyncIteration
        return payload

    async def terminate(self) -> None:
        if not self._listening:
            return

        self._listening = False
        self.emitter.off(self.topic, self._push)
        self._queue.clear()

        waiters, self._waiters = self._waiters, deque()
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(_DONE)
        logger.info(f"Event stream detached from topic: {self.topic}")

    @property
    def is_done(self) -> bool:
        return not self._listening and not self._queue

    @property
    def pending(self) -> int:
        """Number of buffered payloads not yet pulled."""
        return len(self._queue)
