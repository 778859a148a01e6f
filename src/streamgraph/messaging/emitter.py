"""
In-process event emitter used as the producer side of subscriptions.

Listeners are called synchronously, in registration order, every time a
payload is emitted on their topic.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Set

from ..logs import EVENT_TRAFFIC

if TYPE_CHECKING:
    from ..streams.adapter import EventEmitterStream

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class EventEmitter:
    """
    Named-topic publish/subscribe bus.

    Usage:
        pubsub = EventEmitter()

        @pubsub.on("importantEmail")
        def handle_email(payload):
            print(payload)

        # True if at least one listener received it
        consumed = pubsub.emit("importantEmail", {"subject": "Hello"})

        # Pull-based stream of payloads for a subscription
        stream = pubsub.stream("importantEmail")
    """

    def __init__(self):
        self._listeners: Dict[str, list[Listener]] = {}
        self._tasks: Set[asyncio.Task] = set()

    def on(self, topic: str, listener: Optional[Listener] = None):
        """
        Register a listener for topic.

        Can be called directly or used as a decorator:

            pubsub.on("topic", handler)

            @pubsub.on("topic")
            def handler(payload): ...
        """
        def decorator(func: Listener) -> Listener:
            if topic not in self._listeners:
                self._listeners[topic] = []
            self._listeners[topic].append(func)
            logger.debug(f"Listener attached to topic: {topic}")
            return func

        if listener is not None:
            return decorator(listener)
        return decorator

    def off(self, topic: str, listener: Listener) -> bool:
        """
        Remove a listener from topic.

        Returns:
            True if the listener was registered
        """
        listeners = self._listeners.get(topic)
        if not listeners or listener not in listeners:
            return False

        listeners.remove(listener)
        if not listeners:
            del self._listeners[topic]
        logger.debug(f"Listener detached from topic: {topic}")
        return True

    def emit(self, topic: str, payload: Any) -> bool:
        """
        Deliver payload to every listener of topic.

        Coroutine listeners are scheduled on the running loop and held until
        they finish. A failing listener, sync or async, is logged and does
        not stop delivery to the others.

        Returns:
            True if at least one listener was attached
        """
        listeners = list(self._listeners.get(topic, ()))
        if not listeners:
            logger.debug(f"No listeners for topic: {topic}", extra=EVENT_TRAFFIC)
            return False

        for listener in listeners:
            try:
                result = listener(payload)
                if inspect.isawaitable(result):
                    self._schedule(topic, result)
            except Exception as e:
                logger.error(f"Error in listener for {topic}: {e}", exc_info=True)

        logger.debug(f"Emitted on {topic} to {len(listeners)} listeners", extra=EVENT_TRAFFIC)
        return True

    def _schedule(self, topic: str, awaitable: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)

        def done(finished: asyncio.Task) -> None:
            self._tasks.discard(finished)
            if finished.cancelled():
                return
            error = finished.exception()
            if error is not None:
                logger.error(
                    f"Error in listener for {topic}: {error}",
                    exc_info=(type(error), error, error.__traceback__),
                )

        task.add_done_callback(done)

    def listener_count(self, topic: str) -> int:
        """Number of listeners attached to topic."""
        return len(self._listeners.get(topic, ()))

    @property
    def topics(self) -> list[str]:
        """Topics with at least one listener."""
        return list(self._listeners.keys())

    def stream(self, topic: str) -> EventEmitterStream:
        """Create a pull stream of payloads emitted on topic."""
        from ..streams.adapter import EventEmitterStream

        return EventEmitterStream(self, topic)
