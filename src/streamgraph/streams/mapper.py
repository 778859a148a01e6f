"""
Stream mapper - applies a transform to every element of a source stream.

Handles:
- Propagating source completion
- Separating failed transforms from failed sources
- Serializing concurrent pulls
- Forwarding termination to the source
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, AsyncIterable, AsyncIterator, Callable, Optional, Union

from ..logs import EVENT_TRAFFIC
from .base import PullStream, close_stream

logger = logging.getLogger(__name__)

Transform = Callable[[Any], Any]
ErrorHandler = Callable[[Exception, Any], Any]


async def _anext(iterator: Any) -> Any:
    return await iterator.__anext__()


class StreamMapper(PullStream[Any]):
    """
    Pull stream of ``transform(event)`` for every event of a source stream.

    A transform result is always yielded, even when it describes a failure
    (e.g. an ExecutionResult with errors). A source that raises ends the
    stream: the exception surfaces from one ``next()`` call, every later call
    raises StopAsyncIteration.

    Usage:
        results = StreamMapper(events, lambda event: execute(schema, document, event))
        async for result in results:
            ...
    """

    def __init__(
        self,
        source: Union[PullStream, AsyncIterable],
        transform: Transform,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """
        Initialize mapper.

        Args:
            source: PullStream or any async iterable of raw events
            transform: Function (sync or async) mapping an event to a value
            error_handler: Optional (error, event) -> value fallback used when
                transform raises; without it a failing transform ends the stream
        """
        self.source = source
        self.transform = transform
        self.error_handler = error_handler
        self._iterator: Union[PullStream, AsyncIterator] = (
            source if isinstance(source, PullStream) else source.__aiter__()
        )
        self._lock = asyncio.Lock()
        self._pull_task: Optional[asyncio.Task] = None
        self._done = False
        self._terminated = False

    async def next(self) -> Any:
        async with self._lock:
            if self._done:
                raise StopAsyncIteration

            event = await self._pull()
            result = await self._apply(event)

            if self._terminated:
                raise StopAsyncIteration
            return result

    async def _pull(self) -> Any:
        self._pull_task = asyncio.create_task(_anext(self._iterator))
        try:
            return await self._pull_task
        except StopAsyncIteration:
            self._done = True
            raise
        except asyncio.CancelledError:
            if self._terminated:
                raise StopAsyncIteration from None
            raise
        except Exception as e:
            logger.warning(f"Source stream failed, closing: {e}")
            await self._finish()
            raise
        finally:
            self._pull_task = None

    async def _apply(self, event: Any) -> Any:
        try:
            result = self.transform(event)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            if self.error_handler is None:
                logger.warning(f"Transform failed, closing stream: {e}")
                await self._finish()
                raise

            logger.debug(f"Transform failed, handled as value: {e}", extra=EVENT_TRAFFIC)
            result = self.error_handler(e, event)
            if inspect.isawaitable(result):
                result = await result
            return result

    async def _finish(self) -> None:
        self._done = True
        await close_stream(self._iterator)

    async def terminate(self) -> None:
        if self._terminated:
            return

        self._terminated = True
        self._done = True

        pull_task = self._pull_task
        if pull_task is not None and not pull_task.done() and not isinstance(
            self._iterator, PullStream
        ):
            # A running async generator cannot be closed, cancel the pull first
            pull_task.cancel()
            await asyncio.wait({pull_task})

        await close_stream(self._iterator)
        logger.debug("Stream mapper terminated")

    @property
    def is_done(self) -> bool:
        return self._done
