"""
Pull stream contract shared by the event adapter and the stream mapper.

A pull stream hands out one element per ``next()`` call and suspends the
caller until that element exists. ``terminate()`` ends it early and releases
whatever the stream wraps.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Generic, TypeVar

T = TypeVar("T")


class PullStream(ABC, Generic[T]):
    """
    Abstract base class for pull-based, cancellable streams.

    Completion is signalled by raising StopAsyncIteration from ``next()``.
    Once a stream has completed, every later ``next()`` raises
    StopAsyncIteration immediately.

    Streams also speak the async iterator protocol, so they can be consumed
    with ``async for`` and closed with ``contextlib.aclosing``.
    """

    @abstractmethod
    async def next(self) -> T:
        """
        Return the next element, suspending until one is available.

        Raises:
            StopAsyncIteration: If the stream has completed
        """
        pass

    @abstractmethod
    async def terminate(self) -> None:
        """
        Request early completion.

        Must be idempotent, must resolve any pending ``next()`` to completion
        and must terminate any upstream stream that is wrapped.
        """
        pass

    @property
    @abstractmethod
    def is_done(self) -> bool:
        """True once the stream has completed."""
        pass

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        return await self.next()

    async def aclose(self) -> None:
        await self.terminate()


async def close_stream(stream: Any) -> None:
    """
    Terminate a stream of unknown kind.

    PullStreams are terminated, plain async iterators are closed with
    ``aclose()`` when they have one, anything else is left alone.
    """
    if isinstance(stream, PullStream):
        await stream.terminate()
        return

    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()
