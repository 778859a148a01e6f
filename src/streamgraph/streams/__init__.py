"""
Streams module - pull-based, cancellable streams.

Provides:
- PullStream: Contract shared by every stream
- EventEmitterStream: Push-to-pull adapter over an EventEmitter topic
- StreamMapper: Per-element transform with failure isolation
"""

from __future__ import annotations

from .adapter import EventEmitterStream
from .base import PullStream, close_stream
from .mapper import StreamMapper

__all__ = [
    "PullStream",
    "close_stream",
    "EventEmitterStream",
    "StreamMapper",
]
