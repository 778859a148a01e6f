"""
Execution module - subscription initialization and per-event execution.
"""

from __future__ import annotations

from .request import SubscriptionRequest, build_request
from .subscribe import create_source_event_stream, subscribe

__all__ = [
    "SubscriptionRequest",
    "build_request",
    "subscribe",
    "create_source_event_stream",
]
