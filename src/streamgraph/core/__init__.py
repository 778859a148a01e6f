"""
Core module - errors shared by the stream and execution layers.
"""

from __future__ import annotations

from .errors import (
    ConfigError,
    StreamgraphError,
    SubscriptionError,
    error_result,
)

__all__ = [
    "StreamgraphError",
    "SubscriptionError",
    "ConfigError",
    "error_result",
]
