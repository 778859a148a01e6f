"""
Streamgraph - GraphQL subscription execution core.

Turns a subscription request into a pull-based, cancellable stream of
execution results, one per upstream event:
- subscribe() validates the request and resolves the source event stream
- EventEmitterStream adapts a push producer into a pull stream
- StreamMapper executes the query per event and forwards termination

Usage:
    from graphql import parse
    from streamgraph import EventEmitter, subscribe

    pubsub = EventEmitter()
    root = {"importantEmail": lambda info, **args: pubsub.stream("importantEmail")}

    subscription = await subscribe(schema, parse("subscription { importantEmail { subject } }"), root)
    pubsub.emit("importantEmail", {"subject": "Hello"})
    result = await subscription.next()
    await subscription.terminate()
"""

from __future__ import annotations

from .config import (
    LoggingConfig,
    RedisConfig,
    StreamgraphConfig,
    SubscriptionConfig,
    get_config,
    load_config,
    set_config,
)
from .core import (
    ConfigError,
    StreamgraphError,
    SubscriptionError,
    error_result,
)
from .execution import (
    SubscriptionRequest,
    build_request,
    create_source_event_stream,
    subscribe,
)
from .logs import EventTrafficFilter, setup_logging
from .messaging import EventEmitter, RedisEventBridge
from .streams import EventEmitterStream, PullStream, StreamMapper, close_stream

__version__ = "0.1.0"

__all__ = [
    # Subscription
    "subscribe",
    "create_source_event_stream",
    "SubscriptionRequest",
    "build_request",
    # Streams
    "PullStream",
    "EventEmitterStream",
    "StreamMapper",
    "close_stream",
    # Messaging
    "EventEmitter",
    "RedisEventBridge",
    # Errors
    "StreamgraphError",
    "SubscriptionError",
    "ConfigError",
    "error_result",
    # Config
    "StreamgraphConfig",
    "RedisConfig",
    "SubscriptionConfig",
    "LoggingConfig",
    "load_config",
    "get_config",
    "set_config",
    # Logging
    "setup_logging",
    "EventTrafficFilter",
]
