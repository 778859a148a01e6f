"""
Logging setup for streamgraph.

Per-event records are tagged with ``extra={"event_traffic": True}`` and are
dropped by EventTrafficFilter unless event logging is enabled.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import LoggingConfig

LOGGER_NAME = "streamgraph"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

EVENT_TRAFFIC = {"event_traffic": True}


class EventTrafficFilter(logging.Filter):
    """Filter out noisy per-event records."""

    def __init__(self, log_events: bool = False):
        super().__init__()
        self.log_events = log_events

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "event_traffic", False):
            return self.log_events
        return True


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure the package logger.

    Safe to call more than once; handlers installed by a previous call are
    replaced.

    Args:
        config: Logging configuration (defaults to INFO without event records)

    Returns:
        The configured ``streamgraph`` logger
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.level)

    for handler in list(logger.handlers):
        if getattr(handler, "_streamgraph", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(EventTrafficFilter(config.log_events))
    handler._streamgraph = True
    logger.addHandler(handler)

    return logger
