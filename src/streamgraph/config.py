"""
Configuration loading and validation for streamgraph.

Values come from ``streamgraph.yaml`` (or the file named by
``STREAMGRAPH_CONFIG``); ``REDIS_URL`` and ``STREAMGRAPH_LOG_LEVEL`` override
the file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "streamgraph.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RedisConfig:
    """Redis relay configuration."""
    url: Optional[str] = None
    channels: list[str] = field(default_factory=list)
    poll_timeout: float = 1.0  # seconds


@dataclass
class SubscriptionConfig:
    """Subscription initialization rules."""
    # Reject documents selecting more than one root field
    strict_root_field: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_events: bool = False  # per-event debug records


@dataclass
class StreamgraphConfig:
    """Main streamgraph configuration."""
    redis: RedisConfig = field(default_factory=RedisConfig)
    subscription: SubscriptionConfig = field(default_factory=SubscriptionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StreamgraphConfig":
        """Create config from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")

        redis_data = _section(data, "redis")
        channels = redis_data.get("channels", [])
        if not isinstance(channels, list):
            raise ConfigError("redis.channels must be a list")
        try:
            poll_timeout = float(redis_data.get("poll_timeout", 1.0))
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid redis.poll_timeout: {redis_data.get('poll_timeout')!r}") from None
        if poll_timeout <= 0:
            raise ConfigError("redis.poll_timeout must be positive")

        redis = RedisConfig(
            url=redis_data.get("url"),
            channels=[str(channel) for channel in channels],
            poll_timeout=poll_timeout,
        )

        subscription_data = _section(data, "subscription")
        subscription = SubscriptionConfig(
            strict_root_field=bool(subscription_data.get("strict_root_field", False)),
        )

        logging_data = _section(data, "logging")
        log_config = LoggingConfig(
            level=_validate_level(logging_data.get("level", "INFO")),
            log_events=bool(logging_data.get("log_events", False)),
        )

        return cls(redis=redis, subscription=subscription, logging=log_config)

    def apply_env(self) -> "StreamgraphConfig":
        """Override values from environment variables."""
        redis_url = os.getenv("REDIS_URL")
        if redis_url:
            self.redis.url = redis_url

        log_level = os.getenv("STREAMGRAPH_LOG_LEVEL")
        if log_level:
            self.logging.level = _validate_level(log_level)

        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return {
            "redis": {
                "url": self.redis.url,
                "channels": list(self.redis.channels),
                "poll_timeout": self.redis.poll_timeout,
            },
            "subscription": {
                "strict_root_field": self.subscription.strict_root_field,
            },
            "logging": {
                "level": self.logging.level,
                "log_events": self.logging.log_events,
            },
        }

    def save(self, path: Path | str = DEFAULT_CONFIG_PATH) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)


def _validate_level(level: Any) -> str:
    name = str(level).upper()
    if name not in _LOG_LEVELS:
        raise ConfigError(f"Invalid log level {level!r}. Allowed: {list(_LOG_LEVELS)}")
    return name


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} section must be a mapping, got {type(section).__name__}")
    return section


def load_config(path: Path | str | None = None) -> StreamgraphConfig:
    """
    Load configuration from YAML file and environment.

    Missing files yield the defaults.
    """
    path = Path(path or os.getenv("STREAMGRAPH_CONFIG") or DEFAULT_CONFIG_PATH)

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        config = StreamgraphConfig.from_dict(data)
        logger.debug(f"Loaded configuration from {path}")
    else:
        config = StreamgraphConfig()

    return config.apply_env()


_config: Optional[StreamgraphConfig] = None


def get_config() -> StreamgraphConfig:
    """Get the global configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[StreamgraphConfig]) -> None:
    """Replace the global configuration (None reloads on next access)."""
    global _config
    _config = config
