"""
Tests for configuration loading and logging setup.
"""
import logging

import pytest

from streamgraph import (
    ConfigError,
    EventTrafficFilter,
    LoggingConfig,
    StreamgraphConfig,
    get_config,
    load_config,
    set_config,
    setup_logging,
)


class TestStreamgraphConfig:
    """Tests for StreamgraphConfig."""

    def test_defaults(self):
        """Test the configuration used when nothing is provided."""
        config = StreamgraphConfig()

        assert config.redis.url is None
        assert config.redis.channels == []
        assert config.subscription.strict_root_field is False
        assert config.logging.level == "INFO"

    def test_from_dict(self):
        """Test building config from parsed YAML."""
        config = StreamgraphConfig.from_dict({
            "redis": {"url": "redis://redis:6379", "channels": ["importantEmail"], "poll_timeout": 2},
            "subscription": {"strict_root_field": True},
            "logging": {"level": "debug", "log_events": True},
        })

        assert config.redis.url == "redis://redis:6379"
        assert config.redis.channels == ["importantEmail"]
        assert config.redis.poll_timeout == 2.0
        assert config.subscription.strict_root_field is True
        assert config.logging.level == "DEBUG"
        assert config.logging.log_events is True

    @pytest.mark.parametrize("data", [
        {"logging": {"level": "LOUD"}},
        {"redis": {"channels": "importantEmail"}},
        {"redis": {"poll_timeout": "soon"}},
        {"redis": {"poll_timeout": 0}},
        {"redis": "redis://localhost:6379"},
        {"logging": ["DEBUG"]},
    ])
    def test_invalid_values(self, data):
        """Test that invalid values raise ConfigError."""
        with pytest.raises(ConfigError):
            StreamgraphConfig.from_dict(data)

    def test_load_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        """Test loading when no config file exists."""
        monkeypatch.delenv("REDIS_URL", raising=False)
        monkeypatch.delenv("STREAMGRAPH_LOG_LEVEL", raising=False)

        config = load_config(tmp_path / "missing.yaml")

        assert config.to_dict() == StreamgraphConfig().to_dict()

    def test_save_and_load(self, tmp_path, monkeypatch):
        """Test that a saved file loads back."""
        monkeypatch.delenv("REDIS_URL", raising=False)
        monkeypatch.delenv("STREAMGRAPH_LOG_LEVEL", raising=False)
        path = tmp_path / "streamgraph.yaml"
        config = StreamgraphConfig.from_dict({"redis": {"channels": ["a"]}})

        config.save(path)

        assert load_config(path).redis.channels == ["a"]

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        """Test REDIS_URL and STREAMGRAPH_LOG_LEVEL overrides."""
        path = tmp_path / "streamgraph.yaml"
        path.write_text("redis:\n  url: redis://file:6379\nlogging:\n  level: INFO\n")
        monkeypatch.setenv("REDIS_URL", "redis://env:6379")
        monkeypatch.setenv("STREAMGRAPH_LOG_LEVEL", "warning")

        config = load_config(path)

        assert config.redis.url == "redis://env:6379"
        assert config.logging.level == "WARNING"

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        """Test STREAMGRAPH_CONFIG selecting the file."""
        path = tmp_path / "custom.yaml"
        path.write_text("subscription:\n  strict_root_field: true\n")
        monkeypatch.setenv("STREAMGRAPH_CONFIG", str(path))

        assert load_config().subscription.strict_root_field is True

    def test_invalid_yaml(self, tmp_path):
        """Test that broken YAML raises ConfigError."""
        path = tmp_path / "streamgraph.yaml"
        path.write_text("redis: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_global_config(self):
        """Test replacing the global configuration."""
        config = StreamgraphConfig()

        set_config(config)

        assert get_config() is config


class TestLogging:
    """Tests for logging setup."""

    def _record(self, **extra):
        record = logging.LogRecord("streamgraph.test", logging.DEBUG, __file__, 1, "msg", None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_filter_drops_event_traffic(self):
        """Test that per-event records are dropped by default."""
        log_filter = EventTrafficFilter()

        assert log_filter.filter(self._record()) is True
        assert log_filter.filter(self._record(event_traffic=True)) is False

    def test_filter_keeps_event_traffic_when_enabled(self):
        """Test that log_events lets per-event records through."""
        assert EventTrafficFilter(log_events=True).filter(self._record(event_traffic=True)) is True

    def test_setup_logging_replaces_handler(self):
        """Test that repeated setup installs a single handler."""
        logger = setup_logging(LoggingConfig(level="DEBUG"))
        setup_logging(LoggingConfig(level="WARNING"))

        handlers = [h for h in logger.handlers if getattr(h, "_streamgraph", False)]
        assert len(handlers) == 1
        assert logger.level == logging.WARNING

        for handler in handlers:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
