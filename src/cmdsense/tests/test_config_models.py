"""
Test suite for configuration models.

This module tests the pydantic models backing the CmdSense configuration:
defaults, field validation and the derived offline flag.
"""

import pytest
from pydantic import ValidationError

from cmdsense.config.models import (
    CmdSenseConfig, AppConfig, EngineConfig, RemoteConfig, CacheConfig, SessionConfig,
    LogLevel, Provider, DEFAULT_ENDPOINT, DEFAULT_MODEL,
)


class TestDefaults:
    """Built-in defaults match the documented behaviour."""

    def test_section_defaults(self):
        config = CmdSenseConfig()

        assert config.app.name == "CmdSense"
        assert config.app.log_level == LogLevel.WARNING
        assert config.engine.min_input_length == 2
        assert config.engine.max_suggestions == 7
        assert config.engine.history_window == 20
        assert config.cache.max_size == 100
        assert config.session.debounce_ms == 150

    def test_remote_defaults(self):
        remote = RemoteConfig()

        assert remote.provider == Provider.OPENAI
        assert remote.endpoint == DEFAULT_ENDPOINT
        assert remote.model == DEFAULT_MODEL
        assert remote.api_key is None
        assert remote.temperature == 0.3
        assert remote.suggestion_max_tokens == 150


class TestOfflineFlag:
    """Offline when requested or when no credential exists."""

    def test_no_key_is_offline(self):
        assert CmdSenseConfig().is_offline

    def test_key_is_online(self):
        assert not CmdSenseConfig(remote=RemoteConfig(api_key="sk-test")).is_offline

    def test_explicit_offline_mode(self):
        config = CmdSenseConfig(remote=RemoteConfig(api_key="sk-test"), engine=EngineConfig(offline_mode=True))
        assert config.is_offline

    @pytest.mark.parametrize("key", ["", "   "])
    def test_blank_key_is_missing(self, key):
        assert RemoteConfig(api_key=key).api_key is None

    def test_numeric_key_becomes_string(self):
        assert RemoteConfig(api_key=12345).api_key == "12345"


class TestValidation:
    """Out-of-range values are rejected."""

    @pytest.mark.parametrize("model,kwargs", [
        (CacheConfig, {"max_size": 0}),
        (EngineConfig, {"min_input_length": 0}),
        (EngineConfig, {"max_suggestions": 0}),
        (SessionConfig, {"debounce_ms": -1}),
        (RemoteConfig, {"temperature": 3.0}),
        (RemoteConfig, {"timeout": 0.1}),
        (AppConfig, {"log_level": "LOUD"}),
        (AppConfig, {"name": ""}),
    ])
    def test_invalid_values(self, model, kwargs):
        with pytest.raises(ValidationError):
            model(**kwargs)

    def test_assignment_is_validated(self):
        config = CmdSenseConfig()
        with pytest.raises(ValidationError):
            config.engine = "not a section"

    def test_log_file_expands_home(self):
        config = AppConfig(log_file="~/cmdsense.log")
        assert not config.log_file.startswith("~")

    def test_nested_dicts_are_accepted(self):
        config = CmdSenseConfig(**{"engine": {"offline_mode": True}, "cache": {"max_size": 3}})
        assert config.engine.offline_mode is True
        assert config.cache.max_size == 3
