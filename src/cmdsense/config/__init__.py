"""
CmdSense Configuration System

    from cmdsense.config import load_config

    config = load_config()
    print(config.engine.max_suggestions)   # 7
    print(config.is_offline)               # True unless an API key is set
"""

from .loader import (
    ConfigLoader,
    load_config,
    validate_config_file,
    ConfigurationError,
)

from .models import (
    CmdSenseConfig,
    AppConfig,
    RemoteConfig,
    EngineConfig,
    CacheConfig,
    SessionConfig,
    LogLevel,
    Provider,
)

__all__ = [
    "ConfigLoader",
    "load_config",
    "validate_config_file",
    "ConfigurationError",
    "CmdSenseConfig",
    "AppConfig",
    "RemoteConfig",
    "EngineConfig",
    "CacheConfig",
    "SessionConfig",
    "LogLevel",
    "Provider",
]
