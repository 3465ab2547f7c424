"""
Pydantic models for CmdSense configuration validation.

Each section maps to one concern of the suggestion pipeline: application
logging, engine behaviour, the remote inference service, the suggestion
cache and the debounced input session.
"""

from typing import Optional
from pathlib import Path
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Provider(str, Enum):
    """Supported remote inference providers."""
    OPENAI = "openai"
    OPENAI_COMPATIBLE = "openai_compatible"


class AppConfig(BaseModel):
    """Application-level configuration settings."""

    name: str = Field(default="CmdSense", min_length=1, description="Application display name")
    version: str = Field(default="0.1.0", min_length=1, description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Logging level")
    verbose_logging: bool = Field(default=False, description="Enable verbose debug logging")

    log_file: Optional[str] = Field(default=None, description="Optional JSON log file location")
    max_log_size_mb: int = Field(default=10, ge=1, le=1000, description="Maximum log file size")
    backup_count: int = Field(default=5, ge=1, le=100, description="Number of backup log files")
    log_format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Console log format string"
    )

    @field_validator('log_file')
    @classmethod
    def expand_path(cls, v):
        """Expand user home directory in paths."""
        if v is None:
            return v
        return str(Path(v).expanduser())


DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"


class RemoteConfig(BaseModel):
    """Remote inference service configuration."""

    provider: Provider = Field(default=Provider.OPENAI, description="Inference provider")
    endpoint: str = Field(default=DEFAULT_ENDPOINT, description="Chat completion endpoint URL")
    model: str = Field(default=DEFAULT_MODEL, min_length=1, description="Model name")
    api_key: Optional[str] = Field(default=None, description="API key; no key means offline mode")

    timeout: float = Field(default=10.0, ge=0.5, le=120.0, description="Transport timeout in seconds")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0, description="Response randomness")
    suggestion_max_tokens: int = Field(default=150, ge=16, le=4096, description="Token budget for suggestions")
    explanation_max_tokens: int = Field(default=200, ge=16, le=4096, description="Token budget for explanations")
    structured_max_tokens: int = Field(default=500, ge=16, le=4096, description="Token budget for structured explanations")
    structured_temperature: float = Field(default=0.2, ge=0.0, le=2.0, description="Randomness for JSON explanations")
    pattern_max_tokens: int = Field(default=200, ge=16, le=4096, description="Token budget for pattern insights")
    search_max_tokens: int = Field(default=500, ge=16, le=4096, description="Token budget for semantic history search")

    @field_validator('api_key', mode='before')
    @classmethod
    def normalize_key(cls, v):
        """Treat an empty key as missing; all-digit keys arrive as numbers from the environment."""
        if v is None:
            return None
        v = str(v)
        if not v.strip():
            return None
        return v


class EngineConfig(BaseModel):
    """Suggestion engine behaviour."""

    offline_mode: bool = Field(default=False, description="Never call the remote service")
    min_input_length: int = Field(default=2, ge=1, le=20, description="Minimum characters before analysis")
    max_suggestions: int = Field(default=7, ge=1, le=50, description="Maximum suggestions returned")
    pattern_suggestion_limit: int = Field(default=5, ge=1, le=50, description="Maximum history-derived suggestions")
    history_window: int = Field(default=20, ge=2, le=500, description="History entries used as analysis key")
    context_depth: int = Field(default=5, ge=0, le=50, description="Recent commands sent to the remote service")
    max_completions: int = Field(default=15, ge=1, le=200, description="Maximum context completions returned")


class CacheConfig(BaseModel):
    """Suggestion cache configuration."""

    max_size: int = Field(default=100, ge=1, le=100000, description="Maximum cached entries (FIFO eviction)")
    analysis_max_size: int = Field(default=50, ge=1, le=10000, description="Maximum memoized history analyses")


class SessionConfig(BaseModel):
    """Debounced input session configuration."""

    debounce_ms: int = Field(default=150, ge=0, le=5000, description="Input quiescence before analysis")


class CmdSenseConfig(BaseModel):
    """Main configuration model."""

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    app: AppConfig = Field(default_factory=AppConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)

    @property
    def is_offline(self) -> bool:
        """Offline when explicitly requested or when no credential is configured."""
        return self.engine.offline_mode or not self.remote.api_key
