"""
Configuration loading system for CmdSense.

This module handles loading, merging, and validating configuration from
YAML files, a ``.env`` file, environment variables and CLI arguments.
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any, Union, Tuple

import yaml
from pydantic import ValidationError
from dotenv import load_dotenv

from .models import CmdSenseConfig
from ..utils.error_handling import ConfigurationError


ENV_PREFIX = "CMDSENSE_"
# Secrets and identifiers are taken verbatim, never coerced to numbers
VERBATIM_FIELDS = frozenset(("api_key", "model", "endpoint"))


class ConfigLoader:
    """
    Configuration loader that supports multiple sources and validation.

    Loading priority (highest to lowest):
    1. Environment variables (CMDSENSE_*)
    2. CLI-specified config file
    3. Environment-specific config (e.g., development.yaml)
    4. Default configuration file
    5. Built-in defaults (from Pydantic models)

    ``OPENAI_API_KEY`` is honoured when no key was configured otherwise.
    """

    def __init__(self, search_root: Optional[Union[str, Path]] = None, load_env_file: bool = True):
        self._root = Path(search_root) if search_root else Path(".")
        self._config_path: Optional[Path] = None

        env_file = self._root / ".env"
        if load_env_file and env_file.exists():
            load_dotenv(env_file)

    @property
    def config_path(self) -> Optional[Path]:
        """Path of the CLI-specified config file, if any."""
        return self._config_path

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> CmdSenseConfig:
        """
        Load configuration from multiple sources and validate it.

        Args:
            config_path: Optional path to a specific config file

        Returns:
            Validated CmdSenseConfig instance

        Raises:
            ConfigurationError: If configuration loading or validation fails
        """
        try:
            config_data: Dict[str, Any] = {}

            default_config_path = self._find_config("default")
            if default_config_path:
                config_data = self._deep_merge(config_data, self._load_yaml_file(default_config_path))

            env_name = os.getenv("CMDSENSE_ENV") or os.getenv("ENVIRONMENT")
            env_config_path = self._find_config(env_name) if env_name else None
            if env_config_path and env_config_path != default_config_path:
                config_data = self._deep_merge(config_data, self._load_yaml_file(env_config_path))

            if config_path:
                cli_config_path = Path(config_path)
                if not cli_config_path.exists():
                    raise ConfigurationError(f"Specified config file not found: {config_path}")

                config_data = self._deep_merge(config_data, self._load_yaml_file(cli_config_path))
                self._config_path = cli_config_path

            config_data = self._apply_env_overrides(config_data)

            return CmdSenseConfig(**config_data)

        except ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {self._format_validation_error(e)}",
                details={"error_type": "validation"}
            ) from e
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _find_config(self, name: str) -> Optional[Path]:
        """Find a named configuration file under the search root."""
        for directory in ("configs", "config", "."):
            for suffix in (".yaml", ".yml"):
                path = self._root / directory / f"{name}{suffix}"
                if path.exists():
                    return path
        return None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse a YAML configuration file.

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)

            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration file {file_path} must contain a YAML object (dictionary)")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration.

        The first segment after the prefix names the section, the rest is the
        field name: CMDSENSE_REMOTE_API_KEY overrides remote.api_key.
        """
        result = config_data.copy()

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX) or env_key == "CMDSENSE_ENV":
                continue

            section, _, field_name = env_key[len(ENV_PREFIX):].lower().partition('_')
            if not section or not field_name:
                continue

            section_data = result.get(section)
            if section_data is None:
                section_data = {}
            elif not isinstance(section_data, dict):
                continue
            else:
                section_data = dict(section_data)

            if field_name in VERBATIM_FIELDS:
                section_data[field_name] = env_value
            else:
                section_data[field_name] = self._convert_env_value(env_value)
            result[section] = section_data

        remote = result.get("remote") or {}
        if not remote.get("api_key") and os.getenv("OPENAI_API_KEY"):
            result["remote"] = {**remote, "api_key": os.getenv("OPENAI_API_KEY")}

        return result

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable string to bool, int, float, or string."""
        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False

        try:
            if '.' not in value:
                return int(value)
            return float(value)
        except ValueError:
            pass

        return value

    def _format_validation_error(self, error: ValidationError) -> str:
        """Format a Pydantic validation error for user-friendly display."""
        messages = []
        for err in error.errors():
            location = " -> ".join(str(loc) for loc in err['loc'])
            value = err.get('input', 'N/A')
            messages.append(f"  {location}: {err['msg']} (got: {value})")

        return "Validation errors:\n" + "\n".join(messages)


def load_config(config_path: Optional[Union[str, Path]] = None,
                search_root: Optional[Union[str, Path]] = None) -> CmdSenseConfig:
    """
    Load configuration from multiple sources.

    Raises:
        ConfigurationError: If configuration loading fails
    """
    return ConfigLoader(search_root).load_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> Tuple[bool, Optional[str]]:
    """
    Validate a configuration file without keeping the result.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        ConfigLoader(load_env_file=False).load_config(config_path)
        return True, None
    except ConfigurationError as e:
        return False, str(e)
