#!/usr/bin/env python3
"""Hierarchical configuration manager for pathtarget.

This module provides configuration management with:
- 6-level precedence hierarchy
- YAML configuration files
- Environment variable overrides (PATHTARGET_*)
- Validation of every layer before it is used

Example:
    >>> config = ConfigManager("pathtarget.yaml")
    >>> config.get("pathtarget.targets.patterns", default=[])
"""

import copy
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from pathtarget.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode
from pathtarget.core.logging import get_logger
from pathtarget.core.validators import ValidationError, validate_config

ENV_PREFIX = "PATHTARGET_"

# Environment keys holding lists; items are separated like PATH entries
ENV_LIST_KEYS = frozenset({"targets.patterns"})

# Environment keys kept as raw strings
ENV_STRING_KEYS = frozenset({"version", "targets.root", "logging.level", "logging.file"})


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    SYSTEM_CONFIG = 2
    USER_CONFIG = 3
    ENVIRONMENT = 4
    CLI_ARGS = 5
    RUNTIME = 6  # Highest precedence


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigManager:
    """Hierarchical configuration manager.

    Manages configuration from multiple sources with precedence:
    1. Compiled defaults (lowest)
    2. System config (/etc/pathtarget/config.yaml)
    3. User config (--config, else ~/.config/pathtarget/config.yaml)
    4. Environment variables (PATHTARGET_*)
    5. CLI arguments
    6. Runtime layers (highest)
    """

    DEFAULT_CONFIG = {ConfigKey.ROOT: DEFAULT_CONFIG}
    SYSTEM_CONFIG_FILE = Path("/etc/pathtarget/config.yaml")
    USER_CONFIG_FILE = Path("~/.config/pathtarget/config.yaml")

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration manager.

        The system file and the user file are loaded when they exist; an
        explicit ``config_file`` replaces the user file.

        Args:
            config_file: Optional config file to load

        Raises:
            ConfigError: If any layer cannot be loaded or fails validation
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._logger = get_logger("pathtarget.config")

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.SYSTEM_CONFIG_FILE.exists():
            self.load_file(str(self.SYSTEM_CONFIG_FILE), ConfigSource.SYSTEM_CONFIG)

        if config_file:
            self.load_file(config_file)
        elif self.USER_CONFIG_FILE.expanduser().exists():
            self.load_file(str(self.USER_CONFIG_FILE))

        self._load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load configuration from YAML file.

        Args:
            file_path: Path to YAML config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be loaded, parsed or validated
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.PERMISSION_DENIED)

        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

        self._validate(config_data, str(path))
        self._config[source] = config_data
        self._logger.debug("Loaded configuration", file=str(path), source=source.name)

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Load configuration from dictionary.

        Raises:
            ConfigError: If the dictionary fails validation
        """
        self._validate(config_data, source.name)
        self._config[source] = copy.deepcopy(config_data)

    def _validate(self, config_data: Dict[str, Any], origin: str) -> None:
        section = config_data.get(ConfigKey.ROOT)
        if section is None:
            return
        try:
            validate_config(section)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {origin}: {e}", e.error_code)

    def _load_environment(self) -> None:
        """Load configuration from environment variables.

        PATHTARGET_SECTION_KEY=value sets ``pathtarget.section.key``, e.g.
        PATHTARGET_LOGGING_LEVEL=DEBUG. List keys take ``os.pathsep``
        separated items: PATHTARGET_TARGETS_PATTERNS="**/*.cls:!**/old/**".

        Raises:
            ConfigError: If the resulting layer fails validation
        """
        env_config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = key[len(ENV_PREFIX):].lower().split("_")
            dotted = ".".join(parts)

            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})

            if dotted in ENV_LIST_KEYS:
                current[parts[-1]] = [item for item in value.split(os.pathsep) if item]
            elif dotted in ENV_STRING_KEYS:
                current[parts[-1]] = value
            else:
                current[parts[-1]] = self._parse_env_value(value)

        if env_config:
            layer = {ConfigKey.ROOT: env_config}
            self._validate(layer, "environment")
            self._config[ConfigSource.ENVIRONMENT] = layer

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value into bool, int, float or str."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        for convert in (int, float):
            try:
                return convert(value)
            except ValueError:
                pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Dot-separated key path (e.g., "pathtarget.logging.level")
            default: Default value if no source sets the key

        Returns:
            Value from the highest-precedence source that sets it
        """
        for source in sorted(self._config, key=lambda s: s.value, reverse=True):
            value = self._get_nested(self._config[source], key)
            if value is not None:
                return value
        return default

    def _get_nested(self, config: Dict[str, Any], key: str) -> Optional[Any]:
        current = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def get_all(self) -> Dict[str, Any]:
        """Get merged configuration from all sources."""
        merged: Dict[str, Any] = {}
        for source in sorted(self._config, key=lambda s: s.value):
            merged = self._deep_merge(merged, self._config[source])
        return merged

    def get_section(self) -> Dict[str, Any]:
        """Get the merged ``pathtarget`` section."""
        return self.get_all().get(ConfigKey.ROOT, {})

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries; lists and scalars in override win."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
