"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - One YAML file per target environment (dev, staging, production)
    - Environment selection through the MODE variable
    - Environment variable override (APP_BASE_URL overrides app.base_url)
    - Dot notation path access
    - Default value support

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger


# Directory holding <environment>.yaml files
ENVIRONMENTS_DIR = Path(__file__).parent.parent / "config" / "environments"
DEFAULT_ENVIRONMENT = "dev"


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (APP_BASE_URL)
        2. YAML configuration file for the selected environment
        3. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("app.base_url")
        'https://app.livesharenow.com'

        >>> config.get("auth.max_retries", 3)
        3

    Environment Variable Mapping:
        - app.base_url -> APP_BASE_URL
        - google.email -> GOOGLE_EMAIL
        - e2e.enabled -> E2E_ENABLED
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(
        cls,
        config_path: Optional[Path] = None,
        environment: Optional[str] = None,
    ) -> "ConfigLoader":
        """Singleton pattern - configuration is loaded once per process."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(
        self,
        config_path: Optional[Path] = None,
        environment: Optional[str] = None,
    ) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Explicit YAML file. Takes precedence over `environment`.
            environment: Environment name. Defaults to the MODE env var, then "dev".
        """
        if getattr(self, "_initialized", False):
            return

        self._environment = environment or os.getenv("MODE") or DEFAULT_ENVIRONMENT
        self._config_path = (
            Path(config_path) if config_path
            else ENVIRONMENTS_DIR / f"{self._environment}.yaml"
        )
        self._load_config()
        self._initialized = True

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def config_path(self) -> Path:
        return self._config_path

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self._config_path}"
            )
        self._config = loaded
        logger.debug(
            f"Loaded '{self._environment}' configuration from: {self._config_path}"
        )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.
        Environment values are coerced to the type of the default, or of the
        YAML value when no default is given.

        Args:
            key: Dot-notation path (e.g., "app.base_url")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        yaml_value = self._lookup(key)

        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            reference = default if default is not None else yaml_value
            return self._convert_type(env_value, reference)

        if yaml_value is None:
            return default
        return yaml_value

    def _lookup(self, key: str) -> Any:
        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                return None
            if value is None:
                return None
        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name or dot path (e.g., "browser", "scenarios.event_setup")

        Leaf values go through get(), so environment overrides apply
        (SCENARIOS_CUSTOMIZATION_LOCATION overrides scenarios.customization.location).

        Returns:
            Section dictionary or empty dict if not found
        """
        value = self._lookup(section)
        if not isinstance(value, dict):
            return {}
        resolved: Dict[str, Any] = {}
        for key, item in value.items():
            path = f"{section}.{key}"
            resolved[key] = self.get_section(path) if isinstance(item, dict) else self.get(path)
        return resolved

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value
        if isinstance(reference, list):
            return [item.strip() for item in value.split(",") if item.strip()]

        return value

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None
        cls._config = {}


def get_config() -> ConfigLoader:
    """Return the process-wide configuration loader."""
    return ConfigLoader()


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "get_config",
]
