"""
Configuration loader for the Inspection Region Query system.

This module provides the ConfigLoader class that handles loading and validating
JSON configuration files for multi-environment deployments.
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional
from functools import lru_cache

from pydantic import ValidationError

from .settings_models import StoreSettings
from ..exceptions import RQConfigurationError, RQValidationError
from ..utils import get_logger

REQUIRED_ENVIRONMENT_KEYS = ["store", "logging", "processing"]


class ConfigLoader:
    """
    Configuration loader and validator for the region query tools.

    This class handles loading environment-specific configuration from JSON files,
    validating required sections, and providing type-safe access to store settings.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_dir: Directory containing configuration files (defaults to 'config/')
        """
        self.logger = get_logger(__name__)
        self.config_dir = Path(config_dir) if config_dir else Path("config")

    @lru_cache(maxsize=2)
    def load_environment_config(self, environment: str) -> Dict[str, Any]:
        """
        Load configuration for a specific environment.

        Args:
            environment: Environment name (development/production)

        Returns:
            Dictionary containing environment-specific configuration merged with shared config

        Raises:
            RQConfigurationError: If configuration cannot be loaded or validated
        """
        env_config_path = self.config_dir / "environment_config.json"

        if not env_config_path.exists():
            raise RQConfigurationError(
                f"Environment configuration file not found: {env_config_path}"
            )

        try:
            with open(env_config_path, 'r') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise RQConfigurationError(
                f"Invalid JSON in environment configuration: {str(e)}"
            )

        try:
            self._validate_environment_config(config_data, environment)
        except RQValidationError as e:
            raise RQConfigurationError(
                f"Failed to load environment configuration: {e.message}",
                {"environment": environment}
            )

        env_config = _merge_shared(config_data.get("shared", {}),
                                   config_data["environments"][environment])
        env_config["_validation"] = config_data.get("validation", {})

        self.logger.info(f"Loaded configuration for environment: {environment}")
        return env_config

    def get_section(self, environment: str, section: str) -> Dict[str, Any]:
        """
        Get one top-level section of an environment configuration.

        Args:
            environment: Environment name
            section: Section key (store, logging, processing)

        Returns:
            Dictionary containing the section

        Raises:
            RQConfigurationError: If the section is not present
        """
        env_config = self.load_environment_config(environment)
        if section not in env_config:
            raise RQConfigurationError(
                f"Section '{section}' not found in {environment} configuration"
            )
        return env_config[section]

    def get_store_settings(self, environment: str,
                           overrides: Optional[Dict[str, Any]] = None) -> StoreSettings:
        """
        Get validated point store settings for an environment.

        A relative ``data_directory`` in the configuration file is resolved
        against the parent of the configuration directory; override values are
        used as given.

        Args:
            environment: Environment name
            overrides: Values replacing configured ones (e.g. from the command line)

        Returns:
            StoreSettings model

        Raises:
            RQConfigurationError: If the store section fails validation
        """
        store_config = dict(self.get_section(environment, "store"))
        data_directory = store_config.get("data_directory")
        if data_directory and not Path(data_directory).is_absolute():
            store_config["data_directory"] = str(self.config_dir.resolve().parent / data_directory)
        if overrides:
            store_config.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return StoreSettings(**store_config)
        except ValidationError as e:
            raise RQConfigurationError(
                f"Invalid store configuration: {e.errors()[0]['msg']}",
                {"environment": environment}
            )

    def validate_environment_variables(self, environment: str) -> None:
        """
        Validate that required environment variables are set.

        Args:
            environment: Environment name to validate

        Raises:
            RQValidationError: If required environment variables are missing
        """
        env_config = self.load_environment_config(environment)
        required_vars = env_config.get("_validation", {}).get("required_environment_variables", [])

        missing_vars = [var for var in required_vars if not os.getenv(var)]

        if missing_vars:
            raise RQValidationError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

        self.logger.info(f"Environment variables validated for: {environment}")

    def _validate_environment_config(self, config_data: Dict[str, Any], environment: str) -> None:
        """
        Validate environment configuration structure.

        Args:
            config_data: Configuration data to validate
            environment: Environment name to validate

        Raises:
            RQValidationError: If configuration is invalid
        """
        if "environments" not in config_data:
            raise RQValidationError("Missing 'environments' key in configuration")

        if environment not in config_data["environments"]:
            available_envs = list(config_data["environments"].keys())
            raise RQValidationError(
                f"Environment '{environment}' not found. Available: {available_envs}"
            )

        env_config = config_data["environments"][environment]
        shared_config = config_data.get("shared", {})

        for key in REQUIRED_ENVIRONMENT_KEYS:
            if key not in env_config and key not in shared_config:
                raise RQValidationError(
                    f"Missing required key '{key}' in {environment} configuration"
                )

    def clear_cache(self) -> None:
        """Clear the configuration cache."""
        self.load_environment_config.cache_clear()
        self.logger.info("Configuration cache cleared")


def _merge_shared(shared: Dict[str, Any], env_config: Dict[str, Any]) -> Dict[str, Any]:
    """Merge shared sections into an environment; environment values win."""
    merged: Dict[str, Any] = {}
    for key in set(shared) | set(env_config):
        shared_value = shared.get(key)
        env_value = env_config.get(key)
        if isinstance(shared_value, dict) and isinstance(env_value, dict):
            merged[key] = {**shared_value, **env_value}
        elif key in env_config:
            merged[key] = env_value
        else:
            merged[key] = shared_value
    return merged
