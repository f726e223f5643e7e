"""Configuration loading."""
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from cluster_hibernation.config.schemas import HibernationConfig, validate_config
from cluster_hibernation.config.utils.env_expansion import expand_env_vars
from cluster_hibernation.domain.core.exceptions import ConfigurationError
from cluster_hibernation.infrastructure.logging.logger import get_logger

CONFIG_PATH_ENV = "HIBERNATION_CONFIG_FILE"

logger = get_logger(__name__)


class ConfigurationManager:
    """Loads and caches the hibernation configuration."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        if config_path is None:
            config_path = os.environ.get(CONFIG_PATH_ENV)
        self._config_path = Path(config_path) if config_path else None
        self._config: Optional[HibernationConfig] = None

    @property
    def config_path(self) -> Optional[Path]:
        return self._config_path

    def _read_raw(self) -> Dict[str, Any]:
        if self._config_path is None:
            return {}
        if not self._config_path.is_file():
            raise ConfigurationError(f"Configuration file not found: {self._config_path}")
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self._config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {self._config_path}")
        return data

    def get_config(self) -> HibernationConfig:
        """
        Load the configuration, expanding environment variables.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        if self._config is None:
            raw = expand_env_vars(self._read_raw())
            try:
                self._config = validate_config(raw)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid configuration: {e}") from e
            logger.debug("Configuration loaded", path=str(self._config_path) if self._config_path else None)
        return self._config

    def reload(self) -> HibernationConfig:
        self._config = None
        return self.get_config()


def load_config(config_path: Optional[Union[str, Path]] = None) -> HibernationConfig:
    """Load configuration from ``config_path`` or $HIBERNATION_CONFIG_FILE."""
    return ConfigurationManager(config_path).get_config()
