"""Unified configuration management for the application."""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from scopekeeper.config.loader import ConfigurationLoader
from scopekeeper.config.schemas import (
    AppConfig,
    AWSConfig,
    ClusterConfig,
    DNSConfig,
    LoggingConfig,
    NetworkConfig,
    OrchestratorConfig,
    ServerConfig,
)
from scopekeeper.domain.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ConfigurationManager:
    """
    Single source of truth for configuration.

    Loads a JSON/YAML file (optional), applies environment overrides,
    validates the result into an AppConfig, and caches it.
    """

    def __init__(self, config_file: Optional[str] = None,
                 overrides: Optional[Dict[str, Any]] = None,
                 loader: Optional[ConfigurationLoader] = None):
        """Initialize configuration manager with lazy loading."""
        self._config_file = config_file
        self._overrides = overrides or {}
        self._lock = threading.RLock()
        self._app_config: Optional[AppConfig] = None
        self._loader = loader or ConfigurationLoader()

    @property
    def app_config(self) -> AppConfig:
        """Lazy load application configuration."""
        if self._app_config is None:
            with self._lock:
                if self._app_config is None:
                    self._app_config = self._load_app_config()
        return self._app_config

    def _load_app_config(self) -> AppConfig:
        config_data = self._loader.load_configuration(self._config_file)
        config_data = self._loader.apply_environment_overrides(config_data)
        config_data = _deep_merge(config_data, self._overrides)

        try:
            app_config = AppConfig.model_validate(config_data)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                missing_fields=[".".join(str(p) for p in err["loc"])
                                for err in e.errors() if err["type"] == "missing"],
            ) from e

        logger.debug("Configuration loaded for environment %s", app_config.environment)
        return app_config

    def reload(self) -> AppConfig:
        with self._lock:
            self._app_config = None
        return self.app_config

    def get_aws_config(self) -> AWSConfig:
        return self.app_config.aws

    def get_network_config(self) -> NetworkConfig:
        return self.app_config.network

    def get_dns_config(self) -> DNSConfig:
        return self.app_config.dns

    def get_cluster_config(self) -> ClusterConfig:
        return self.app_config.cluster

    def get_orchestrator_config(self) -> OrchestratorConfig:
        return self.app_config.orchestrator

    def get_logging_config(self) -> LoggingConfig:
        return self.app_config.logging

    def get_server_config(self) -> ServerConfig:
        return self.app_config.server


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
