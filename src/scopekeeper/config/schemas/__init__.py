"""Configuration schemas package."""

from .app_schema import AppConfig, validate_config
from .logging_schema import LoggingConfig
from .provider_schema import (
    AWSConfig,
    ClusterConfig,
    DNSConfig,
    NetworkConfig,
    OrchestratorConfig,
)
from .server_schema import ServerConfig

__all__ = [
    # Main configuration
    "AppConfig",
    "validate_config",
    # Provider configurations
    "AWSConfig",
    "NetworkConfig",
    "DNSConfig",
    "ClusterConfig",
    "OrchestratorConfig",
    # Logging configuration
    "LoggingConfig",
    # Server configuration
    "ServerConfig",
]
