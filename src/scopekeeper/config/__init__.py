"""Configuration package with clean public API."""

# Main configuration classes
from .schemas import (
    AppConfig, validate_config,
    AWSConfig, NetworkConfig, DNSConfig, ClusterConfig, OrchestratorConfig,
    LoggingConfig, ServerConfig,
)

# Configuration management
from .manager import ConfigurationManager
from .loader import ConfigurationLoader

__all__ = [
    # Main configuration
    'AppConfig',
    'validate_config',

    # Specific configurations
    'AWSConfig',
    'NetworkConfig',
    'DNSConfig',
    'ClusterConfig',
    'OrchestratorConfig',
    'LoggingConfig',
    'ServerConfig',

    # Configuration management
    'ConfigurationManager',
    'ConfigurationLoader',
]
