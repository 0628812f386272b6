"""Main application configuration schema."""

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator, model_validator

from .logging_schema import LoggingConfig
from .provider_schema import AWSConfig, ClusterConfig, DNSConfig, NetworkConfig, OrchestratorConfig
from .server_schema import ServerConfig


class AppConfig(BaseModel):
    """Application configuration."""

    version: str = Field("1.0.0", description="Configuration version")
    environment: str = Field("development", description="Environment")
    aws: AWSConfig = Field(default_factory=AWSConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    dns: DNSConfig = Field(default_factory=DNSConfig)
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """
        Validate environment.

        Args:
            v: Value to validate

        Returns:
            Validated value

        Raises:
            ValueError: If environment is invalid
        """
        valid_environments = ["development", "testing", "staging", "production"]
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of {valid_environments}")
        return v

    @model_validator(mode="after")
    def ensure_hosted_zone(self) -> "AppConfig":
        """Production sessions must name their hosted zone."""
        if self.environment == "production" and not (
            self.dns.hosted_zone_id or self.dns.hosted_zone_name
        ):
            raise ValueError("Production configuration requires dns.hosted_zone_id or dns.hosted_zone_name")
        return self


def validate_config(config: Dict[str, Any]) -> AppConfig:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Returns:
        Validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    return AppConfig(**config)
