"""Server configuration schema for the webhook API server."""
from pydantic import BaseModel, Field, ConfigDict


class ServerConfig(BaseModel):
    """REST API server configuration."""
    model_config = ConfigDict(extra="forbid")

    host: str = Field("0.0.0.0", description="Server host")
    port: int = Field(8000, description="Server port")
    log_level: str = Field("info", description="Server log level")
    access_log: bool = Field(True, description="Enable access logging")

    # Documentation
    docs_enabled: bool = Field(True, description="Enable API documentation")
    docs_url: str = Field("/docs", description="Swagger UI URL")
    openapi_url: str = Field("/openapi.json", description="OpenAPI schema URL")
