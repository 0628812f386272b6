"""AWS provider configuration schemas."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AWSConfig(BaseModel):
    """AWS session and transport configuration."""

    region: str = Field("us-east-1", description="AWS region")
    profile: Optional[str] = Field(None, description="Named profile from the shared credentials file")
    endpoint_url: Optional[str] = Field(None, description="Custom endpoint, e.g. LocalStack")
    request_retry_attempts: int = Field(3, description="botocore retry attempts per call")
    connection_timeout_ms: int = Field(1000, description="Connection timeout in milliseconds")

    @field_validator("request_retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry attempts."""
        if v < 0:
            raise ValueError("Retry attempts cannot be negative")
        return v

    @field_validator("connection_timeout_ms")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate connection timeout."""
        if v <= 0:
            raise ValueError("Connection timeout must be positive")
        return v


class NetworkConfig(BaseModel):
    """Shared VPC lookup and subnet allocation."""

    vpc_id: Optional[str] = Field(None, description="Shared VPC id; looked up by tag when unset")
    vpc_tag_key: str = Field("scopekeeper:role", description="Tag key marking the shared VPC")
    vpc_tag_value: str = Field("shared-vpc", description="Tag value marking the shared VPC")
    subnet_prefix_length: int = Field(24, description="Prefix length of project subnets")

    @field_validator("subnet_prefix_length")
    @classmethod
    def validate_prefix_length(cls, v: int) -> int:
        """AWS subnets range from /16 to /28."""
        if not 16 <= v <= 28:
            raise ValueError("Subnet prefix length must be between 16 and 28")
        return v


class DNSConfig(BaseModel):
    """Hosted zone lookup."""

    hosted_zone_id: Optional[str] = Field(None, description="Hosted zone id")
    hosted_zone_name: Optional[str] = Field(None, description="Hosted zone domain, used when no id is set")
    record_target: Optional[str] = Field(
        None, description="DNS name workload CNAME records point at, e.g. the shared load balancer"
    )
    record_ttl: int = Field(60, description="TTL of workload records in seconds")

    @field_validator("record_ttl")
    @classmethod
    def validate_record_ttl(cls, v: int) -> int:
        """Validate record TTL."""
        if v < 0:
            raise ValueError("Record TTL must be non-negative")
        return v


class ClusterConfig(BaseModel):
    """ECS cluster running every workload."""

    cluster_name: str = Field("scopekeeper", description="ECS cluster name")
    launch_type: str = Field("FARGATE", description="ECS launch type")
    assign_public_ip: bool = Field(True, description="Assign public IPs to workload tasks")
    execution_role_arn: Optional[str] = Field(None, description="Task execution role")
    task_cpu: str = Field("256", description="Default task CPU units")
    task_memory: str = Field("512", description="Default task memory (MiB)")
    desired_count: int = Field(1, description="Tasks per workload")

    @field_validator("launch_type")
    @classmethod
    def validate_launch_type(cls, v: str) -> str:
        """Validate launch type."""
        valid_types = ["FARGATE", "EC2"]
        if v not in valid_types:
            raise ValueError(f"Launch type must be one of {valid_types}")
        return v


class OrchestratorConfig(BaseModel):
    """Project scope discovery tolerance."""

    lookup_attempts: int = Field(3, description="Tag lookups before a project is reported missing")
    lookup_delay: float = Field(1.0, description="Seconds between tag lookups")

    @field_validator("lookup_attempts")
    @classmethod
    def validate_lookup_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Lookup attempts must be at least 1")
        return v

    @field_validator("lookup_delay")
    @classmethod
    def validate_lookup_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Lookup delay cannot be negative")
        return v
