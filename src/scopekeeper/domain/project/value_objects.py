# src/scopekeeper/domain/project/value_objects.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import re
from scopekeeper.domain.core.exceptions import ValidationError

_IDENTIFIER_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$')


@dataclass(frozen=True)
class ProjectId:
    """Project identifier, safe to embed in tag values and ECS service names."""
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise ValidationError("Project ID must be a string")
        if not _IDENTIFIER_PATTERN.match(self.value):
            raise ValidationError(f"Invalid project ID format: {self.value!r}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PullRequestNumber:
    """Upstream pull request number."""
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value <= 0:
            raise ValidationError(f"Pull request number must be a positive integer: {self.value!r}")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class DeploymentName:
    """Deployment name, reused across shas."""
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise ValidationError("Deployment name must be a string")
        if not _IDENTIFIER_PATTERN.match(self.value):
            raise ValidationError(f"Invalid deployment name format: {self.value!r}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProjectScope:
    """A project's subnet, network ACL and route association."""
    project_id: str
    subnet_id: str
    network_acl_id: Optional[str] = None
    route_table_id: Optional[str] = None
    cidr_block: Optional[str] = None

    @classmethod
    def from_subnet(cls, project_id: str, subnet: Dict[str, Any],
                    network_acl_id: Optional[str] = None,
                    route_table_id: Optional[str] = None) -> 'ProjectScope':
        return cls(
            project_id=project_id,
            subnet_id=subnet['SubnetId'],
            network_acl_id=network_acl_id,
            route_table_id=route_table_id,
            cidr_block=subnet.get('CidrBlock'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "subnet_id": self.subnet_id,
            "network_acl_id": self.network_acl_id,
            "route_table_id": self.route_table_id,
            "cidr_block": self.cidr_block,
        }


@dataclass(frozen=True)
class Infrastructure:
    """Account-wide descriptors resolved once per orchestrator."""
    vpc: Dict[str, Any]
    hosted_zone_id: str
    hosted_zone_name: Optional[str] = None

    @property
    def vpc_id(self) -> str:
        return self.vpc['VpcId']


@dataclass(frozen=True)
class Endpoint:
    """Reachability descriptor of a workload."""
    hostname: str
    service_arn: str
    target: Optional[str] = None

    @property
    def is_registered(self) -> bool:
        return self.target is not None

    def to_dict(self) -> Dict[str, Any]:
        return {"hostname": self.hostname, "service_arn": self.service_arn, "target": self.target}


@dataclass(frozen=True)
class PortSpec:
    """A port exposed by a workload, as entered by a user."""
    external: int
    internal: int
    protocol: str = "tcp"

    def __post_init__(self):
        for port in (self.external, self.internal):
            if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
                raise ValidationError(f"Invalid port: {port!r}")
        if self.protocol not in ("tcp", "udp"):
            raise ValidationError(f"Invalid port protocol: {self.protocol!r}")

    def to_port_mapping(self) -> Dict[str, Any]:
        return {
            "hostPort": self.external,
            "containerPort": self.internal,
            "protocol": self.protocol,
        }

    @classmethod
    def parse(cls, text: str) -> 'PortSpec':
        """Parse ``external[:internal][/protocol]``, e.g. ``80:8080/tcp``."""
        protocol = "tcp"
        if "/" in text:
            text, protocol = text.split("/", 1)
        parts = text.split(":")
        try:
            if len(parts) == 1:
                external = internal = int(parts[0])
            elif len(parts) == 2:
                external, internal = int(parts[0]), int(parts[1])
            else:
                raise ValueError(text)
        except ValueError as e:
            raise ValidationError(f"Invalid port specification: {text!r}") from e
        return cls(external=external, internal=internal, protocol=protocol.lower())


def parse_ports(values: Optional[List[str]]) -> List[PortSpec]:
    return [PortSpec.parse(v) for v in values or []]
