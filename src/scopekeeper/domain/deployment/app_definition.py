"""App definition: the container/task document cloned per workload."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from scopekeeper.domain.core.exceptions import InvalidAppDefinitionError
from scopekeeper.domain.project.value_objects import PortSpec


class PortMapping(BaseModel):
    """Port mapping; all three fields are mandatory."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    host_port: int = Field(..., alias="hostPort", ge=0, le=65535)
    container_port: int = Field(..., alias="containerPort", ge=1, le=65535)
    protocol: Literal["tcp", "udp"]


class ContainerDefinition(BaseModel):
    """Container definition; unknown ECS keys are kept and forwarded."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    port_mappings: List[PortMapping] = Field(default_factory=list, alias="portMappings")


class TaskDefinition(BaseModel):
    """A task: one or more containers started together."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    family: Optional[str] = None
    container_definitions: List[ContainerDefinition] = Field(
        ..., alias="containerDefinitions", min_length=1
    )


class AppDefinition(BaseModel):
    """Structured workload specification."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., min_length=1)
    tasks: List[TaskDefinition] = Field(..., min_length=1)

    @field_validator("tasks")
    @classmethod
    def validate_container_names(cls, v: List[TaskDefinition]) -> List[TaskDefinition]:
        """Container names must be unique across tasks, they share one task definition."""
        seen = set()
        for task in v:
            for container in task.container_definitions:
                if container.name in seen:
                    raise ValueError(f"Duplicate container name: {container.name}")
                seen.add(container.name)
        return v

    @classmethod
    def parse(cls, document: Union[str, bytes, Mapping[str, Any]]) -> 'AppDefinition':
        """
        Parse an app definition from its serialized form or a mapping.

        Raises:
            InvalidAppDefinitionError: If the document is not JSON or fails validation
        """
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except (TypeError, ValueError) as e:
                raise InvalidAppDefinitionError(f"Error parsing app definition: {e}") from e
        if not isinstance(document, Mapping):
            raise InvalidAppDefinitionError("App definition must be a JSON object")
        try:
            return cls.model_validate(dict(document))
        except PydanticValidationError as e:
            raise InvalidAppDefinitionError(
                f"Invalid app definition: {e.error_count()} validation error(s)",
                details=e.errors(include_url=False),
            ) from e

    @classmethod
    def coerce(cls, value: Union['AppDefinition', str, bytes, Mapping[str, Any]]) -> 'AppDefinition':
        if isinstance(value, AppDefinition):
            return value
        return cls.parse(value)

    @classmethod
    def skeleton(cls, project_id: str, ports: Iterable[PortSpec] = (),
                 image: Optional[str] = None) -> 'AppDefinition':
        """Default document for a new project's deployments."""
        app_def = cls.model_validate({
            "name": project_id,
            "tasks": [{
                "family": project_id,
                "containerDefinitions": [{
                    "name": project_id,
                    "image": image or f"{project_id}:latest",
                    "essential": True,
                    "cpu": 256,
                    "memory": 512,
                    "portMappings": [],
                    "environment": [],
                }],
            }],
        })
        return app_def.with_ports(ports)

    def with_ports(self, ports: Iterable[Union[PortSpec, Mapping[str, Any]]]) -> 'AppDefinition':
        """Return a copy with port mappings appended to the first container."""
        clone = self.model_copy(deep=True)
        container = clone.tasks[0].container_definitions[0]
        for port in ports:
            mapping = port.to_port_mapping() if isinstance(port, PortSpec) else dict(port)
            try:
                container.port_mappings.append(PortMapping.model_validate(mapping))
            except PydanticValidationError as e:
                raise InvalidAppDefinitionError(f"Invalid port mapping: {mapping}") from e
        return clone

    @property
    def containers(self) -> List[ContainerDefinition]:
        return [c for task in self.tasks for c in task.container_definitions]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
