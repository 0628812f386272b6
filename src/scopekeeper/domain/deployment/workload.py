"""Descriptor of a live workload (pull request preview or deployment)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from scopekeeper.domain.project.tags import SHA_TAG, OwnerKind, OwnerTag


@dataclass(frozen=True)
class WorkloadDescriptor:
    """What the cluster reports about one tagged workload."""
    workload_id: str
    service_name: str
    owner: OwnerTag
    status: str = "UNKNOWN"
    sha: Optional[str] = None
    task_definition: Optional[str] = None
    running_count: int = 0
    desired_count: int = 0

    @property
    def project_id(self) -> str:
        return self.owner.project_id

    @property
    def kind(self) -> OwnerKind:
        return self.owner.kind

    @property
    def identifier(self) -> str:
        return self.owner.identifier or ""

    @property
    def is_pull_request(self) -> bool:
        return self.owner.kind is OwnerKind.PULL_REQUEST

    @property
    def is_deployment(self) -> bool:
        return self.owner.kind is OwnerKind.DEPLOYMENT

    def summary(self) -> str:
        label = "PR" if self.is_pull_request else "Deployment"
        return f"{label} {self.identifier} ({self.status})"

    @classmethod
    def from_service(cls, service: Mapping[str, Any], owner: OwnerTag,
                     tags: Mapping[str, str]) -> 'WorkloadDescriptor':
        return cls(
            workload_id=service['serviceArn'],
            service_name=service.get('serviceName', owner.resource_name),
            owner=owner,
            status=service.get('status', 'UNKNOWN'),
            sha=tags.get(SHA_TAG),
            task_definition=service.get('taskDefinition'),
            running_count=service.get('runningCount', 0),
            desired_count=service.get('desiredCount', 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "PR" if self.is_pull_request else "Deployment",
            "identifier": self.identifier,
            "project_id": self.project_id,
            "workload_id": self.workload_id,
            "service_name": self.service_name,
            "status": self.status,
            "sha": self.sha,
            "task_definition": self.task_definition,
            "running_count": self.running_count,
            "desired_count": self.desired_count,
        }
