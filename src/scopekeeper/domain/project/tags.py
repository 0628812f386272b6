"""Ownership tag conventions.

Every provider-side object created by scopekeeper carries exactly one
ownership tag. Its value encodes the owning entity, so discovery is a pure
query against the provider:

    scopekeeper:owner = project/<project_id>
    scopekeeper:owner = pull-request/<project_id>/<number>
    scopekeeper:owner = deployment/<project_id>/<name>

Workloads additionally carry correlation tags (project id, sha) that never
establish ownership.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from scopekeeper._package import TAG_NAMESPACE
from scopekeeper.domain.core.exceptions import ValidationError
from scopekeeper.domain.project.value_objects import (
    DeploymentName,
    ProjectId,
    PullRequestNumber,
)

OWNER_TAG = f"{TAG_NAMESPACE}:owner"
PROJECT_TAG = f"{TAG_NAMESPACE}:project"
SHA_TAG = f"{TAG_NAMESPACE}:sha"
CREATED_AT_TAG = f"{TAG_NAMESPACE}:created-at"
NAME_TAG = "Name"


class OwnerKind(str, Enum):
    """Logical entity that owns a provider-side object."""
    PROJECT = "project"
    PULL_REQUEST = "pull-request"
    DEPLOYMENT = "deployment"


@dataclass(frozen=True)
class OwnerTag:
    """Value of the ownership tag."""
    kind: OwnerKind
    project_id: str
    identifier: Optional[str] = None

    def __post_init__(self):
        ProjectId(self.project_id)
        if self.kind is OwnerKind.PROJECT:
            if self.identifier is not None:
                raise ValidationError("Project owner tags carry no identifier")
        elif self.identifier is None:
            raise ValidationError(f"{self.kind.value} owner tags require an identifier")

    @classmethod
    def project(cls, project_id: str) -> 'OwnerTag':
        return cls(OwnerKind.PROJECT, str(ProjectId(project_id)))

    @classmethod
    def pull_request(cls, project_id: str, pr_number: int) -> 'OwnerTag':
        return cls(OwnerKind.PULL_REQUEST, project_id, str(PullRequestNumber(pr_number)))

    @classmethod
    def deployment(cls, project_id: str, name: str) -> 'OwnerTag':
        return cls(OwnerKind.DEPLOYMENT, project_id, str(DeploymentName(name)))

    @classmethod
    def parse(cls, value: str) -> 'OwnerTag':
        parts = value.split("/")
        try:
            kind = OwnerKind(parts[0])
        except ValueError as e:
            raise ValidationError(f"Unknown owner tag: {value!r}") from e
        if kind is OwnerKind.PROJECT and len(parts) == 2:
            return cls(kind, parts[1])
        if kind is not OwnerKind.PROJECT and len(parts) == 3:
            return cls(kind, parts[1], parts[2])
        raise ValidationError(f"Malformed owner tag: {value!r}")

    @property
    def value(self) -> str:
        if self.identifier is None:
            return f"{self.kind.value}/{self.project_id}"
        return f"{self.kind.value}/{self.project_id}/{self.identifier}"

    @property
    def resource_name(self) -> str:
        """
        Provider-safe name derived from the owner, e.g. ``acme-pr-42-1f0c9a2b``.

        Ids may contain ``-``, so workload names end with a digest of the
        owner value; ECS service names must be unique within a cluster.
        """
        if self.kind is OwnerKind.PROJECT:
            return self.project_id
        digest = hashlib.sha1(self.value.encode("utf-8")).hexdigest()[:8]
        return f"{self.project_id}-{self._label}-{self.identifier}-{digest}"

    @property
    def _label(self) -> str:
        return "pr" if self.kind is OwnerKind.PULL_REQUEST else "deploy"

    def hostname(self, zone_name: Optional[str] = None) -> str:
        """
        DNS name of a workload, e.g. ``42.pr.acme.example.com``.

        Ids never contain dots, so each label pair maps back to one owner.
        """
        if self.kind is OwnerKind.PROJECT:
            raise ValidationError("Only workloads are reachable under a hostname")
        host = f"{self.identifier}.{self._label}.{self.project_id}".lower()
        if zone_name:
            host = f"{host}.{zone_name.rstrip('.').lower()}"
        return host

    def filters(self) -> List[Dict[str, Any]]:
        """EC2 describe filters matching objects owned by this owner."""
        return [{'Name': f"tag:{OWNER_TAG}", 'Values': [self.value]}]

    def __str__(self) -> str:
        return self.value


TagList = List[Dict[str, str]]


def tags_to_dict(tags: Optional[Iterable[Mapping[str, Any]]]) -> Dict[str, str]:
    """Flatten EC2 (``Key``/``Value``) or ECS (``key``/``value``) tag lists."""
    result: Dict[str, str] = {}
    for tag in tags or []:
        key = tag.get('Key', tag.get('key'))
        if key is not None:
            result[key] = tag.get('Value', tag.get('value', ''))
    return result


def owner_of(tags: Union[Mapping[str, str], Iterable[Mapping[str, Any]], None]) -> Optional[OwnerTag]:
    """Return the owner encoded in a tag set, or None if it carries no valid one."""
    flat = tags if isinstance(tags, Mapping) else tags_to_dict(tags)
    value = flat.get(OWNER_TAG)
    if not value:
        return None
    try:
        return OwnerTag.parse(value)
    except ValidationError:
        return None


class TagBuilder:
    """Utility for building standardized AWS resource tags."""

    @staticmethod
    def build_common_tags(owner: OwnerTag) -> TagList:
        """Build the tags every object carries: name, owner and creation time."""
        return [
            {'Key': NAME_TAG, 'Value': f"{TAG_NAMESPACE}-{owner.resource_name}"},
            {'Key': OWNER_TAG, 'Value': owner.value},
            {'Key': CREATED_AT_TAG, 'Value': datetime.now(timezone.utc).isoformat()},
        ]

    @staticmethod
    def build_workload_tags(owner: OwnerTag, sha: Optional[str] = None) -> TagList:
        """Build tags for a pull request or deployment workload.

        Args:
            owner: Pull request or deployment owner
            sha: Commit the workload runs, deployments only

        Returns:
            List of tag dictionaries with Key/Value pairs
        """
        if owner.kind is OwnerKind.PROJECT:
            raise ValidationError("Workloads are owned by a pull request or a deployment")
        tags = TagBuilder.build_common_tags(owner)
        tags.append({'Key': PROJECT_TAG, 'Value': owner.project_id})
        if sha:
            tags.append({'Key': SHA_TAG, 'Value': sha})
        return tags

    @staticmethod
    def build_tag_specifications(owner: OwnerTag, resource_type: str) -> List[Dict[str, Any]]:
        """Build an EC2 TagSpecifications list for a single resource type."""
        return [{
            'ResourceType': resource_type,
            'Tags': TagBuilder.build_common_tags(owner),
        }]

    @staticmethod
    def to_ecs_tags(tags: TagList) -> List[Dict[str, str]]:
        """ECS spells tag keys in lower case."""
        return [{'key': tag['Key'], 'value': tag['Value']} for tag in tags]
