"""Domain ports for the sub-resource managers.

Each port wraps one provider concept. Implementations are asynchronous,
independently fallible, and return the provider's native descriptors.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from scopekeeper.domain.deployment.app_definition import AppDefinition
from scopekeeper.domain.deployment.workload import WorkloadDescriptor
from scopekeeper.domain.project.tags import TagList


class VpcPort(ABC):
    """Shared virtual network lookup."""

    @abstractmethod
    async def find(self) -> Optional[Dict[str, Any]]:
        """Return the shared VPC descriptor, or None."""


class HostedZonePort(ABC):
    """Hosted DNS zone lookup."""

    @abstractmethod
    async def find(self) -> Optional[Dict[str, Any]]:
        """Return the hosted zone descriptor, or None."""

    async def find_id(self) -> Optional[str]:
        zone = await self.find()
        if not zone:
            return None
        return zone['Id'].split('/')[-1]

    @abstractmethod
    async def upsert_record(self, zone_id: str, hostname: str) -> Optional[str]:
        """Point a workload hostname at the ingress; return the target, or None if none is configured."""

    @abstractmethod
    async def delete_record(self, zone_id: str, hostname: str) -> bool:
        """Remove a workload hostname; return False if no record existed."""


class RouteTablePort(ABC):
    """Route tables of the shared VPC."""

    @abstractmethod
    async def find_default(self) -> Dict[str, Any]:
        """Return the VPC's main route table."""


class NetworkAclPort(ABC):
    """Per-project network ACLs."""

    @abstractmethod
    async def create(self, project_id: str) -> Dict[str, Any]:
        """Create a network ACL tagged for the project."""

    @abstractmethod
    async def find(self, project_id: str) -> List[Dict[str, Any]]:
        """Return the network ACLs tagged for the project."""

    @abstractmethod
    async def destroy(self, project_id: str) -> None:
        """Delete the network ACLs tagged for the project."""


class SubnetPort(ABC):
    """Per-project subnets."""

    @abstractmethod
    async def create(self, project_id: str, route_table_id: str, network_acl_id: str) -> Dict[str, Any]:
        """Create the project subnet; raises ResourceConflictError if one exists."""

    @abstractmethod
    async def find_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        """Return the subnet tagged for the project, or None."""

    @abstractmethod
    async def list_projects(self) -> List[str]:
        """Return the ids of every project owning a subnet."""

    @abstractmethod
    async def destroy(self, project_id: str) -> None:
        """Delete the project subnet."""


class ClusterPort(ABC):
    """Container workloads."""

    @abstractmethod
    async def describe_project(self, project_id: str) -> List[WorkloadDescriptor]:
        """Return live pull request and deployment workloads of a project."""

    @abstractmethod
    async def launch(self, tags: TagList, app_definition: AppDefinition,
                     subnet_ids: Sequence[str] = ()) -> WorkloadDescriptor:
        """Start a workload from an app definition."""

    @abstractmethod
    async def update_task_definition(self, workload_id: str, app_definition: AppDefinition,
                                     sha: Optional[str] = None) -> WorkloadDescriptor:
        """Replace the running task definition of a workload in place."""

    @abstractmethod
    async def terminate(self, workload_id: str) -> None:
        """Stop and remove a workload."""
