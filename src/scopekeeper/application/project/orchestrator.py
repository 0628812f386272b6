# src/scopekeeper/application/project/orchestrator.py
import asyncio
from typing import Any, Dict, List, Optional

from scopekeeper.config.schemas import OrchestratorConfig
from scopekeeper.domain.base.ports import (
    ClusterPort,
    HostedZonePort,
    NetworkAclPort,
    RouteTablePort,
    SubnetPort,
    VpcPort,
)
from scopekeeper.domain.core.exceptions import (
    InfrastructureNotFoundError,
    OrchestratorNotInitializedError,
    ProjectHasOpenChildrenError,
    ProjectNotFoundError,
    ResourceConflictError,
)
from scopekeeper.domain.deployment import WorkloadDescriptor
from scopekeeper.domain.project import Endpoint, Infrastructure, OwnerTag, ProjectId, ProjectScope
from scopekeeper.helpers.logger import get_logger
from scopekeeper.infrastructure.exceptions import InfrastructureError


class ProjectOrchestrator:
    """
    Owns the lifecycle of per-project network scopes.

    A project scope is one subnet, one network ACL and the association to the
    shared VPC's main route table. Existence is never stored locally: every
    lookup is a tag query against the provider.
    """

    def __init__(self,
                 vpc: VpcPort,
                 hosted_zone: HostedZonePort,
                 route_tables: RouteTablePort,
                 network_acls: NetworkAclPort,
                 subnets: SubnetPort,
                 cluster: ClusterPort,
                 config: Optional[OrchestratorConfig] = None):
        self.vpc = vpc
        self.hosted_zone = hosted_zone
        self.route_tables = route_tables
        self.network_acls = network_acls
        self.subnets = subnets
        self.cluster = cluster
        self.config = config or OrchestratorConfig()
        self._infrastructure: Optional[Infrastructure] = None
        self._logger = get_logger(__name__)

    @property
    def infrastructure(self) -> Optional[Infrastructure]:
        return self._infrastructure

    @property
    def is_initialized(self) -> bool:
        return self._infrastructure is not None

    async def initialize(self) -> Infrastructure:
        """
        Resolve the shared VPC and hosted zone.

        The result is cached; later calls return it without provider calls.

        Raises:
            InfrastructureNotFoundError: If either lookup comes back empty
        """
        if self._infrastructure is not None:
            return self._infrastructure

        vpc, zone = await asyncio.gather(self.vpc.find(), self.hosted_zone.find())
        if not vpc:
            raise InfrastructureNotFoundError("vpc")
        if not zone:
            raise InfrastructureNotFoundError("hosted zone")

        self._infrastructure = Infrastructure(
            vpc=vpc,
            hosted_zone_id=zone['Id'].split('/')[-1],
            hosted_zone_name=zone.get('Name'),
        )
        self._logger.info("Orchestrator initialized",
                          vpc_id=self._infrastructure.vpc_id,
                          hosted_zone_id=self._infrastructure.hosted_zone_id)
        return self._infrastructure

    def _require_initialized(self, operation: str) -> Infrastructure:
        if self._infrastructure is None:
            raise OrchestratorNotInitializedError(operation)
        return self._infrastructure

    async def create(self, project_id: str) -> Dict[str, Any]:
        """
        Provision a project scope.

        The main route table lookup and the ACL creation run concurrently;
        the subnet is created once both are known.

        Returns:
            The subnet descriptor

        Raises:
            ResourceConflictError: If the project already has a subnet
        """
        self._require_initialized("create project")
        project_id = str(ProjectId(project_id))

        route_table, acl = await asyncio.gather(
            self.route_tables.find_default(),
            self.network_acls.create(project_id),
        )
        subnet = await self.subnets.create(
            project_id, route_table['RouteTableId'], acl['NetworkAclId']
        )
        self._logger.info("Project created", project_id=project_id, subnet_id=subnet['SubnetId'])
        return subnet

    async def find_or_create_project(self, project_id: str) -> Dict[str, Any]:
        """
        Return the project subnet, creating the scope when it does not exist.

        Creation is attempted first; a conflict or a provider failure falls
        back to a tag lookup.

        Raises:
            ProjectNotFoundError: If creation failed and no subnet can be found
        """
        self._require_initialized("find or create project")
        project_id = str(ProjectId(project_id))
        try:
            return await self._try_create(project_id)
        except (ResourceConflictError, InfrastructureError) as create_error:
            self._logger.info("Project create failed, looking it up",
                              project_id=project_id, reason=str(create_error))
            return await self._try_find(project_id, create_error)

    async def _try_create(self, project_id: str) -> Dict[str, Any]:
        return await self.create(project_id)

    async def _try_find(self, project_id: str, create_error: Exception) -> Dict[str, Any]:
        for attempt in range(1, self.config.lookup_attempts + 1):
            subnet = await self.subnets.find_project(project_id)
            if subnet:
                return subnet
            if attempt < self.config.lookup_attempts:
                self._logger.debug("Project not visible yet", project_id=project_id, attempt=attempt)
                await asyncio.sleep(self.config.lookup_delay)
        raise ProjectNotFoundError(project_id, f"create failed: {create_error}") from create_error

    async def find_project(self, project_id: str) -> Dict[str, Any]:
        """Return the project subnet without ever creating it."""
        self._require_initialized("find project")
        project_id = str(ProjectId(project_id))
        subnet = await self.subnets.find_project(project_id)
        if not subnet:
            raise ProjectNotFoundError(project_id)
        return subnet

    async def scope(self, project_id: str) -> ProjectScope:
        """Describe the network scope of an existing project."""
        subnet = await self.find_project(project_id)
        acls = await self.network_acls.find(project_id)
        return ProjectScope.from_subnet(
            project_id, subnet,
            network_acl_id=acls[0]['NetworkAclId'] if acls else None,
        )

    async def register_endpoint(self, owner: OwnerTag, workload_id: str) -> Endpoint:
        """Publish the hostname of a workload in the hosted zone."""
        infrastructure = self._require_initialized("register endpoint")
        hostname = owner.hostname(infrastructure.hosted_zone_name)
        target = await self.hosted_zone.upsert_record(infrastructure.hosted_zone_id, hostname)
        return Endpoint(hostname=hostname, service_arn=workload_id, target=target)

    async def release_endpoint(self, owner: OwnerTag) -> None:
        infrastructure = self._require_initialized("release endpoint")
        await self.hosted_zone.delete_record(
            infrastructure.hosted_zone_id, owner.hostname(infrastructure.hosted_zone_name)
        )

    async def describe_project(self, project_id: str) -> List[WorkloadDescriptor]:
        """List the live pull request and deployment workloads of a project."""
        self._require_initialized("describe project")
        return await self.cluster.describe_project(str(ProjectId(project_id)))

    async def list_projects(self) -> List[str]:
        self._require_initialized("list projects")
        return await self.subnets.list_projects()

    async def destroy(self, project_id: str) -> None:
        """
        Tear down a project scope.

        Open pull requests block the teardown; deployments do not.

        Raises:
            ProjectHasOpenChildrenError: If pull request workloads are live
            ProjectNotFoundError: If the project has no subnet
        """
        self._require_initialized("destroy project")
        project_id = str(ProjectId(project_id))

        workloads = await self.cluster.describe_project(project_id)
        open_prs = [w for w in workloads if w.is_pull_request]
        if open_prs:
            raise ProjectHasOpenChildrenError(project_id, open_prs)

        deployments = [w for w in workloads if w.is_deployment]
        if deployments:
            self._logger.warning("Destroying project with live deployments",
                                 project_id=project_id,
                                 deployments=[w.identifier for w in deployments])

        await self.subnets.destroy(project_id)
        await self.network_acls.destroy(project_id)
        self._logger.info("Project destroyed", project_id=project_id)
