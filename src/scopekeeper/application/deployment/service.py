# src/scopekeeper/application/deployment/service.py
from typing import Any, List, Mapping, Union

from scopekeeper.application.project.orchestrator import ProjectOrchestrator
from scopekeeper.domain.core.exceptions import DeploymentNotFoundError, DeploymentShaMismatchError
from scopekeeper.domain.deployment import AppDefinition, WorkloadDescriptor
from scopekeeper.domain.project import Endpoint, OwnerTag, TagBuilder
from scopekeeper.helpers.logger import get_logger

AppDefinitionInput = Union[AppDefinition, str, bytes, Mapping[str, Any]]


class DeploymentService:
    """Named, sha-versioned workloads of a project."""

    def __init__(self, orchestrator: ProjectOrchestrator):
        self._orchestrator = orchestrator
        self._logger = get_logger(__name__)

    async def create(self, project_id: str, name: str, sha: str,
                     app_definition: AppDefinitionInput) -> Endpoint:
        """
        Launch a deployment, provisioning the project scope if needed.

        Returns:
            Endpoint the deployment is reachable under
        """
        owner = OwnerTag.deployment(project_id, name)
        app_def = AppDefinition.coerce(app_definition)

        subnet = await self._orchestrator.find_or_create_project(project_id)
        workload = await self._orchestrator.cluster.launch(
            TagBuilder.build_workload_tags(owner, sha=sha),
            app_def,
            subnet_ids=[subnet['SubnetId']],
        )
        endpoint = await self._orchestrator.register_endpoint(owner, workload.workload_id)
        self._logger.info("Deployment created", owner=owner.value, sha=sha, hostname=endpoint.hostname)
        return endpoint

    async def find(self, project_id: str, name: str) -> WorkloadDescriptor:
        owner = OwnerTag.deployment(project_id, name)
        await self._orchestrator.find_project(project_id)
        for workload in await self._orchestrator.cluster.describe_project(project_id):
            if workload.owner == owner:
                return workload
        raise DeploymentNotFoundError(project_id, name)

    async def update(self, project_id: str, name: str, sha: str,
                     app_definition: AppDefinitionInput) -> WorkloadDescriptor:
        """
        Roll a deployment onto a new sha and app definition in place.

        Raises:
            ProjectNotFoundError: If the project has no scope
            DeploymentNotFoundError: If the deployment is not running
        """
        app_def = AppDefinition.coerce(app_definition)
        workload = await self.find(project_id, name)
        updated = await self._orchestrator.cluster.update_task_definition(
            workload.workload_id, app_def, sha=sha
        )
        self._logger.info("Deployment updated", owner=workload.owner.value,
                          previous_sha=workload.sha, sha=sha)
        return updated

    async def destroy(self, project_id: str, name: str, sha: str) -> None:
        """
        Terminate a deployment if it runs the given sha.

        Raises:
            DeploymentNotFoundError: If the deployment is not running
            DeploymentShaMismatchError: If it runs a different sha
        """
        workload = await self.find(project_id, name)
        if workload.sha != sha:
            raise DeploymentShaMismatchError(project_id, name, sha, workload.sha)
        await self._orchestrator.cluster.terminate(workload.workload_id)
        await self._orchestrator.release_endpoint(workload.owner)
        self._logger.info("Deployment destroyed", owner=workload.owner.value, sha=sha)

    async def list(self, project_id: str) -> List[WorkloadDescriptor]:
        workloads = await self._orchestrator.describe_project(project_id)
        return [w for w in workloads if w.is_deployment]
