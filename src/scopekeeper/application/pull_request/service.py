# src/scopekeeper/application/pull_request/service.py
from typing import Any, List, Mapping, Union

from scopekeeper.application.project.orchestrator import ProjectOrchestrator
from scopekeeper.domain.core.exceptions import PullRequestNotFoundError
from scopekeeper.domain.deployment import AppDefinition, WorkloadDescriptor
from scopekeeper.domain.project import OwnerTag, TagBuilder
from scopekeeper.helpers.logger import get_logger

AppDefinitionInput = Union[AppDefinition, str, bytes, Mapping[str, Any]]


class PullRequestService:
    """Preview workloads, one per open pull request."""

    def __init__(self, orchestrator: ProjectOrchestrator):
        self._orchestrator = orchestrator
        self._logger = get_logger(__name__)

    async def create(self, project_id: str, pr_number: int,
                     app_definition: AppDefinitionInput) -> WorkloadDescriptor:
        """Launch a pull request workload, provisioning the project scope if needed."""
        owner = OwnerTag.pull_request(project_id, pr_number)
        app_def = AppDefinition.coerce(app_definition)

        subnet = await self._orchestrator.find_or_create_project(project_id)
        workload = await self._orchestrator.cluster.launch(
            TagBuilder.build_workload_tags(owner),
            app_def,
            subnet_ids=[subnet['SubnetId']],
        )
        endpoint = await self._orchestrator.register_endpoint(owner, workload.workload_id)
        self._logger.info("Pull request created", owner=owner.value,
                          workload_id=workload.workload_id, hostname=endpoint.hostname)
        return workload

    async def find(self, project_id: str, pr_number: int) -> WorkloadDescriptor:
        owner = OwnerTag.pull_request(project_id, pr_number)
        await self._orchestrator.find_project(project_id)
        for workload in await self._orchestrator.cluster.describe_project(project_id):
            if workload.owner == owner:
                return workload
        raise PullRequestNotFoundError(project_id, pr_number)

    async def destroy(self, project_id: str, pr_number: int) -> None:
        """
        Terminate a pull request workload.

        Raises:
            ProjectNotFoundError: If the project has no scope; none is created
            PullRequestNotFoundError: If no workload is tagged for the pull request
        """
        workload = await self.find(project_id, pr_number)
        await self._orchestrator.cluster.terminate(workload.workload_id)
        await self._orchestrator.release_endpoint(workload.owner)
        self._logger.info("Pull request destroyed", owner=workload.owner.value,
                          workload_id=workload.workload_id)

    async def list(self, project_id: str) -> List[WorkloadDescriptor]:
        workloads = await self._orchestrator.describe_project(project_id)
        return [w for w in workloads if w.is_pull_request]
