"""ECS workloads: one service per pull request or deployment."""
from typing import Any, Dict, List, Optional, Sequence

from scopekeeper.config.schemas import ClusterConfig
from scopekeeper.domain.base.ports import ClusterPort
from scopekeeper.domain.core.exceptions import ValidationError
from scopekeeper.domain.deployment import AppDefinition, WorkloadDescriptor
from scopekeeper.domain.project.tags import (
    PROJECT_TAG,
    SHA_TAG,
    OwnerKind,
    TagBuilder,
    TagList,
    owner_of,
    tags_to_dict,
)
from scopekeeper.providers.aws.exceptions import AWSEntityNotFoundError
from scopekeeper.providers.aws.managers.base import AWSResourceManager

# describe_services accepts at most this many services per call
_DESCRIBE_BATCH_SIZE = 10


class AWSClusterManager(AWSResourceManager, ClusterPort):
    """Runs workloads as services of a shared ECS cluster."""

    resource_type = "ecs-service"

    def __init__(self, aws_client, config: Optional[ClusterConfig] = None, logger=None):
        super().__init__(aws_client, logger)
        self.config = config or ClusterConfig()

    async def _ecs(self, method: str, **kwargs) -> Any:
        return await self.aws_client.call(self.aws_client.ecs_client, method, **kwargs)

    async def _describe_services(self, service_arns: Sequence[str]) -> List[Dict[str, Any]]:
        services: List[Dict[str, Any]] = []
        for start in range(0, len(service_arns), _DESCRIBE_BATCH_SIZE):
            response = await self._ecs(
                'describe_services',
                cluster=self.config.cluster_name,
                services=list(service_arns[start:start + _DESCRIBE_BATCH_SIZE]),
                include=['TAGS'],
            )
            services.extend(response.get('services', []))
        return services

    async def describe_project(self, project_id: str) -> List[WorkloadDescriptor]:
        """Return the live pull request and deployment services of a project."""
        service_arns = await self.aws_client.paginate(
            self.aws_client.ecs_client, 'list_services', 'serviceArns',
            cluster=self.config.cluster_name,
        )
        workloads = []
        for service in await self._describe_services(service_arns):
            if service.get('status') == 'INACTIVE':
                continue
            tags = tags_to_dict(service.get('tags'))
            owner = owner_of(tags)
            if owner is None or owner.kind is OwnerKind.PROJECT:
                continue
            if owner.project_id != project_id or tags.get(PROJECT_TAG, project_id) != project_id:
                continue
            workloads.append(WorkloadDescriptor.from_service(service, owner, tags))
        return workloads

    async def launch(self, tags: TagList, app_definition: AppDefinition,
                     subnet_ids: Sequence[str] = ()) -> WorkloadDescriptor:
        """
        Register a task definition and start a service for it.

        Args:
            tags: Workload tags, carrying a pull request or deployment owner
            app_definition: Containers to run
            subnet_ids: Project subnets the tasks are placed in

        Returns:
            Descriptor of the new service
        """
        flat_tags = tags_to_dict(tags)
        owner = owner_of(flat_tags)
        if owner is None or owner.kind is OwnerKind.PROJECT:
            raise ValidationError("Workload tags must carry a pull request or deployment owner")
        if not subnet_ids:
            raise ValidationError("Workloads need at least one subnet")

        ecs_tags = TagBuilder.to_ecs_tags(tags)
        task_definition_arn = await self._register_task_definition(
            owner.resource_name, app_definition, ecs_tags
        )

        response = await self._ecs(
            'create_service',
            cluster=self.config.cluster_name,
            serviceName=owner.resource_name,
            taskDefinition=task_definition_arn,
            desiredCount=self.config.desired_count,
            launchType=self.config.launch_type,
            networkConfiguration={'awsvpcConfiguration': {
                'subnets': list(subnet_ids),
                'assignPublicIp': 'ENABLED' if self.config.assign_public_ip else 'DISABLED',
            }},
            tags=ecs_tags,
            propagateTags='SERVICE',
        )
        service = response['service']
        self._logger.info("Launched workload", owner=owner.value,
                          service_arn=service['serviceArn'], task_definition=task_definition_arn)
        return WorkloadDescriptor.from_service(service, owner, flat_tags)

    async def update_task_definition(self, workload_id: str, app_definition: AppDefinition,
                                     sha: Optional[str] = None) -> WorkloadDescriptor:
        """Register a new task definition revision and roll the service onto it."""
        services = await self._describe_services([workload_id])
        if not services or services[0].get('status') == 'INACTIVE':
            raise AWSEntityNotFoundError(f"Service {workload_id} not found", error_code='ServiceNotFoundException')
        current = services[0]
        tags = tags_to_dict(current.get('tags'))
        owner = owner_of(tags)
        if owner is None:
            raise ValidationError(f"Service {workload_id} carries no owner tag")
        if sha:
            tags[SHA_TAG] = sha

        ecs_tags = [{'key': k, 'value': v} for k, v in tags.items()]
        task_definition_arn = await self._register_task_definition(
            owner.resource_name, app_definition, ecs_tags
        )
        response = await self._ecs(
            'update_service',
            cluster=self.config.cluster_name,
            service=workload_id,
            taskDefinition=task_definition_arn,
        )
        if sha:
            await self._ecs('tag_resource', resourceArn=workload_id,
                            tags=[{'key': SHA_TAG, 'value': sha}])

        self._logger.info("Updated workload", owner=owner.value, service_arn=workload_id,
                          task_definition=task_definition_arn, sha=sha)
        return WorkloadDescriptor.from_service(response['service'], owner, tags)

    async def terminate(self, workload_id: str) -> None:
        await self._ecs('delete_service', cluster=self.config.cluster_name,
                        service=workload_id, force=True)
        self._logger.info("Terminated workload", service_arn=workload_id)

    async def _register_task_definition(self, family: str, app_definition: AppDefinition,
                                        ecs_tags: List[Dict[str, str]]) -> str:
        request: Dict[str, Any] = {
            'family': family,
            'containerDefinitions': self._container_definitions(app_definition),
            'networkMode': 'awsvpc',
            'requiresCompatibilities': [self.config.launch_type],
            'cpu': self.config.task_cpu,
            'memory': self.config.task_memory,
            'tags': ecs_tags,
        }
        if self.config.execution_role_arn:
            request['executionRoleArn'] = self.config.execution_role_arn
        response = await self._ecs('register_task_definition', **request)
        return response['taskDefinition']['taskDefinitionArn']

    @staticmethod
    def _container_definitions(app_definition: AppDefinition) -> List[Dict[str, Any]]:
        """Flatten every task's containers into one task definition."""
        containers = []
        for task in app_definition.to_dict()['tasks']:
            for container in task['containerDefinitions']:
                # awsvpc tasks listen on the container port itself
                container['portMappings'] = [
                    {**m, 'hostPort': m['containerPort']} for m in container.get('portMappings', [])
                ]
                containers.append(container)
        return containers
