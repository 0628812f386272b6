"""Per-project subnets."""
import ipaddress
from typing import Any, Dict, List, Optional

from scopekeeper.config.schemas import NetworkConfig
from scopekeeper.domain.base.ports import SubnetPort, VpcPort
from scopekeeper.domain.core.exceptions import (
    InfrastructureNotFoundError,
    ProjectNotFoundError,
    ResourceConflictError,
)
from scopekeeper.domain.project.tags import OWNER_TAG, OwnerKind, OwnerTag, TagBuilder, owner_of
from scopekeeper.providers.aws.managers.base import AWSResourceManager


class AWSSubnetManager(AWSResourceManager, SubnetPort):
    """Creates the subnet of each project and wires its routing and ACL."""

    resource_type = "subnet"

    def __init__(self, aws_client, vpc: VpcPort, config: Optional[NetworkConfig] = None, logger=None):
        super().__init__(aws_client, logger)
        self.vpc = vpc
        self.config = config or NetworkConfig()

    async def create(self, project_id: str, route_table_id: str, network_acl_id: str) -> Dict[str, Any]:
        """
        Create the project subnet.

        The subnet gets the next free CIDR block of the shared VPC, is
        associated with the given route table and moved to the given ACL.

        Raises:
            ResourceConflictError: If the project already owns a subnet
            InfrastructureNotFoundError: If the shared VPC is missing or full
        """
        owner = OwnerTag.project(project_id)
        existing = await self.find_project(project_id)
        if existing:
            raise ResourceConflictError("subnet", owner.value, existing['SubnetId'])

        vpc = await self.vpc.find()
        if not vpc:
            raise InfrastructureNotFoundError("vpc")

        cidr_block = await self._next_cidr_block(vpc)
        response = await self._ec2(
            'create_subnet',
            VpcId=vpc['VpcId'],
            CidrBlock=cidr_block,
            TagSpecifications=TagBuilder.build_tag_specifications(owner, 'subnet'),
        )
        subnet = response['Subnet']
        subnet_id = subnet['SubnetId']
        self._logger.info("Created subnet", project_id=project_id, subnet_id=subnet_id,
                          cidr_block=cidr_block)

        await self._ec2('associate_route_table', RouteTableId=route_table_id, SubnetId=subnet_id)
        await self._replace_acl_association(subnet_id, network_acl_id)
        return subnet

    async def _next_cidr_block(self, vpc: Dict[str, Any]) -> str:
        response = await self._ec2('describe_subnets', Filters=[
            {'Name': 'vpc-id', 'Values': [vpc['VpcId']]},
        ])
        taken = [ipaddress.IPv4Network(s['CidrBlock']) for s in response.get('Subnets', [])]
        vpc_network = ipaddress.IPv4Network(vpc['CidrBlock'])
        prefix = max(self.config.subnet_prefix_length, vpc_network.prefixlen)
        for candidate in vpc_network.subnets(new_prefix=prefix):
            if not any(candidate.overlaps(t) for t in taken):
                return str(candidate)
        raise InfrastructureNotFoundError("vpc", f"no free /{prefix} block left in {vpc['VpcId']}")

    async def _replace_acl_association(self, subnet_id: str, network_acl_id: str) -> None:
        response = await self._ec2('describe_network_acls', Filters=[
            {'Name': 'association.subnet-id', 'Values': [subnet_id]},
        ])
        for acl in response.get('NetworkAcls', []):
            for association in acl.get('Associations', []):
                if association.get('SubnetId') == subnet_id:
                    await self._ec2('replace_network_acl_association',
                                    AssociationId=association['NetworkAclAssociationId'],
                                    NetworkAclId=network_acl_id)
                    return
        raise InfrastructureNotFoundError("network ACL", f"no association for {subnet_id}")

    async def find_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        owner = OwnerTag.project(project_id)
        response = await self._ec2('describe_subnets', Filters=owner.filters())
        subnets = response.get('Subnets', [])
        if len(subnets) > 1:
            self._logger.warning("Several subnets tagged for project", project_id=project_id,
                                 subnet_ids=[s['SubnetId'] for s in subnets])
        return subnets[0] if subnets else None

    async def list_projects(self) -> List[str]:
        response = await self._ec2('describe_subnets', Filters=[
            {'Name': 'tag-key', 'Values': [OWNER_TAG]},
        ])
        projects = []
        for subnet in response.get('Subnets', []):
            owner = owner_of(subnet.get('Tags'))
            if owner and owner.kind is OwnerKind.PROJECT and owner.project_id not in projects:
                projects.append(owner.project_id)
        return sorted(projects)

    async def destroy(self, project_id: str) -> None:
        subnet = await self.find_project(project_id)
        if not subnet:
            raise ProjectNotFoundError(project_id, "no subnet")
        await self._ec2('delete_subnet', SubnetId=subnet['SubnetId'])
        self._logger.info("Deleted subnet", project_id=project_id, subnet_id=subnet['SubnetId'])
