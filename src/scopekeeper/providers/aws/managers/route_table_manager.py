"""Route tables of the shared VPC."""
from typing import Any, Dict

from scopekeeper.domain.base.ports import RouteTablePort, VpcPort
from scopekeeper.domain.core.exceptions import InfrastructureNotFoundError
from scopekeeper.providers.aws.managers.base import AWSResourceManager


class AWSRouteTableManager(AWSResourceManager, RouteTablePort):
    """Locates the main route table project subnets are associated with."""

    resource_type = "route-table"

    def __init__(self, aws_client, vpc: VpcPort, logger=None):
        super().__init__(aws_client, logger)
        self.vpc = vpc

    async def find_default(self) -> Dict[str, Any]:
        vpc = await self.vpc.find()
        if not vpc:
            raise InfrastructureNotFoundError("vpc")
        response = await self._ec2('describe_route_tables', Filters=[
            {'Name': 'vpc-id', 'Values': [vpc['VpcId']]},
            {'Name': 'association.main', 'Values': ['true']},
        ])
        tables = response.get('RouteTables', [])
        if not tables:
            raise InfrastructureNotFoundError("route table", f"no main route table in {vpc['VpcId']}")
        return tables[0]
