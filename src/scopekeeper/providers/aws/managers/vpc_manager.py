"""Shared VPC lookup."""
from typing import Any, Dict, Optional

from scopekeeper.config.schemas import NetworkConfig
from scopekeeper.domain.base.ports import VpcPort
from scopekeeper.providers.aws.managers.base import AWSResourceManager


class AWSVpcManager(AWSResourceManager, VpcPort):
    """Finds the VPC every project subnet is carved out of."""

    resource_type = "vpc"

    def __init__(self, aws_client, config: Optional[NetworkConfig] = None, logger=None):
        super().__init__(aws_client, logger)
        self.config = config or NetworkConfig()

    async def find(self) -> Optional[Dict[str, Any]]:
        """Return the configured VPC, or the one carrying the shared-VPC tag."""
        if self.config.vpc_id:
            response = await self._ec2('describe_vpcs', VpcIds=[self.config.vpc_id])
        else:
            response = await self._ec2('describe_vpcs', Filters=[{
                'Name': f"tag:{self.config.vpc_tag_key}",
                'Values': [self.config.vpc_tag_value],
            }])
        vpcs = response.get('Vpcs', [])
        if not vpcs:
            self._logger.warning("Shared VPC not found", vpc_id=self.config.vpc_id)
            return None
        if len(vpcs) > 1:
            self._logger.warning("Several VPCs tagged as shared, using the first",
                                 vpc_ids=[v['VpcId'] for v in vpcs])
        return vpcs[0]
