"""Per-project network ACLs."""
from typing import Any, Dict, List

from scopekeeper.domain.base.ports import NetworkAclPort, VpcPort
from scopekeeper.domain.core.exceptions import InfrastructureNotFoundError, ValidationError
from scopekeeper.domain.network import SecurityRule
from scopekeeper.domain.project.tags import OwnerTag, TagBuilder
from scopekeeper.providers.aws.managers.base import AWSResourceManager

# Rule numbers of the default entries added to every project ACL
_ALLOW_ALL_RULE_NUMBER = 100


class AWSNetworkAclManager(AWSResourceManager, NetworkAclPort):
    """Creates, finds and deletes the network ACL of each project."""

    resource_type = "network-acl"

    def __init__(self, aws_client, vpc: VpcPort, logger=None):
        super().__init__(aws_client, logger)
        self.vpc = vpc

    async def create(self, project_id: str) -> Dict[str, Any]:
        """
        Create a network ACL tagged for the project.

        A project ACL left behind by an earlier partial create is reused
        rather than duplicated.

        Returns:
            The ACL descriptor
        """
        owner = OwnerTag.project(project_id)
        existing = await self.find(project_id)
        if existing:
            self._logger.info("Reusing network ACL", project_id=project_id,
                              network_acl_id=existing[0]['NetworkAclId'])
            return existing[0]

        vpc = await self.vpc.find()
        if not vpc:
            raise InfrastructureNotFoundError("vpc")

        response = await self._ec2(
            'create_network_acl',
            VpcId=vpc['VpcId'],
            TagSpecifications=TagBuilder.build_tag_specifications(owner, 'network-acl'),
        )
        acl = response['NetworkAcl']
        acl_id = acl['NetworkAclId']

        rule = SecurityRule.build('-1', None, None, [{'CidrIp': '0.0.0.0/0'}])
        for egress in (False, True):
            await self.add_entry(acl_id, _ALLOW_ALL_RULE_NUMBER, rule, egress=egress)

        self._logger.info("Created network ACL", project_id=project_id, network_acl_id=acl_id)
        return acl

    async def add_entry(self, network_acl_id: str, rule_number: int, rule: SecurityRule,
                        egress: bool = False, action: str = 'allow') -> None:
        """Add one ACL entry per CIDR target of an ip-range rule."""
        if not rule.is_cidr_rule:
            raise ValidationError("Network ACL entries only accept ip range targets")
        permission = rule.to_ip_permission()
        for offset, target in enumerate(permission['IpRanges']):
            entry: Dict[str, Any] = {
                'NetworkAclId': network_acl_id,
                'RuleNumber': rule_number + offset,
                'Protocol': _acl_protocol(rule.protocol),
                'RuleAction': action,
                'Egress': egress,
                'CidrBlock': target['CidrIp'],
            }
            if rule.protocol in ('tcp', 'udp') and rule.from_port is not None:
                entry['PortRange'] = {'From': rule.from_port, 'To': rule.to_port}
            if rule.protocol == 'icmp':
                entry['IcmpTypeCode'] = {'Type': rule.from_port, 'Code': rule.to_port}
            await self._ec2('create_network_acl_entry', **entry)

    async def find(self, project_id: str) -> List[Dict[str, Any]]:
        owner = OwnerTag.project(project_id)
        response = await self._ec2('describe_network_acls', Filters=owner.filters())
        return response.get('NetworkAcls', [])

    async def destroy(self, project_id: str) -> None:
        for acl in await self.find(project_id):
            await self._ec2('delete_network_acl', NetworkAclId=acl['NetworkAclId'])
            self._logger.info("Deleted network ACL", project_id=project_id,
                              network_acl_id=acl['NetworkAclId'])


def _acl_protocol(protocol: str) -> str:
    return {'-1': '-1', 'tcp': '6', 'udp': '17', 'icmp': '1'}[protocol]
