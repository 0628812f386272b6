"""AWS implementations of the resource ports."""

from scopekeeper.providers.aws.managers.cluster_manager import AWSClusterManager
from scopekeeper.providers.aws.managers.hosted_zone_manager import AWSHostedZoneManager
from scopekeeper.providers.aws.managers.network_acl_manager import AWSNetworkAclManager
from scopekeeper.providers.aws.managers.route_table_manager import AWSRouteTableManager
from scopekeeper.providers.aws.managers.subnet_manager import AWSSubnetManager
from scopekeeper.providers.aws.managers.vpc_manager import AWSVpcManager

__all__ = [
    "AWSClusterManager",
    "AWSHostedZoneManager",
    "AWSNetworkAclManager",
    "AWSRouteTableManager",
    "AWSSubnetManager",
    "AWSVpcManager",
]
