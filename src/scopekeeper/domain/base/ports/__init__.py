"""Domain ports for provider resources."""

from .resource_ports import (
    ClusterPort,
    HostedZonePort,
    NetworkAclPort,
    RouteTablePort,
    SubnetPort,
    VpcPort,
)

__all__ = [
    "ClusterPort",
    "HostedZonePort",
    "NetworkAclPort",
    "RouteTablePort",
    "SubnetPort",
    "VpcPort",
]
