"""Security rule value objects for security groups and network ACLs.

A rule targets either CIDR ranges or peer security groups, never a mix, and
never nothing. The target variant is fixed when the rule is built.
"""
from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Type, Union

from scopekeeper.domain.core.exceptions import InvalidRuleTargetsError, ValidationError

VALID_PROTOCOLS = ("-1", "tcp", "udp", "icmp")
ALL_PROTOCOLS = "-1"


@dataclass(frozen=True)
class CidrTarget:
    """An IPv4 CIDR range."""
    cidr: str
    description: Optional[str] = None

    def __post_init__(self):
        try:
            ipaddress.IPv4Network(self.cidr, strict=False)
        except ValueError as e:
            raise InvalidRuleTargetsError(f"Invalid CIDR range: {self.cidr!r}") from e

    def to_aws(self) -> Dict[str, str]:
        item = {'CidrIp': self.cidr}
        if self.description:
            item['Description'] = self.description
        return item


@dataclass(frozen=True)
class PeerGroupTarget:
    """A peer security group, optionally in another account."""
    group_id: str
    user_id: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if not self.group_id:
            raise InvalidRuleTargetsError("Peer group target requires a group id")

    def to_aws(self) -> Dict[str, str]:
        item = {'GroupId': self.group_id}
        if self.user_id:
            item['UserId'] = self.user_id
        if self.description:
            item['Description'] = self.description
        return item


RuleTarget = Union[CidrTarget, PeerGroupTarget]


def coerce_target(target: Union[RuleTarget, Mapping[str, Any]]) -> RuleTarget:
    """Turn an AWS-shaped mapping into a RuleTarget; pass variants through."""
    if isinstance(target, (CidrTarget, PeerGroupTarget)):
        return target
    if isinstance(target, Mapping):
        if target.get('CidrIp') and target.get('GroupId'):
            raise InvalidRuleTargetsError(
                "Security rule target is either an ip range or a security group, not both", details=target
            )
        if target.get('CidrIp'):
            return CidrTarget(target['CidrIp'], target.get('Description'))
        if target.get('GroupId'):
            return PeerGroupTarget(target['GroupId'], target.get('UserId'), target.get('Description'))
    raise InvalidRuleTargetsError(
        "Security rule expecting an ip range, or a security group", details=target
    )


def classify_target(target: RuleTarget) -> Type[RuleTarget]:
    """Return the variant of a target."""
    if isinstance(target, CidrTarget):
        return CidrTarget
    if isinstance(target, PeerGroupTarget):
        return PeerGroupTarget
    raise InvalidRuleTargetsError(
        "Security rule expecting an ip range, or a security group", details=target
    )


def normalize_protocol(protocol: Union[str, int]) -> str:
    value = str(protocol).lower() if not isinstance(protocol, bool) else None
    if value not in VALID_PROTOCOLS:
        raise ValidationError(
            f"Invalid protocol {protocol!r}, expected one of {list(VALID_PROTOCOLS)}"
        )
    return value


@dataclass(frozen=True)
class SecurityRule:
    """Immutable ingress/egress rule, ready for a security group or ACL API."""
    protocol: str
    from_port: Optional[int]
    to_port: Optional[int]
    targets: Tuple[RuleTarget, ...]
    target_type: Type[RuleTarget]

    @classmethod
    def build(cls, protocol: Union[str, int], from_port: Optional[int], to_port: Optional[int],
              targets: Iterable[Union[RuleTarget, Mapping[str, Any]]]) -> 'SecurityRule':
        """
        Validate and build a rule.

        Args:
            protocol: -1 (all), "tcp", "udp" or "icmp"
            from_port: First port of the range, optional for protocol -1
            to_port: Last port of the range, optional for protocol -1
            targets: CIDR targets or peer group targets, AWS-shaped mappings accepted

        Returns:
            SecurityRule whose target_type matches every target

        Raises:
            ValidationError: If protocol or ports are invalid
            InvalidRuleTargetsError: If targets are empty, unknown or mixed
        """
        normalized = normalize_protocol(protocol)
        from_port, to_port = _validate_ports(normalized, from_port, to_port)

        if isinstance(targets, (str, bytes, Mapping)) or targets is None:
            raise InvalidRuleTargetsError(
                "Security rule expecting a collection of ip ranges, or security groups"
            )
        coerced = tuple(coerce_target(t) for t in targets)
        if not coerced:
            raise InvalidRuleTargetsError("Security rule requires at least one target")

        target_type: Optional[Type[RuleTarget]] = None
        for target in coerced:
            current = classify_target(target)
            if target_type is None:
                target_type = current
            elif current is not target_type:
                raise InvalidRuleTargetsError(
                    "Security rule targets must be entirely ip ranges, or security groups",
                    details=target,
                )

        return cls(normalized, from_port, to_port, coerced, target_type)

    @property
    def is_cidr_rule(self) -> bool:
        return self.target_type is CidrTarget

    def to_ip_permission(self) -> Dict[str, Any]:
        """Render the AWS IpPermission structure."""
        permission: Dict[str, Any] = {'IpProtocol': self.protocol}
        if self.from_port is not None:
            permission['FromPort'] = self.from_port
        if self.to_port is not None:
            permission['ToPort'] = self.to_port
        items = [t.to_aws() for t in self.targets]
        if self.is_cidr_rule:
            permission['IpRanges'] = items
        else:
            permission['UserIdGroupPairs'] = items
        return permission


def _validate_ports(protocol: str, from_port: Optional[int],
                    to_port: Optional[int]) -> Tuple[Optional[int], Optional[int]]:
    if protocol == ALL_PROTOCOLS and from_port is None and to_port is None:
        return None, None
    for port in (from_port, to_port):
        if isinstance(port, bool) or not isinstance(port, int):
            raise ValidationError(f"Port must be an integer: {port!r}")
    # ICMP uses the port fields for type and code, where -1 means any
    lower = -1 if protocol in (ALL_PROTOCOLS, "icmp") else 0
    if not lower <= from_port <= 65535 or not lower <= to_port <= 65535:
        raise ValidationError(f"Port out of range: {from_port}-{to_port}")
    if protocol != "icmp" and from_port > to_port:
        raise ValidationError(f"Invalid port range: {from_port}-{to_port}")
    return from_port, to_port
