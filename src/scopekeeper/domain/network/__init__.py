"""Network rule value objects."""

from .security_rule import (
    CidrTarget,
    PeerGroupTarget,
    RuleTarget,
    SecurityRule,
    classify_target,
    coerce_target,
)

__all__ = [
    "CidrTarget",
    "PeerGroupTarget",
    "RuleTarget",
    "SecurityRule",
    "classify_target",
    "coerce_target",
]
