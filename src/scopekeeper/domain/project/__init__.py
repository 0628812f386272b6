"""Project identity, scope descriptors and ownership tags."""

from .tags import OWNER_TAG, PROJECT_TAG, SHA_TAG, OwnerKind, OwnerTag, TagBuilder, owner_of, tags_to_dict
from .value_objects import (
    DeploymentName,
    Endpoint,
    Infrastructure,
    PortSpec,
    ProjectId,
    ProjectScope,
    PullRequestNumber,
)

__all__ = [
    "OWNER_TAG",
    "PROJECT_TAG",
    "SHA_TAG",
    "OwnerKind",
    "OwnerTag",
    "TagBuilder",
    "owner_of",
    "tags_to_dict",
    "DeploymentName",
    "Endpoint",
    "Infrastructure",
    "PortSpec",
    "ProjectId",
    "ProjectScope",
    "PullRequestNumber",
]
