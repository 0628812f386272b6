"""Workload specification documents and live workload descriptors."""

from .app_definition import AppDefinition, ContainerDefinition, PortMapping, TaskDefinition
from .workload import WorkloadDescriptor

__all__ = [
    "AppDefinition",
    "ContainerDefinition",
    "PortMapping",
    "TaskDefinition",
    "WorkloadDescriptor",
]
