# src/scopekeeper/domain/core/exceptions.py
from typing import Any, Optional, List, Sequence


class DomainException(Exception):
    """Base exception for all domain-specific errors."""
    pass


class ValidationError(DomainException):
    """Raised when domain validation fails."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class InvalidAppDefinitionError(ValidationError):
    """Raised when an app definition cannot be parsed or fails validation."""
    pass


class InvalidRuleTargetsError(ValidationError):
    """Raised when security rule targets are empty, unknown or mixed."""
    pass


class ConfigurationError(DomainException):
    """Raised when there's an issue with configuration."""
    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class InfrastructureNotFoundError(DomainException):
    """Raised when the shared VPC or the hosted zone cannot be found."""
    def __init__(self, resource_type: str, detail: str = ""):
        message = f"Shared {resource_type} not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.resource_type = resource_type


class OrchestratorNotInitializedError(DomainException):
    """Raised when an orchestrator operation runs before initialize()."""
    def __init__(self, operation: str):
        super().__init__(f"Cannot {operation}: orchestrator is not initialized")
        self.operation = operation


class ProjectNotFoundError(DomainException):
    """Raised when no network scope is tagged for a project."""
    def __init__(self, project_id: str, detail: str = ""):
        message = f"Project {project_id} not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.project_id = project_id


class ResourceConflictError(DomainException):
    """Raised when a resource owned by a project already exists."""
    def __init__(self, resource_type: str, owner: str, resource_id: Optional[str] = None):
        message = f"{resource_type} already exists for {owner}"
        if resource_id:
            message = f"{message} ({resource_id})"
        super().__init__(message)
        self.resource_type = resource_type
        self.owner = owner
        self.resource_id = resource_id


class ProjectHasOpenChildrenError(DomainException):
    """Raised when a project scope is destroyed while pull requests are live."""
    def __init__(self, project_id: str, children: Sequence[Any]):
        super().__init__(
            f"Cannot destroy project {project_id} while {len(children)} "
            f"open pull request(s) exist"
        )
        self.project_id = project_id
        self.children = list(children)


class PullRequestNotFoundError(DomainException):
    """Raised when no workload is tagged for a pull request."""
    def __init__(self, project_id: str, pr_number: int):
        super().__init__(f"Pull request {pr_number} of project {project_id} not found")
        self.project_id = project_id
        self.pr_number = pr_number


class DeploymentNotFoundError(DomainException):
    """Raised when no workload is tagged for a deployment."""
    def __init__(self, project_id: str, name: str):
        super().__init__(f"Deployment {name} of project {project_id} not found")
        self.project_id = project_id
        self.name = name


class DeploymentShaMismatchError(DomainException):
    """Raised when the running deployment sha differs from the requested one."""
    def __init__(self, project_id: str, name: str, requested_sha: str, running_sha: Optional[str]):
        super().__init__(
            f"Deployment {name} of project {project_id} is running sha "
            f"{running_sha or '<unknown>'}, not {requested_sha}"
        )
        self.project_id = project_id
        self.name = name
        self.requested_sha = requested_sha
        self.running_sha = running_sha
