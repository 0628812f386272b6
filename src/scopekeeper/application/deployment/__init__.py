from scopekeeper.application.deployment.service import DeploymentService

__all__ = ["DeploymentService"]
