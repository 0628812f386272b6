from scopekeeper.application.project.orchestrator import ProjectOrchestrator

__all__ = ["ProjectOrchestrator"]
