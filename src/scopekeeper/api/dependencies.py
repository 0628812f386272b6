"""FastAPI dependency injection integration."""
from fastapi import Depends, Request

from scopekeeper.application.project import ProjectOrchestrator
from scopekeeper.application.pull_request import PullRequestWebhook
from scopekeeper.bootstrap import Application


def get_application(request: Request) -> Application:
    """Get the Application the server was created with."""
    return request.app.state.application


def get_orchestrator(application: Application = Depends(get_application)) -> ProjectOrchestrator:
    return application.orchestrator


def get_webhook(application: Application = Depends(get_application)) -> PullRequestWebhook:
    return application.webhook
