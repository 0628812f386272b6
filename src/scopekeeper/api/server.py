"""FastAPI server factory and application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scopekeeper._package import DESCRIPTION, PACKAGE_NAME, __version__
from scopekeeper.api.middleware import LoggingMiddleware
from scopekeeper.api.routers import projects_router, webhooks_router
from scopekeeper.bootstrap import Application
from scopekeeper.config.schemas import ServerConfig
from scopekeeper.domain.core.exceptions import (
    DeploymentNotFoundError,
    DeploymentShaMismatchError,
    DomainException,
    InfrastructureNotFoundError,
    ProjectHasOpenChildrenError,
    ProjectNotFoundError,
    PullRequestNotFoundError,
    ResourceConflictError,
    ValidationError,
)
from scopekeeper.helpers.logger import get_logger

_STATUS_BY_ERROR = (
    ((ProjectNotFoundError, PullRequestNotFoundError, DeploymentNotFoundError), 404),
    ((ResourceConflictError, ProjectHasOpenChildrenError, DeploymentShaMismatchError), 409),
    ((ValidationError,), 400),
    ((InfrastructureNotFoundError,), 503),
)


def status_for(exc: Exception) -> int:
    """HTTP status for an exception raised by a service."""
    for error_types, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_types):
            return status_code
    return 500


def create_fastapi_app(server_config: ServerConfig, application: Application) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        server_config: Server configuration
        application: Application context the routes act on

    Returns:
        Configured FastAPI application
    """
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await application.initialize()
        yield

    app = FastAPI(
        title="scopekeeper API",
        description=DESCRIPTION,
        version=__version__,
        docs_url=server_config.docs_url if server_config.docs_enabled else None,
        openapi_url=server_config.openapi_url if server_config.docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.application = application

    # Add logging middleware
    app.add_middleware(LoggingMiddleware)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        status_code = status_for(exc)
        logger.warning("Request failed", path=request.url.path, status_code=status_code,
                       error_type=type(exc).__name__, error=str(exc))
        return JSONResponse(
            status_code=status_code,
            content={
                "success": False,
                "error": {"code": type(exc).__name__, "message": str(exc)},
                "request_id": getattr(request.state, "request_id", "unknown"),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for all unhandled exceptions."""
        logger.error("Unhandled error", path=request.url.path, error_type=type(exc).__name__,
                     error=str(exc))
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {"code": type(exc).__name__, "message": str(exc)},
                "request_id": getattr(request.state, "request_id", "unknown"),
            },
        )

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": PACKAGE_NAME, "version": __version__}

    app.include_router(webhooks_router)
    app.include_router(projects_router)

    logger.info("FastAPI application created", routes=len(app.routes))
    return app
