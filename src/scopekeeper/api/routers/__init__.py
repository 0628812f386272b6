from scopekeeper.api.routers.projects import router as projects_router
from scopekeeper.api.routers.webhooks import router as webhooks_router

__all__ = ["projects_router", "webhooks_router"]
