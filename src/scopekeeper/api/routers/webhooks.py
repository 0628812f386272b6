"""Source-control webhook routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from scopekeeper.api.dependencies import get_webhook
from scopekeeper.application.pull_request import PullRequestWebhook, WebhookRejected
from scopekeeper.helpers.logger import get_logger

router = APIRouter(prefix="/api/0.1", tags=["Webhooks"])
logger = get_logger(__name__)


@router.post("/pr", summary="Pull Request Event",
             description="Destroys the pull request workload when a pull request is closed")
async def pull_request_event(
    request: Request,
    x_github_event: Optional[str] = Header(None),
    webhook: PullRequestWebhook = Depends(get_webhook),
) -> JSONResponse:
    """
    Receive a pull request webhook delivery.

    - **X-GitHub-Event**: only `pull_request` events are accepted
    """
    try:
        body = await request.json()
    except ValueError:
        body = None

    try:
        result = await webhook.handle(x_github_event, body)
    except WebhookRejected as e:
        logger.info("Webhook rejected", status_code=e.status_code, reason=e.message)
        return JSONResponse(status_code=e.status_code, content={"success": False, "error": e.message})
    except Exception as e:
        logger.error("Pull request teardown failed", error=str(e))
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return JSONResponse(content={"success": True, **result})
