"""Source-control webhook handling for pull request events."""
from typing import Any, Dict, Mapping, Optional

from scopekeeper.application.pull_request.service import PullRequestService
from scopekeeper.domain.core.exceptions import ValidationError
from scopekeeper.domain.project import ProjectId, PullRequestNumber
from scopekeeper.helpers.logger import get_logger

PULL_REQUEST_EVENT = "pull_request"
CLOSED_ACTION = "closed"


class WebhookRejected(Exception):
    """Raised for events the webhook refuses; carries the HTTP status to answer with."""
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class PullRequestWebhook:
    """Tears down pull request workloads when the pull request is closed."""

    def __init__(self, service: PullRequestService):
        self._service = service
        self._logger = get_logger(__name__)

    async def handle(self, event_type: Optional[str], body: Any) -> Dict[str, Any]:
        """
        Handle one webhook delivery.

        Args:
            event_type: Value of the event type header
            body: Decoded JSON payload

        Returns:
            Description of the destroyed pull request

        Raises:
            WebhookRejected: For other event types, other actions or malformed payloads
        """
        if event_type != PULL_REQUEST_EVENT:
            raise WebhookRejected(403, "Pull requests only!")
        if not isinstance(body, Mapping):
            raise WebhookRejected(400, "Malformed pull request event")
        if body.get("action") != CLOSED_ACTION:
            raise WebhookRejected(403, 'We only want "closed" PR events right now.')

        project_id, pr_number = self._extract(body)
        self._logger.info("Pull request closed", project_id=project_id, pr_number=pr_number)
        await self._service.destroy(project_id, pr_number)
        return {"project_id": project_id, "pr_number": pr_number}

    @staticmethod
    def _extract(body: Mapping[str, Any]):
        """Project id is the name of the pull request's head repository."""
        pull_request = body.get("pull_request")
        if not isinstance(pull_request, Mapping):
            raise WebhookRejected(400, "Malformed pull request event")
        head = pull_request.get("head")
        head_repo = (head.get("repo") if isinstance(head, Mapping) else None) or body.get("repository")
        name = head_repo.get("name") if isinstance(head_repo, Mapping) else None
        number = pull_request.get("number", body.get("number"))
        if not isinstance(name, str) or not name:
            raise WebhookRejected(400, "Pull request event carries no repository name")
        if isinstance(number, bool) or not isinstance(number, int):
            raise WebhookRejected(400, "Pull request event carries no pull request number")
        try:
            ProjectId(name)
            PullRequestNumber(number)
        except ValidationError as e:
            raise WebhookRejected(400, str(e)) from e
        return name, number
