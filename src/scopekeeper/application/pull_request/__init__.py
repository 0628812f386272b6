from scopekeeper.application.pull_request.service import PullRequestService
from scopekeeper.application.pull_request.webhook import PullRequestWebhook, WebhookRejected

__all__ = ["PullRequestService", "PullRequestWebhook", "WebhookRejected"]
