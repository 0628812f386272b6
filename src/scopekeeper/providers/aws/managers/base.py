"""Shared plumbing for the AWS sub-resource managers."""
from typing import Any, Optional

import structlog

from scopekeeper.helpers.logger import get_logger
from scopekeeper.providers.aws.aws_client import AWSClient


class AWSResourceManager:
    """Base class holding the AWS client and a bound logger."""

    resource_type = "resource"

    def __init__(self, aws_client: AWSClient, logger: Optional[structlog.stdlib.BoundLogger] = None):
        """
        Initialize the manager.

        Args:
            aws_client: AWS client instance
            logger: Logger for logging messages
        """
        self.aws_client = aws_client
        self._logger = (logger or get_logger(__name__)).bind(resource_type=self.resource_type)

    async def _ec2(self, method: str, **kwargs) -> Any:
        return await self.aws_client.call(self.aws_client.ec2_client, method, **kwargs)
