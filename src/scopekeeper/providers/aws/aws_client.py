import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from scopekeeper.config.schemas import AWSConfig
from scopekeeper.providers.aws.exceptions import AWSInfrastructureError, convert_client_error

logger = logging.getLogger(__name__)


class AWSClient:
    """
    Centralized AWS client management.

    Owns the boto3 session and clients, and bridges the blocking SDK into
    coroutines. Every call is converted to a provider exception on failure.
    """

    def __init__(self, config: Optional[AWSConfig] = None, session: Optional[boto3.session.Session] = None):
        """
        Initialize AWS client with configuration.

        Args:
            config: AWS configuration; defaults apply when None
            session: Existing boto3 session, mostly for tests
        """
        self.aws_config = config or AWSConfig()
        self.region_name = self.aws_config.region
        self.config = Config(
            region_name=self.region_name,
            retries={
                'max_attempts': self.aws_config.request_retry_attempts,
                'mode': 'standard'
            },
            connect_timeout=self.aws_config.connection_timeout_ms / 1000
        )
        self.session = session or boto3.session.Session(
            region_name=self.region_name,
            profile_name=self.aws_config.profile,
        )
        self._clients: Dict[str, Any] = {}

    def _client(self, service_name: str) -> Any:
        if service_name not in self._clients:
            kwargs: Dict[str, Any] = {'config': self.config}
            if self.aws_config.endpoint_url:
                kwargs['endpoint_url'] = self.aws_config.endpoint_url
            self._clients[service_name] = self.session.client(service_name, **kwargs)
        return self._clients[service_name]

    @property
    def ec2_client(self) -> Any:
        return self._client('ec2')

    @property
    def ecs_client(self) -> Any:
        return self._client('ecs')

    @property
    def route53_client(self) -> Any:
        return self._client('route53')

    async def call(self, client: Any, method: str, **kwargs) -> Dict[str, Any]:
        """
        Run one SDK call in a worker thread.

        Raises:
            AWSError: Converted from the botocore error
        """
        operation: Callable[..., Dict[str, Any]] = getattr(client, method)
        try:
            return await asyncio.to_thread(operation, **kwargs)
        except ClientError as e:
            error = convert_client_error(e, method)
            logger.error("AWS call %s failed: %s", method, error)
            raise error
        except BotoCoreError as e:
            logger.error("AWS call %s failed: %s", method, e)
            raise AWSInfrastructureError(f"{method} failed: {e}") from e

    async def paginate(self, client: Any, method: str, result_key: str, **kwargs) -> List[Dict[str, Any]]:
        """Collect every page of a paginated SDK call."""
        def _collect() -> List[Dict[str, Any]]:
            items: List[Dict[str, Any]] = []
            for page in client.get_paginator(method).paginate(**kwargs):
                items.extend(page.get(result_key, []))
            return items

        try:
            return await asyncio.to_thread(_collect)
        except ClientError as e:
            error = convert_client_error(e, method)
            logger.error("AWS call %s failed: %s", method, error)
            raise error
        except BotoCoreError as e:
            logger.error("AWS call %s failed: %s", method, e)
            raise AWSInfrastructureError(f"{method} failed: {e}") from e
