"""Application bootstrap: wires configuration, AWS managers and services."""

from __future__ import annotations

from typing import Optional

from scopekeeper.application.deployment import DeploymentService
from scopekeeper.application.project import ProjectOrchestrator
from scopekeeper.application.pull_request import PullRequestService, PullRequestWebhook
from scopekeeper.config import ConfigurationManager
from scopekeeper.domain.project import Infrastructure
from scopekeeper.helpers.logger import get_logger, setup_logging
from scopekeeper.providers.aws.aws_client import AWSClient
from scopekeeper.providers.aws.managers import (
    AWSClusterManager,
    AWSHostedZoneManager,
    AWSNetworkAclManager,
    AWSRouteTableManager,
    AWSSubnetManager,
    AWSVpcManager,
)


class Application:
    """Application context holding the orchestrator and lifecycle services."""

    def __init__(self, config_path: Optional[str] = None,
                 config_manager: Optional[ConfigurationManager] = None,
                 aws_client: Optional[AWSClient] = None) -> None:
        """Initialize the instance; nothing touches AWS until initialize()."""
        self.config_path = config_path
        self.config_manager = config_manager or ConfigurationManager(config_path)
        self._aws_client = aws_client
        self._orchestrator: Optional[ProjectOrchestrator] = None
        self.logger = get_logger(__name__)

    def configure_logging(self) -> None:
        setup_logging(self.config_manager.get_logging_config())

    @property
    def aws_client(self) -> AWSClient:
        if self._aws_client is None:
            self._aws_client = AWSClient(self.config_manager.get_aws_config())
        return self._aws_client

    @property
    def orchestrator(self) -> ProjectOrchestrator:
        """Build the orchestrator and its managers on first use."""
        if self._orchestrator is None:
            client = self.aws_client
            network = self.config_manager.get_network_config()
            vpc = AWSVpcManager(client, network)
            self._orchestrator = ProjectOrchestrator(
                vpc=vpc,
                hosted_zone=AWSHostedZoneManager(client, self.config_manager.get_dns_config()),
                route_tables=AWSRouteTableManager(client, vpc),
                network_acls=AWSNetworkAclManager(client, vpc),
                subnets=AWSSubnetManager(client, vpc, network),
                cluster=AWSClusterManager(client, self.config_manager.get_cluster_config()),
                config=self.config_manager.get_orchestrator_config(),
            )
        return self._orchestrator

    @property
    def pull_requests(self) -> PullRequestService:
        return PullRequestService(self.orchestrator)

    @property
    def deployments(self) -> DeploymentService:
        return DeploymentService(self.orchestrator)

    @property
    def webhook(self) -> PullRequestWebhook:
        return PullRequestWebhook(self.pull_requests)

    async def initialize(self) -> Infrastructure:
        """
        Resolve the shared infrastructure.

        Raises:
            InfrastructureNotFoundError: If the VPC or hosted zone is missing
        """
        infrastructure = await self.orchestrator.initialize()
        self.logger.info("Application initialized",
                         environment=self.config_manager.app_config.environment,
                         vpc_id=infrastructure.vpc_id)
        return infrastructure
