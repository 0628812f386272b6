import os
import pytest
from unittest.mock import AsyncMock

import boto3
from moto import mock_aws

from scopekeeper.config.schemas import AWSConfig, OrchestratorConfig
from scopekeeper.domain.base.ports import (
    ClusterPort,
    HostedZonePort,
    NetworkAclPort,
    RouteTablePort,
    SubnetPort,
    VpcPort,
)
from scopekeeper.domain.deployment import AppDefinition, WorkloadDescriptor
from scopekeeper.domain.project import OwnerTag
from scopekeeper.providers.aws.aws_client import AWSClient


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Mocked AWS Credentials for moto."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def aws_client():
    """Create mocked AWS client."""
    with mock_aws():
        yield AWSClient(AWSConfig(region='us-east-1'), session=boto3.session.Session(region_name='us-east-1'))


@pytest.fixture
def app_definition():
    return AppDefinition.parse({
        "name": "acme",
        "tasks": [{
            "containerDefinitions": [{
                "name": "web",
                "image": "acme/web:latest",
                "portMappings": [{"hostPort": 80, "containerPort": 8080, "protocol": "tcp"}],
            }],
        }],
    })


@pytest.fixture
def make_workload():
    """Factory for live workload descriptors."""
    def _make(owner: OwnerTag, sha=None, status="ACTIVE") -> WorkloadDescriptor:
        return WorkloadDescriptor(
            workload_id=f"arn:aws:ecs:us-east-1:123456789012:service/scopekeeper/{owner.resource_name}",
            service_name=owner.resource_name,
            owner=owner,
            status=status,
            sha=sha,
        )
    return _make


@pytest.fixture
def ports():
    """AsyncMock implementations of every resource port, preloaded for project acme."""
    vpc = AsyncMock(spec=VpcPort)
    vpc.find.return_value = {'VpcId': 'vpc-1', 'CidrBlock': '10.0.0.0/16'}
    hosted_zone = AsyncMock(spec=HostedZonePort)
    hosted_zone.find.return_value = {'Id': '/hostedzone/Z123', 'Name': 'example.com.'}
    hosted_zone.upsert_record.return_value = 'ingress.example.com'
    hosted_zone.delete_record.return_value = True
    route_tables = AsyncMock(spec=RouteTablePort)
    route_tables.find_default.return_value = {'RouteTableId': 'rtb-1'}
    network_acls = AsyncMock(spec=NetworkAclPort)
    network_acls.create.return_value = {'NetworkAclId': 'acl-1'}
    network_acls.find.return_value = [{'NetworkAclId': 'acl-1'}]
    subnets = AsyncMock(spec=SubnetPort)
    subnets.create.return_value = {'SubnetId': 'subnet-1', 'CidrBlock': '10.0.0.0/24'}
    subnets.find_project.return_value = {'SubnetId': 'subnet-1', 'CidrBlock': '10.0.0.0/24'}
    subnets.list_projects.return_value = ['acme']
    cluster = AsyncMock(spec=ClusterPort)
    cluster.describe_project.return_value = []
    return {
        'vpc': vpc,
        'hosted_zone': hosted_zone,
        'route_tables': route_tables,
        'network_acls': network_acls,
        'subnets': subnets,
        'cluster': cluster,
    }


@pytest.fixture
def orchestrator(ports):
    from scopekeeper.application.project import ProjectOrchestrator
    return ProjectOrchestrator(config=OrchestratorConfig(lookup_attempts=2, lookup_delay=0), **ports)


