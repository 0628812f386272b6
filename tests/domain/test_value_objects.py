"""Tests for project value objects and workload descriptors."""
import pytest

from scopekeeper.domain.deployment import WorkloadDescriptor
from scopekeeper.domain.project import Endpoint, OwnerTag, ProjectScope, SHA_TAG


@pytest.mark.unit
class TestEndpoint:

    def test_registered_endpoint(self):
        endpoint = Endpoint("prod.deploy.acme.example.com", "arn:svc", target="ingress.example.com")

        assert endpoint.is_registered
        assert endpoint.to_dict() == {
            "hostname": "prod.deploy.acme.example.com",
            "service_arn": "arn:svc",
            "target": "ingress.example.com",
        }

    def test_unregistered_endpoint(self):
        assert not Endpoint("prod.deploy.acme.example.com", "arn:svc").is_registered


@pytest.mark.unit
class TestProjectScope:

    def test_from_subnet(self):
        scope = ProjectScope.from_subnet("acme", {"SubnetId": "subnet-1", "CidrBlock": "10.0.1.0/24"},
                                         network_acl_id="acl-1")

        assert scope.to_dict() == {
            "project_id": "acme",
            "subnet_id": "subnet-1",
            "network_acl_id": "acl-1",
            "route_table_id": None,
            "cidr_block": "10.0.1.0/24",
        }


@pytest.mark.unit
class TestWorkloadDescriptor:

    def test_from_service(self):
        owner = OwnerTag.deployment("acme", "prod")
        service = {
            "serviceArn": "arn:aws:ecs:us-east-1:123456789012:service/scopekeeper/acme-prod",
            "serviceName": "acme-prod",
            "status": "ACTIVE",
            "taskDefinition": "arn:td:1",
            "runningCount": 1,
            "desiredCount": 1,
        }

        workload = WorkloadDescriptor.from_service(service, owner, {SHA_TAG: "abc123"})

        assert workload.is_deployment
        assert workload.identifier == "prod"
        assert workload.sha == "abc123"
        assert workload.summary() == "Deployment prod (ACTIVE)"
        assert workload.to_dict()["type"] == "Deployment"

    def test_pull_request_summary(self):
        owner = OwnerTag.pull_request("acme", 42)
        workload = WorkloadDescriptor("arn:svc", "acme-pr-42", owner, status="ACTIVE")

        assert workload.is_pull_request
        assert workload.project_id == "acme"
        assert workload.summary() == "PR 42 (ACTIVE)"
