"""Tests for the project orchestrator."""
import asyncio
import pytest
import pytest_asyncio

from scopekeeper.domain.core.exceptions import (
    InfrastructureNotFoundError,
    OrchestratorNotInitializedError,
    ProjectHasOpenChildrenError,
    ProjectNotFoundError,
    ResourceConflictError,
    ValidationError,
)
from scopekeeper.domain.project import OwnerTag
from scopekeeper.providers.aws.exceptions import AWSInfrastructureError


@pytest_asyncio.fixture
async def initialized(orchestrator):
    await orchestrator.initialize()
    return orchestrator


@pytest.mark.unit
class TestInitialize:

    @pytest.mark.asyncio
    async def test_resolves_infrastructure_once(self, orchestrator, ports):
        first = await orchestrator.initialize()
        second = await orchestrator.initialize()

        assert first is second
        assert first.vpc_id == 'vpc-1'
        assert first.hosted_zone_id == 'Z123'
        ports['vpc'].find.assert_awaited_once()
        ports['hosted_zone'].find.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_vpc(self, orchestrator, ports):
        ports['vpc'].find.return_value = None

        with pytest.raises(InfrastructureNotFoundError):
            await orchestrator.initialize()
        assert not orchestrator.is_initialized

    @pytest.mark.asyncio
    async def test_missing_hosted_zone(self, orchestrator, ports):
        ports['hosted_zone'].find.return_value = None

        with pytest.raises(InfrastructureNotFoundError):
            await orchestrator.initialize()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation, args", [
        ("create", ("acme",)),
        ("find_or_create_project", ("acme",)),
        ("find_project", ("acme",)),
        ("destroy", ("acme",)),
        ("describe_project", ("acme",)),
        ("list_projects", ()),
    ])
    async def test_operations_require_initialize(self, orchestrator, ports, operation, args):
        with pytest.raises(OrchestratorNotInitializedError):
            await getattr(orchestrator, operation)(*args)
        ports['subnets'].create.assert_not_awaited()
        ports['subnets'].destroy.assert_not_awaited()


@pytest.mark.unit
class TestCreate:

    @pytest.mark.asyncio
    async def test_create_runs_route_lookup_and_acl_create_before_subnet(self, orchestrator, ports):
        await orchestrator.initialize()
        events = []
        both_started = asyncio.Event()

        async def find_default():
            events.append('route:start')
            if len(events) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)
            events.append('route:end')
            return {'RouteTableId': 'rtb-1'}

        async def create_acl(project_id):
            events.append('acl:start')
            if len(events) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)
            events.append('acl:end')
            return {'NetworkAclId': 'acl-1'}

        async def create_subnet(project_id, route_table_id, network_acl_id):
            events.append('subnet')
            return {'SubnetId': 'subnet-1', 'Tags': [{'Key': 'scopekeeper:owner', 'Value': 'project/acme'}]}

        ports['route_tables'].find_default.side_effect = find_default
        ports['network_acls'].create.side_effect = create_acl
        ports['subnets'].create.side_effect = create_subnet

        subnet = await orchestrator.create('acme')

        assert subnet['SubnetId'] == 'subnet-1'
        assert set(events[:2]) == {'route:start', 'acl:start'}
        assert events[-1] == 'subnet'
        ports['subnets'].create.assert_awaited_once_with('acme', 'rtb-1', 'acl-1')

    @pytest.mark.asyncio
    async def test_create_surfaces_conflict(self, initialized, ports):
        ports['subnets'].create.side_effect = ResourceConflictError('subnet', 'project/acme', 'subnet-1')

        with pytest.raises(ResourceConflictError):
            await initialized.create('acme')

    @pytest.mark.asyncio
    async def test_invalid_project_id_makes_no_calls(self, initialized, ports):
        with pytest.raises(ValidationError):
            await initialized.create('not a project')
        ports['network_acls'].create.assert_not_awaited()


@pytest.mark.unit
class TestFindOrCreate:

    @pytest.mark.asyncio
    async def test_fresh_project_is_created(self, initialized, ports):
        subnet = await initialized.find_or_create_project('acme')

        assert subnet['SubnetId'] == 'subnet-1'
        ports['subnets'].find_project.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_second_call_falls_back_to_find(self, initialized, ports):
        first = await initialized.find_or_create_project('acme')
        ports['subnets'].create.side_effect = ResourceConflictError('subnet', 'project/acme', 'subnet-1')

        second = await initialized.find_or_create_project('acme')

        assert second['SubnetId'] == first['SubnetId']
        ports['subnets'].find_project.assert_awaited_once_with('acme')

    @pytest.mark.asyncio
    async def test_provider_error_falls_back_to_find(self, initialized, ports):
        ports['network_acls'].create.side_effect = AWSInfrastructureError('boom')

        subnet = await initialized.find_or_create_project('acme')

        assert subnet['SubnetId'] == 'subnet-1'

    @pytest.mark.asyncio
    async def test_lookup_retried_for_eventual_consistency(self, initialized, ports):
        ports['subnets'].create.side_effect = ResourceConflictError('subnet', 'project/acme')
        ports['subnets'].find_project.side_effect = [None, {'SubnetId': 'subnet-1'}]

        subnet = await initialized.find_or_create_project('acme')

        assert subnet['SubnetId'] == 'subnet-1'
        assert ports['subnets'].find_project.await_count == 2

    @pytest.mark.asyncio
    async def test_not_found_after_failed_create(self, initialized, ports):
        conflict = ResourceConflictError('subnet', 'project/acme')
        ports['subnets'].create.side_effect = conflict
        ports['subnets'].find_project.return_value = None

        with pytest.raises(ProjectNotFoundError) as exc_info:
            await initialized.find_or_create_project('acme')
        assert exc_info.value.__cause__ is conflict
        assert ports['subnets'].find_project.await_count == 2

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, initialized, ports):
        ports['route_tables'].find_default.side_effect = InfrastructureNotFoundError('route table')

        with pytest.raises(InfrastructureNotFoundError):
            await initialized.find_or_create_project('acme')
        ports['subnets'].find_project.assert_not_awaited()


@pytest.mark.unit
class TestFindAndDescribe:

    @pytest.mark.asyncio
    async def test_find_project_never_creates(self, initialized, ports):
        ports['subnets'].find_project.return_value = None

        with pytest.raises(ProjectNotFoundError):
            await initialized.find_project('acme')
        ports['subnets'].create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_scope(self, initialized):
        scope = await initialized.scope('acme')

        assert scope.subnet_id == 'subnet-1'
        assert scope.network_acl_id == 'acl-1'

    @pytest.mark.asyncio
    async def test_list_projects(self, initialized):
        assert await initialized.list_projects() == ['acme']


@pytest.mark.unit
class TestEndpoints:

    @pytest.mark.asyncio
    async def test_register_endpoint_upserts_record(self, initialized, ports):
        endpoint = await initialized.register_endpoint(OwnerTag.deployment('acme', 'prod'), 'arn:svc')

        assert endpoint.hostname == 'prod.deploy.acme.example.com'
        assert endpoint.target == 'ingress.example.com'
        ports['hosted_zone'].upsert_record.assert_awaited_once_with('Z123', 'prod.deploy.acme.example.com')

    @pytest.mark.asyncio
    async def test_register_endpoint_without_target(self, initialized, ports):
        ports['hosted_zone'].upsert_record.return_value = None

        endpoint = await initialized.register_endpoint(OwnerTag.pull_request('acme', 42), 'arn:svc')

        assert not endpoint.is_registered
        assert endpoint.hostname == '42.pr.acme.example.com'

    @pytest.mark.asyncio
    async def test_release_endpoint_deletes_record(self, initialized, ports):
        await initialized.release_endpoint(OwnerTag.pull_request('acme', 42))

        ports['hosted_zone'].delete_record.assert_awaited_once_with('Z123', '42.pr.acme.example.com')

    @pytest.mark.asyncio
    async def test_endpoints_require_initialize(self, orchestrator, ports):
        with pytest.raises(OrchestratorNotInitializedError):
            await orchestrator.register_endpoint(OwnerTag.pull_request('acme', 42), 'arn:svc')
        ports['hosted_zone'].upsert_record.assert_not_awaited()


@pytest.mark.unit
class TestDestroy:

    @pytest.mark.asyncio
    async def test_open_pull_requests_block_destroy(self, initialized, ports, make_workload):
        ports['cluster'].describe_project.return_value = [
            make_workload(OwnerTag.pull_request('acme', 42)),
            make_workload(OwnerTag.deployment('acme', 'prod'), sha='abc'),
        ]

        with pytest.raises(ProjectHasOpenChildrenError) as exc_info:
            await initialized.destroy('acme')

        assert [w.identifier for w in exc_info.value.children] == ['42']
        ports['subnets'].destroy.assert_not_awaited()
        ports['network_acls'].destroy.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_destroys_subnet_before_acl(self, initialized, ports):
        order = []
        ports['subnets'].destroy.side_effect = lambda project_id: order.append('subnet')
        ports['network_acls'].destroy.side_effect = lambda project_id: order.append('acl')

        await initialized.destroy('acme')

        assert order == ['subnet', 'acl']

    @pytest.mark.asyncio
    async def test_deployments_do_not_block_destroy(self, initialized, ports, make_workload):
        ports['cluster'].describe_project.return_value = [
            make_workload(OwnerTag.deployment('acme', 'prod'), sha='abc'),
        ]

        await initialized.destroy('acme')

        ports['subnets'].destroy.assert_awaited_once_with('acme')
        ports['network_acls'].destroy.assert_awaited_once_with('acme')
