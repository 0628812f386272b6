"""Tests for the EC2 and Route 53 managers against moto."""
import pytest

from scopekeeper.config.schemas import DNSConfig, NetworkConfig
from scopekeeper.domain.core.exceptions import (
    InfrastructureNotFoundError,
    ProjectNotFoundError,
    ResourceConflictError,
)
from scopekeeper.domain.project import OWNER_TAG, tags_to_dict
from scopekeeper.providers.aws.exceptions import AWSEntityNotFoundError
from scopekeeper.providers.aws.managers import (
    AWSHostedZoneManager,
    AWSNetworkAclManager,
    AWSRouteTableManager,
    AWSSubnetManager,
    AWSVpcManager,
)


@pytest.fixture
def shared_vpc(aws_client):
    """Shared VPC tagged the way the VPC manager looks it up."""
    ec2 = aws_client.ec2_client
    vpc = ec2.create_vpc(CidrBlock='10.0.0.0/16')['Vpc']
    ec2.create_tags(Resources=[vpc['VpcId']], Tags=[{'Key': 'scopekeeper:role', 'Value': 'shared-vpc'}])
    return vpc


@pytest.fixture
def vpc_manager(aws_client, shared_vpc):
    return AWSVpcManager(aws_client, NetworkConfig())


@pytest.fixture
def acl_manager(aws_client, vpc_manager):
    return AWSNetworkAclManager(aws_client, vpc_manager)


@pytest.fixture
def subnet_manager(aws_client, vpc_manager):
    return AWSSubnetManager(aws_client, vpc_manager, NetworkConfig(subnet_prefix_length=24))


@pytest.fixture
def route_table_manager(aws_client, vpc_manager):
    return AWSRouteTableManager(aws_client, vpc_manager)


async def provision(project_id, route_table_manager, acl_manager, subnet_manager):
    route_table = await route_table_manager.find_default()
    acl = await acl_manager.create(project_id)
    subnet = await subnet_manager.create(project_id, route_table['RouteTableId'], acl['NetworkAclId'])
    return route_table, acl, subnet


@pytest.mark.aws
class TestVpcManager:

    @pytest.mark.asyncio
    async def test_find_by_tag(self, vpc_manager, shared_vpc):
        vpc = await vpc_manager.find()

        assert vpc['VpcId'] == shared_vpc['VpcId']

    @pytest.mark.asyncio
    async def test_find_by_configured_id(self, aws_client, shared_vpc):
        manager = AWSVpcManager(aws_client, NetworkConfig(vpc_id=shared_vpc['VpcId']))

        assert (await manager.find())['VpcId'] == shared_vpc['VpcId']

    @pytest.mark.asyncio
    async def test_missing_tagged_vpc(self, aws_client):
        manager = AWSVpcManager(aws_client, NetworkConfig(vpc_tag_value='nope'))

        assert await manager.find() is None


@pytest.mark.aws
class TestHostedZoneManager:

    @pytest.fixture
    def zone(self, aws_client):
        return aws_client.route53_client.create_hosted_zone(
            Name='example.com', CallerReference='scopekeeper-test'
        )['HostedZone']

    @pytest.mark.asyncio
    async def test_find_by_name(self, aws_client, zone):
        manager = AWSHostedZoneManager(aws_client, DNSConfig(hosted_zone_name='example.com'))

        found = await manager.find()

        assert found['Id'] == zone['Id']
        assert await manager.find_id() == zone['Id'].split('/')[-1]

    @pytest.mark.asyncio
    async def test_find_by_id(self, aws_client, zone):
        zone_id = zone['Id'].split('/')[-1]
        manager = AWSHostedZoneManager(aws_client, DNSConfig(hosted_zone_id=zone_id))

        assert (await manager.find())['Name'] == 'example.com.'

    @pytest.mark.asyncio
    async def test_unknown_name(self, aws_client, zone):
        manager = AWSHostedZoneManager(aws_client, DNSConfig(hosted_zone_name='other.org'))

        assert await manager.find() is None
        assert await manager.find_id() is None

    @pytest.mark.asyncio
    async def test_nothing_configured(self, aws_client):
        assert await AWSHostedZoneManager(aws_client, DNSConfig()).find() is None

    @pytest.mark.asyncio
    async def test_upsert_and_delete_workload_record(self, aws_client, zone):
        zone_id = zone['Id'].split('/')[-1]
        manager = AWSHostedZoneManager(aws_client, DNSConfig(hosted_zone_id=zone_id,
                                                              record_target='ingress.example.com'))

        assert await manager.upsert_record(zone_id, 'prod.deploy.acme.example.com') == 'ingress.example.com'
        assert await manager.upsert_record(zone_id, 'prod.deploy.acme.example.com') == 'ingress.example.com'

        record = await manager.find_record(zone_id, 'prod.deploy.acme.example.com')
        assert record['Type'] == 'CNAME'
        assert record['ResourceRecords'] == [{'Value': 'ingress.example.com'}]

        assert await manager.delete_record(zone_id, 'prod.deploy.acme.example.com') is True
        assert await manager.find_record(zone_id, 'prod.deploy.acme.example.com') is None
        assert await manager.delete_record(zone_id, 'prod.deploy.acme.example.com') is False

    @pytest.mark.asyncio
    async def test_records_of_other_workloads_survive_delete(self, aws_client, zone):
        zone_id = zone['Id'].split('/')[-1]
        manager = AWSHostedZoneManager(aws_client, DNSConfig(record_target='ingress.example.com'))
        await manager.upsert_record(zone_id, '42.pr.acme.example.com')
        await manager.upsert_record(zone_id, 'prod.deploy.acme.example.com')

        await manager.delete_record(zone_id, '42.pr.acme.example.com')

        assert await manager.find_record(zone_id, '42.pr.acme.example.com') is None
        assert await manager.find_record(zone_id, 'prod.deploy.acme.example.com') is not None

    @pytest.mark.asyncio
    async def test_upsert_without_target_writes_nothing(self, aws_client, zone):
        zone_id = zone['Id'].split('/')[-1]
        manager = AWSHostedZoneManager(aws_client, DNSConfig(hosted_zone_id=zone_id))

        assert await manager.upsert_record(zone_id, 'prod.deploy.acme.example.com') is None
        assert await manager.find_record(zone_id, 'prod.deploy.acme.example.com') is None


@pytest.mark.aws
class TestRouteTableManager:

    @pytest.mark.asyncio
    async def test_find_default_returns_main_table(self, route_table_manager, shared_vpc):
        table = await route_table_manager.find_default()

        assert table['VpcId'] == shared_vpc['VpcId']
        assert any(a.get('Main') for a in table['Associations'])

    @pytest.mark.asyncio
    async def test_missing_vpc(self, aws_client):
        manager = AWSRouteTableManager(aws_client, AWSVpcManager(aws_client, NetworkConfig(vpc_tag_value='nope')))

        with pytest.raises(InfrastructureNotFoundError):
            await manager.find_default()


@pytest.mark.aws
class TestNetworkAclManager:

    @pytest.mark.asyncio
    async def test_create_tags_acl(self, acl_manager, shared_vpc):
        acl = await acl_manager.create('acme')

        assert acl['VpcId'] == shared_vpc['VpcId']
        found = await acl_manager.find('acme')
        assert [a['NetworkAclId'] for a in found] == [acl['NetworkAclId']]
        assert tags_to_dict(found[0]['Tags'])[OWNER_TAG] == 'project/acme'

    @pytest.mark.asyncio
    async def test_create_reuses_project_acl(self, acl_manager):
        first = await acl_manager.create('acme')
        second = await acl_manager.create('acme')

        assert first['NetworkAclId'] == second['NetworkAclId']
        assert len(await acl_manager.find('acme')) == 1

    @pytest.mark.asyncio
    async def test_destroy(self, acl_manager):
        await acl_manager.create('acme')
        await acl_manager.create('other')

        await acl_manager.destroy('acme')

        assert await acl_manager.find('acme') == []
        assert len(await acl_manager.find('other')) == 1


@pytest.mark.aws
class TestSubnetManager:

    @pytest.mark.asyncio
    async def test_create_wires_route_table_and_acl(self, aws_client, route_table_manager, acl_manager,
                                                    subnet_manager):
        route_table, acl, subnet = await provision('acme', route_table_manager, acl_manager, subnet_manager)

        assert subnet['CidrBlock'] == '10.0.0.0/24'
        assert tags_to_dict(subnet['Tags'])[OWNER_TAG] == 'project/acme'

        acls = aws_client.ec2_client.describe_network_acls(Filters=[
            {'Name': 'association.subnet-id', 'Values': [subnet['SubnetId']]},
        ])['NetworkAcls']
        assert [a['NetworkAclId'] for a in acls] == [acl['NetworkAclId']]

        tables = aws_client.ec2_client.describe_route_tables(
            RouteTableIds=[route_table['RouteTableId']]
        )['RouteTables']
        assert subnet['SubnetId'] in [a.get('SubnetId') for a in tables[0]['Associations']]

    @pytest.mark.asyncio
    async def test_second_create_conflicts(self, route_table_manager, acl_manager, subnet_manager):
        route_table, acl, subnet = await provision('acme', route_table_manager, acl_manager, subnet_manager)

        with pytest.raises(ResourceConflictError) as exc_info:
            await subnet_manager.create('acme', route_table['RouteTableId'], acl['NetworkAclId'])
        assert exc_info.value.resource_id == subnet['SubnetId']

    @pytest.mark.asyncio
    async def test_allocates_next_free_block(self, route_table_manager, acl_manager, subnet_manager):
        await provision('acme', route_table_manager, acl_manager, subnet_manager)
        _, _, subnet = await provision('globex', route_table_manager, acl_manager, subnet_manager)

        assert subnet['CidrBlock'] == '10.0.1.0/24'

    @pytest.mark.asyncio
    async def test_find_and_list_projects(self, route_table_manager, acl_manager, subnet_manager):
        await provision('globex', route_table_manager, acl_manager, subnet_manager)
        _, _, acme = await provision('acme', route_table_manager, acl_manager, subnet_manager)

        assert (await subnet_manager.find_project('acme'))['SubnetId'] == acme['SubnetId']
        assert await subnet_manager.find_project('initech') is None
        assert await subnet_manager.list_projects() == ['acme', 'globex']

    @pytest.mark.asyncio
    async def test_destroy(self, route_table_manager, acl_manager, subnet_manager):
        await provision('acme', route_table_manager, acl_manager, subnet_manager)

        await subnet_manager.destroy('acme')
        await acl_manager.destroy('acme')

        assert await subnet_manager.find_project('acme') is None
        assert await acl_manager.find('acme') == []

    @pytest.mark.asyncio
    async def test_destroy_missing_project(self, subnet_manager):
        with pytest.raises(ProjectNotFoundError):
            await subnet_manager.destroy('acme')

    @pytest.mark.asyncio
    async def test_unknown_route_table_is_converted(self, acl_manager, subnet_manager):
        acl = await acl_manager.create('acme')

        with pytest.raises(AWSEntityNotFoundError):
            await subnet_manager.create('acme', 'rtb-00000000', acl['NetworkAclId'])
