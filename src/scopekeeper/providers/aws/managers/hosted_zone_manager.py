"""Hosted zone lookup and workload records."""
from typing import Any, Dict, Optional

from scopekeeper.config.schemas import DNSConfig
from scopekeeper.domain.base.ports import HostedZonePort
from scopekeeper.providers.aws.managers.base import AWSResourceManager


class AWSHostedZoneManager(AWSResourceManager, HostedZonePort):
    """Resolves the Route 53 zone deployment hostnames live under."""

    resource_type = "hosted-zone"

    def __init__(self, aws_client, config: Optional[DNSConfig] = None, logger=None):
        super().__init__(aws_client, logger)
        self.config = config or DNSConfig()

    async def find(self) -> Optional[Dict[str, Any]]:
        route53 = self.aws_client.route53_client
        if self.config.hosted_zone_id:
            response = await self.aws_client.call(route53, 'get_hosted_zone', Id=self.config.hosted_zone_id)
            return response.get('HostedZone')

        if not self.config.hosted_zone_name:
            self._logger.warning("No hosted zone configured")
            return None

        wanted = self.config.hosted_zone_name.rstrip('.').lower() + '.'
        response = await self.aws_client.call(route53, 'list_hosted_zones_by_name', DNSName=wanted)
        for zone in response.get('HostedZones', []):
            if zone['Name'].lower() == wanted:
                return zone
        self._logger.warning("Hosted zone not found", zone_name=wanted)
        return None

    async def upsert_record(self, zone_id: str, hostname: str) -> Optional[str]:
        """
        Create or replace the CNAME record of a workload hostname.

        Returns:
            The record target, or None when no target is configured
        """
        target = self.config.record_target
        if not target:
            self._logger.warning("No record target configured, hostname not registered", hostname=hostname)
            return None

        record = {
            'Name': hostname.rstrip('.'),
            'Type': 'CNAME',
            'TTL': self.config.record_ttl,
            'ResourceRecords': [{'Value': target}],
        }
        await self._change(zone_id, 'UPSERT', record)
        self._logger.info("Record upserted", hostname=hostname, target=target)
        return target

    async def find_record(self, zone_id: str, hostname: str) -> Optional[Dict[str, Any]]:
        wanted = hostname.rstrip('.').lower() + '.'
        response = await self.aws_client.call(
            self.aws_client.route53_client, 'list_resource_record_sets',
            HostedZoneId=zone_id, StartRecordName=wanted, StartRecordType='CNAME', MaxItems='1',
        )
        for record in response.get('ResourceRecordSets', []):
            if record['Name'].lower() == wanted and record['Type'] == 'CNAME':
                return record
        return None

    async def delete_record(self, zone_id: str, hostname: str) -> bool:
        # Route 53 deletes only on an exact match of the current record set
        record = await self.find_record(zone_id, hostname)
        if not record:
            self._logger.info("No record to delete", hostname=hostname)
            return False
        await self._change(zone_id, 'DELETE', record)
        self._logger.info("Record deleted", hostname=hostname)
        return True

    async def _change(self, zone_id: str, action: str, record: Dict[str, Any]) -> None:
        await self.aws_client.call(
            self.aws_client.route53_client, 'change_resource_record_sets',
            HostedZoneId=zone_id,
            ChangeBatch={'Changes': [{'Action': action, 'ResourceRecordSet': record}]},
        )
