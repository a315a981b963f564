"""DynamoDB-backed tenant and channel directories.

Scans the alliances table and the channel configurations table with boto3.
Scans are blocking, so they run in a worker thread via ``asyncio.to_thread``
to keep the event loop free for the fan-out.

Tables:
    alliances:        id (S), external_id (S), name (S), workspace_id (S),
                      is_active (BOOL)
    channel configs:  tenant_id (S), module (S), event_type (S),
                      channel_id (S), is_active (BOOL), settings (M)
"""

import asyncio
from typing import Any, Dict, List

import boto3  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore

from infrastructure.configuration.integrations import AwsSettings
from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import DeliveryTarget, NotificationCategory
from infrastructure.operations import classify_aws_error
from modules.war_alerts.directory import (
    ChannelDirectory,
    TenantDirectory,
    select_active_tenants,
    select_targets,
    target_from_record,
    tenant_from_record,
)
from modules.war_alerts.models import Tenant

logger = get_module_logger()


def get_dynamodb_resource(aws_settings: AwsSettings) -> Any:
    """Create a DynamoDB service resource from settings."""
    resource_config: Dict[str, Any] = {"region_name": aws_settings.AWS_REGION}
    if aws_settings.DYNAMODB_ENDPOINT_URL:
        resource_config["endpoint_url"] = aws_settings.DYNAMODB_ENDPOINT_URL
    return boto3.resource("dynamodb", **resource_config)


def scan_table(table: Any, **kwargs: Any) -> List[Dict[str, Any]]:
    """Scan a whole table, following LastEvaluatedKey pagination.

    Raises:
        ClientError, BotoCoreError: The scan failed; logged before re-raising.
    """
    items: List[Dict[str, Any]] = []
    params = dict(kwargs)
    logger.debug("dynamodb_scan_started", table=table.name)
    try:
        while True:
            response = table.scan(**params)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            params["ExclusiveStartKey"] = last_key
    except (ClientError, BotoCoreError) as e:
        result = classify_aws_error(e)
        logger.error(
            "dynamodb_scan_failed",
            table=table.name,
            error=result.message,
            error_code=result.error_code,
        )
        raise
    logger.debug("dynamodb_scan_completed", table=table.name, item_count=len(items))
    return items


class DynamoDBTenantDirectory(TenantDirectory):
    """Tenant directory backed by a DynamoDB table."""

    def __init__(self, resource: Any, table_name: str):
        """Initialize the directory.

        Args:
            resource: boto3 DynamoDB service resource
            table_name: Alliances table name
        """
        self._table = resource.Table(table_name)

    async def list_active(self) -> List[Tenant]:
        items = await asyncio.to_thread(scan_table, self._table)
        tenants = []
        for item in items:
            try:
                tenants.append(tenant_from_record(item))
            except (KeyError, ValueError) as e:
                logger.warning("invalid_tenant_record", error=str(e))
        return select_active_tenants(tenants)


class DynamoDBChannelDirectory(ChannelDirectory):
    """Channel directory backed by a DynamoDB table."""

    def __init__(self, resource: Any, table_name: str):
        self._table = resource.Table(table_name)

    async def list_targets(
        self,
        tenant_id: str,
        category: NotificationCategory,
        active_only: bool = True,
    ) -> List[DeliveryTarget]:
        items = await asyncio.to_thread(
            scan_table,
            self._table,
            FilterExpression="tenant_id = :tenant_id",
            ExpressionAttributeValues={":tenant_id": tenant_id},
        )
        targets = []
        for item in items:
            try:
                targets.append(target_from_record(item))
            except (KeyError, ValueError) as e:
                logger.warning(
                    "invalid_channel_record", tenant_id=tenant_id, error=str(e)
                )
        return select_targets(targets, tenant_id, category, active_only)
