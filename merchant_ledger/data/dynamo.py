"""DynamoDB-backed record store."""

from typing import Any, Mapping

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from merchant_ledger.config import DynamoConfig, settings
from merchant_ledger.data.ranges import KeyRange
from merchant_ledger.data.records import PARTITION_KEY, SETTLEMENT_KEY, SORT_KEY
from merchant_ledger.data.storage import IndexName, RecordWriterMixin, ScanResult
from merchant_ledger.errors import StorageError
from merchant_ledger.utils.logging import get_logger


logger = get_logger("dynamo", settings.log_level)


def build_table(config: DynamoConfig):
    """Create the shared table resource. Retries are left to the caller."""
    resource = boto3.resource(
        "dynamodb",
        region_name=config.region_name,
        endpoint_url=config.endpoint_url,
        config=Config(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            retries={"max_attempts": 1, "mode": "standard"},
        ),
    )
    return resource.Table(config.table_name)


class DynamoRecordStore(RecordWriterMixin):
    """Record store over one table and its settlement GSI.

    Table: ``pk`` (merchant id) + ``sk``. GSI: ``settlement_merchant_id`` + ``sk``.
    """

    def __init__(self, table, settlement_index_name: str = "settlement-index"):
        self.table = table
        self.settlement_index_name = settlement_index_name

    @classmethod
    def from_config(cls, config: DynamoConfig) -> "DynamoRecordStore":
        return cls(build_table(config), config.settlement_index_name)

    def query(
        self,
        index: IndexName,
        partition: str,
        key_range: KeyRange,
        limit: int,
        filters: Mapping[str, str] | None = None,
    ) -> ScanResult:
        partition_attr = PARTITION_KEY if index is IndexName.PRIMARY else SETTLEMENT_KEY
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": (
                Key(partition_attr).eq(partition)
                & Key(SORT_KEY).between(key_range.lower, key_range.upper)
            ),
            "ScanIndexForward": False,
            "Limit": limit,
        }
        if index is IndexName.SETTLEMENT:
            kwargs["IndexName"] = self.settlement_index_name

        # Build filter expression only if filters present
        filter_expr = None
        for name, value in (filters or {}).items():
            expr = Attr(name).eq(value)
            filter_expr = expr if filter_expr is None else filter_expr & expr
        if filter_expr is not None:
            kwargs["FilterExpression"] = filter_expr

        response = self._call("query", **kwargs)
        last_key = response.get("LastEvaluatedKey")
        return ScanResult(
            items=response.get("Items", []),
            last_evaluated_key=last_key[SORT_KEY] if last_key else None,
        )

    def get_item(self, partition: str, sort_key: str) -> dict[str, Any] | None:
        response = self._call("get_item", Key={PARTITION_KEY: partition, SORT_KEY: sort_key})
        return response.get("Item")

    def put_item(self, item: dict[str, Any]) -> None:
        self._call("put_item", Item=item)

    def _call(self, operation: str, **kwargs) -> dict[str, Any]:
        try:
            return getattr(self.table, operation)(**kwargs)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"DynamoDB {operation} failed: {code}")
            raise StorageError(f"DynamoDB {operation} failed: {code}") from e
        except BotoCoreError as e:
            logger.error(f"DynamoDB {operation} failed: {e}")
            raise StorageError(f"DynamoDB {operation} failed: {e}") from e
