"""DynamoDB implementation of CustomerStore."""

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from devportal.aws import call_aws, create_resource
from devportal.config import AWSConfig
from devportal.errors import StoreReadError, StoreWriteError
from devportal.observability.logging import get_logger
from devportal.storage.base import Item

logger = get_logger(__name__)

SERVICE = "dynamodb"


class DynamoDBStore:
    """
    DynamoDB tables through the boto3 resource API.

    Works with AWS, DynamoDB Local and LocalStack (AWS_ENDPOINT_URL).
    Scans follow LastEvaluatedKey until the table is exhausted.
    """

    def __init__(self, resource=None, aws_config: AWSConfig | None = None):
        self.resource = resource or create_resource(SERVICE, aws_config or AWSConfig())

    def _table(self, table: str):
        return self.resource.Table(table)

    async def get(self, table: str, key: Item) -> Item | None:
        try:
            response = await call_aws(
                SERVICE, "get_item", self._table(table).get_item, Key=key
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("DynamoDB get failed", table=table, key=key, error=str(e))
            raise StoreReadError(f"Failed to read {key} from {table}: {e}", table=table) from e
        return response.get("Item")

    async def put(self, table: str, item: Item) -> None:
        try:
            await call_aws(SERVICE, "put_item", self._table(table).put_item, Item=item)
        except (ClientError, BotoCoreError) as e:
            logger.error("DynamoDB put failed", table=table, error=str(e))
            raise StoreWriteError(f"Failed to write item to {table}: {e}", table=table) from e

    async def delete(self, table: str, key: Item) -> None:
        try:
            await call_aws(SERVICE, "delete_item", self._table(table).delete_item, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error("DynamoDB delete failed", table=table, key=key, error=str(e))
            raise StoreWriteError(f"Failed to delete {key} from {table}: {e}", table=table) from e

    async def scan(
        self, table: str, filter_expression: str, filter_values: dict[str, Any]
    ) -> list[Item]:
        items: list[Item] = []
        params: dict[str, Any] = {
            "FilterExpression": filter_expression,
            "ExpressionAttributeValues": filter_values,
        }
        scan = self._table(table).scan

        while True:
            try:
                response = await call_aws(SERVICE, "scan", scan, **params)
            except (ClientError, BotoCoreError) as e:
                logger.error("DynamoDB scan failed", table=table, error=str(e))
                raise StoreReadError(f"Failed to scan {table}: {e}", table=table) from e

            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            params["ExclusiveStartKey"] = last_key

        logger.debug("DynamoDB scan finished", table=table, item_count=len(items))
        return items
