"""
API key registry interface and its API Gateway implementation.

The portal never creates keys here; it only discovers the keys registered for
a customer and revokes them when the account is deleted.
"""

from typing import Any, Protocol, runtime_checkable

from botocore.exceptions import BotoCoreError, ClientError

from devportal.aws import call_aws, create_client
from devportal.config import AWSConfig
from devportal.errors import KeyRegistryError
from devportal.models.customer import ApiKey
from devportal.observability.logging import get_logger

logger = get_logger(__name__)

SERVICE = "apigateway"


@runtime_checkable
class KeyRegistry(Protocol):
    async def fetch_api_gateway_api_keys(self, filter_criteria: dict[str, Any]) -> list[ApiKey]:
        """Every key matching the criteria (nameQuery, customerId), across all pages."""
        ...

    async def delete_api_key(self, key_id: str) -> None:
        """Revoke a key; revoking an absent key is a no-op."""
        ...


class ApiGatewayKeyRegistry:
    """API Gateway (REST) keys through boto3 apigateway."""

    def __init__(self, client=None, aws_config: AWSConfig | None = None, page_size: int = 500):
        self.client = client or create_client(SERVICE, aws_config or AWSConfig())
        self.page_size = page_size

    async def fetch_api_gateway_api_keys(self, filter_criteria: dict[str, Any]) -> list[ApiKey]:
        keys: list[ApiKey] = []
        params: dict[str, Any] = {"limit": self.page_size, "includeValues": False, **filter_criteria}

        while True:
            try:
                response = await call_aws(SERVICE, "get_api_keys", self.client.get_api_keys, **params)
            except (ClientError, BotoCoreError) as e:
                logger.error("API Gateway get_api_keys failed", criteria=filter_criteria, error=str(e))
                raise KeyRegistryError(f"Failed to fetch API keys: {e}") from e

            keys.extend(ApiKey.model_validate(item) for item in response.get("items", []))
            position = response.get("position")
            if not position:
                return keys
            params["position"] = position

    async def delete_api_key(self, key_id: str) -> None:
        try:
            await call_aws(SERVICE, "delete_api_key", self.client.delete_api_key, apiKey=key_id)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "NotFoundException":
                logger.info("API key already absent", api_key_id=key_id)
                return
            logger.error("API Gateway delete_api_key failed", api_key_id=key_id, error=str(e))
            raise KeyRegistryError(f"Failed to delete API key {key_id}: {e}") from e
        except BotoCoreError as e:
            logger.error("API Gateway delete_api_key failed", api_key_id=key_id, error=str(e))
            raise KeyRegistryError(f"Failed to delete API key {key_id}: {e}") from e
