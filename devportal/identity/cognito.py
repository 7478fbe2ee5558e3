"""
Identity provider interface and its Cognito user pool implementation.
"""

from typing import Any, Protocol, runtime_checkable

from botocore.exceptions import BotoCoreError, ClientError

from devportal.aws import call_aws, create_client
from devportal.config import AWSConfig
from devportal.errors import IdentityProviderError
from devportal.models.customer import IdentityUser
from devportal.observability.logging import get_logger

logger = get_logger(__name__)

SERVICE = "cognito-idp"


@runtime_checkable
class IdentityProvider(Protocol):
    """User operations the customer workflows need from the identity provider."""

    async def list_users(self, user_pool_id: str, filter_expression: str) -> list[IdentityUser]:
        """Users matching a Cognito filter such as 'sub = "<uuid>"'."""
        ...

    async def admin_create_user(
        self, user_pool_id: str, username: str, attributes: dict[str, str]
    ) -> IdentityUser:
        """Create a user and return it with its generated attributes (sub)."""
        ...

    async def admin_delete_user(self, user_pool_id: str, username: str) -> None:
        """Delete a user; deleting an absent user is a no-op."""
        ...


def subject_filter(user_sub: str) -> str:
    """Cognito ListUsers filter selecting a user by subject id."""
    return f'sub = "{user_sub}"'


class CognitoIdentityProvider:
    """Cognito user pool operations through boto3 cognito-idp."""

    def __init__(self, client=None, aws_config: AWSConfig | None = None):
        self.client = client or create_client(SERVICE, aws_config or AWSConfig())

    async def list_users(self, user_pool_id: str, filter_expression: str) -> list[IdentityUser]:
        users: list[IdentityUser] = []
        params: dict[str, Any] = {"UserPoolId": user_pool_id, "Filter": filter_expression}

        while True:
            try:
                response = await call_aws(SERVICE, "list_users", self.client.list_users, **params)
            except (ClientError, BotoCoreError) as e:
                logger.error("Cognito list_users failed", filter=filter_expression, error=str(e))
                raise IdentityProviderError(f"Failed to list users: {e}") from e

            users.extend(IdentityUser.model_validate(user) for user in response.get("Users", []))
            token = response.get("PaginationToken")
            if not token:
                return users
            params["PaginationToken"] = token

    async def admin_create_user(
        self, user_pool_id: str, username: str, attributes: dict[str, str]
    ) -> IdentityUser:
        try:
            response = await call_aws(
                SERVICE,
                "admin_create_user",
                self.client.admin_create_user,
                UserPoolId=user_pool_id,
                Username=username,
                UserAttributes=[{"Name": name, "Value": value} for name, value in attributes.items()],
                DesiredDeliveryMediums=["EMAIL"],
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Cognito admin_create_user failed", email=username, error=str(e))
            raise IdentityProviderError(f"Failed to create user: {e}") from e

        return IdentityUser.model_validate(response["User"])

    async def admin_delete_user(self, user_pool_id: str, username: str) -> None:
        try:
            await call_aws(
                SERVICE,
                "admin_delete_user",
                self.client.admin_delete_user,
                UserPoolId=user_pool_id,
                Username=username,
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "UserNotFoundException":
                logger.info("Cognito user already absent", user_sub=username)
                return
            logger.error("Cognito admin_delete_user failed", user_sub=username, error=str(e))
            raise IdentityProviderError(f"Failed to delete user {username}: {e}") from e
        except BotoCoreError as e:
            logger.error("Cognito admin_delete_user failed", user_sub=username, error=str(e))
            raise IdentityProviderError(f"Failed to delete user {username}: {e}") from e
