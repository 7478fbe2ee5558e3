"""
Customers controller: one entry point for the three customer workflows.

Wires the reconciler, inviter and deleter over shared clients. Anything not
passed in is built from Settings (boto3 clients for DynamoDB, Cognito and
API Gateway).
"""

from devportal.config import CustomerTablesConfig, Settings, get_settings
from devportal.customers.deletion import AccountDeleter, AccountDeletionReport
from devportal.customers.invitations import AccountInviter
from devportal.customers.reconciliation import CustomerReconciler
from devportal.identity.cognito import CognitoIdentityProvider, IdentityProvider
from devportal.keys.registry import ApiGatewayKeyRegistry, KeyRegistry
from devportal.models.customer import CustomerItem, PreLoginAccount
from devportal.observability.logging import (
    OperationContext,
    RequestContext,
    configure_logging_from_settings,
)
from devportal.result import Result
from devportal.storage.base import CustomerStore
from devportal.storage.dynamodb import DynamoDBStore


class CustomersController:
    def __init__(
        self,
        tables: CustomerTablesConfig,
        store: CustomerStore,
        identity_provider: IdentityProvider,
        key_registry: KeyRegistry,
    ):
        self.tables = tables
        self.store = store
        self.identity_provider = identity_provider
        self.key_registry = key_registry

        self.reconciler = CustomerReconciler(store, tables)
        self.inviter = AccountInviter(store, identity_provider, tables)
        self.deleter = AccountDeleter(store, identity_provider, key_registry, tables)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CustomersController":
        """Controller backed by AWS clients configured from the environment."""
        settings = settings or get_settings()
        configure_logging_from_settings(settings.logging)
        return cls(
            tables=settings.tables,
            store=DynamoDBStore(aws_config=settings.aws),
            identity_provider=CognitoIdentityProvider(aws_config=settings.aws),
            key_registry=ApiGatewayKeyRegistry(aws_config=settings.aws),
        )

    async def ensure_customer_item(
        self, identity_id: str, user_id: str, api_key_id: str | None
    ) -> Result[CustomerItem]:
        with RequestContext(user_sub=user_id):
            return await self.reconciler.ensure_customer_item(identity_id, user_id, api_key_id)

    async def create_account_invite(
        self, target_email_address: str, inviter_user_id: str, inviter_user_sub: str
    ) -> PreLoginAccount:
        with RequestContext(user_sub=inviter_user_sub):
            with OperationContext("create_account_invite", inviter_sub=inviter_user_sub):
                return await self.inviter.create_account_invite(
                    target_email_address, inviter_user_id, inviter_user_sub
                )

    async def delete_account_by_user_id(self, user_sub: str) -> AccountDeletionReport:
        with RequestContext(user_sub=user_sub):
            with OperationContext("delete_account_by_user_id"):
                return await self.deleter.delete_account_by_user_id(user_sub)
