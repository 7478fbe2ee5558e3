"""
Pytest configuration and fixtures.

Provides shared fixtures for:
- Customer table configuration
- In-memory customer store seeded per test
- Mock identity provider (Cognito) and key registry (API Gateway)
- Workflow instances wired to the fakes
"""

from unittest.mock import AsyncMock

import pytest

from devportal.config import CustomerTablesConfig
from devportal.customers.deletion import AccountDeleter
from devportal.customers.invitations import AccountInviter
from devportal.customers.reconciliation import CustomerReconciler
from devportal.identity.cognito import IdentityProvider
from devportal.keys.registry import KeyRegistry
from devportal.models.customer import IdentityUser
from devportal.storage.memory import InMemoryStore

USER_POOL_ID = "user-pool-id"
PRE_LOGIN_TABLE = "PreLoginAccountsTable"
CUSTOMERS_TABLE = "DevPortalCustomers"


@pytest.fixture
def tables() -> CustomerTablesConfig:
    """Table configuration independent of the process environment."""
    return CustomerTablesConfig(
        user_pool_id=USER_POOL_ID,
        pre_login_accounts_table_name=PRE_LOGIN_TABLE,
        customers_table_name=CUSTOMERS_TABLE,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(
        key_schema={
            PRE_LOGIN_TABLE: ["UserId"],
            CUSTOMERS_TABLE: ["Id"],
        }
    )


@pytest.fixture
def identity_provider() -> AsyncMock:
    """Cognito stand-in; tests set return values per call."""
    provider = AsyncMock(spec=IdentityProvider)
    provider.list_users.return_value = []
    provider.admin_delete_user.return_value = None
    return provider


@pytest.fixture
def key_registry() -> AsyncMock:
    """API Gateway stand-in with no keys registered."""
    registry = AsyncMock(spec=KeyRegistry)
    registry.fetch_api_gateway_api_keys.return_value = []
    registry.delete_api_key.return_value = None
    return registry


@pytest.fixture
def reconciler(store: InMemoryStore, tables: CustomerTablesConfig) -> CustomerReconciler:
    return CustomerReconciler(store, tables)


@pytest.fixture
def inviter(
    store: InMemoryStore, identity_provider: AsyncMock, tables: CustomerTablesConfig
) -> AccountInviter:
    return AccountInviter(store, identity_provider, tables)


@pytest.fixture
def deleter(
    store: InMemoryStore,
    identity_provider: AsyncMock,
    key_registry: AsyncMock,
    tables: CustomerTablesConfig,
) -> AccountDeleter:
    return AccountDeleter(store, identity_provider, key_registry, tables)


@pytest.fixture
def make_user():
    """Factory for identity provider users with the given attributes."""

    def _make_user(sub: str | None = None, email: str | None = None, username: str | None = None):
        attributes = []
        if email is not None:
            attributes.append({"Name": "email", "Value": email})
        if sub is not None:
            attributes.append({"Name": "sub", "Value": sub})
        return IdentityUser.model_validate({"Username": username, "Attributes": attributes})

    return _make_user
