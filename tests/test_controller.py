"""
Tests for the customers controller wiring.
"""

from unittest.mock import patch

import pytest

from devportal.config import AWSConfig, CustomerTablesConfig, Settings
from devportal.customers.controller import CustomersController
from devportal.identity.cognito import CognitoIdentityProvider
from devportal.keys.registry import ApiGatewayKeyRegistry
from devportal.result import Ok
from devportal.storage.dynamodb import DynamoDBStore


@pytest.fixture
def controller(tables, store, identity_provider, key_registry) -> CustomersController:
    return CustomersController(tables, store, identity_provider, key_registry)


@pytest.mark.asyncio
async def test_controller_runs_full_lifecycle(controller, store, identity_provider, make_user):
    user_sub = "12345678-1234-5678-9abc-123456789abc"
    identity_provider.list_users.return_value = [make_user(email="admin@example.com")]
    identity_provider.admin_create_user.return_value = make_user(sub=user_sub, email="user@example.com")

    invite = await controller.create_account_invite("user@example.com", "admin@example.com", "admin-sub")
    store.seed("PreLoginAccountsTable", {**invite.to_item(), "RegistrationStatus": "registered"})

    result = await controller.ensure_customer_item("identity-1", user_sub, "key-1")
    assert isinstance(result, Ok)
    assert result.value.registration_status == "registered"
    assert result.value.inviter_email_address == "admin@example.com"
    assert store.items("PreLoginAccountsTable") == []

    report = await controller.delete_account_by_user_id(user_sub)
    assert report.deleted_customer_ids == ["identity-1"]
    assert store.items("DevPortalCustomers") == []


def test_from_settings_builds_aws_clients():
    settings = Settings(
        tables=CustomerTablesConfig(
            user_pool_id="pool",
            pre_login_accounts_table_name="staging",
            customers_table_name="customers",
        ),
        aws=AWSConfig(region="eu-west-1", endpoint_url="http://localhost:4566"),
    )

    with (
        patch("devportal.aws.boto3") as boto3,
        patch("devportal.customers.controller.configure_logging_from_settings") as configure,
    ):
        controller = CustomersController.from_settings(settings)

    configure.assert_called_once_with(settings.logging)

    assert isinstance(controller.store, DynamoDBStore)
    assert isinstance(controller.identity_provider, CognitoIdentityProvider)
    assert isinstance(controller.key_registry, ApiGatewayKeyRegistry)
    assert controller.deleter.tables.user_pool_id == "pool"

    boto3.resource.assert_called_once()
    assert boto3.resource.call_args.kwargs["service_name"] == "dynamodb"
    assert boto3.resource.call_args.kwargs["endpoint_url"] == "http://localhost:4566"
    services = sorted(call.kwargs["service_name"] for call in boto3.client.call_args_list)
    assert services == ["apigateway", "cognito-idp"]
