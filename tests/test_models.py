"""
Tests for record models and the in-memory store.
"""

import pytest

from devportal.models.customer import (
    CustomerItem,
    IdentityUser,
    PreLoginAccount,
    RegistrationStatus,
    api_key_name,
)
from devportal.storage.memory import InMemoryStore


def test_customer_item_round_trip_keeps_unknown_attributes():
    item = {"Id": "X", "UserPoolId": "U", "ApiKeyId": "K", "MarketplaceProductCode": "abc"}

    assert CustomerItem.from_item(item).to_item() == item


def test_customer_item_up_to_date_requires_user_pool_id():
    assert CustomerItem(id="X", user_pool_id="U").is_up_to_date
    assert not CustomerItem(id="X").is_up_to_date
    assert not CustomerItem(id="X", user_pool_id="").is_up_to_date


def test_invited_pre_login_account():
    account = PreLoginAccount.invited(
        user_sub="sub-1",
        email_address="user@example.com",
        inviter_email_address="admin@example.com",
        inviter_user_id="admin-sub",
    )

    item = account.to_item()
    assert item["UserId"] == item["Username"] == "sub-1"
    assert item["RegistrationStatus"] == RegistrationStatus.INVITED.value
    assert item["DatetimeCreated"].endswith("+00:00")


def test_identity_user_attributes():
    user = IdentityUser.model_validate(
        {
            "Username": "sub-1",
            "Attributes": [{"Name": "sub", "Value": "sub-1"}, {"Name": "email", "Value": "a@b.io"}],
        }
    )

    assert user.sub == "sub-1"
    assert user.email == "a@b.io"
    assert user.attribute("phone_number") is None


def test_api_key_name():
    assert api_key_name("us-east-1:identity", "sub-1") == "us-east-1:identity/sub-1"


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_get_put_delete(self):
        store = InMemoryStore({"customers": ["Id"]})

        await store.put("customers", {"Id": "X", "UserPoolId": "U"})
        assert await store.get("customers", {"Id": "X"}) == {"Id": "X", "UserPoolId": "U"}

        await store.delete("customers", {"Id": "X"})
        await store.delete("customers", {"Id": "X"})  # absent key is a no-op
        assert await store.get("customers", {"Id": "X"}) is None

    @pytest.mark.asyncio
    async def test_returned_items_are_copies(self):
        store = InMemoryStore({"customers": ["Id"]})
        store.seed("customers", {"Id": "X", "Tags": ["a"]})

        item = await store.get("customers", {"Id": "X"})
        item["Tags"].append("b")

        assert store.items("customers") == [{"Id": "X", "Tags": ["a"]}]

    @pytest.mark.asyncio
    async def test_scan_with_conjunction(self):
        store = InMemoryStore({"customers": ["Id"]})
        store.seed(
            "customers",
            {"Id": "1", "UserPoolId": "U", "RegistrationStatus": "registered"},
            {"Id": "2", "UserPoolId": "U"},
            {"Id": "3", "UserPoolId": "V", "RegistrationStatus": "registered"},
        )

        items = await store.scan(
            "customers",
            "UserPoolId = :u AND RegistrationStatus = :s",
            {":u": "U", ":s": "registered"},
        )

        assert [item["Id"] for item in items] == ["1"]

    @pytest.mark.asyncio
    async def test_scan_rejects_unsupported_expression(self):
        store = InMemoryStore({"customers": ["Id"]})

        with pytest.raises(ValueError, match="Unsupported filter expression"):
            await store.scan("customers", "begins_with(Id, :p)", {":p": "1"})
