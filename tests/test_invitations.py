"""
Tests for account invites.
"""

from unittest.mock import AsyncMock

import pytest

from devportal.errors import IdentityLookupAmbiguousError, IdentityProviderError, StoreWriteError

ADMIN_SUB = "a1b2c3d4-a1b2-c3d4-e5f6-a1b2c3d4e5f6"
USER_SUB = "12345678-1234-5678-9abc-123456789abc"
PRE_LOGIN = "PreLoginAccountsTable"


@pytest.mark.asyncio
async def test_creates_an_account_invite_for_a_new_account(
    inviter, identity_provider, store, make_user
):
    identity_provider.list_users.return_value = [make_user(email="admin@example.com")]
    identity_provider.admin_create_user.return_value = make_user(
        sub=USER_SUB, email="user@example.com", username=USER_SUB
    )

    account = await inviter.create_account_invite(
        target_email_address="user@example.com",
        inviter_user_id="admin@example.com",
        inviter_user_sub=ADMIN_SUB,
    )

    identity_provider.list_users.assert_awaited_once_with("user-pool-id", f'sub = "{ADMIN_SUB}"')
    identity_provider.admin_create_user.assert_awaited_once_with(
        "user-pool-id",
        "user@example.com",
        {"email": "user@example.com", "email_verified": "true"},
    )

    assert account.username == USER_SUB
    assert account.inviter_email_address == "admin@example.com"
    assert account.registration_status == "invited"

    stored = store.items(PRE_LOGIN)
    assert len(stored) == 1
    assert stored[0]["UserId"] == USER_SUB
    assert stored[0]["Username"] == USER_SUB
    assert stored[0]["InviterEmailAddress"] == "admin@example.com"
    assert stored[0]["InviterUserId"] == ADMIN_SUB
    assert stored[0]["EmailAddress"] == "user@example.com"
    assert stored[0]["RegistrationStatus"] == "invited"
    assert "DatetimeCreated" in stored[0]
    assert stored[0] == account.to_item()


@pytest.mark.asyncio
async def test_inviter_without_email_falls_back_to_inviter_user_id(
    inviter, identity_provider, store, make_user
):
    identity_provider.list_users.return_value = [make_user(sub=ADMIN_SUB)]
    identity_provider.admin_create_user.return_value = make_user(sub=USER_SUB)

    account = await inviter.create_account_invite("user@example.com", "admin-user", ADMIN_SUB)

    assert account.inviter_email_address == "admin-user"
    assert account.email_address == "user@example.com"


@pytest.mark.asyncio
async def test_fails_when_inviter_lookup_finds_nobody(inviter, identity_provider, store):
    identity_provider.list_users.return_value = []

    with pytest.raises(IdentityLookupAmbiguousError) as exc_info:
        await inviter.create_account_invite("user@example.com", "admin@example.com", ADMIN_SUB)

    assert exc_info.value.match_count == 0
    identity_provider.admin_create_user.assert_not_awaited()
    assert store.writes() == []


@pytest.mark.asyncio
async def test_fails_when_inviter_lookup_is_ambiguous(inviter, identity_provider, store, make_user):
    identity_provider.list_users.return_value = [
        make_user(email="admin@example.com"),
        make_user(email="other@example.com"),
    ]

    with pytest.raises(IdentityLookupAmbiguousError) as exc_info:
        await inviter.create_account_invite("user@example.com", "admin@example.com", ADMIN_SUB)

    assert exc_info.value.match_count == 2
    identity_provider.admin_create_user.assert_not_awaited()
    assert store.writes() == []


@pytest.mark.asyncio
async def test_user_creation_failure_writes_nothing(inviter, identity_provider, store, make_user):
    identity_provider.list_users.return_value = [make_user(email="admin@example.com")]
    identity_provider.admin_create_user.side_effect = IdentityProviderError("UsernameExistsException")

    with pytest.raises(IdentityProviderError):
        await inviter.create_account_invite("user@example.com", "admin@example.com", ADMIN_SUB)

    assert store.writes() == []


@pytest.mark.asyncio
async def test_created_user_without_subject_is_rejected(inviter, identity_provider, store, make_user):
    identity_provider.list_users.return_value = [make_user(email="admin@example.com")]
    identity_provider.admin_create_user.return_value = make_user(email="user@example.com")

    with pytest.raises(IdentityProviderError, match="no subject id"):
        await inviter.create_account_invite("user@example.com", "admin@example.com", ADMIN_SUB)

    assert store.writes() == []


@pytest.mark.asyncio
async def test_staging_write_failure_is_raised_without_cleanup(
    inviter, identity_provider, store, make_user
):
    identity_provider.list_users.return_value = [make_user(email="admin@example.com")]
    identity_provider.admin_create_user.return_value = make_user(sub=USER_SUB)
    store.put = AsyncMock(side_effect=StoreWriteError("table missing"))

    with pytest.raises(StoreWriteError):
        await inviter.create_account_invite("user@example.com", "admin@example.com", ADMIN_SUB)

    identity_provider.admin_delete_user.assert_not_awaited()


@pytest.mark.asyncio
async def test_inviter_email_attribute_wins_over_inviter_user_id(
    inviter, identity_provider, make_user
):
    identity_provider.list_users.return_value = [make_user(sub=ADMIN_SUB, email="admin@example.com")]
    identity_provider.admin_create_user.return_value = make_user(sub=USER_SUB)

    account = await inviter.create_account_invite("user@example.com", "admin-user", ADMIN_SUB)

    assert account.inviter_email_address == "admin@example.com"
