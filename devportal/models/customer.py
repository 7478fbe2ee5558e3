"""
Customer record data models for the developer portal.

Records live in DynamoDB-style tables whose attribute names are PascalCase.
Models use snake_case fields with PascalCase aliases; to_item() produces the
attribute map written to a store and from_item() parses one read back.
Unknown attributes are kept so a read-modify-write never drops data.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RegistrationStatus(str, Enum):
    """Staging record lifecycle."""

    INVITED = "invited"  # Created by an account invite
    REGISTERED = "registered"  # Invitee completed sign-up


class StoreRecord(BaseModel):
    """Base for records persisted as attribute maps."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", use_enum_values=True)

    @classmethod
    def from_item(cls, item: dict[str, Any]):
        return cls.model_validate(item)

    def to_item(self) -> dict[str, Any]:
        """Attribute map for the store (aliases, unset optionals dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CustomerItem(StoreRecord):
    """
    Canonical customer record, keyed by identity pool id.

    A record without UserPoolId is a stale or partial write and is repaired
    on the next reconciliation.
    """

    id: str = Field(..., alias="Id", min_length=1, description="Identity pool subject id")
    user_pool_id: str | None = Field(
        default=None, alias="UserPoolId", description="Identity provider user subject"
    )
    api_key_id: str | None = Field(default=None, alias="ApiKeyId")
    registration_status: RegistrationStatus | None = Field(default=None, alias="RegistrationStatus")

    # Inviter metadata carried over from the staging record
    inviter_email_address: str | None = Field(default=None, alias="InviterEmailAddress")
    inviter_user_id: str | None = Field(default=None, alias="InviterUserId")

    @property
    def is_up_to_date(self) -> bool:
        """True once the record carries the identity provider subject."""
        return bool(self.user_pool_id)


class PreLoginAccount(StoreRecord):
    """
    Legacy staging record, keyed by identity provider user subject.

    Holds pending invites and accounts not yet migrated to the customer table.
    """

    user_id: str = Field(..., alias="UserId", min_length=1)
    username: str | None = Field(default=None, alias="Username")
    registration_status: RegistrationStatus | None = Field(default=None, alias="RegistrationStatus")
    email_address: str | None = Field(default=None, alias="EmailAddress")
    inviter_email_address: str | None = Field(default=None, alias="InviterEmailAddress")
    inviter_user_id: str | None = Field(default=None, alias="InviterUserId")
    api_key_id: str | None = Field(default=None, alias="ApiKeyId")
    datetime_created: str | None = Field(default=None, alias="DatetimeCreated")

    @classmethod
    def invited(
        cls,
        user_sub: str,
        email_address: str | None,
        inviter_email_address: str,
        inviter_user_id: str,
    ) -> "PreLoginAccount":
        """Build the staging record for a freshly provisioned invitee."""
        return cls(
            user_id=user_sub,
            username=user_sub,
            email_address=email_address,
            inviter_email_address=inviter_email_address,
            inviter_user_id=inviter_user_id,
            registration_status=RegistrationStatus.INVITED,
            datetime_created=datetime.now(UTC).isoformat(),
        )


class UserAttribute(BaseModel):
    """Single identity provider user attribute."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="Name")
    value: str | None = Field(default=None, alias="Value")


class IdentityUser(BaseModel):
    """Identity provider user as returned by list/create calls."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    username: str | None = Field(default=None, alias="Username")
    attributes: list[UserAttribute] = Field(default_factory=list, alias="Attributes")
    enabled: bool | None = Field(default=None, alias="Enabled")
    user_status: str | None = Field(default=None, alias="UserStatus")

    def attribute(self, name: str) -> str | None:
        """Value of the named attribute, or None when absent."""
        for attr in self.attributes:
            if attr.name == name:
                return attr.value
        return None

    @property
    def sub(self) -> str | None:
        return self.attribute("sub")

    @property
    def email(self) -> str | None:
        return self.attribute("email")


class ApiKey(BaseModel):
    """API Gateway key associated with a customer."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str | None = None
    customer_id: str | None = Field(default=None, alias="customerId")
    enabled: bool = True


def api_key_name(identity_id: str, user_sub: str) -> str:
    """Name under which a customer's API key is registered: <identity id>/<user sub>."""
    return f"{identity_id}/{user_sub}"
