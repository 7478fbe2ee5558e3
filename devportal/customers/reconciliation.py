"""
Read-repair of canonical customer records.

ensure_customer_item guarantees a canonical record keyed by identity id
exists and carries the user pool subject, migrating legacy staging data when
it does not. There is no cross-table transaction: a repair is a put followed
by a staging delete, and a failure part-way is healed by calling again (the
repaired record then takes the fast path).
"""

from dataclasses import dataclass
from typing import Callable

from pydantic import ValidationError

from devportal.config import CustomerTablesConfig
from devportal.errors import InvalidCustomerRecordError, StoreError, StoreReadError
from devportal.models.customer import CustomerItem, PreLoginAccount
from devportal.observability.logging import get_logger
from devportal.observability.metrics import track_reconciliation
from devportal.result import Err, Ok, Result
from devportal.storage.base import CustomerStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class CustomerRepairPlan:
    """Outcome of comparing the canonical and staging reads."""

    item: CustomerItem
    write: bool
    delete_pre_login_account: bool


def plan_customer_repair(
    identity_id: str,
    user_id: str,
    api_key_id: str | None,
    customer: CustomerItem | None,
    pre_login_account: PreLoginAccount | None,
) -> CustomerRepairPlan:
    """
    Decide what, if anything, must be written for a customer.

    An up-to-date canonical record is returned untouched. Otherwise the
    record is rebuilt: existing canonical attributes win, except that a
    staging RegistrationStatus may advance the status.
    """
    if customer is not None and customer.is_up_to_date:
        return CustomerRepairPlan(item=customer, write=False, delete_pre_login_account=False)

    attributes = customer.to_item() if customer is not None else {}
    attributes["Id"] = identity_id
    attributes["UserPoolId"] = user_id

    if not attributes.get("ApiKeyId"):
        carried = api_key_id or (pre_login_account.api_key_id if pre_login_account else None)
        if carried:
            attributes["ApiKeyId"] = carried

    if pre_login_account is not None:
        if pre_login_account.registration_status:
            attributes["RegistrationStatus"] = pre_login_account.registration_status
        for name, value in (
            ("InviterEmailAddress", pre_login_account.inviter_email_address),
            ("InviterUserId", pre_login_account.inviter_user_id),
        ):
            if value and not attributes.get(name):
                attributes[name] = value

    return CustomerRepairPlan(
        item=CustomerItem.from_item(attributes),
        write=True,
        delete_pre_login_account=True,
    )


class CustomerReconciler:
    """Keeps the canonical customer table consistent with the staging table."""

    def __init__(self, store: CustomerStore, tables: CustomerTablesConfig):
        self.store = store
        self.tables = tables

    async def _get_customer(self, identity_id: str) -> CustomerItem | None:
        table = self.tables.customers_table_name
        item = await self.store.get(table, {"Id": identity_id})
        try:
            return CustomerItem.from_item(item) if item else None
        except ValidationError as e:
            raise StoreReadError(f"Malformed customer record {identity_id}: {e}", table=table) from e

    async def _get_pre_login_account(self, user_id: str) -> PreLoginAccount | None:
        table = self.tables.pre_login_accounts_table_name
        item = await self.store.get(table, {"UserId": user_id})
        try:
            return PreLoginAccount.from_item(item) if item else None
        except ValidationError as e:
            raise StoreReadError(f"Malformed staging record {user_id}: {e}", table=table) from e

    async def ensure_customer_item(
        self, identity_id: str, user_id: str, api_key_id: str | None
    ) -> Result[CustomerItem]:
        """
        Make sure an up-to-date canonical record exists for identity_id.

        Args:
            identity_id: Identity pool subject (canonical key)
            user_id: User pool subject (staging key, UserPoolId value)
            api_key_id: API key to record when the canonical record has none

        Returns:
            Ok(record) as stored, or Err(StoreReadError | StoreWriteError |
            InvalidCustomerRecordError). Nothing raises past this method.
        """
        if not identity_id or not user_id:
            track_reconciliation("failed")
            logger.error(
                "Customer record reconciliation rejected",
                identity_id=identity_id,
                user_sub=user_id,
            )
            return Err(
                InvalidCustomerRecordError("identity_id and user_id must be non-empty")
            )

        try:
            customer = await self._get_customer(identity_id)
            if customer is not None and customer.is_up_to_date:
                track_reconciliation("fast_path")
                return Ok(customer)

            pre_login_account = await self._get_pre_login_account(user_id)
            try:
                plan = plan_customer_repair(
                    identity_id, user_id, api_key_id, customer, pre_login_account
                )
            except ValidationError as e:
                raise InvalidCustomerRecordError(
                    f"Cannot build customer record {identity_id}: {e}"
                ) from e

            await self.store.put(self.tables.customers_table_name, plan.item.to_item())
            if plan.delete_pre_login_account:
                await self.store.delete(
                    self.tables.pre_login_accounts_table_name, {"UserId": user_id}
                )
        except (StoreError, InvalidCustomerRecordError) as e:
            track_reconciliation("failed")
            logger.error(
                "Customer record reconciliation failed",
                identity_id=identity_id,
                user_sub=user_id,
                error=str(e),
            )
            return Err(e)

        track_reconciliation("repaired")
        logger.info(
            "Customer record repaired",
            identity_id=identity_id,
            user_sub=user_id,
            created=customer is None,
            migrated_staging_record=pre_login_account is not None,
        )
        return Ok(plan.item)

    async def ensure_customer_item_with_callbacks(
        self,
        identity_id: str,
        user_id: str,
        api_key_id: str | None,
        on_error: Callable[[Exception], None],
        on_success: Callable[[CustomerItem], None],
    ) -> None:
        """Continuation-style wrapper: exactly one of the callbacks is invoked."""
        match await self.ensure_customer_item(identity_id, user_id, api_key_id):
            case Ok(customer):
                on_success(customer)
            case Err(error):
                on_error(error)
