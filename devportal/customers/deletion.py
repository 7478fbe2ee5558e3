"""
Cascading account deletion.

Removes the staging record, the identity provider user, every canonical
record whose UserPoolId is the user's subject, and the API keys registered
for those records. Steps are independent best-effort deletions: each runs
even if an earlier one failed, nothing is rolled back, and the whole
operation can be repeated until it reports no errors.
"""

from dataclasses import dataclass, field

from devportal.config import CustomerTablesConfig
from devportal.errors import AccountDeletionError, CustomerLifecycleError
from devportal.identity.cognito import IdentityProvider
from devportal.keys.registry import KeyRegistry
from devportal.models.customer import api_key_name
from devportal.observability.logging import get_logger
from devportal.observability.metrics import track_api_key_revoked, track_deletion_step
from devportal.storage.base import CustomerStore, Item

logger = get_logger(__name__)

# Canonical records are keyed by identity id, so they are found by filter
CUSTOMER_BY_USER_FILTER = "UserPoolId = :userId"


@dataclass
class AccountDeletionReport:
    """What a deletion run did and what failed."""

    user_sub: str
    pre_login_account_found: bool = False
    completed_steps: list[str] = field(default_factory=list)
    deleted_customer_ids: list[str] = field(default_factory=list)
    revoked_api_key_ids: list[str] = field(default_factory=list)
    errors: list[tuple[str, Exception]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors


class AccountDeleter:
    """Deletes an account and everything that hangs off it."""

    def __init__(
        self,
        store: CustomerStore,
        identity_provider: IdentityProvider,
        key_registry: KeyRegistry,
        tables: CustomerTablesConfig,
    ):
        self.store = store
        self.identity_provider = identity_provider
        self.key_registry = key_registry
        self.tables = tables

    def _record(
        self,
        report: AccountDeletionReport,
        step: str,
        error: Exception | None = None,
        identity_id: str | None = None,
    ):
        # Metric labels use the bare step; the report names the customer too
        track_deletion_step(step, success=error is None)
        reported = f"{step}:{identity_id}" if identity_id else step
        if error is None:
            report.completed_steps.append(reported)
        else:
            report.errors.append((reported, error))
            logger.warning(
                "Account deletion step failed",
                user_sub=report.user_sub,
                step=step,
                identity_id=identity_id,
                exception_type=type(error).__name__,
                error=str(error),
            )

    async def _delete_customer(self, report: AccountDeletionReport, customer: Item) -> None:
        """Revoke the customer's API keys, then drop the canonical record."""
        identity_id = customer["Id"]
        user_sub = customer.get("UserPoolId") or report.user_sub
        try:
            keys = await self.key_registry.fetch_api_gateway_api_keys(
                {"nameQuery": api_key_name(identity_id, user_sub)}
            )
            for key in keys:
                await self.key_registry.delete_api_key(key.id)
                report.revoked_api_key_ids.append(key.id)
                track_api_key_revoked()
        except CustomerLifecycleError as e:
            self._record(report, "revoke_api_keys", e, identity_id=identity_id)
            # Keep the record so a retry can still find the remaining keys
            return
        self._record(report, "revoke_api_keys", identity_id=identity_id)

        try:
            await self.store.delete(self.tables.customers_table_name, {"Id": identity_id})
        except CustomerLifecycleError as e:
            self._record(report, "delete_customer", e, identity_id=identity_id)
            return
        report.deleted_customer_ids.append(identity_id)
        self._record(report, "delete_customer", identity_id=identity_id)

    async def delete_account_by_user_id(self, user_sub: str) -> AccountDeletionReport:
        """
        Delete every durable trace of the account owned by user_sub.

        Args:
            user_sub: User pool subject (staging key and canonical UserPoolId)

        Returns:
            AccountDeletionReport: All steps completed

        Raises:
            AccountDeletionError: At least one step failed; .report says which
        """
        report = AccountDeletionReport(user_sub=user_sub)
        staging_table = self.tables.pre_login_accounts_table_name
        staging_key = {"UserId": user_sub}

        try:
            report.pre_login_account_found = (
                await self.store.get(staging_table, staging_key) is not None
            )
            self._record(report, "read_pre_login_account")
        except CustomerLifecycleError as e:
            self._record(report, "read_pre_login_account", e)

        # Attempted whether or not the read found anything
        try:
            await self.store.delete(staging_table, staging_key)
            self._record(report, "delete_pre_login_account")
        except CustomerLifecycleError as e:
            self._record(report, "delete_pre_login_account", e)

        try:
            await self.identity_provider.admin_delete_user(self.tables.user_pool_id, user_sub)
            self._record(report, "delete_identity_user")
        except CustomerLifecycleError as e:
            self._record(report, "delete_identity_user", e)

        try:
            customers = await self.store.scan(
                self.tables.customers_table_name,
                CUSTOMER_BY_USER_FILTER,
                {":userId": user_sub},
            )
            self._record(report, "find_customers")
        except CustomerLifecycleError as e:
            self._record(report, "find_customers", e)
            customers = []

        for customer in customers:
            await self._delete_customer(report, customer)

        if not report.succeeded:
            logger.error(
                "Account deletion incomplete",
                user_sub=user_sub,
                failed_steps=[step for step, _ in report.errors],
                completed_steps=report.completed_steps,
            )
            raise AccountDeletionError(report)

        logger.info(
            "Account deleted",
            user_sub=user_sub,
            pre_login_account_found=report.pre_login_account_found,
            deleted_customer_ids=report.deleted_customer_ids,
            revoked_api_key_count=len(report.revoked_api_key_ids),
        )
        return report
