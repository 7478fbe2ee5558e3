"""
Error taxonomy for the customer lifecycle workflows.

Adapters translate botocore failures into these types (cause chained), so
workflow callers never need to import botocore to tell failures apart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devportal.customers.deletion import AccountDeletionReport


class CustomerLifecycleError(Exception):
    """Base exception for customer lifecycle errors."""

    pass


class StoreError(CustomerLifecycleError):
    """A key-value store operation failed."""

    def __init__(self, message: str, table: str | None = None):
        super().__init__(message)
        self.table = table


class StoreReadError(StoreError):
    """Reading (get or scan) from a store table failed."""

    pass


class StoreWriteError(StoreError):
    """Writing (put or delete) to a store table failed."""

    pass


class InvalidCustomerRecordError(CustomerLifecycleError):
    """A customer record could not be built from the given identifiers."""

    pass


class IdentityProviderError(CustomerLifecycleError):
    """User lookup, creation or deletion failed at the identity provider."""

    pass


class IdentityLookupAmbiguousError(IdentityProviderError):
    """User lookup matched zero or more than one user."""

    def __init__(self, filter_expression: str, match_count: int):
        super().__init__(
            f"Expected exactly one user matching {filter_expression!r}, found {match_count}"
        )
        self.filter_expression = filter_expression
        self.match_count = match_count


class KeyRegistryError(CustomerLifecycleError):
    """API key discovery or revocation failed."""

    pass


class AccountDeletionError(CustomerLifecycleError):
    """One or more account deletion steps failed; earlier steps are not rolled back."""

    def __init__(self, report: AccountDeletionReport):
        failed = ", ".join(step for step, _ in report.errors)
        super().__init__(f"Account deletion for {report.user_sub} incomplete (failed: {failed})")
        self.report = report
