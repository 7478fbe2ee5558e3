"""
Customer record lifecycle workflows.

- reconciliation: read-repair of canonical customer records
- invitations: invited account provisioning
- deletion: cascading account removal
"""

from devportal.customers.controller import CustomersController
from devportal.customers.deletion import AccountDeleter, AccountDeletionReport
from devportal.customers.invitations import AccountInviter
from devportal.customers.reconciliation import (
    CustomerReconciler,
    CustomerRepairPlan,
    plan_customer_repair,
)

__all__ = [
    "AccountDeleter",
    "AccountDeletionReport",
    "AccountInviter",
    "CustomerReconciler",
    "CustomerRepairPlan",
    "CustomersController",
    "plan_customer_repair",
]
