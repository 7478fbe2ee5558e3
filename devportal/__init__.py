"""
devportal - customer record lifecycle for the developer portal.

Keeps a customer's state consistent across the Cognito user pool, the legacy
pre-login accounts table and the canonical customers table, and tears an
account down across all three plus its API Gateway keys.

Example:
    >>> from devportal import CustomersController
    >>> controller = CustomersController.from_settings()
    >>> result = await controller.ensure_customer_item(identity_id, user_sub, key_id)
"""

from devportal.config import get_settings
from devportal.customers.controller import CustomersController

__all__ = ["CustomersController", "get_settings"]
