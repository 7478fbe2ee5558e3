"""
Observability infrastructure.

Components:
- metrics.py: Prometheus counters and histograms for workflows and AWS calls
- logging.py: Structured JSON logging with request context
"""

from devportal.observability.logging import (
    OperationContext,
    RequestContext,
    configure_logging,
    get_logger,
)
from devportal.observability.metrics import (
    track_account_invite,
    track_api_key_revoked,
    track_deletion_step,
    track_external_call,
    track_reconciliation,
)

__all__ = [
    "OperationContext",
    "RequestContext",
    "configure_logging",
    "get_logger",
    "track_account_invite",
    "track_api_key_revoked",
    "track_deletion_step",
    "track_external_call",
    "track_reconciliation",
]
