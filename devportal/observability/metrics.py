"""
Prometheus metrics for the customer lifecycle workflows.

Metrics tracked:
- Reconciliation outcomes (fast path, repaired, failed)
- Account invites (created, failed)
- Account deletion steps by outcome
- API keys revoked
- External call latency per service and operation

Integration:
- Exposed by the hosting process (get_metrics() returns the text format)
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)

# ============================================================================
# WORKFLOW METRICS
# ============================================================================

customer_reconciliations_total = Counter(
    "devportal_customer_reconciliations_total",
    "Customer record reconciliations by outcome",
    labelnames=["outcome"],  # fast_path, repaired, failed
)

account_invites_total = Counter(
    "devportal_account_invites_total",
    "Account invites by outcome",
    labelnames=["outcome"],  # created, failed
)

account_deletion_steps_total = Counter(
    "devportal_account_deletion_steps_total",
    "Account deletion steps by step name and success",
    labelnames=["step", "success"],
)

api_keys_revoked_total = Counter(
    "devportal_api_keys_revoked_total",
    "API keys revoked during account deletion",
)

# ============================================================================
# EXTERNAL CALL METRICS
# ============================================================================

external_call_duration_seconds = Histogram(
    "devportal_external_call_duration_seconds",
    "Latency of calls to DynamoDB, Cognito and API Gateway",
    labelnames=["service", "operation", "success"],
    buckets=(
        0.005,  # 5ms
        0.010,  # 10ms
        0.025,  # 25ms
        0.050,  # 50ms
        0.100,  # 100ms
        0.250,  # 250ms
        0.500,  # 500ms
        1.000,  # 1s
        2.500,  # 2.5s
        5.000,  # 5s
    ),
)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def track_reconciliation(outcome: str) -> None:
    """
    Record a reconciliation outcome.

    Args:
        outcome: fast_path, repaired or failed
    """
    customer_reconciliations_total.labels(outcome=outcome).inc()


def track_account_invite(success: bool) -> None:
    account_invites_total.labels(outcome="created" if success else "failed").inc()


def track_deletion_step(step: str, success: bool) -> None:
    account_deletion_steps_total.labels(step=step, success=str(success).lower()).inc()


def track_api_key_revoked() -> None:
    api_keys_revoked_total.inc()


def track_external_call(
    service: str, operation: str, duration_seconds: float, success: bool
) -> None:
    """
    Record latency of one external call.

    Args:
        service: dynamodb, cognito-idp or apigateway
        operation: API operation name (get_item, admin_create_user, ...)
        duration_seconds: Wall time of the call
        success: Whether the call returned without error
    """
    external_call_duration_seconds.labels(
        service=service, operation=operation, success=str(success).lower()
    ).observe(duration_seconds)


def get_metrics() -> tuple[bytes, str]:
    """
    Metrics payload in Prometheus text format.

    Returns:
        tuple: (payload, content type)
    """
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
