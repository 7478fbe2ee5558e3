"""
structlog setup for the customer workflows.

Every event carries the service name and environment, the ids of the
invocation it belongs to (request_id, trace_id, user_sub), and never a full
e-mail address or credential. JSON goes to stdout in deployed environments;
the console renderer is for local runs.
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from structlog.types import EventDict, Processor

if TYPE_CHECKING:
    from devportal.config import LoggingConfig

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
user_sub_var: ContextVar[str | None] = ContextVar("user_sub", default=None)
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)

# Logged as a prefix only
CREDENTIAL_FIELDS = frozenset({"api_key_value", "authorization", "password", "secret", "token"})


def add_request_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Copy the invocation ids set by RequestContext onto the event."""
    for name, var in (("request_id", request_id_var), ("trace_id", trace_id_var)):
        value = var.get()
        if value:
            event_dict[name] = value

    user_sub = user_sub_var.get()
    if user_sub:
        # An explicit user_sub on the call wins over the invocation's
        event_dict.setdefault("user_sub", user_sub)
    return event_dict


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """UTC ISO 8601 timestamp, e.g. 2025-01-15T10:30:45.123456Z."""
    event_dict["timestamp"] = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return event_dict


def add_service_metadata(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Service name, version and environment from LOGGING_* settings."""
    # Deferred: config imports nothing from here, but settings load lazily
    from devportal.config import get_settings

    config = get_settings().logging
    event_dict["service"] = config.service_name
    event_dict["version"] = config.service_version
    event_dict["environment"] = config.environment
    return event_dict


def redact_email(value: str) -> str:
    """user@example.com -> ***@example.com"""
    if "@" in value:
        return f"***@{value.split('@', 1)[1]}"
    return value


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Strip PII and credentials from string fields.

    Credential fields keep a short prefix (or are fully masked when short).
    Any field named *email or *email_address keeps only the domain.
    """
    for key, value in list(event_dict.items()):
        if not isinstance(value, str):
            continue

        lowered = key.lower()
        if lowered in CREDENTIAL_FIELDS:
            event_dict[key] = f"{value[:12]}***{value[-3:]}" if len(value) > 12 else "***REDACTED***"
        elif lowered.endswith(("email", "email_address")):
            event_dict[key] = redact_email(value)

    return event_dict


def add_exception_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """exception_type / exception_message fields for grouping failures."""
    exc_info = event_dict.get("exc_info")
    if isinstance(exc_info, BaseException):
        exc_type, exc_value = type(exc_info), exc_info
    elif isinstance(exc_info, tuple) and len(exc_info) == 3:
        exc_type, exc_value, _ = exc_info
    else:
        return event_dict

    event_dict["exception_type"] = exc_type.__name__ if exc_type else "Unknown"
    event_dict["exception_message"] = str(exc_value) if exc_value else ""
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True,
    colorized: bool = False,
) -> None:
    """
    Install the processor chain and route output through stdlib logging.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_output: JSONRenderer when True, ConsoleRenderer otherwise
        colorized: Colour console output (ignored for JSON)
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_request_context,
        add_service_metadata,
        redact_sensitive_fields,
        add_timestamp,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        add_exception_info,
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colorized))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def configure_logging_from_settings(config: "LoggingConfig") -> None:
    configure_logging(
        log_level=config.level,
        json_output=config.json_output,
        colorized=config.colorized,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class RequestContext:
    """
    Binds request_id, trace_id and user_sub for everything logged inside.

    Missing ids are generated. Nested contexts restore the outer values on
    exit.

        with RequestContext(user_sub=user_sub):
            await deleter.delete_account_by_user_id(user_sub)
    """

    def __init__(
        self,
        user_sub: str | None = None,
        trace_id: str | None = None,
        request_id: str | None = None,
    ):
        self.request_id = request_id or f"req_{uuid.uuid4().hex[:16]}"
        self.trace_id = trace_id or f"trace_{uuid.uuid4().hex[:16]}"
        self.user_sub = user_sub
        self._tokens = []

    def __enter__(self):
        self._tokens = [
            (request_id_var, request_id_var.set(self.request_id)),
            (trace_id_var, trace_id_var.set(self.trace_id)),
            (user_sub_var, user_sub_var.set(self.user_sub)),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens = []


class OperationContext:
    """
    Logs one "<operation> completed" or "<operation> failed" event with
    latency_ms. Exceptions propagate.
    """

    def __init__(self, operation: str, **fields):
        self.operation = operation
        self.fields = fields
        self.logger = get_logger(f"operation.{operation}")
        self.start_time = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"{self.operation} started", **self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        latency_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
        if exc_type is None:
            self.logger.info(f"{self.operation} completed", latency_ms=latency_ms, **self.fields)
        else:
            self.logger.error(
                f"{self.operation} failed",
                latency_ms=latency_ms,
                exception_type=exc_type.__name__,
                exc_info=(exc_type, exc_val, exc_tb),
                **self.fields,
            )
