"""Correlation ID logging context for tracing one booking attempt.

Every log line emitted while planning, persisting or compensating a
reservation carries the same request id, so a failed multi-service
booking can be followed across planner, transaction and store.

Usage:
    from appointment_engine.logging_context import get_request_logger, set_request_id

    set_request_id("REQ-abc123")
    logger = get_request_logger(__name__)
    logger.info("Planning reservation")  # record.request_id == "REQ-abc123"
"""

import logging
import uuid
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("request_id", default="NO_REQUEST_ID")


def new_request_id() -> str:
    """Generate and activate a fresh request id for the current context."""
    request_id = f"REQ-{uuid.uuid4().hex[:8]}"
    _request_id.set(request_id)
    return request_id


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current thread or async context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
