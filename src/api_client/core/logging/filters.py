"""
Log filters for adding context to records.

The correlation ID lives in a ContextVar, so every asyncio task (and
therefore every in-flight request) sees its own value.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("api_client_correlation_id", default=None)


def set_correlation_id(correlation_id: str) -> None:
    """
    Set correlation ID for the current context.

    Example:
        >>> set_correlation_id("req_1700000000000_ab12cd34e")
        >>> logger.info("Processing request")  # Will include correlation_id
    """
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Correlation ID for the current context, or None."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Reset correlation ID for the current context."""
    _correlation_id.set(None)


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[None]:
    """
    Restore the previous correlation ID on exit.

    IDs set inside the block (for example by the X-Request-ID interceptor)
    do not leak into log lines written after it.

    Example:
        >>> with correlation_scope("req-1"):
        ...     logger.info("inside")   # correlation_id=req-1
        >>> logger.info("outside")      # previous value
    """
    token = _correlation_id.set(correlation_id if correlation_id is not None else _correlation_id.get())
    try:
        yield
    finally:
        _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """
    Filter that adds ``correlation_id`` to log records.

    Example:
        >>> handler.addFilter(CorrelationIdFilter())
        >>> set_correlation_id("req-12345")
        >>> logger.info("Request started")  # correlation_id=req-12345
    """

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id and not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Filter that adds static fields (service, environment, ...) to all records.

    Example:
        >>> handler.addFilter(ExtraFieldsFilter({"service": "billing"}))
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = extra_fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
