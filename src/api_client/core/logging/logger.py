"""
Structured logger for API Client.

Wraps a stdlib logger: keyword arguments become ``extra`` fields and are
masked with the sanitizer before they reach any handler.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from .config import LoggingConfig, LogLevel
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .formatters import get_formatter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_sensitive_data

# stdlib logger name -> (open instances, propagate value before the first one)
_owners: Dict[str, Tuple[int, bool]] = {}
_owners_lock = threading.Lock()


class APIClientLogger:
    """
    Logger with console/file handlers, correlation ID and secret masking.

    Example:
        >>> config = LoggingConfig.create(level="INFO", format="colored")
        >>> logger = APIClientLogger(config)
        >>> logger.info("Request started", method="GET", url="https://api.com")
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = "api_client"):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        level = self._get_level(self.config.level)
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        with _owners_lock:
            count, propagate = _owners.get(name, (0, self._logger.propagate))
            _owners[name] = (count + 1, propagate)
            self._logger.propagate = False

        filters = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)

        # Only these handlers belong to this instance; other handlers on the
        # same stdlib logger (user's, another instance's) are left alone
        self._handlers: List[logging.Handler] = []
        if self.config.enable_console:
            self._handlers.append(
                create_console_handler(level=level, formatter=formatter, filters=filters)
            )
        if self.config.enable_file and self.config.file_path:
            self._handlers.append(
                create_file_handler(
                    file_path=self.config.file_path,
                    level=level,
                    formatter=formatter,
                    max_bytes=self.config.max_bytes,
                    backup_count=self.config.backup_count,
                    filters=filters,
                )
            )
        for handler in self._handlers:
            self._logger.addHandler(handler)

    @staticmethod
    def _get_level(level: LogLevel) -> int:
        return getattr(logging, level.value)

    @property
    def handlers(self) -> List[logging.Handler]:
        """Handlers added by this instance (empty after close)."""
        return list(self._handlers)

    def _log(self, level: int, message: str, fields: dict, exc_info: bool = False) -> None:
        if self._closed:
            return
        self._logger.log(level, message, extra=mask_sensitive_data(fields), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log info message.

        Example:
            >>> logger.info("Request completed", status=200, elapsed_ms=150)
        """
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log with traceback. Call from an exception handler."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def close(self) -> None:
        """
        Flush, close and detach the handlers of this instance.

        Handlers added by anyone else stay on the stdlib logger.
        Idempotent: calling it twice is safe.
        """
        if self._closed:
            return

        for handler in self._handlers:
            try:
                handler.flush()
                handler.close()
            except (OSError, ValueError):
                # Stream already closed
                pass
            self._logger.removeHandler(handler)

        self._handlers = []
        with _owners_lock:
            count, propagate = _owners.pop(self.name)
            if count > 1:
                _owners[self.name] = (count - 1, propagate)
            else:
                self._logger.propagate = propagate
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


_default_logger: Optional[APIClientLogger] = None


def get_logger(config: Optional[LoggingConfig] = None) -> APIClientLogger:
    """
    Get the global logger, creating it on first call.

    ``config`` is only used when the logger does not exist yet.
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = APIClientLogger(config)

    return _default_logger


def configure_logging(config: LoggingConfig) -> APIClientLogger:
    """
    Replace the global logger with a newly configured one.

    Example:
        >>> logger = configure_logging(LoggingConfig.create(level="DEBUG", format="json"))
        >>> logger.info("Logger configured")
    """
    global _default_logger
    if _default_logger is not None:
        _default_logger.close()
    _default_logger = APIClientLogger(config)
    return _default_logger
