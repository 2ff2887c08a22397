# src/api_client/interceptors/error_logging.py

import logging

from ..core.exceptions import ClientError

logger = logging.getLogger(__name__)


def error_logging_interceptor(error: ClientError) -> ClientError:
    """
    Залогировать финальную ошибку запроса (статус, метод, URL).

    Возвращает ту же ошибку без изменений.
    """
    method = error.config.method if error.config is not None else "-"
    logger.error(
        "API Error: %s %s %s: %s",
        error.status,
        method,
        error.url or "-",
        error.message,
        extra={"status": error.status, "error_type": type(error).__name__},
    )
    return error
