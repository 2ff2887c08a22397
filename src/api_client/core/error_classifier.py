# src/api_client/core/error_classifier.py
"""
Классификация неудачных попыток в типизированные ClientError.

Две точки входа:
- classify_exception: транспорт бросил исключение (ответа нет, status=0)
- classify_response: пришёл ответ со статусом >= 400

Retryability - чистая функция статуса, см. is_retryable_status.
"""

import asyncio
import logging
from typing import Optional

import httpx

from .config import RequestConfig
from .exceptions import (
    BadRequestError,
    ClientError,
    ClientRequestError,
    ConnectionError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    TimeoutError,
    TransportError,
    UnauthorizedError,
)
from .response import parse_error_body

logger = logging.getLogger(__name__)

_STATUS_ERRORS = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
}


def classify_exception(
    exc: BaseException,
    config: RequestConfig,
    timeout_ms: Optional[int] = None,
) -> ClientError:
    """
    Конвертировать исключение транспорта в ClientError со status=0.

    Args:
        exc: Исключение из httpx / asyncio
        config: RequestConfig попытки
        timeout_ms: Таймаут попытки (для сообщения)

    Returns:
        TimeoutError, ConnectionError или TransportError

    Examples:
        >>> err = classify_exception(httpx.ConnectError("refused"), config)
        >>> assert isinstance(err, ConnectionError)
        >>> assert err.is_retryable
    """
    if isinstance(exc, ClientError):
        return exc

    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return TimeoutError("Request timeout", config, timeout_ms=timeout_ms)

    if isinstance(exc, (httpx.ConnectError, httpx.NetworkError)):
        return ConnectionError(str(exc) or "Connection error", config)

    # Неизвестная ошибка транспорта - оборачиваем, наружу httpx не выпускаем
    logger.debug("Unclassified transport failure: %r", exc)
    return TransportError(str(exc) or type(exc).__name__, config)


def classify_response(response: httpx.Response, config: RequestConfig) -> ClientError:
    """
    Построить ClientError из ответа со статусом >= 400.

    Тело разбирается защищённо: JSON даёт message/code/details,
    иначе используется текст или reason phrase.

    Args:
        response: httpx.Response
        config: RequestConfig попытки

    Returns:
        Подкласс ClientError по статус коду
    """
    status = response.status_code
    body = parse_error_body(response)
    kwargs = dict(
        status=status,
        status_text=response.reason_phrase,
        config=config,
        response=response,
        code=body["code"],
        details=body["details"],
    )
    message = body["message"] or f"HTTP {status}"

    if status == 429:
        return RateLimitedError(
            message, retry_after=response.headers.get("Retry-After"), **kwargs
        )
    if status >= 500:
        return ServerError(message, **kwargs)
    if status in _STATUS_ERRORS:
        return _STATUS_ERRORS[status](message, **kwargs)
    if 400 <= status < 500:
        return ClientRequestError(message, **kwargs)
    return ClientError(message, **kwargs)
