# src/api_client/core/interceptors.py
"""
Конвейер интерсепторов запроса, ответа и ошибки.

Интерсепторы выполняются последовательно в порядке регистрации:
каждый следующий получает результат предыдущего. Интерсептор может быть
обычной функцией или корутиной.

Исключение внутри интерсептора не глотается: оно прерывает весь вызов.
"""

import inspect
import threading
from typing import Any, Callable, Tuple

from .config import (
    ErrorInterceptor,
    InterceptorSet,
    RequestConfig,
    RequestInterceptor,
    ResponseInterceptor,
)
from .exceptions import ClientError
from .response import APIResponse


async def _call(interceptor: Callable[[Any], Any], value: Any) -> Any:
    result = interceptor(value)
    if inspect.isawaitable(result):
        result = await result
    return result


def _check_result(interceptor: Callable, result: Any, expected: type) -> Any:
    if not isinstance(result, expected):
        name = getattr(interceptor, '__qualname__', repr(interceptor))
        raise TypeError(
            f"Interceptor {name} returned {type(result).__name__}, "
            f"expected {expected.__name__}"
        )
    return result


class InterceptorPipeline:
    """
    Три независимых упорядоченных списка интерсепторов.

    Списки хранятся как кортежи и заменяются целиком при регистрации
    (copy-on-write под lock). Запрос, который уже выполняется, работает
    со снимком, взятым в начале попытки, поэтому регистрация во время
    трафика безопасна и не влияет на текущую попытку.

    Example:
        >>> pipeline = InterceptorPipeline(InterceptorSet(request=(request_id_interceptor,)))
        >>> pipeline.add_request_interceptor(lambda cfg: cfg.with_headers({"X-Trace": "1"}))
        >>> config = await pipeline.apply_request(config)
    """

    def __init__(self, interceptors: InterceptorSet = None):
        interceptors = interceptors or InterceptorSet()
        self._lock = threading.Lock()
        self._request: Tuple[RequestInterceptor, ...] = interceptors.request
        self._response: Tuple[ResponseInterceptor, ...] = interceptors.response
        self._error: Tuple[ErrorInterceptor, ...] = interceptors.error

    # ==================== Регистрация ====================

    def add_request_interceptor(self, interceptor: RequestInterceptor) -> None:
        """Добавить интерсептор запроса в конец списка."""
        with self._lock:
            self._request = self._request + (interceptor,)

    def add_response_interceptor(self, interceptor: ResponseInterceptor) -> None:
        """Добавить интерсептор ответа в конец списка."""
        with self._lock:
            self._response = self._response + (interceptor,)

    def add_error_interceptor(self, interceptor: ErrorInterceptor) -> None:
        """Добавить интерсептор ошибки в конец списка."""
        with self._lock:
            self._error = self._error + (interceptor,)

    def snapshot(self) -> InterceptorSet:
        """Текущее состояние как immutable InterceptorSet."""
        with self._lock:
            return InterceptorSet(self._request, self._response, self._error)

    # ==================== Применение ====================

    async def apply_request(self, config: RequestConfig) -> RequestConfig:
        for interceptor in self._request:
            config = _check_result(interceptor, await _call(interceptor, config), RequestConfig)
        return config

    async def apply_response(self, response: APIResponse) -> APIResponse:
        for interceptor in self._response:
            response = _check_result(interceptor, await _call(interceptor, response), APIResponse)
        return response

    async def apply_error(self, error: ClientError) -> ClientError:
        for interceptor in self._error:
            error = _check_result(interceptor, await _call(interceptor, error), ClientError)
        return error

    def __len__(self) -> int:
        return len(self._request) + len(self._response) + len(self._error)

    def __repr__(self) -> str:
        return (
            f"InterceptorPipeline(request={len(self._request)}, "
            f"response={len(self._response)}, error={len(self._error)})"
        )
