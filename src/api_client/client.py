# src/api_client/client.py
"""
Асинхронный API клиент на базе httpx.

Один вызов request() = один логический запрос: merge конфигурации,
интерсепторы, попытки с таймаутом, классификация ошибок и retry
с exponential backoff.
"""

import asyncio
import itertools
import time
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import urlparse

import httpx

from .core.auth import build_auth_headers
from .core.config import (
    ClientConfig,
    ErrorInterceptor,
    RequestConfig,
    RequestInterceptor,
    ResponseInterceptor,
    get_header,
    merge_headers,
)
from .core.error_classifier import classify_exception, classify_response
from .core.exceptions import ClientError, ConfigurationError, InvalidResponseError
from .core.interceptors import InterceptorPipeline
from .core.logging import APIClientLogger, correlation_scope
from .core.response import APIResponse, parse_body
from .core.retry_engine import RetryEngine
from .core.utils import build_url

# Исключения транспорта, которые классифицируются в ClientError.
# Остальное (ошибки программиста, CancelledError) пробрасывается как есть.
_TRANSPORT_EXCEPTIONS = (httpx.HTTPError, OSError, asyncio.TimeoutError)

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

# Суффикс имени логгера: у каждого клиента свой stdlib логгер
_logger_ids = itertools.count(1)


def _encode_body(config: RequestConfig) -> Tuple[Dict[str, str], Dict[str, Any]]:
    """
    Заголовки и kwargs тела для httpx.

    - files -> multipart (Content-Type с boundary выставит httpx),
      data при этом только mapping полей формы
    - str / bytes -> как есть
    - mapping + form Content-Type -> поля формы
    - остальное -> JSON (Content-Type: application/json, если не задан)
    """
    headers = dict(config.headers)
    data = config.data

    if config.files:
        for key in [k for k in headers if k.lower() == "content-type"]:
            del headers[key]
        if data is not None and not isinstance(data, Mapping):
            raise ConfigurationError(
                f"data must be a mapping of form fields when files are sent, got {type(data).__name__}"
            )
        return headers, {"files": dict(config.files), "data": dict(data) if data else None}

    if data is None:
        return headers, {}

    if isinstance(data, (str, bytes, bytearray)):
        return headers, {"content": data}

    content_type = (get_header(headers, "Content-Type") or "").lower()
    if isinstance(data, Mapping) and content_type.startswith(_FORM_CONTENT_TYPES):
        return headers, {"data": dict(data)}

    return headers, {"json": data}


class APIClient:
    """
    Асинхронный API клиент с interceptors, retry и таймаутами.

    Example:
        >>> async with APIClient("https://api.example.com") as client:
        ...     response = await client.get("/users", params={"page": 2})
        ...     print(response.data)

        >>> # Полная конфигурация
        >>> config = ClientConfig(
        ...     base_url="https://api.example.com",
        ...     timeout_ms=5000,
        ...     auth=BearerAuth(),
        ...     token_provider=EnvTokenProvider(),
        ... )
        >>> client = APIClient(config=config)
        >>> response = await client.request(RequestConfig("POST", "/users", data={"name": "alice"}))
        >>> await client.close()

    Features:
        - Конкурентные запросы на одном клиенте независимы
        - Exponential backoff для status 0, 429 и 5xx
        - Таймаут на каждую попытку (asyncio.wait_for)
        - Request / response / error интерсепторы (sync или async)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ):
        """
        Инициализация клиента.

        Args:
            base_url: Базовый URL для всех запросов
            config: ClientConfig (если указан, base_url и kwargs игнорируются)
            transport: httpx транспорт (например httpx.MockTransport в тестах)
            **kwargs: Поля ClientConfig (timeout_ms, max_retries, headers, auth, ...)
        """
        if config is None:
            config = ClientConfig(base_url=base_url or "", **kwargs)

        self._config = config
        self._pipeline = InterceptorPipeline(config.interceptors)
        self._transport = transport

        self._logger: Optional[APIClientLogger] = None
        if config.logging:
            domain = urlparse(config.base_url).netloc or "default"
            self._logger = APIClientLogger(
                config=config.logging,
                name=f"api_client.client.{domain}.{next(_logger_ids)}",
            )

        # httpx клиент создаётся лениво или при входе в context manager
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            # Таймаут контролирует asyncio.wait_for, а не httpx
            self._client = httpx.AsyncClient(timeout=None, transport=self._transport)
        return self._client

    async def __aenter__(self) -> "APIClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Закрыть httpx клиент и логгер."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._logger is not None:
            self._logger.close()

    # ==================== Конфигурация ====================

    @property
    def config(self) -> ClientConfig:
        """Текущая конфигурация (интерсепторы включают добавленные через add_*)."""
        return replace(self._config, interceptors=self._pipeline.snapshot())

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def add_request_interceptor(self, interceptor: RequestInterceptor) -> None:
        self._pipeline.add_request_interceptor(interceptor)

    def add_response_interceptor(self, interceptor: ResponseInterceptor) -> None:
        self._pipeline.add_response_interceptor(interceptor)

    def add_error_interceptor(self, interceptor: ErrorInterceptor) -> None:
        self._pipeline.add_error_interceptor(interceptor)

    def _merge(self, config: RequestConfig) -> RequestConfig:
        """
        Merge конфигурации вызова поверх дефолтов клиента.

        Заголовки: дефолты клиента -> заголовки вызова -> auth (последним).
        URL становится абсолютным, query параметры остаются в params.
        """
        defaults = self._config
        auth_headers = build_auth_headers(
            defaults.auth,
            token_provider=defaults.token_provider,
            credentials_provider=defaults.credentials_provider,
        )
        return replace(
            config,
            url=build_url(defaults.base_url, config.url),
            headers=merge_headers(defaults.headers, config.headers, auth_headers),
            timeout_ms=config.timeout_ms if config.timeout_ms is not None else defaults.timeout_ms,
            max_retries=config.max_retries if config.max_retries is not None else defaults.max_retries,
            retry_base_delay_ms=(
                config.retry_base_delay_ms
                if config.retry_base_delay_ms is not None
                else defaults.retry_base_delay_ms
            ),
        )

    # ==================== Выполнение ====================

    async def _send(self, config: RequestConfig) -> APIResponse:
        """
        Одна попытка: отправка под таймаутом и разбор ответа.

        Raises:
            ClientError: любая неудача попытки (уже классифицированная)
        """
        client = self._get_client()
        headers, body = _encode_body(config)
        request = client.build_request(
            config.method,
            build_url("", config.url, config.params),
            headers=headers,
            **body,
        )

        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                client.send(request), timeout=config.timeout_ms / 1000
            )
        except _TRANSPORT_EXCEPTIONS as e:
            raise classify_exception(e, config, timeout_ms=config.timeout_ms) from e
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        if not response.is_success:
            raise classify_response(response, config)

        try:
            data = parse_body(response)
        except (ValueError, UnicodeDecodeError) as e:
            raise InvalidResponseError(
                f"Failed to decode response body: {e}",
                status=response.status_code,
                status_text=response.reason_phrase,
                config=config,
                response=response,
            ) from e

        return APIResponse(
            data=data,
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=response.headers,
            config=config,
            elapsed_ms=elapsed_ms,
        )

    async def request(self, config: RequestConfig) -> APIResponse:
        """
        Выполнить запрос с интерсепторами и retry логикой.

        Args:
            config: RequestConfig вызова (None поля берутся из ClientConfig)

        Returns:
            APIResponse после response интерсепторов

        Raises:
            ClientError: финальная ошибка после error интерсепторов
            ConfigurationError: относительный URL без base_url
        """
        # X-Request-ID интерсептор выставляет correlation id, он живёт только до конца вызова
        with correlation_scope():
            return await self._request(config)

    async def _request(self, config: RequestConfig) -> APIResponse:
        merged = self._merge(config)
        attempt = 0
        started = time.perf_counter()

        if self._logger:
            self._logger.info(
                "Request started",
                method=merged.method,
                url=merged.url,
                timeout_ms=merged.timeout_ms,
                max_retries=merged.max_retries,
            )

        while True:
            # Интерсепторы получают одну и ту же базовую конфигурацию на каждой попытке
            attempt_config = await self._pipeline.apply_request(merged)

            try:
                response = await self._send(attempt_config)
            except ClientError as error:
                # Бюджет и базовая задержка берутся из конфигурации этой попытки
                retry_engine = RetryEngine(attempt_config.retry_base_delay_ms, self._config.retry_policy)
                decision = retry_engine.should_retry(error, attempt, attempt_config.max_retries)

                if decision.retry:
                    if self._logger:
                        self._logger.warning(
                            "Request error (will retry)",
                            method=attempt_config.method,
                            url=attempt_config.url,
                            error=error.message,
                            error_type=type(error).__name__,
                            attempt=attempt + 1,
                            max_retries=attempt_config.max_retries,
                            delay_ms=decision.delay_ms,
                        )
                    await asyncio.sleep(decision.delay_ms / 1000)
                    attempt += 1
                    continue

                if self._logger:
                    self._logger.error(
                        "Request failed",
                        method=attempt_config.method,
                        url=attempt_config.url,
                        error=error.message,
                        error_type=type(error).__name__,
                        status=error.status,
                        attempt=attempt + 1,
                        duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    )
                raise await self._pipeline.apply_error(error)

            if self._logger:
                self._logger.info(
                    "Request completed",
                    method=attempt_config.method,
                    url=attempt_config.url,
                    status=response.status,
                    elapsed_ms=response.elapsed_ms,
                    attempt=attempt + 1,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )
            return await self._pipeline.apply_response(response)

    # ==================== Удобные методы ====================

    async def get(self, url: str, params: Optional[Mapping[str, Any]] = None, **kwargs) -> APIResponse:
        """GET запрос."""
        return await self.request(RequestConfig("GET", url, params=params or {}, **kwargs))

    async def post(self, url: str, data: Any = None, **kwargs) -> APIResponse:
        """POST запрос."""
        return await self.request(RequestConfig("POST", url, data=data, **kwargs))

    async def put(self, url: str, data: Any = None, **kwargs) -> APIResponse:
        """PUT запрос."""
        return await self.request(RequestConfig("PUT", url, data=data, **kwargs))

    async def patch(self, url: str, data: Any = None, **kwargs) -> APIResponse:
        """PATCH запрос."""
        return await self.request(RequestConfig("PATCH", url, data=data, **kwargs))

    async def delete(self, url: str, **kwargs) -> APIResponse:
        """DELETE запрос."""
        return await self.request(RequestConfig("DELETE", url, **kwargs))

    # ==================== Диагностика ====================

    async def health_check(self, test_url: Optional[str] = None, timeout_ms: int = 5000) -> Dict[str, Any]:
        """
        Проверка здоровья клиента.

        Без test_url возвращает только конфигурацию. С test_url делает один
        HEAD запрос без retry и интерсепторов.

        Returns:
            Словарь с диагностической информацией
        """
        snapshot = self._pipeline.snapshot()
        result = {
            "healthy": True,
            "base_url": self._config.base_url,
            "timeout_ms": self._config.timeout_ms,
            "max_retries": self._config.max_retries,
            "interceptors": {
                "request": len(snapshot.request),
                "response": len(snapshot.response),
                "error": len(snapshot.error),
            },
            "connectivity": None,
        }

        if test_url:
            connectivity = {
                "url": test_url,
                "reachable": False,
                "response_time_ms": None,
                "status_code": None,
                "error": None,
            }
            config = self._merge(RequestConfig("HEAD", test_url, timeout_ms=timeout_ms))
            try:
                response = await self._send(config)
            except ClientError as e:
                if e.status:
                    connectivity["reachable"] = True
                    connectivity["status_code"] = e.status
                connectivity["error"] = e.message[:100]
                result["healthy"] = False
            else:
                connectivity["reachable"] = True
                connectivity["response_time_ms"] = response.elapsed_ms
                connectivity["status_code"] = response.status

            result["connectivity"] = connectivity

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self._config.base_url!r}, {self._pipeline!r})"
