"""
Иерархия исключений API Client.

Классификация:
- ClientError.is_retryable=True - можно ретраить (status 0, 429, 5xx)
- ClientError.is_retryable=False - остальные 4xx, невалидный ответ
- ConfigurationError - ошибка конфигурации, до сети дело не доходит
"""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    import httpx
    from .config import RequestConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class APIClientException(Exception):
    """Базовое исключение API Client."""

    def __init__(self, message: str, **kwargs):
        self.message = message
        super().__init__(message)


def is_retryable_status(status: int) -> bool:
    """
    Retryable iff transport failure (0), rate limit (429) or server error (5xx).

    Examples:
        >>> is_retryable_status(503)
        True
        >>> is_retryable_status(404)
        False
    """
    return status == 0 or status == 429 or status >= 500


class ClientError(APIClientException):
    """
    Ошибка запроса, которую видит вызывающий код.

    Args:
        message: Сообщение об ошибке
        status: HTTP статус (0 для транспортных ошибок)
        status_text: Reason phrase
        config: RequestConfig, с которым выполнялась попытка
        response: Сырой httpx.Response (если ответ был)
        code: Машинный код ошибки из тела ответа
        details: Структурированные детали из тела ответа

    Флаг is_retryable вычисляется один раз при создании
    и не меняется внутри retry цикла.
    """

    def __init__(
        self,
        message: str,
        status: int = 0,
        status_text: str = "",
        config: Optional['RequestConfig'] = None,
        response: Optional['httpx.Response'] = None,
        code: Optional[str] = None,
        details: Any = None,
    ):
        self.status = status
        self.status_text = status_text
        self.config = config
        self.response = response
        self.code = code
        self.details = details
        self.is_retryable = is_retryable_status(status)
        super().__init__(message)

    @property
    def is_network_error(self) -> bool:
        """Транспортная ошибка или 5xx."""
        return self.status == 0 or self.status >= 500

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    @property
    def is_auth_error(self) -> bool:
        return self.status in (401, 403)

    @property
    def url(self) -> Optional[str]:
        return self.config.url if self.config is not None else None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(status={self.status}, "
            f"message={self.message!r}, url={self.url!r})"
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ТРАНСПОРТНЫЕ ОШИБКИ (status=0, retryable)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportError(ClientError):
    """
    Ответа нет: DNS, соединение, таймаут.

    Примеры: connection refused, connection reset, network unreachable.
    """

    def __init__(
        self,
        message: str,
        config: Optional['RequestConfig'] = None,
        status_text: str = "Network Error",
    ):
        super().__init__(message, status=0, status_text=status_text, config=config)


class TimeoutError(TransportError):
    """
    Истёк дедлайн попытки, запрос отменён.

    Args:
        message: Сообщение об ошибке
        config: RequestConfig
        timeout_ms: Значение таймаута
    """

    def __init__(
        self,
        message: str,
        config: Optional['RequestConfig'] = None,
        timeout_ms: Optional[int] = None,
    ):
        self.timeout_ms = timeout_ms
        msg = message
        if timeout_ms:
            msg += f" (timeout: {timeout_ms}ms)"
        super().__init__(msg, config=config, status_text="Timeout")


class ConnectionError(TransportError):
    """Ошибка подключения."""
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTTP ОШИБКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ClientRequestError(ClientError):
    """4xx кроме 429 - никогда не ретраится."""
    pass


class BadRequestError(ClientRequestError):
    """400 Bad Request."""
    pass


class UnauthorizedError(ClientRequestError):
    """401 Unauthorized."""
    pass


class ForbiddenError(ClientRequestError):
    """403 Forbidden."""
    pass


class NotFoundError(ClientRequestError):
    """404 Not Found."""
    pass


class RateLimitedError(ClientError):
    """
    429 Rate Limit.

    Args:
        retry_after: Значение Retry-After header (сырое, секунды или HTTP-date)
    """

    def __init__(self, *args, retry_after: Optional[str] = None, **kwargs):
        self.retry_after = retry_after
        super().__init__(*args, **kwargs)


class ServerError(ClientError):
    """5xx ошибка сервера."""
    pass


class InvalidResponseError(ClientError):
    """
    Успешный статус, но тело не удалось разобрать.

    Примеры:
    - Битый JSON при Content-Type: application/json
    - Невалидная кодировка
    """
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# СПЕЦИАЛЬНЫЕ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ConfigurationError(APIClientException):
    """Ошибка конфигурации (неизвестный пресет, неверный override, пустой base_url)."""
    pass
