"""
Система конфигурации для API Client.

Все конфиги immutable (frozen dataclasses): клиент читает их из
нескольких конкурирующих запросов одновременно и никогда не меняет.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    ClassVar,
    Dict,
    Iterable,
    Mapping,
    Optional,
    Tuple,
    Union,
)

if TYPE_CHECKING:
    from .auth import CredentialsProvider, TokenProvider
    from .logging import LoggingConfig
    from .response import APIResponse
    from .retry_engine import RetryPolicy
    from .exceptions import ClientError

DEFAULT_TIMEOUT_MS = 10000
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY_MS = 1000

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HEADERS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _freeze_dict(d: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """
    Convert mapping to immutable MappingProxyType (insertion order preserved).

    Example:
        >>> frozen = _freeze_dict({"X-API-Key": "secret"})
        >>> frozen["X-New"] = "value"  # Raises TypeError
    """
    if d is None:
        return MappingProxyType({})
    return MappingProxyType(dict(d))


def merge_headers(*layers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """
    Объединить слои заголовков, более поздний слой побеждает.

    Ключи сравниваются без учёта регистра: "content-type" из вызова
    заменяет "Content-Type" из дефолтов, а не дублирует его.

    Examples:
        >>> merge_headers({"Accept": "a"}, {"accept": "b", "X-Id": "1"})
        {'accept': 'b', 'X-Id': '1'}
    """
    merged: Dict[str, str] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            for existing in [k for k in merged if k.lower() == key.lower()]:
                del merged[existing]
            merged[key] = value
    return merged


def get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# AUTH CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class BearerAuth:
    """
    Bearer аутентификация: ``Authorization: <token_prefix> <token>``.

    Сам токен здесь не хранится, он берётся из TokenProvider в момент запроса.
    """
    type: ClassVar[str] = "bearer"
    token_prefix: str = "Bearer"


@dataclass(frozen=True)
class ApiKeyAuth:
    """API key аутентификация: ``<header_name>: <token>``."""
    type: ClassVar[str] = "apiKey"
    header_name: str = "X-API-Key"

    def __post_init__(self):
        if not self.header_name:
            raise ValueError("header_name must be non-empty")


@dataclass(frozen=True)
class BasicAuth:
    """Basic аутентификация, логин и пароль берутся из CredentialsProvider."""
    type: ClassVar[str] = "basic"


AuthConfig = Union[BearerAuth, ApiKeyAuth, BasicAuth]

AUTH_TYPES: Mapping[str, type] = MappingProxyType({
    BearerAuth.type: BearerAuth,
    ApiKeyAuth.type: ApiKeyAuth,
    BasicAuth.type: BasicAuth,
})


def auth_from_dict(data: Mapping[str, Any]) -> AuthConfig:
    """
    Построить AuthConfig из словаря (файлы конфигурации, документация API).

    Examples:
        >>> auth_from_dict({"type": "apiKey", "header_name": "X-Token"})
        ApiKeyAuth(header_name='X-Token')
    """
    params = dict(data)
    auth_type = params.pop("type", None)
    auth_cls = AUTH_TYPES.get(auth_type)
    if auth_cls is None:
        raise ValueError(
            f"Unknown auth type: {auth_type!r}. "
            f"Available: {', '.join(AUTH_TYPES)}"
        )
    return auth_cls(**params)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# INTERCEPTORS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

RequestInterceptor = Callable[
    ["RequestConfig"], Union["RequestConfig", Awaitable["RequestConfig"]]
]
ResponseInterceptor = Callable[
    ["APIResponse"], Union["APIResponse", Awaitable["APIResponse"]]
]
ErrorInterceptor = Callable[
    ["ClientError"], Union["ClientError", Awaitable["ClientError"]]
]


@dataclass(frozen=True)
class InterceptorSet:
    """
    Упорядоченные списки интерсепторов (request / response / error).

    Порядок в кортеже = порядок выполнения.

    Examples:
        >>> base = InterceptorSet(request=(request_id_interceptor,))
        >>> base.extend(InterceptorSet(request=(my_interceptor,))).request
        (request_id_interceptor, my_interceptor)
    """
    request: Tuple[RequestInterceptor, ...] = ()
    response: Tuple[ResponseInterceptor, ...] = ()
    error: Tuple[ErrorInterceptor, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'request', tuple(self.request))
        object.__setattr__(self, 'response', tuple(self.response))
        object.__setattr__(self, 'error', tuple(self.error))

    @classmethod
    def coerce(cls, value: Union["InterceptorSet", Mapping[str, Iterable], None]) -> "InterceptorSet":
        """Accept an InterceptorSet, a {"request": [...], ...} mapping or None."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        unknown = set(value) - {"request", "response", "error"}
        if unknown:
            raise ValueError(f"Unknown interceptor kinds: {sorted(unknown)}")
        return cls(
            request=tuple(value.get("request", ())),
            response=tuple(value.get("response", ())),
            error=tuple(value.get("error", ())),
        )

    def extend(self, other: "InterceptorSet") -> "InterceptorSet":
        """Новый набор: сначала свои интерсепторы, затем интерсепторы other."""
        return InterceptorSet(
            request=self.request + other.request,
            response=self.response + other.response,
            error=self.error + other.error,
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# REQUEST CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _validate_limits(timeout_ms, max_retries, retry_base_delay_ms) -> None:
    if timeout_ms is not None and timeout_ms <= 0:
        raise ValueError("timeout_ms must be positive")
    if max_retries is not None and max_retries < 0:
        raise ValueError("max_retries must be non-negative")
    if retry_base_delay_ms is not None and retry_base_delay_ms < 0:
        raise ValueError("retry_base_delay_ms must be non-negative")


@dataclass(frozen=True)
class RequestConfig:
    """
    Конфигурация одного логического запроса.

    Числовые поля со значением None означают "взять из ClientConfig".
    После merge в клиенте все поля заполнены, url абсолютный,
    заголовки включают auth.

    Args:
        method: HTTP метод
        url: Относительный путь или абсолютный URL
        headers: Заголовки вызова (перекрывают дефолтные)
        params: Query параметры (None значения пропускаются)
        data: Тело запроса
        files: Multipart файлы (Content-Type выставит httpx)
        timeout_ms: Таймаут одной попытки (мс)
        max_retries: Количество повторов (не включая первую попытку)
        retry_base_delay_ms: Базовая задержка backoff (мс)

    Examples:
        >>> RequestConfig("GET", "/users", params={"page": 2})
        >>> RequestConfig("POST", "/users", data={"name": "alice"}, max_retries=0)
    """
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    data: Any = None
    files: Optional[Mapping[str, Any]] = None
    timeout_ms: Optional[int] = None
    max_retries: Optional[int] = None
    retry_base_delay_ms: Optional[int] = None

    def __post_init__(self):
        """Normalize method and freeze mutable dicts."""
        object.__setattr__(self, 'method', self.method.upper())
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', _freeze_dict(self.headers))
        if not isinstance(self.params, MappingProxyType):
            object.__setattr__(self, 'params', _freeze_dict(self.params))
        _validate_limits(self.timeout_ms, self.max_retries, self.retry_base_delay_ms)

    def with_headers(self, headers: Mapping[str, str]) -> 'RequestConfig':
        """
        Новый конфиг с дополнительными заголовками (поверх существующих).

        Удобно для интерсепторов:
            >>> return config.with_headers({"X-Trace": "1"})
        """
        return replace(self, headers=merge_headers(self.headers, headers))

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ClientConfig:
    """
    Главная конфигурация APIClient.

    Args:
        base_url: Базовый URL (может быть пустым, тогда нужны абсолютные URL)
        timeout_ms: Таймаут попытки по умолчанию
        max_retries: Количество повторов по умолчанию
        retry_base_delay_ms: Базовая задержка backoff по умолчанию
        headers: Дефолтные заголовки
        auth: AuthConfig (bearer / apiKey / basic)
        interceptors: InterceptorSet
        token_provider: Источник токена для bearer / apiKey
        credentials_provider: Источник логина и пароля для basic
        retry_policy: Стратегия retry (по умолчанию ExponentialBackoff)
        logging: Конфигурация логирования (None = без логирования)

    Examples:
        >>> config = ClientConfig(base_url="https://api.example.com")
        >>> config = ClientConfig(
        ...     base_url="https://api.example.com",
        ...     auth=BearerAuth(),
        ...     token_provider=StaticTokenProvider("secret"),
        ... )
    """
    base_url: str = ""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay_ms: int = DEFAULT_RETRY_BASE_DELAY_MS
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    auth: Optional[AuthConfig] = None
    interceptors: InterceptorSet = field(default_factory=InterceptorSet)
    token_provider: Optional['TokenProvider'] = None
    credentials_provider: Optional['CredentialsProvider'] = None
    retry_policy: Optional['RetryPolicy'] = None
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Normalize base_url, freeze headers, coerce interceptors."""
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', _freeze_dict(self.headers))
        if not isinstance(self.interceptors, InterceptorSet):
            object.__setattr__(self, 'interceptors', InterceptorSet.coerce(self.interceptors))
        if self.base_url is None:
            object.__setattr__(self, 'base_url', "")
        _validate_limits(self.timeout_ms, self.max_retries, self.retry_base_delay_ms)

    def with_headers(self, headers: Mapping[str, str]) -> 'ClientConfig':
        """
        Новый конфиг с дополнительными заголовками.

        Example:
            >>> new_config = config.with_headers({"X-API-Version": "2"})
        """
        return replace(self, headers=merge_headers(self.headers, headers))

    def with_interceptors(self, interceptors: InterceptorSet) -> 'ClientConfig':
        """Новый конфиг, интерсепторы дописаны в конец существующих."""
        return replace(self, interceptors=self.interceptors.extend(interceptors))

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PRESETS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class PresetConfig:
    """
    Именованный пресет фабрики клиентов.

    Example:
        >>> PresetConfig("billing", "Billing API", ClientConfig(base_url="https://billing.example.com"))
    """
    name: str
    description: str
    config: ClientConfig

    def __post_init__(self):
        if not self.name:
            raise ValueError("Preset name must be non-empty")
