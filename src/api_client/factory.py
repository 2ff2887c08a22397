# src/api_client/factory.py
"""
Фабрика API клиентов: именованные пресеты и кэш готовых клиентов.

Кэш ключуется парой (имя пресета, fingerprint overrides). Изменение
пресета (register_config / update_client_config) вытесняет его записи,
поэтому кэш никогда не отдаёт клиента со старой конфигурацией.
"""

import logging
import threading
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .client import APIClient
from .core.auth import TokenProvider
from .core.config import (
    AuthConfig,
    BasicAuth,
    BearerAuth,
    ClientConfig,
    InterceptorSet,
    PresetConfig,
    auth_from_dict,
    merge_headers,
)
from .core.env_config import ClientSettings, PresetFileLoader
from .core.exceptions import ConfigurationError
from .interceptors import default_interceptors
from .utils.fingerprint import fingerprint

logger = logging.getLogger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}
EXTERNAL_USER_AGENT = "api-client-core/1.0"

_OVERRIDE_FIELDS = frozenset(f.name for f in fields(ClientConfig))


@dataclass(frozen=True)
class APIDocumentation:
    """
    Описание внешнего API, из которого строится клиент.

    Example:
        >>> doc = APIDocumentation(
        ...     title="Billing",
        ...     version="2.1",
        ...     base_url="https://billing.example.com/v2",
        ...     authentication=BearerAuth(),
        ...     global_headers={"X-Client": "web"},
        ...     timeout_ms=8000,
        ... )
        >>> client = factory.create_client_from_documentation(doc)
    """
    title: str
    version: str
    base_url: str
    description: str = ""
    authentication: Optional[AuthConfig] = None
    global_headers: Mapping[str, str] = field(default_factory=dict)
    timeout_ms: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "APIDocumentation":
        """Построить из распарсенного JSON / YAML документа."""
        auth = data.get("authentication")
        return cls(
            title=data.get("title", ""),
            version=str(data.get("version", "")),
            base_url=data["base_url"],
            description=data.get("description", ""),
            authentication=auth_from_dict(auth) if isinstance(auth, Mapping) else auth,
            global_headers=dict(data.get("global_headers") or {}),
            timeout_ms=data.get("timeout_ms"),
        )


def default_presets(settings: ClientSettings) -> List[PresetConfig]:
    """
    Встроенные пресеты: default, auth, upload, external.

    | preset   | timeout_ms | max_retries | base delay | headers                |
    |----------|------------|-------------|------------|------------------------|
    | default  | 10000      | 3           | 1000       | JSON                   |
    | auth     | 15000      | 2           | 1500       | JSON + bearer          |
    | upload   | 60000      | 1           | 2000       | Accept only            |
    | external | 20000      | 2           | 2000       | JSON + User-Agent      |

    Таймауты и retry пресета default берутся из settings.
    """
    common = dict(
        interceptors=default_interceptors(),
        logging=settings.to_logging_config(),
    )
    return [
        PresetConfig(
            name="default",
            description="Default API client",
            config=ClientConfig(
                base_url=settings.base_url,
                timeout_ms=settings.timeout_ms,
                max_retries=settings.max_retries,
                retry_base_delay_ms=settings.retry_base_delay_ms,
                headers=JSON_HEADERS,
                **common,
            ),
        ),
        PresetConfig(
            name="auth",
            description="Client with bearer authentication",
            config=ClientConfig(
                base_url=settings.base_url,
                timeout_ms=15000,
                max_retries=2,
                retry_base_delay_ms=1500,
                headers=JSON_HEADERS,
                auth=BearerAuth(),
                token_provider=settings.token_provider(),
                **common,
            ),
        ),
        PresetConfig(
            name="upload",
            description="File upload client",
            config=ClientConfig(
                base_url=settings.base_url,
                timeout_ms=60000,
                max_retries=1,
                retry_base_delay_ms=2000,
                headers={"Accept": "application/json"},
                **common,
            ),
        ),
        PresetConfig(
            name="external",
            description="Third-party API client",
            config=ClientConfig(
                base_url="",
                timeout_ms=20000,
                max_retries=2,
                retry_base_delay_ms=2000,
                headers={**JSON_HEADERS, "User-Agent": EXTERNAL_USER_AGENT},
                **common,
            ),
        ),
    ]


class ClientFactory:
    """
    Реестр пресетов и кэш клиентов.

    Обычный объект, без глобального singleton: приложение создаёт
    фабрику там, где ей нужен жизненный цикл.

    Examples:
        >>> factory = ClientFactory()
        >>> client = factory.create_client()  # preset "default"
        >>> client is factory.create_client()
        True
        >>> billing = factory.create_client("default", {"base_url": "https://billing.example.com"})
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        presets: Optional[List[PresetConfig]] = None,
    ):
        """
        Args:
            settings: ClientSettings (по умолчанию читаются из окружения)
            presets: Начальные пресеты (по умолчанию default_presets(settings))
        """
        self._settings = settings if settings is not None else ClientSettings()
        self._token_provider: TokenProvider = self._settings.token_provider()
        self._lock = threading.Lock()
        self._presets: Dict[str, PresetConfig] = {}
        self._cache: Dict[Tuple[str, str], APIClient] = {}

        for preset in presets if presets is not None else default_presets(self._settings):
            self._presets[preset.name] = preset

    # ==================== Пресеты ====================

    def get_config(self, name: str) -> Optional[PresetConfig]:
        """Пресет по имени или None."""
        with self._lock:
            return self._presets.get(name)

    def list_configs(self) -> List[PresetConfig]:
        """Все пресеты в порядке регистрации."""
        with self._lock:
            return list(self._presets.values())

    def register_config(self, name: str, config: ClientConfig, description: str = "") -> PresetConfig:
        """
        Зарегистрировать (или заменить) пресет.

        Закэшированные клиенты этого пресета вытесняются.
        """
        preset = PresetConfig(name=name, description=description, config=config)
        with self._lock:
            self._presets[name] = preset
            self._evict(name)
        logger.debug("Registered preset %s", name)
        return preset

    def update_client_config(self, name: str, updates: Mapping[str, Any]) -> PresetConfig:
        """
        Частично обновить пресет.

        Заголовки объединяются (новые значения побеждают), остальные поля
        заменяются. Закэшированные клиенты пресета вытесняются; клиенты,
        уже выданные вызывающему коду, не меняются.

        Raises:
            ConfigurationError: неизвестный пресет или поле
        """
        with self._lock:
            existing = self._presets.get(name)
            if existing is None:
                raise ConfigurationError(f"Configuration {name!r} not found")

            changes = self._normalize(updates)
            if "headers" in changes:
                changes["headers"] = merge_headers(existing.config.headers, changes["headers"])
            preset = replace(existing, config=self._replace(existing.config, changes))

            self._presets[name] = preset
            self._evict(name)

        logger.debug("Updated preset %s: %s", name, sorted(updates))
        return preset

    def load_presets(self, path: Union[str, Path]) -> List[PresetConfig]:
        """
        Зарегистрировать пресеты из YAML / JSON файла.

        Пресеты из файла получают стандартные интерсепторы, а bearer /
        apiKey пресеты ещё и источник токена фабрики.
        """
        loaded = []
        for preset in PresetFileLoader.from_file(path):
            config = replace(
                preset.config,
                interceptors=default_interceptors().extend(preset.config.interceptors),
            )
            loaded.append(self.register_config(preset.name, config, preset.description))
        return loaded

    # ==================== Кэш ====================

    def clear_cache(self) -> None:
        """Удалить все закэшированные клиенты."""
        with self._lock:
            self._cache.clear()

    def clear_client_cache(self, name: str) -> None:
        """Удалить закэшированные клиенты одного пресета."""
        with self._lock:
            self._evict(name)

    def _evict(self, name: str) -> None:
        for key in [key for key in self._cache if key[0] == name]:
            del self._cache[key]

    # ==================== Создание клиентов ====================

    def create_client(self, name: str = "default", overrides: Optional[Mapping[str, Any]] = None) -> APIClient:
        """
        Клиент для пресета с overrides (из кэша, если уже создан).

        Args:
            name: Имя пресета
            overrides: Поля ClientConfig. headers объединяются с пресетом,
                interceptors дописываются после интерсепторов пресета,
                остальное заменяется.

        Raises:
            ConfigurationError: неизвестный пресет или поле override
        """
        key = (name, fingerprint(overrides))

        with self._lock:
            client = self._cache.get(key)
            if client is not None:
                return client

            preset = self._presets.get(name)
            if preset is None:
                raise ConfigurationError(
                    f"Unknown client configuration: {name!r}. "
                    f"Available: {', '.join(self._presets)}"
                )

            changes = self._normalize(overrides or {})
            if "headers" in changes:
                changes["headers"] = merge_headers(preset.config.headers, changes["headers"])
            if "interceptors" in changes:
                changes["interceptors"] = preset.config.interceptors.extend(changes["interceptors"])

            client = APIClient(config=self._replace(preset.config, changes))
            self._cache[key] = client

        logger.debug("Created client for preset %s", name)
        return client

    def create_authenticated_client(
        self,
        base_url: str,
        auth: Optional[AuthConfig] = None,
        token_provider: Optional[TokenProvider] = None,
        name: str = "auth",
    ) -> APIClient:
        """Клиент с аутентификацией (по умолчанию пресет auth)."""
        overrides: Dict[str, Any] = {"base_url": base_url}
        if auth is not None:
            overrides["auth"] = auth
        if token_provider is not None:
            overrides["token_provider"] = token_provider
        return self.create_client(name, overrides)

    def create_upload_client(self, base_url: str) -> APIClient:
        """Клиент для загрузки файлов (пресет upload)."""
        return self.create_client("upload", {"base_url": base_url})

    def create_external_client(
        self,
        base_url: str,
        headers: Optional[Mapping[str, str]] = None,
        auth: Optional[AuthConfig] = None,
        token_provider: Optional[TokenProvider] = None,
    ) -> APIClient:
        """Клиент для стороннего API (пресет external)."""
        overrides: Dict[str, Any] = {"base_url": base_url}
        if headers:
            overrides["headers"] = dict(headers)
        if auth is not None:
            overrides["auth"] = auth
        if token_provider is not None:
            overrides["token_provider"] = token_provider
        return self.create_client("external", overrides)

    def create_client_from_documentation(
        self,
        documentation: APIDocumentation,
        name: str = "default",
    ) -> APIClient:
        """Клиент по описанию API: base URL, таймаут, общие заголовки, auth."""
        overrides: Dict[str, Any] = {"base_url": documentation.base_url}
        if documentation.timeout_ms is not None:
            overrides["timeout_ms"] = documentation.timeout_ms
        if documentation.global_headers:
            overrides["headers"] = dict(documentation.global_headers)
        if documentation.authentication is not None:
            overrides["auth"] = documentation.authentication
        return self.create_client(name, overrides)

    # ==================== Helpers ====================

    @staticmethod
    def _normalize(overrides: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = set(overrides) - _OVERRIDE_FIELDS
        if unknown:
            raise ConfigurationError(
                f"Unknown config fields: {', '.join(sorted(unknown))}"
            )

        changes = dict(overrides)
        try:
            if isinstance(changes.get("auth"), Mapping):
                changes["auth"] = auth_from_dict(changes["auth"])
            if "interceptors" in changes:
                changes["interceptors"] = InterceptorSet.coerce(changes["interceptors"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e
        if "headers" in changes and changes["headers"] is None:
            changes["headers"] = {}
        return changes

    def _replace(self, config: ClientConfig, changes: Dict[str, Any]) -> ClientConfig:
        try:
            result = replace(config, **changes)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e

        # Auth без источника секрета получает источник токена фабрики
        if (
            result.auth is not None
            and not isinstance(result.auth, BasicAuth)
            and result.token_provider is None
        ):
            result = replace(result, token_provider=self._token_provider)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(presets={list(self._presets)}, cached={len(self._cache)})"
