# src/api_client/core/auth.py
"""
Построение заголовков аутентификации.

Секреты не хранятся в конфиге: токен и логин/пароль запрашиваются у
провайдера при каждом запросе, поэтому ротация токена не требует
пересоздания клиента.
"""

import base64
import os
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from .config import ApiKeyAuth, AuthConfig, BasicAuth, BearerAuth


class TokenProvider(ABC):
    """Источник токена для bearer / apiKey аутентификации."""

    @abstractmethod
    def get_token(self) -> Optional[str]:
        """Вернуть текущий токен (None или "" - токена нет)."""
        pass


class CredentialsProvider(ABC):
    """Источник логина и пароля для basic аутентификации."""

    @abstractmethod
    def get_credentials(self) -> Optional[Tuple[str, str]]:
        """Вернуть (username, password) или None."""
        pass


class StaticTokenProvider(TokenProvider):
    """
    Фиксированный токен, можно заменить через update_token.

    Example:
        >>> provider = StaticTokenProvider("abc")
        >>> provider.update_token("def")
        >>> provider.get_token()
        'def'
    """

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token

    def update_token(self, token: Optional[str]) -> None:
        """Обновляет токен аутентификации"""
        self._token = token

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(token={'***' if self._token else None})"


class EnvTokenProvider(TokenProvider):
    """
    Токен из переменной окружения, читается на каждый запрос.

    Example:
        >>> provider = EnvTokenProvider("API_CLIENT_AUTH_TOKEN")
    """

    def __init__(self, variable: str = "API_CLIENT_AUTH_TOKEN"):
        self.variable = variable

    def get_token(self) -> Optional[str]:
        return os.environ.get(self.variable)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.variable!r})"


class StaticCredentialsProvider(CredentialsProvider):
    """Фиксированная пара логин/пароль."""

    def __init__(self, username: str, password: str):
        self._credentials = (username, password)

    def get_credentials(self) -> Optional[Tuple[str, str]]:
        return self._credentials

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(username={self._credentials[0]!r})"


def build_auth_headers(
    auth: Optional[AuthConfig],
    token_provider: Optional[TokenProvider] = None,
    credentials_provider: Optional[CredentialsProvider] = None,
) -> Dict[str, str]:
    """
    Заголовок аутентификации для AuthConfig (ноль или одна запись).

    Args:
        auth: BearerAuth / ApiKeyAuth / BasicAuth или None
        token_provider: Источник токена
        credentials_provider: Источник логина и пароля

    Returns:
        {} если auth не задан или секрета нет, иначе один заголовок

    Examples:
        >>> build_auth_headers(BearerAuth(), StaticTokenProvider("t"))
        {'Authorization': 'Bearer t'}
        >>> build_auth_headers(ApiKeyAuth(header_name="X-Key"), StaticTokenProvider("k"))
        {'X-Key': 'k'}
    """
    if auth is None:
        return {}

    if isinstance(auth, BearerAuth):
        token = token_provider.get_token() if token_provider else None
        if not token:
            return {}
        return {"Authorization": f"{auth.token_prefix} {token}"}

    if isinstance(auth, ApiKeyAuth):
        token = token_provider.get_token() if token_provider else None
        if not token:
            return {}
        return {auth.header_name: token}

    if isinstance(auth, BasicAuth):
        credentials = credentials_provider.get_credentials() if credentials_provider else None
        if not credentials:
            return {}
        username, password = credentials
        encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {encoded}"}

    raise TypeError(f"Unsupported auth config: {auth!r}")
