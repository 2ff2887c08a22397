"""
Environment settings for API Client.

Feeds preset defaults (base URL, timeouts, retries), logging and the
auth token source of ClientFactory.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..auth import EnvTokenProvider, StaticTokenProvider, TokenProvider
from ..config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_BASE_DELAY_MS, DEFAULT_TIMEOUT_MS
from ..logging import LoggingConfig

DEFAULT_BASE_URL = "http://localhost:3000/api"
AUTH_TOKEN_ENV = "API_CLIENT_AUTH_TOKEN"


class ClientSettings(BaseSettings):
    """
    API Client configuration from environment variables.

    Reads from:
    1. Environment variables (API_CLIENT_*)
    2. .env file
    3. Defaults

    Example .env file:
        API_CLIENT_BASE_URL=https://api.example.com
        API_CLIENT_TIMEOUT_MS=5000
        API_CLIENT_MAX_RETRIES=2
        API_CLIENT_LOG_ENABLED=true
        API_CLIENT_LOG_LEVEL=DEBUG
        API_CLIENT_AUTH_TOKEN=secret-token

    Usage:
        >>> settings = ClientSettings()
        >>> settings.base_url
        'http://localhost:3000/api'
    """

    model_config = SettingsConfigDict(
        env_prefix='API_CLIENT_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Base URL of the default presets")

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_base_delay_ms: int = Field(default=DEFAULT_RETRY_BASE_DELAY_MS, ge=0)

    # Logging (disabled unless API_CLIENT_LOG_ENABLED=true)
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_file_path: Optional[str] = None

    # Secrets (will be masked in logs)
    auth_token: Optional[str] = Field(default=None, description="Token for bearer presets")

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')

    def to_logging_config(self) -> Optional[LoggingConfig]:
        """LoggingConfig if logging is enabled, else None."""
        if not self.log_enabled:
            return None

        return LoggingConfig.create(
            level=self.log_level,
            format=self.log_format,
            enable_file=bool(self.log_file_path),
            file_path=self.log_file_path,
        )

    def token_provider(self) -> TokenProvider:
        """
        Token source for bearer presets.

        A token given explicitly (or via .env) is static; otherwise the
        environment variable is re-read on every request.
        """
        if self.auth_token:
            return StaticTokenProvider(self.auth_token)
        return EnvTokenProvider(AUTH_TOKEN_ENV)
