"""API Client Library - async HTTP request engine with interceptors, retry and client presets."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .client import APIClient
from .factory import APIDocumentation, ClientFactory, default_presets
from .core.config import (
    ClientConfig,
    RequestConfig,
    InterceptorSet,
    PresetConfig,
    BearerAuth,
    ApiKeyAuth,
    BasicAuth,
)
from .core.auth import (
    TokenProvider,
    CredentialsProvider,
    StaticTokenProvider,
    EnvTokenProvider,
    StaticCredentialsProvider,
)
from .core.response import APIResponse
from .core.retry_engine import RetryEngine, RetryPolicy, ExponentialBackoff
from .core.exceptions import (
    APIClientException,
    ClientError,
    TransportError,
    TimeoutError,
    ConnectionError,
    ClientRequestError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    InvalidResponseError,
    ConfigurationError,
)
from .core.env_config import ClientSettings, PresetFileLoader
from .core.logging import LoggingConfig
from .interceptors import (
    request_id_interceptor,
    response_time_interceptor,
    error_logging_interceptor,
)

# Set up logging - add NullHandler to prevent "No handler found" warnings
# Users can configure logging themselves using logging.getLogger('api_client')
logging.getLogger('api_client').addHandler(logging.NullHandler())

# Version info - read from package metadata (single source of truth in pyproject.toml)
try:
    __version__ = version("api-client-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Core
    "APIClient",
    "ClientFactory",
    "APIDocumentation",
    "default_presets",

    # Config
    "ClientConfig",
    "RequestConfig",
    "InterceptorSet",
    "PresetConfig",
    "BearerAuth",
    "ApiKeyAuth",
    "BasicAuth",
    "ClientSettings",
    "PresetFileLoader",
    "LoggingConfig",

    # Auth
    "TokenProvider",
    "CredentialsProvider",
    "StaticTokenProvider",
    "EnvTokenProvider",
    "StaticCredentialsProvider",

    # Response / retry
    "APIResponse",
    "RetryEngine",
    "RetryPolicy",
    "ExponentialBackoff",

    # Interceptors
    "request_id_interceptor",
    "response_time_interceptor",
    "error_logging_interceptor",

    # Exceptions
    "APIClientException",
    "ClientError",
    "TransportError",
    "TimeoutError",
    "ConnectionError",
    "ClientRequestError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "InvalidResponseError",
    "ConfigurationError",
]
