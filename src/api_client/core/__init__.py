"""Core API Client модули."""

from .config import (
    ApiKeyAuth,
    AuthConfig,
    BasicAuth,
    BearerAuth,
    ClientConfig,
    InterceptorSet,
    PresetConfig,
    RequestConfig,
    auth_from_dict,
    merge_headers,
)
from .auth import (
    CredentialsProvider,
    EnvTokenProvider,
    StaticCredentialsProvider,
    StaticTokenProvider,
    TokenProvider,
    build_auth_headers,
)
from .response import APIResponse
from .retry_engine import ExponentialBackoff, RetryDecision, RetryEngine, RetryPolicy
from .interceptors import InterceptorPipeline
from .error_classifier import classify_exception, classify_response
from .exceptions import (
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
    is_retryable_status,
)

__all__ = [
    # Config
    "ClientConfig",
    "RequestConfig",
    "InterceptorSet",
    "PresetConfig",
    "AuthConfig",
    "BearerAuth",
    "ApiKeyAuth",
    "BasicAuth",
    "auth_from_dict",
    "merge_headers",
    # Auth
    "TokenProvider",
    "CredentialsProvider",
    "StaticTokenProvider",
    "EnvTokenProvider",
    "StaticCredentialsProvider",
    "build_auth_headers",
    # Response
    "APIResponse",
    # Retry
    "RetryEngine",
    "RetryPolicy",
    "RetryDecision",
    "ExponentialBackoff",
    # Interceptors
    "InterceptorPipeline",
    # Classification
    "classify_exception",
    "classify_response",
    "is_retryable_status",
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
