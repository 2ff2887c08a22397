"""
Pytest configuration and fixtures for api-client-core tests.
"""

import logging

import pytest

from api_client.core.config import ClientConfig, RequestConfig
from api_client.core.env_config import ClientSettings
from api_client.core.logging.config import LoggingConfig
from api_client.core.logging import logger as logger_module
from api_client.core.logging.filters import clear_correlation_id


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def client_config(base_url):
    """ClientConfig with zero backoff so retry tests run instantly."""
    return ClientConfig(base_url=base_url, retry_base_delay_ms=0)


@pytest.fixture
def request_config(base_url):
    """Fully resolved GET request config."""
    return RequestConfig("GET", f"{base_url}/users")


@pytest.fixture
def settings():
    """ClientSettings independent of the process environment and .env files."""
    return ClientSettings(
        _env_file=None,
        base_url="https://api.example.com",
        auth_token="test-token",
    )


@pytest.fixture
def logging_config():
    """LoggingConfig fixture for tests that need client logging."""
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=True,
        enable_file=False
    )


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "test.log"
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file)
    )


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Correlation id and api_client logger handlers do not leak between tests."""
    yield
    clear_correlation_id()
    logger_module._owners.clear()
    for name in list(logging.root.manager.loggerDict):
        if name == "api_client" or name.startswith("api_client."):
            logger = logging.getLogger(name)
            if not logger.propagate:
                for handler in logger.handlers[:]:
                    if isinstance(handler, logging.NullHandler):
                        continue
                    handler.close()
                    logger.removeHandler(handler)
                logger.propagate = True
