"""
Tests for ClientFactory: presets, overrides and the client cache.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from api_client.client import APIClient
from api_client.core.auth import StaticTokenProvider
from api_client.core.config import ApiKeyAuth, BasicAuth, BearerAuth, ClientConfig, PresetConfig
from api_client.core.env_config import ClientSettings
from api_client.core.exceptions import ConfigurationError
from api_client.factory import (
    EXTERNAL_USER_AGENT,
    APIDocumentation,
    ClientFactory,
    default_presets,
)
from api_client.interceptors import (
    error_logging_interceptor,
    request_id_interceptor,
    response_time_interceptor,
)


@pytest.fixture
def factory(settings):
    return ClientFactory(settings=settings)


def _noop(value):
    return value


class TestPresets:
    """Встроенные пресеты."""

    @pytest.mark.parametrize("name,timeout_ms,max_retries,base_delay", [
        ("default", 10000, 3, 1000),
        ("auth", 15000, 2, 1500),
        ("upload", 60000, 1, 2000),
        ("external", 20000, 2, 2000),
    ])
    def test_preset_values(self, factory, name, timeout_ms, max_retries, base_delay):
        config = factory.get_config(name).config

        assert config.timeout_ms == timeout_ms
        assert config.max_retries == max_retries
        assert config.retry_base_delay_ms == base_delay

    def test_default_headers(self, factory):
        headers = factory.get_config("default").config.headers
        assert headers == {"Content-Type": "application/json", "Accept": "application/json"}

    def test_auth_preset(self, factory):
        config = factory.get_config("auth").config

        assert config.auth == BearerAuth()
        assert config.token_provider.get_token() == "test-token"

    def test_upload_preset_has_no_content_type(self, factory):
        assert factory.get_config("upload").config.headers == {"Accept": "application/json"}

    def test_external_preset(self, factory):
        config = factory.get_config("external").config

        assert config.base_url == ""
        assert config.headers["User-Agent"] == EXTERNAL_USER_AGENT

    def test_default_interceptors_attached(self, factory):
        for preset in factory.list_configs():
            interceptors = preset.config.interceptors
            assert interceptors.request == (request_id_interceptor,)
            assert interceptors.response == (response_time_interceptor,)
            assert interceptors.error == (error_logging_interceptor,)

    def test_base_url_from_settings(self, factory):
        assert factory.get_config("default").config.base_url == "https://api.example.com"

    def test_settings_drive_default_preset(self):
        settings = ClientSettings(_env_file=None, timeout_ms=3000, max_retries=0)
        [default, *_] = default_presets(settings)

        assert default.name == "default"
        assert default.config.timeout_ms == 3000
        assert default.config.max_retries == 0

    def test_logging_from_settings(self):
        settings = ClientSettings(_env_file=None, log_enabled=True, log_level="DEBUG")
        for preset in default_presets(settings):
            assert preset.config.logging is not None

    def test_list_configs(self, factory):
        assert [p.name for p in factory.list_configs()] == ["default", "auth", "upload", "external"]

    def test_get_unknown_config(self, factory):
        assert factory.get_config("missing") is None

    def test_custom_initial_presets(self, settings):
        preset = PresetConfig(name="only", description="", config=ClientConfig(base_url="https://a.example.com"))
        factory = ClientFactory(settings=settings, presets=[preset])

        assert factory.list_configs() == [preset]
        with pytest.raises(ConfigurationError, match="Unknown client configuration"):
            factory.create_client()


class TestCreateClient:
    """create_client и кэш."""

    def test_returns_api_client(self, factory):
        client = factory.create_client()

        assert isinstance(client, APIClient)
        assert client.base_url == "https://api.example.com"

    def test_cached_identity(self, factory):
        assert factory.create_client() is factory.create_client("default")
        assert factory.create_client("default", {}) is factory.create_client("default", None)

    def test_override_key_order_irrelevant(self, factory):
        a = factory.create_client("default", {"timeout_ms": 1000, "max_retries": 1})
        b = factory.create_client("default", {"max_retries": 1, "timeout_ms": 1000})
        assert a is b

    def test_distinct_overrides_distinct_clients(self, factory):
        a = factory.create_client("default", {"timeout_ms": 1000})
        b = factory.create_client("default", {"timeout_ms": 2000})

        assert a is not b
        assert a.config.timeout_ms == 1000
        assert b.config.timeout_ms == 2000

    def test_distinct_presets_distinct_clients(self, factory):
        assert factory.create_client("default") is not factory.create_client("upload")

    def test_headers_merged(self, factory):
        client = factory.create_client("default", {"headers": {"X-Tenant": "acme", "accept": "text/plain"}})
        headers = dict(client.config.headers)

        assert headers["X-Tenant"] == "acme"
        assert headers["accept"] == "text/plain"
        assert "Accept" not in headers
        assert headers["Content-Type"] == "application/json"

    def test_interceptors_appended(self, factory):
        client = factory.create_client("default", {"interceptors": {"request": [_noop], "error": [_noop]}})
        interceptors = client.config.interceptors

        assert interceptors.request == (request_id_interceptor, _noop)
        assert interceptors.response == (response_time_interceptor,)
        assert interceptors.error == (error_logging_interceptor, _noop)

    def test_scalar_overrides_replace(self, factory):
        client = factory.create_client("auth", {"base_url": "https://auth.example.com", "max_retries": 0})

        assert client.base_url == "https://auth.example.com"
        assert client.config.max_retries == 0
        assert client.config.timeout_ms == 15000

    def test_auth_override_from_dict(self, factory):
        client = factory.create_client("default", {"auth": {"type": "apiKey", "header_name": "X-Key"}})

        assert client.config.auth == ApiKeyAuth(header_name="X-Key")
        assert client.config.token_provider is not None

    def test_unknown_preset(self, factory):
        with pytest.raises(ConfigurationError, match="Unknown client configuration"):
            factory.create_client("missing")

    def test_unknown_override_field(self, factory):
        with pytest.raises(ConfigurationError, match="Unknown config fields: timeout"):
            factory.create_client("default", {"timeout": 5})

    @pytest.mark.parametrize("overrides", [
        {"timeout_ms": 0},
        {"max_retries": -1},
        {"auth": {"type": "oauth"}},
        {"interceptors": {"before": []}},
    ])
    def test_invalid_override_values(self, factory, overrides):
        with pytest.raises(ConfigurationError):
            factory.create_client("default", overrides)

    def test_invalid_overrides_not_cached(self, factory):
        with pytest.raises(ConfigurationError):
            factory.create_client("default", {"timeout_ms": 0})
        assert factory._cache == {}

    def test_concurrent_creation_single_instance(self, factory):
        barrier = threading.Barrier(16)

        def create():
            barrier.wait()
            return factory.create_client("default", {"headers": {"X-Tenant": "acme"}})

        with ThreadPoolExecutor(max_workers=16) as executor:
            clients = list(executor.map(lambda _: create(), range(16)))

        assert all(client is clients[0] for client in clients)


class TestUpdatesAndEviction:
    """update_client_config / register_config / clear_*."""

    def test_update_evicts_cached_client(self, factory):
        before = factory.create_client()
        factory.update_client_config("default", {"timeout_ms": 5000})
        after = factory.create_client()

        assert after is not before
        assert after.config.timeout_ms == 5000
        assert before.config.timeout_ms == 10000

    def test_update_merges_headers(self, factory):
        preset = factory.update_client_config("default", {"headers": {"X-Version": "2"}})
        headers = preset.config.headers

        assert headers["X-Version"] == "2"
        assert headers["Accept"] == "application/json"

    def test_update_keeps_other_presets_cached(self, factory):
        upload = factory.create_client("upload")
        factory.update_client_config("default", {"max_retries": 0})
        assert factory.create_client("upload") is upload

    def test_update_evicts_all_override_variants(self, factory):
        a = factory.create_client("default", {"timeout_ms": 1000})
        factory.update_client_config("default", {"max_retries": 0})
        b = factory.create_client("default", {"timeout_ms": 1000})

        assert a is not b
        assert b.config.max_retries == 0

    def test_update_unknown_preset(self, factory):
        with pytest.raises(ConfigurationError, match="not found"):
            factory.update_client_config("missing", {"timeout_ms": 1})

    def test_update_unknown_field(self, factory):
        with pytest.raises(ConfigurationError, match="Unknown config fields"):
            factory.update_client_config("default", {"retries": 1})

    def test_register_new_preset(self, factory):
        factory.register_config("billing", ClientConfig(base_url="https://billing.example.com"), "Billing")

        assert factory.get_config("billing").description == "Billing"
        assert factory.create_client("billing").base_url == "https://billing.example.com"

    def test_register_replaces_and_evicts(self, factory):
        before = factory.create_client()
        factory.register_config("default", ClientConfig(base_url="https://new.example.com"))
        after = factory.create_client()

        assert after is not before
        assert after.base_url == "https://new.example.com"

    def test_clear_cache(self, factory):
        client = factory.create_client()
        factory.clear_cache()
        assert factory.create_client() is not client

    def test_clear_client_cache(self, factory):
        default = factory.create_client()
        upload = factory.create_client("upload")
        factory.clear_client_cache("default")

        assert factory.create_client() is not default
        assert factory.create_client("upload") is upload


class TestHelpers:
    """create_*_client helpers."""

    def test_authenticated_client(self, factory):
        client = factory.create_authenticated_client("https://secure.example.com")

        assert client.base_url == "https://secure.example.com"
        assert client.config.auth == BearerAuth()
        assert client.config.timeout_ms == 15000

    def test_authenticated_client_custom_auth(self, factory):
        provider = StaticTokenProvider("k")
        client = factory.create_authenticated_client(
            "https://secure.example.com", auth=ApiKeyAuth(), token_provider=provider
        )

        assert client.config.auth == ApiKeyAuth()
        assert client.config.token_provider is provider

    def test_basic_auth_not_given_token_provider(self, factory):
        client = factory.create_client("default", {"auth": BasicAuth()})
        assert client.config.token_provider is None

    def test_upload_client(self, factory):
        client = factory.create_upload_client("https://files.example.com")

        assert client.base_url == "https://files.example.com"
        assert client.config.timeout_ms == 60000
        assert factory.create_upload_client("https://files.example.com") is client

    def test_external_client(self, factory):
        client = factory.create_external_client("https://partner.example.com", headers={"X-Partner": "p1"})
        headers = client.config.headers

        assert client.base_url == "https://partner.example.com"
        assert headers["User-Agent"] == EXTERNAL_USER_AGENT
        assert headers["X-Partner"] == "p1"

    def test_external_client_keeps_package_logger(self):
        package_logger = logging.getLogger("api_client")
        user_handler = logging.StreamHandler()
        package_logger.addHandler(user_handler)
        propagate = package_logger.propagate
        try:
            factory = ClientFactory(ClientSettings(_env_file=None, log_enabled=True))
            client = factory.create_client("external")

            assert client._logger is not None
            assert client._logger.name != "api_client"
            assert user_handler in package_logger.handlers
            assert package_logger.propagate is propagate

            client._logger.close()
            assert user_handler in package_logger.handlers
        finally:
            package_logger.removeHandler(user_handler)

    def test_client_from_documentation(self, factory):
        doc = APIDocumentation.from_dict({
            "title": "Billing",
            "version": 2,
            "base_url": "https://billing.example.com/v2",
            "authentication": {"type": "bearer"},
            "global_headers": {"X-Client": "web"},
            "timeout_ms": 8000,
        })
        client = factory.create_client_from_documentation(doc)

        assert doc.version == "2"
        assert client.base_url == "https://billing.example.com/v2"
        assert client.config.timeout_ms == 8000
        assert client.config.headers["X-Client"] == "web"
        assert client.config.auth == BearerAuth()


class TestLoadPresets:
    """load_presets из файла."""

    def test_load_yaml(self, factory, tmp_path):
        path = tmp_path / "presets.yaml"
        path.write_text(
            "presets:\n"
            "  billing:\n"
            "    description: Billing API\n"
            "    base_url: https://billing.example.com\n"
            "    auth:\n"
            "      type: bearer\n",
            encoding="utf-8",
        )

        [preset] = factory.load_presets(path)
        client = factory.create_client("billing")

        assert preset.name == "billing"
        assert client.base_url == "https://billing.example.com"
        assert client.config.interceptors.request == (request_id_interceptor,)
        assert client.config.token_provider.get_token() == "test-token"


def test_repr(factory):
    factory.create_client()
    assert repr(factory) == "ClientFactory(presets=['default', 'auth', 'upload', 'external'], cached=1)"
