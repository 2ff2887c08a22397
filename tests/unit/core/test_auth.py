"""Тесты построения заголовков аутентификации."""

import base64

import pytest

from api_client.core.auth import (
    EnvTokenProvider,
    StaticCredentialsProvider,
    StaticTokenProvider,
    build_auth_headers,
)
from api_client.core.config import ApiKeyAuth, BasicAuth, BearerAuth


def test_no_auth():
    assert build_auth_headers(None, StaticTokenProvider("t")) == {}


def test_bearer():
    headers = build_auth_headers(BearerAuth(), StaticTokenProvider("abc"))
    assert headers == {"Authorization": "Bearer abc"}


def test_bearer_custom_prefix():
    headers = build_auth_headers(BearerAuth(token_prefix="Token"), StaticTokenProvider("abc"))
    assert headers == {"Authorization": "Token abc"}


def test_api_key():
    headers = build_auth_headers(ApiKeyAuth(header_name="X-Key"), StaticTokenProvider("k1"))
    assert headers == {"X-Key": "k1"}


def test_basic():
    headers = build_auth_headers(BasicAuth(), credentials_provider=StaticCredentialsProvider("user", "pass"))
    expected = base64.b64encode(b"user:pass").decode("ascii")
    assert headers == {"Authorization": f"Basic {expected}"}


@pytest.mark.parametrize("token", [None, ""])
def test_missing_token_adds_nothing(token):
    assert build_auth_headers(BearerAuth(), StaticTokenProvider(token)) == {}
    assert build_auth_headers(ApiKeyAuth(), StaticTokenProvider(token)) == {}


def test_missing_provider_adds_nothing():
    assert build_auth_headers(BearerAuth()) == {}
    assert build_auth_headers(BasicAuth()) == {}


def test_unsupported_auth():
    with pytest.raises(TypeError):
        build_auth_headers(object())


def test_static_provider_rotation():
    provider = StaticTokenProvider("old")
    provider.update_token("new")
    assert build_auth_headers(BearerAuth(), provider) == {"Authorization": "Bearer new"}


def test_env_provider_reads_every_call(monkeypatch):
    provider = EnvTokenProvider("TEST_API_TOKEN")
    monkeypatch.setenv("TEST_API_TOKEN", "first")
    assert provider.get_token() == "first"
    monkeypatch.setenv("TEST_API_TOKEN", "second")
    assert provider.get_token() == "second"
    monkeypatch.delenv("TEST_API_TOKEN")
    assert build_auth_headers(BearerAuth(), provider) == {}


def test_repr_hides_secrets():
    assert "secret" not in repr(StaticTokenProvider("secret"))
    assert "hunter2" not in repr(StaticCredentialsProvider("bob", "hunter2"))
