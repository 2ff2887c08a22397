"""Tests for URL building."""

import pytest

from api_client.core.exceptions import ConfigurationError
from api_client.core.utils import build_url, is_absolute_url


class TestBuildUrl:
    """build_url."""

    def test_relative_path(self):
        assert build_url("https://api.example.com", "/users") == "https://api.example.com/users"

    def test_keeps_base_path(self):
        assert build_url("https://api.example.com/v1/", "users") == "https://api.example.com/v1/users"

    def test_absolute_url_untouched(self):
        assert build_url("https://api.example.com", "https://other.example.com/x") == "https://other.example.com/x"

    def test_empty_path(self):
        assert build_url("https://api.example.com/", "") == "https://api.example.com"

    def test_params(self):
        url = build_url("https://api.example.com", "/users", {"page": 2, "q": "a b"})
        assert url == "https://api.example.com/users?page=2&q=a+b"

    def test_none_params_skipped(self):
        url = build_url("https://api.example.com", "/users", {"page": None, "limit": 10})
        assert url == "https://api.example.com/users?limit=10"

    def test_all_params_none(self):
        assert build_url("https://api.example.com", "/users", {"page": None}) == "https://api.example.com/users"

    def test_bool_params(self):
        url = build_url("https://api.example.com", "/users", {"active": True, "deleted": False})
        assert url == "https://api.example.com/users?active=true&deleted=false"

    def test_list_params(self):
        url = build_url("https://api.example.com", "/users", {"id": [1, 2]})
        assert url == "https://api.example.com/users?id=1&id=2"

    def test_appends_to_existing_query(self):
        url = build_url("https://api.example.com", "/users?sort=name", {"page": 1})
        assert url == "https://api.example.com/users?sort=name&page=1"

    def test_relative_without_base(self):
        with pytest.raises(ConfigurationError, match="base_url"):
            build_url("", "/users")


@pytest.mark.parametrize("url,expected", [
    ("https://api.example.com", True),
    ("http://localhost:3000/api", True),
    ("/users", False),
    ("users", False),
])
def test_is_absolute_url(url, expected):
    assert is_absolute_url(url) is expected
