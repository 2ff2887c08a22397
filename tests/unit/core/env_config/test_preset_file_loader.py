"""
Tests for PresetFileLoader.
"""

import json

import pytest

from api_client.core.config import ApiKeyAuth, BearerAuth, PresetConfig
from api_client.core.env_config import PresetFileError, PresetFileLoader
from api_client.core.exceptions import ConfigurationError
from api_client.core.logging import LogLevel

YAML_PRESETS = """
presets:
  billing:
    description: Billing API
    base_url: https://billing.example.com
    timeout_ms: 5000
    max_retries: 2
    headers:
      Accept: application/json
      X-Version: 2
    auth:
      type: bearer
    logging:
      level: DEBUG
      format: json
  search:
    base_url: https://search.example.com
    auth:
      type: apiKey
      header_name: X-Search-Key
"""


@pytest.fixture
def yaml_file(tmp_path):
    path = tmp_path / "presets.yaml"
    path.write_text(YAML_PRESETS, encoding="utf-8")
    return path


class TestFromYaml:
    """Загрузка YAML."""

    def test_loads_presets(self, yaml_file):
        presets = PresetFileLoader.from_yaml(yaml_file)
        by_name = {preset.name: preset for preset in presets}

        assert set(by_name) == {"billing", "search"}
        assert all(isinstance(p, PresetConfig) for p in presets)

        billing = by_name["billing"]
        assert billing.description == "Billing API"
        assert billing.config.base_url == "https://billing.example.com"
        assert billing.config.timeout_ms == 5000
        assert billing.config.max_retries == 2
        assert billing.config.headers == {"Accept": "application/json", "X-Version": "2"}
        assert billing.config.auth == BearerAuth()
        assert billing.config.logging.level == LogLevel.DEBUG

        search = by_name["search"]
        assert search.description == ""
        assert search.config.auth == ApiKeyAuth(header_name="X-Search-Key")
        assert search.config.logging is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PresetFileLoader.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_syntax(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("presets: [unclosed", encoding="utf-8")

        with pytest.raises(PresetFileError, match="Invalid YAML"):
            PresetFileLoader.from_yaml(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(PresetFileError, match="Empty"):
            PresetFileLoader.from_yaml(path)


class TestValidation:
    """Невалидные пресеты."""

    def _load(self, tmp_path, data):
        path = tmp_path / "presets.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return PresetFileLoader.from_json(path)

    def test_presets_must_be_dict(self, tmp_path):
        with pytest.raises(PresetFileError, match="'presets' must be a dictionary"):
            self._load(tmp_path, {"presets": ["a"]})

    def test_unknown_key(self, tmp_path):
        with pytest.raises(PresetFileError, match="Unknown keys"):
            self._load(tmp_path, {"presets": {"a": {"timeout": 5}}})

    def test_unknown_auth_type(self, tmp_path):
        with pytest.raises(PresetFileError, match="Unknown auth type"):
            self._load(tmp_path, {"presets": {"a": {"auth": {"type": "oauth"}}}})

    def test_invalid_limits(self, tmp_path):
        with pytest.raises(PresetFileError, match="timeout_ms"):
            self._load(tmp_path, {"presets": {"a": {"timeout_ms": 0}}})

    def test_is_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError):
            self._load(tmp_path, {"presets": {"a": "not a dict"}})

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(PresetFileError, match="Invalid JSON"):
            PresetFileLoader.from_json(path)


class TestFromFile:
    """Автоопределение формата и переменная окружения."""

    def test_json(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text(json.dumps({"presets": {"a": {"base_url": "https://a.example.com"}}}), encoding="utf-8")

        [preset] = PresetFileLoader.from_file(path)
        assert preset.config.base_url == "https://a.example.com"

    def test_yml_extension(self, tmp_path):
        path = tmp_path / "presets.yml"
        path.write_text(YAML_PRESETS, encoding="utf-8")
        assert len(PresetFileLoader.from_file(path)) == 2

    def test_unsupported_extension(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported preset file format"):
            PresetFileLoader.from_file(tmp_path / "presets.toml")

    def test_from_env_path(self, yaml_file, monkeypatch):
        monkeypatch.setenv("API_CLIENT_PRESETS_FILE", str(yaml_file))
        assert len(PresetFileLoader.from_env_path()) == 2

    def test_from_env_path_unset(self, monkeypatch):
        monkeypatch.delenv("API_CLIENT_PRESETS_FILE", raising=False)
        assert PresetFileLoader.from_env_path() is None
