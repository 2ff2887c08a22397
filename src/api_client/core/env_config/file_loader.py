"""
Preset file loader for YAML and JSON files.

File layout::

    presets:
      billing:
        description: Billing API
        base_url: https://billing.example.com
        timeout_ms: 5000
        max_retries: 2
        headers:
          Accept: application/json
        auth:
          type: bearer
        logging:
          level: DEBUG
          format: json
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..config import ClientConfig, PresetConfig, auth_from_dict
from ..exceptions import ConfigurationError
from ..logging import LoggingConfig

CONFIG_FILE_ENV = "API_CLIENT_PRESETS_FILE"

_SCALAR_FIELDS = ("base_url", "timeout_ms", "max_retries", "retry_base_delay_ms")
_KNOWN_KEYS = set(_SCALAR_FIELDS) | {"description", "headers", "auth", "logging"}


class PresetFileError(ConfigurationError):
    """Raised when a preset file is invalid."""
    pass


class PresetFileLoader:
    """
    Загрузчик пресетов из файлов.

    Examples:
        >>> presets = PresetFileLoader.from_yaml("presets.yaml")
        >>> presets = PresetFileLoader.from_file("presets.json")  # Auto-detect
        >>> presets = PresetFileLoader.from_env_path()  # From API_CLIENT_PRESETS_FILE
    """

    @staticmethod
    def from_yaml(path: Union[str, Path]) -> List[PresetConfig]:
        """
        Загрузить пресеты из YAML файла.

        Raises:
            FileNotFoundError: Если файл не найден
            PresetFileError: Если файл невалидный
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Preset file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PresetFileError(f"Invalid YAML syntax in {path}: {e}") from e

        return PresetFileLoader._build_presets(data, str(path))

    @staticmethod
    def from_json(path: Union[str, Path]) -> List[PresetConfig]:
        """
        Загрузить пресеты из JSON файла.

        Raises:
            FileNotFoundError: Если файл не найден
            PresetFileError: Если файл невалидный
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Preset file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise PresetFileError(f"Invalid JSON syntax in {path}: {e}") from e

        return PresetFileLoader._build_presets(data, str(path))

    @staticmethod
    def from_file(path: Union[str, Path]) -> List[PresetConfig]:
        """Автоопределение формата по расширению (.yaml, .yml, .json)."""
        suffix = Path(path).suffix.lower()

        if suffix in (".yaml", ".yml"):
            return PresetFileLoader.from_yaml(path)
        if suffix == ".json":
            return PresetFileLoader.from_json(path)
        raise ValueError(
            f"Unsupported preset file format: {suffix}. "
            f"Supported formats: .yaml, .yml, .json"
        )

    @staticmethod
    def from_env_path() -> Optional[List[PresetConfig]]:
        """Загрузить из пути в API_CLIENT_PRESETS_FILE (None если переменная не задана)."""
        path = os.environ.get(CONFIG_FILE_ENV)
        if not path:
            return None
        return PresetFileLoader.from_file(path)

    @staticmethod
    def _build_presets(data: Any, source: str) -> List[PresetConfig]:
        if not data:
            raise PresetFileError(f"Empty preset file: {source}")
        if not isinstance(data, dict) or not isinstance(data.get("presets"), dict):
            raise PresetFileError(f"'presets' must be a dictionary in {source}")

        return [
            PresetFileLoader._build_preset(name, preset_data, source)
            for name, preset_data in data["presets"].items()
        ]

    @staticmethod
    def _build_preset(name: str, data: Any, source: str) -> PresetConfig:
        if not isinstance(data, dict):
            raise PresetFileError(f"Preset {name!r} must be a dictionary in {source}")

        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            raise PresetFileError(
                f"Unknown keys for preset {name!r} in {source}: {', '.join(sorted(unknown))}"
            )

        kwargs: Dict[str, Any] = {key: data[key] for key in _SCALAR_FIELDS if key in data}

        headers = data.get("headers", {})
        if not isinstance(headers, dict):
            raise PresetFileError(f"headers of preset {name!r} must be a dictionary in {source}")
        kwargs["headers"] = {str(k): str(v) for k, v in headers.items()}

        try:
            if "auth" in data:
                kwargs["auth"] = auth_from_dict(data["auth"])
            if "logging" in data:
                kwargs["logging"] = LoggingConfig.create(**data["logging"])
            config = ClientConfig(**kwargs)
        except (TypeError, ValueError) as e:
            raise PresetFileError(f"Invalid preset {name!r} in {source}: {e}") from e

        return PresetConfig(name=str(name), description=str(data.get("description", "")), config=config)
