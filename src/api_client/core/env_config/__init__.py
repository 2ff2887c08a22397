"""
Environment and file based configuration.

Example:
    >>> from api_client.core.env_config import ClientSettings, PresetFileLoader
    >>> settings = ClientSettings()
    >>> presets = PresetFileLoader.from_file("presets.yaml")
"""

from .settings import AUTH_TOKEN_ENV, DEFAULT_BASE_URL, ClientSettings
from .file_loader import CONFIG_FILE_ENV, PresetFileError, PresetFileLoader

__all__ = [
    "ClientSettings",
    "DEFAULT_BASE_URL",
    "AUTH_TOKEN_ENV",
    "PresetFileLoader",
    "PresetFileError",
    "CONFIG_FILE_ENV",
]
