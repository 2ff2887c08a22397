"""
Client logging settings.

``ClientConfig.logging`` holds a LoggingConfig; when it is set the client
attaches its own APIClientLogger. Level and format accept enum members or
plain strings (as they come from .env files and preset YAML).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Formatter names understood by get_formatter()."""
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Where and how a client writes its request log.

    Attributes:
        level: Minimum level of client records
        format: json / text / colored
        enable_console: Write to stdout
        enable_file: Write to a rotating file at file_path
        max_bytes, backup_count: Rotation of the log file
        enable_correlation_id: Attach X-Request-ID of the current request
        extra_fields: Static fields added to every record (service, env, ...)

    Example:
        >>> LoggingConfig(level="debug", format="json").level
        <LogLevel.DEBUG: 'DEBUG'>
    """

    level: Union[LogLevel, str] = LogLevel.INFO
    format: Union[LogFormat, str] = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = DEFAULT_MAX_BYTES
    backup_count: int = DEFAULT_BACKUP_COUNT
    enable_correlation_id: bool = True
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # ValueError from the enum constructors reports the bad value
        object.__setattr__(self, 'level', LogLevel(str(getattr(self.level, 'value', self.level)).upper()))
        object.__setattr__(self, 'format', LogFormat(str(getattr(self.format, 'value', self.format)).lower()))
        object.__setattr__(self, 'extra_fields', dict(self.extra_fields or {}))

        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")

    @classmethod
    def create(cls, level: str = "INFO", format: str = "text", **options: Any) -> "LoggingConfig":
        """
        Build from plain values, e.g. the ``logging`` block of a preset file.

        Unknown option names raise TypeError.
        """
        return cls(level=level, format=format, **options)
