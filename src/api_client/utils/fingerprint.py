"""
Stable serialization of configuration overrides for cache keys.

Turns an overrides mapping into a deterministic JSON string. Plain data
is serialized by value; callables and provider objects are serialized by
identity, so two different interceptor functions never collide.
"""

import dataclasses
import enum
import json
from types import MappingProxyType
from typing import Any, Mapping, Optional


def _describe_object(obj: Any) -> str:
    name = getattr(obj, '__qualname__', None) or type(obj).__qualname__
    module = getattr(obj, '__module__', None) or type(obj).__module__
    return f"<{module}.{name}@{id(obj):x}>"


def to_serializable(value: Any) -> Any:
    """
    Convert a value to a JSON-compatible structure.

    - dicts / mappings -> dicts (keys as str)
    - lists / tuples / sets -> lists (sets sorted)
    - frozen config dataclasses -> {"__type__": name, **fields}
    - enums -> their value
    - callables and other objects -> "<module.qualname@id>"

    Example:
        >>> to_serializable({"headers": {"X-A": "1"}, "timeout_ms": 5000})
        {'headers': {'X-A': '1'}, 'timeout_ms': 5000}
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if isinstance(value, enum.Enum):
        return value.value

    if isinstance(value, (dict, MappingProxyType)) or isinstance(value, Mapping):
        return {str(k): to_serializable(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [to_serializable(item) for item in value]

    if isinstance(value, (set, frozenset)):
        return sorted((to_serializable(item) for item in value), key=repr)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = {"__type__": type(value).__qualname__}
        for f in dataclasses.fields(value):
            data[f.name] = to_serializable(getattr(value, f.name))
        return data

    return _describe_object(value)


def fingerprint(overrides: Optional[Mapping[str, Any]]) -> str:
    """
    Deterministic JSON string for an overrides mapping.

    Key order does not matter; ``None`` and ``{}`` give the same result.

    Examples:
        >>> fingerprint({"b": 1, "a": 2}) == fingerprint({"a": 2, "b": 1})
        True
        >>> fingerprint(None)
        '{}'
    """
    return json.dumps(
        to_serializable(dict(overrides or {})),
        sort_keys=True,
        separators=(",", ":"),
    )
