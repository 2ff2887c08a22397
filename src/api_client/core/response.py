"""Typed response wrapper and content-type driven body decoding."""

from dataclasses import dataclass
from typing import Any, Dict, Generic, Mapping, TypeVar

import httpx

from .config import RequestConfig

T = TypeVar("T")


@dataclass(frozen=True)
class APIResponse(Generic[T]):
    """
    Result of one successful attempt.

    Attributes:
        data: Decoded body (dict/list for JSON, str for text/*, bytes otherwise)
        status: HTTP status code
        status_text: Reason phrase
        headers: Response headers (httpx.Headers, case-insensitive)
        config: The RequestConfig that was actually sent
        elapsed_ms: Wall time of the attempt in milliseconds
    """

    data: T
    status: int
    status_text: str
    headers: Mapping[str, str]
    config: RequestConfig
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def content_type_of(response: httpx.Response) -> str:
    return response.headers.get("content-type", "").lower()


def parse_body(response: httpx.Response) -> Any:
    """
    Decode body by Content-Type.

    ``application/json`` -> decoded JSON, ``text/*`` -> str, anything else -> bytes.
    An empty JSON body decodes to None.

    Raises:
        ValueError: JSON content-type with an undecodable body
    """
    content_type = content_type_of(response)

    if "application/json" in content_type:
        if not response.content:
            return None
        return response.json()
    if "text/" in content_type:
        return response.text
    return response.content


def parse_error_body(response: httpx.Response) -> Dict[str, Any]:
    """
    Extract message/code/details from an error response.

    Never raises: malformed bodies fall back to the reason phrase.

    Example:
        >>> parse_error_body(httpx.Response(400, json={"message": "bad", "code": "E1"}))
        {'message': 'bad', 'code': 'E1', 'details': {'message': 'bad', 'code': 'E1'}}
    """
    reason = response.reason_phrase
    try:
        if "application/json" in content_type_of(response):
            payload = response.json()
            if isinstance(payload, dict):
                return {
                    "message": str(payload.get("message") or payload.get("error") or reason),
                    "code": payload.get("code") or payload.get("error_code"),
                    "details": payload.get("details") or payload,
                }
            return {"message": reason, "code": None, "details": payload}

        text = response.text
        return {"message": text or reason, "code": None, "details": None}
    except (ValueError, UnicodeDecodeError):
        return {"message": reason, "code": None, "details": None}
