"""Helpers shared across the API client."""

from .fingerprint import fingerprint
from .sanitizer import add_sensitive_keys, mask_headers, mask_sensitive_data

__all__ = [
    "fingerprint",
    "mask_sensitive_data",
    "mask_headers",
    "add_sensitive_keys",
]
