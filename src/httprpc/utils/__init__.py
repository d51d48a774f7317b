"""Utilities for httprpc."""

from .sanitizer import mask_headers, mask_sensitive_data, mask_url, is_sensitive_key

__all__ = [
    "mask_url",
    "mask_headers",
    "mask_sensitive_data",
    "is_sensitive_key",
]
