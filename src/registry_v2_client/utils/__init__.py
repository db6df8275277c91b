"""Utility functions for Registry API v2 client."""

from .body import bytes_body, file_body
from .digest import calculate_digest, calculate_file_digest, validate_digest, verify_digest

__all__ = [
    "bytes_body",
    "calculate_digest",
    "calculate_file_digest",
    "file_body",
    "validate_digest",
    "verify_digest",
]
