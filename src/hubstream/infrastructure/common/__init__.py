"""Common infrastructure utilities."""

from __future__ import annotations

from .parsers import format_size, is_absolute_url, parse_height, parse_size_to_bytes

__all__ = [
    "format_size",
    "is_absolute_url",
    "parse_height",
    "parse_size_to_bytes",
]
