"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "hubstream",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "max_retries": 3,
        "backoff_base": 1.0,
        "follow_redirects": True,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
        "debug": False,
    },
    "cache": {
        "enabled": True,
        "backend": "diskcache",
        "dir": "./.cache/hubstream",
        "search_ttl_seconds": 86_400,
        "redirect_ttl_seconds": 259_200,
        "final_links_ttl_seconds": 3_600,
        "metadata_ttl_seconds": 86_400,
    },
    "resolver": {
        "max_concurrent_entries": 5,
        "match_max_distance": 5,
        "year_tolerance": 1,
    },
    "site": {
        "base_url": "https://4khdhub.fans",
    },
}
