"""Outbound HTTP: browser-mimicking fetcher with retry."""

from .fetcher import BROWSER_HEADERS, HttpFetcher, build_http_client

__all__ = ["BROWSER_HEADERS", "HttpFetcher", "build_http_client"]
