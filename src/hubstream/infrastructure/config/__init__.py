from __future__ import annotations

from .load import load_config
from .schema import AppConfig, CacheConfig, EnvOverrides, ResolverConfig, SiteDialect

__all__ = [
    "AppConfig",
    "CacheConfig",
    "EnvOverrides",
    "ResolverConfig",
    "SiteDialect",
    "load_config",
]
