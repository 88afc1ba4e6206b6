from .cache import CachePort
from .fetcher import PageFetcherPort
from .metadata import MetadataPort

__all__ = [
    "CachePort",
    "MetadataPort",
    "PageFetcherPort",
]
