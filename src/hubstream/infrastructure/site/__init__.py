"""Site pipeline: search match, redirect decode, hop walking, batch resolve."""

from .batch_resolver import BatchResolver
from .link_extractor import LinkExtractor
from .page_matcher import PageMatcher
from .redirect_decoder import RedirectDecoder

__all__ = [
    "BatchResolver",
    "LinkExtractor",
    "PageMatcher",
    "RedirectDecoder",
]
