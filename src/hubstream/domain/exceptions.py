"""Resolution pipeline exceptions.

None of these escape the top-level use case: each component boundary
converts them into an empty or ``None`` result.
"""

from __future__ import annotations


class ResolutionError(Exception):
    """Base class for all pipeline errors."""


class NetworkError(ResolutionError):
    """Raised when a request still fails after all retry attempts."""

    def __init__(self, url: str, attempts: int, reason: str = "") -> None:
        self.url = url
        self.attempts = attempts
        self.reason = reason
        super().__init__(f"request to {url} failed after {attempts} attempts: {reason}")


class ParseError(ResolutionError):
    """Raised when an expected HTML structure or token is absent."""


class DecodeError(ResolutionError):
    """Raised when a redirect token fails a transform stage."""

    def __init__(self, stage: str, reason: str = "") -> None:
        self.stage = stage
        super().__init__(f"decode failed at stage {stage!r}: {reason}")


class UpstreamEmpty(ResolutionError):
    """Raised when metadata lookup or page search yields nothing."""
