"""Parsing utilities for sizes, quality markers and URLs."""

from __future__ import annotations

import re
from urllib.parse import urlparse

_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([KMGT]i?B)\b", re.IGNORECASE)
_HEIGHT_RE = re.compile(r"\b(\d{3,4})p\b", re.IGNORECASE)

_MULTIPLIERS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
}

# Checked in order; first hit wins.
_QUALITY_MARKERS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"4K|2160p", re.IGNORECASE), 2160),
    (re.compile(r"1080p", re.IGNORECASE), 1080),
    (re.compile(r"720p", re.IGNORECASE), 720),
    (re.compile(r"480p", re.IGNORECASE), 480),
)


def parse_size_to_bytes(size_str: str) -> int:
    """Parse size string to bytes.

    Supports formats:
        - "1234" (raw bytes)
        - "4.5 GB"
        - "500MB", "1.5 GiB"
        - "Size: 1.2 TB" (first size found in a longer string)

    Returns 0 when nothing parses.
    """
    if not size_str:
        return 0

    size_str = size_str.strip()
    if size_str.isdigit():
        return int(size_str)

    match = _SIZE_RE.search(size_str)
    if not match:
        return 0

    value = float(match.group(1))
    unit = match.group(2).upper().replace("I", "")
    return int(value * _MULTIPLIERS.get(unit, 1))


def format_size(size_bytes: int) -> str:
    """Format bytes as a short human-readable string, e.g. ``"1.4 GB"``."""
    if size_bytes <= 0:
        return "0 B"
    value = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"
        value /= 1024
    return f"{value:.2f}".rstrip("0").rstrip(".") + " TB"


def _bucket(height: int) -> int:
    """Snap a raw pixel height onto 0/480/720/1080/2160."""
    if height >= 2160:
        return 2160
    if height >= 1080:
        return 1080
    if height >= 720:
        return 720
    if height >= 480:
        return 480
    return 0


def parse_height(*texts: str) -> int:
    """Detect the vertical resolution named in *texts*.

    An explicit ``NNNp`` marker wins (first text that has one), snapped to a
    canonical bucket.  Otherwise the 4K/2160p, 1080p, 720p, 480p markers are
    tried across all texts.  Returns 0 when no marker is present.
    """
    for text in texts:
        if not text:
            continue
        match = _HEIGHT_RE.search(text)
        if match:
            bucket = _bucket(int(match.group(1)))
            if bucket:
                return bucket

    for pattern, height in _QUALITY_MARKERS:
        if any(text and pattern.search(text) for text in texts):
            return height
    return 0


def is_absolute_url(url: str) -> bool:
    """True when *url* carries both a scheme and a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme in ("http", "https") and parsed.netloc)
