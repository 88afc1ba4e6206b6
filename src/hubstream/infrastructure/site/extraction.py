"""Token extraction strategies and the redirect decode chain.

Each strategy is a pure function ``html -> ExtractedToken | None``.
Strategies are tried in order and the first hit wins, so a new
obfuscation variant is one more function appended to a tuple.
"""

from __future__ import annotations

import base64
import binascii
import codecs
import json
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from hubstream.domain.exceptions import DecodeError, ParseError

_O_TOKEN_RE = re.compile(r"""'o'\s*,\s*['"](.*?)['"]""")
_META_REFRESH_RE = re.compile(
    r"""content=['"]\s*\d+\s*;\s*url=([^'"]+)['"]""", re.IGNORECASE
)
_SCRIPT_URL_RE = re.compile(
    r"""var\s+(?:url|link)\s*=\s*['"]([^'"]+)['"]""", re.IGNORECASE
)


@dataclass(frozen=True)
class ExtractedToken:
    """A value pulled out of a hop page.

    ``encoded`` tokens still need :func:`decode_redirect_token`;
    plain ones are already a destination URL.
    """

    strategy: str
    value: str
    encoded: bool = False


Strategy = Callable[[str], "ExtractedToken | None"]


def o_token(html: str) -> ExtractedToken | None:
    """``'o', "<token>"`` pair passed to the page's redirect script."""
    match = _O_TOKEN_RE.search(html)
    if not match or not match.group(1):
        return None
    return ExtractedToken("o_token", match.group(1), encoded=True)


def meta_refresh(html: str) -> ExtractedToken | None:
    """``<meta http-equiv="refresh" content="0;url=...">``."""
    match = _META_REFRESH_RE.search(html)
    if not match:
        return None
    return ExtractedToken("meta_refresh", match.group(1).strip())


def script_url(html: str) -> ExtractedToken | None:
    """Inline ``var url = "..."`` / ``var link = "..."`` assignment."""
    match = _SCRIPT_URL_RE.search(html)
    if not match:
        return None
    return ExtractedToken("script_url", match.group(1).strip())


REDIRECT_STRATEGIES: tuple[Strategy, ...] = (o_token, meta_refresh)
CLOUD_STRATEGIES: tuple[Strategy, ...] = (script_url, meta_refresh)


def run_strategies(html: str, strategies: Sequence[Strategy]) -> ExtractedToken:
    """Return the first strategy hit.

    Raises:
        ParseError: if no strategy matches.
    """
    for strategy in strategies:
        token = strategy(html)
        if token is not None:
            return token
    names = ", ".join(s.__name__ for s in strategies)
    raise ParseError(f"no extraction strategy matched ({names})")


# ---------------------------------------------------------------------------
# Decode chain
# ---------------------------------------------------------------------------


def b64_decode(value: str) -> str:
    """Decode base64 to a latin-1 string (byte-preserving, like ``atob``)."""
    cleaned = "".join(value.split())
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        raw = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("base64", str(exc)) from exc
    return raw.decode("latin-1")


def rot13(value: str) -> str:
    """Rotate ASCII letters by 13; everything else passes through."""
    return codecs.encode(value, "rot13")


DECODE_STAGES: tuple[tuple[str, Callable[[str], str]], ...] = (
    ("base64_1", b64_decode),
    ("base64_2", b64_decode),
    ("rot13", rot13),
    ("base64_3", b64_decode),
)


def decode_redirect_token(token: str) -> str:
    """Run the full transform chain and return the destination URL.

    Raises:
        DecodeError: naming the stage that failed.
    """
    value = token
    for name, stage in DECODE_STAGES:
        try:
            value = stage(value)
        except DecodeError as exc:
            raise DecodeError(name, str(exc)) from exc

    try:
        payload = json.loads(value)
    except ValueError as exc:
        raise DecodeError("json", str(exc)) from exc
    if not isinstance(payload, dict) or not payload.get("o"):
        raise DecodeError("json", "missing field 'o'")

    try:
        url = b64_decode(str(payload["o"]))
    except DecodeError as exc:
        raise DecodeError("payload", str(exc)) from exc
    url = url.encode("latin-1").decode("utf-8", errors="replace").strip()
    if not url:
        raise DecodeError("payload", "empty destination")
    return url
