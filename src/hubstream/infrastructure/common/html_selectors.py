"""CSS-selector-based HTML extraction.

Thin helpers over BeautifulSoup so pipeline stages query the document
through selector strings taken from the site dialect config rather than
hard-coded tag walks.
"""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (``lxml`` parser)."""
    return BeautifulSoup(html, "lxml")


def select_items(root: BeautifulSoup | Tag, selector: str) -> list[Tag]:
    """Select all elements matching *selector* in document order."""
    return root.select(selector)


def extract_text(
    element: BeautifulSoup | Tag,
    selector: str = "",
    *,
    default: str = "",
    strip: bool = True,
) -> str:
    """Extract text from the first matching child element.

    With ``selector=""`` the element's own text is returned.
    """
    if selector == "":
        text = element.get_text(strip=strip)
        return text if text else default

    match = element.select_one(selector)
    if match:
        text = match.get_text(strip=strip)
        if text:
            return text
    return default


def extract_attr(element: Tag, attr: str, *, default: str = "") -> str:
    """Read an attribute from *element*, joining multi-valued attributes."""
    val = element.get(attr)
    if not val:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def find_anchor_href(root: BeautifulSoup | Tag, label: str) -> str | None:
    """Return the href of the first ``<a>`` whose visible text contains *label*."""
    for anchor in root.find_all("a"):
        if label in anchor.get_text():
            href = anchor.get("href")
            if href:
                return str(href)
    return None


def extract_links(
    element: BeautifulSoup | Tag,
    selector: str = "a[href]",
    *,
    base_url: str = "",
) -> list[dict[str, str]]:
    """Extract all links matching *selector*.

    Returns a list of ``{"text": ..., "href": ..., "class": ...}`` dicts.
    """
    results: list[dict[str, str]] = []
    for tag in select_items(element, selector):
        href = tag.get("href")
        if not href:
            continue
        href_str = str(href).strip()
        if base_url and href_str != "#":
            href_str = urljoin(base_url, href_str)
        results.append(
            {
                "text": tag.get_text(" ", strip=True),
                "href": href_str,
                "class": extract_attr(tag, "class"),
            }
        )
    return results
