"""
Link extraction from fetched pages.
"""
from __future__ import annotations

from typing import List, Optional, Union
from urllib.parse import urlparse

from bs4 import BeautifulSoup, SoupStrainer

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

ABSOLUTE_PREFIXES = ("http://", "https://")


def site_root(url: str) -> Optional[str]:
    """Return scheme://netloc for url, or None if it has no scheme or host."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def resolve_link(href: str, root: Optional[str]) -> Optional[str]:
    """
    Resolve a single href.

    Absolute http(s) links are kept as written, root-relative paths are
    joined onto root. Anything else (relative paths, fragments,
    protocol-relative ``//host`` links, other schemes) yields None.
    """
    href = href.strip()
    if href.lower().startswith(ABSOLUTE_PREFIXES):
        return href
    if href.startswith("/") and not href.startswith("//") and root:
        return root + href
    return None


def extract_links(body: Union[str, bytes], base_url: str) -> List[str]:
    """Extract absolute link targets from <a href> tags, in document order."""
    if not body:
        return []
    root = site_root(base_url)
    soup = BeautifulSoup(body, "lxml", parse_only=LINK_STRAINER)
    links = []
    for a in soup.find_all("a", href=True):
        target = resolve_link(a["href"], root)
        if target:
            links.append(target)
    return links
