"""
HTML meta extraction for brand color hints.

Reads the color hints a site declares in its homepage markup
(theme-color, msapplication-TileColor, apple status-bar style) and locates
its favicon so the image palette can fill whatever the tags leave out.
"""
import re
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup
from loguru import logger

PRIMARY_META_NAMES = ["theme-color", "msapplication-TileColor"]
SECONDARY_META_NAMES = ["apple-mobile-web-app-status-bar-style"]
FAVICON_RELS = [["icon"], ["shortcut", "icon"]]


@dataclass(frozen=True)
class MetaHints:
    """Raw, not yet normalized, color hints found in a page."""
    primary_token: Optional[str] = None
    secondary_token: Optional[str] = None
    favicon_url: Optional[str] = None

    @property
    def secondary_is_favicon(self) -> bool:
        """True if the secondary slot holds the favicon URL placeholder."""
        return self.secondary_token is not None and self.secondary_token == self.favicon_url


def _parse(html: str) -> Optional[BeautifulSoup]:
    if not html:
        return None
    try:
        return BeautifulSoup(html, "lxml")
    except Exception as e:
        logger.warning(f"Failed to parse page markup: {e}")
        return None


def _first_meta_content(soup: BeautifulSoup, name: str) -> Optional[str]:
    """Content of the first ``<meta name=...>`` with a non-blank value."""
    pattern = re.compile(rf"^\s*{re.escape(name)}\s*$", re.IGNORECASE)
    for tag in soup.find_all("meta", attrs={"name": pattern}):
        content = (tag.get("content") or "").strip()
        if content:
            return content
    return None


def _first_of(soup: BeautifulSoup, names: List[str]) -> Optional[str]:
    for name in names:
        content = _first_meta_content(soup, name)
        if content:
            return content
    return None


def _rel_tokens(tag) -> List[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [token.lower() for token in rel]


def resolve_favicon_href(href: str, domain: str) -> Optional[str]:
    """
    Make a favicon href absolute against ``https://{domain}/``.

    Inline ``data:`` URIs have nothing to fetch and resolve to None.
    """
    href = href.strip()
    if href.lower().startswith("data:"):
        return None
    if href.startswith("http"):
        return href
    if href.startswith("//"):
        return f"https:{href}"
    separator = "" if href.startswith("/") else "/"
    return f"https://{domain}{separator}{href}"


def _locate_in_soup(soup: BeautifulSoup, domain: str) -> Optional[str]:
    for tag in soup.find_all("link", href=True):
        if _rel_tokens(tag) in FAVICON_RELS:
            href = tag["href"].strip()
            url = resolve_favicon_href(href, domain) if href else None
            if url:
                return url
    return None


def locate_favicon(html: str, domain: str) -> Optional[str]:
    """
    Find the site's icon link and resolve it to an absolute URL.

    Args:
        html: Homepage markup
        domain: Bare hostname the page was fetched from

    Returns:
        Absolute favicon URL, or None if the page declares no icon
    """
    soup = _parse(html)
    if soup is None:
        return None
    return _locate_in_soup(soup, domain)


def extract_meta_hints(html: str, domain: str) -> MetaHints:
    """
    Scan page markup for brand color hints.

    Primary comes from theme-color, then msapplication-TileColor. Secondary
    comes from the apple status-bar style, then falls back to the favicon
    URL as a placeholder for the image palette stage.

    Args:
        html: Homepage markup
        domain: Bare hostname, used to absolutize the favicon href

    Returns:
        MetaHints with absent fields set to None
    """
    soup = _parse(html)
    if soup is None:
        return MetaHints()

    primary = _first_of(soup, PRIMARY_META_NAMES)
    secondary = _first_of(soup, SECONDARY_META_NAMES)
    favicon_url = _locate_in_soup(soup, domain)

    if secondary is None and favicon_url:
        secondary = favicon_url

    logger.debug(f"Meta hints for {domain}: primary={primary!r} secondary={secondary!r} "
                 f"favicon={favicon_url!r}")
    return MetaHints(primary_token=primary, secondary_token=secondary, favicon_url=favicon_url)
