"""Listing URL builder and link helpers.

Pure functions — no network dependency.
"""

from urllib.parse import urlencode, urljoin, urlparse

from src.core.schemas import Source


def build_page_url(source: Source, page: int, proxy_base_url: str | None = None) -> str:
    """Build the listing URL for one page of a source.

    Args:
        source: The portal to page through.
        page: One-based page number.
        proxy_base_url: When set, route through the reverse proxy
            (``{proxy}/api/{source_id}{listing_path}``) instead of the portal.

    Returns:
        Fully qualified listing URL with the ``page`` query parameter.
    """
    if page < 1:
        msg = f"page must be >= 1, got {page}"
        raise ValueError(msg)
    query = urlencode({"page": page})
    if proxy_base_url:
        return f"{proxy_base_url}/api/{source.id}{source.listing_path}?{query}"
    return f"{source.base_url}{source.listing_path}?{query}"


def resolve_link(href: str, base_url: str) -> str:
    """Resolve an anchor href against the portal base URL."""
    href = href.strip()
    parsed = urlparse(href)
    if parsed.scheme and parsed.netloc:
        return href
    return urljoin(f"{base_url}/", href)


def is_bare_base_url(link: str, base_url: str) -> bool:
    """True when ``link`` points at the portal root rather than a listing."""
    return link.rstrip("/") == base_url.rstrip("/")
