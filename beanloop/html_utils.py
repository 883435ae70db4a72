"""HTML and URL helpers for beanloop.

Functions:
    escape_xml: Escape text for inclusion in XML feeds.
    join_root_url: Join a base URL with a path.
    absolutize_html_urls: Convert root-relative URLs to absolute in HTML.
"""

from __future__ import annotations

import re

_URL_ATTR_RE = re.compile(
    r'(?P<prefix>\b(?:href|src)=["\'])(?P<url>[^"\']+)(?P<suffix>["\'])'
)

_URL_SKIP_PREFIXES = (
    "http://",
    "https://",
    "//",
    "mailto:",
    "tel:",
    "#",
)


def escape_xml(text: str) -> str:
    """Escape special characters for XML text and attribute values.

    Examples:
        >>> escape_xml('Tom & "Jerry"')
        'Tom &amp; &quot;Jerry&quot;'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def join_root_url(root_url: str, path: str) -> str:
    """Join a root URL and a path without doubling slashes.

    Examples:
        >>> join_root_url('https://example.com/', 'about/')
        'https://example.com/about/'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def absolutize_html_urls(html: str, root_url: str) -> str:
    """Rewrite root-relative ``href``/``src`` URLs to absolute URLs.

    Relative URLs without a leading slash (post-local images), external
    URLs, anchors and mailto/tel links are left unchanged.

    Args:
        html: HTML content to process.
        root_url: Base URL to prepend.

    Returns:
        HTML with root-relative URLs made absolute.
    """
    if not root_url:
        return html

    def repl(match: re.Match) -> str:
        url = match.group("url")
        if url.startswith(_URL_SKIP_PREFIXES) or not url.startswith("/"):
            return match.group(0)
        absolute = join_root_url(root_url, url)
        return f"{match.group('prefix')}{absolute}{match.group('suffix')}"

    return _URL_ATTR_RE.sub(repl, html)
