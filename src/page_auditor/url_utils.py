"""
URL helpers shared by the fetcher, the checkers and the orchestrator.
"""

import re
from typing import Optional
from urllib.parse import quote, urlparse

import idna


_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_ASCII_HOST_RE = re.compile(r"^[A-Za-z0-9._-]+$")

# Characters left alone by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def normalize_url(url: str) -> str:
    """
    Trim a user-supplied URL and default its scheme to https.

    Args:
        url: Bare domain or full URL

    Returns:
        Normalized URL, or an empty string for blank input
    """
    trimmed = url.strip()
    if not trimmed:
        return ""

    if not _SCHEME_RE.match(trimmed):
        return f"https://{trimmed}"

    return trimmed


def _is_valid_host(host: str) -> bool:
    if not host:
        return False
    if ":" in host:
        # IPv6 literal, brackets already stripped by urlparse
        return all(c in "0123456789abcdefABCDEF:." for c in host)
    if host.isascii():
        return bool(_ASCII_HOST_RE.match(host)) and ".." not in host
    try:
        idna.encode(host, uts46=True)
    except idna.IDNAError:
        return False
    return True


def is_valid_url(url: str) -> bool:
    """
    Check that a string is an absolute http(s) URL with a usable host.

    Internationalized host names are accepted when they encode to IDNA.
    """
    try:
        parsed = urlparse(url)
        host = parsed.hostname
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return False

    if parsed.scheme.lower() not in ("http", "https"):
        return False

    return _is_valid_host(host or "")


def extract_domain(url: str) -> str:
    """Return the lowercase host of a URL, or '' when it has none."""
    try:
        host = urlparse(normalize_url(url)).hostname
    except ValueError:
        return ""
    return host or ""


def site_root(url: str) -> Optional[str]:
    """
    Return scheme://host[:port] for a URL.

    Args:
        url: Absolute URL

    Returns:
        Site root, or None when the URL has no host
    """
    try:
        parsed = urlparse(url)
        host = parsed.hostname
        port = parsed.port
    except ValueError:
        return None

    if not host:
        return None

    if ":" in host:
        host = f"[{host}]"
    netloc = f"{host}:{port}" if port else host
    return f"{parsed.scheme}://{netloc}"


def is_internal_link(href: str, base_url: str) -> bool:
    """
    Decide whether a link target stays on the analyzed site.

    Fragment-only links and javascript:, mailto: and tel: targets are
    neither internal nor external and return False. Relative paths are
    internal. Absolute http(s) links are internal when their host matches
    the host of base_url.
    """
    if (
        not href
        or href.startswith("#")
        or href.startswith("javascript:")
        or href.startswith("mailto:")
        or href.startswith("tel:")
    ):
        return False

    if href.startswith("/") or href.startswith("./") or href.startswith("../"):
        return True

    if href.startswith("http://") or href.startswith("https://"):
        return extract_domain(href) == extract_domain(base_url)

    return True


def encode_uri_component(value: str) -> str:
    """Percent-encode a value the way JavaScript's encodeURIComponent does."""
    return quote(value, safe=_URI_COMPONENT_SAFE)
