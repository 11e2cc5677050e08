"""URI normalization and href resolution."""

import re
from collections.abc import Container
from pathlib import Path
from typing import Optional
from urllib.parse import quote, unquote_to_bytes, urljoin, urlsplit, urlunsplit
import structlog

logger = structlog.get_logger()

WEB_SCHEMES = ("http", "https")
CHECKED_SCHEMES = WEB_SCHEMES + ("file",)

# RFC 3986 pchar minus '%', which is re-escaped after unquoting
_SAFE_PATH_CHARS = "/:@!$&'()*+,;=-._~"

# An escaped slash is data, not a separator, and stays escaped
_ESCAPED_SLASH = re.compile("%2F", re.IGNORECASE)


def _normalize_path(path: str) -> str:
    """Re-escape a path byte-wise so undecodable escapes survive."""
    return "%2F".join(
        quote(unquote_to_bytes(segment), safe=_SAFE_PATH_CHARS)
        for segment in _ESCAPED_SLASH.split(path)
    )


def normalize_uri(uri: str) -> str:
    """
    Normalize an absolute URI for deduplication.

    Lowercases scheme and authority, re-escapes the path into a canonical
    form and drops the fragment. Query strings are kept as-is.

    Raises:
        ValueError: If the URI cannot be parsed
    """
    parts = urlsplit(uri)
    # Accessing the port validates it
    parts.port
    scheme = parts.scheme.lower()
    path = _normalize_path(parts.path)
    if scheme in WEB_SCHEMES and not path:
        path = "/"
    return urlunsplit((scheme, parts.netloc.lower(), path, parts.query, ""))


def is_web_uri(uri: str) -> bool:
    """Check if a URI uses http or https."""
    return urlsplit(uri).scheme in WEB_SCHEMES


def to_target_uri(location: str) -> str:
    """
    Turn a starting argument into a canonical Target URI.

    URLs with a http(s) or file scheme are normalized as-is; anything else
    is treated as a local path. Directories get a trailing slash so that
    links in their index page resolve inside them.

    Args:
        location: URL or local path given on the command line

    Returns:
        Normalized absolute URI
    """
    if urlsplit(location).scheme in CHECKED_SCHEMES:
        return normalize_uri(location)

    path = Path(location).expanduser().resolve()
    uri = path.as_uri()
    if path.is_dir() and not uri.endswith("/"):
        uri += "/"
    return normalize_uri(uri)


def derive_base_url(start_uri: str) -> str:
    """Scope prefix for recursion: the directory of the starting URI."""
    return start_uri[: start_uri.rfind("/") + 1]


def derive_root_url(start_uri: str, base_url: Optional[str] = None) -> str:
    """
    Base for root-relative links.

    Web URIs resolve ``/...`` against their origin. File URIs resolve them
    against the base directory, since the filesystem root is never the
    root of a docs build.
    """
    parts = urlsplit(start_uri)
    if parts.scheme in WEB_SCHEMES:
        return f"{parts.scheme}://{parts.netloc}/"
    return base_url or derive_base_url(start_uri)


class UriResolver:
    """Resolves href text found on a page to a normalized Target URI."""

    def __init__(self, root_url: str, ignored: Optional[Container[str]] = None):
        """
        Initialize resolver.

        Args:
            root_url: Base URI for hrefs starting with '/'
            ignored: Raw href strings that are never resolved
        """
        self.root_url = root_url if root_url.endswith("/") else root_url + "/"
        self.ignored = ignored if ignored is not None else frozenset()

    def resolve(self, referral_uri: str, href: str) -> Optional[str]:
        """
        Resolve href text against the page it was found on.

        Args:
            referral_uri: URI of the page containing the link
            href: Raw href attribute value

        Returns:
            Normalized absolute URI, or None if the href is ignored,
            malformed, or uses a scheme that is not checked
        """
        if href in self.ignored:
            logger.debug("href_ignored", href=href, page=referral_uri)
            return None

        text = href.strip()
        try:
            if urlsplit(text).scheme:
                absolute = text
            elif text.startswith("/") and not text.startswith("//"):
                absolute = urljoin(self.root_url, text.lstrip("/"))
            else:
                absolute = urljoin(referral_uri, text)
            uri = normalize_uri(absolute)
        except ValueError as e:
            logger.warning("malformed_href", href=href, page=referral_uri, error=str(e))
            return None

        if urlsplit(uri).scheme not in CHECKED_SCHEMES:
            logger.debug("href_skipped_scheme", href=href, page=referral_uri)
            return None

        return uri
