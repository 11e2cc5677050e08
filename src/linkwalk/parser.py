"""Href scanning and link extraction."""

import re
from abc import ABC, abstractmethod
from typing import Optional
from bs4 import BeautifulSoup, SoupStrainer
import structlog

from linkwalk.resolver import UriResolver

logger = structlog.get_logger()

# Anchor tag with an href value that is double quoted, single quoted or bare
HREF_PATTERN = re.compile(
    r"""<a\s[^>]*?(?<![\w-])href\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""",
    re.IGNORECASE,
)

ANCHOR_STRAINER = SoupStrainer("a", href=True)


class HrefScanner(ABC):
    """Finds raw href values of anchor tags in page content."""

    @abstractmethod
    def scan(self, content: str) -> list[str]:
        """
        Scan content for anchor hrefs.

        Args:
            content: HTML text

        Returns:
            Raw href strings in document order, duplicates included
        """


class RegexHrefScanner(HrefScanner):
    """
    Tolerant single-pass pattern scan.

    Does not understand comments, scripts, or nested quotes; an anchor
    inside an HTML comment is still reported.
    """

    def scan(self, content: str) -> list[str]:
        return [next(g for g in m.groups() if g is not None) for m in HREF_PATTERN.finditer(content)]


class SoupHrefScanner(HrefScanner):
    """Parses the document with BeautifulSoup and reads anchor hrefs."""

    def scan(self, content: str) -> list[str]:
        soup = BeautifulSoup(content, "lxml", parse_only=ANCHOR_STRAINER)
        return [anchor["href"] for anchor in soup.find_all("a", href=True)]


SCANNERS: dict[str, type[HrefScanner]] = {
    "regex": RegexHrefScanner,
    "soup": SoupHrefScanner,
}


class LinkExtractor:
    """Extracts resolved, deduplicated links from a page."""

    def __init__(self, resolver: UriResolver, scanner: Optional[HrefScanner] = None):
        """
        Initialize extractor.

        Args:
            resolver: Resolver for raw hrefs
            scanner: Href scanner, the regex scanner if None
        """
        self.resolver = resolver
        self.scanner = scanner or RegexHrefScanner()

    def extract(self, page_uri: str, content: str) -> list[str]:
        """
        Extract links from page content.

        Args:
            page_uri: URI of the page, used as the referral for relative hrefs
            content: HTML text of the page

        Returns:
            Unique Target URIs sorted by string form
        """
        hrefs = self.scanner.scan(content)
        links = set()
        for href in hrefs:
            uri = self.resolver.resolve(page_uri, href)
            if uri is not None:
                links.add(uri)

        logger.debug("links_extracted", url=page_uri, hrefs=len(hrefs), links=len(links))
        return sorted(links)
