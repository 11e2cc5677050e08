"""Crawl session state: page queue and membership sets."""

from collections import deque
from typing import Optional
import structlog

from linkwalk.models import BadLink

logger = structlog.get_logger()


class CrawlSession:
    """
    All mutable state of a single run.

    Pages are queued FIFO and scanned at most once; links are checked at
    most once; broken links are appended in discovery order.
    """

    def __init__(self, start_uri: str, base_url: str, recursive: bool = True):
        self.start_uri = start_uri
        self.base_url = base_url
        self.recursive = recursive
        self.queue: deque[str] = deque([start_uri])
        self.checked_pages: set[str] = set()
        self.checked_links: set[str] = set()
        self.bad_links: list[BadLink] = []

    def next_page(self) -> Optional[str]:
        """
        Dequeue the next page that has not been scanned yet.

        Returns:
            Page URI, or None once the queue is drained
        """
        while self.queue:
            uri = self.queue.popleft()
            if uri in self.checked_pages:
                continue
            self.checked_pages.add(uri)
            return uri
        return None

    def in_scope(self, uri: str) -> bool:
        """Check if a link is inside the recursion scope prefix."""
        return uri.startswith(self.base_url)

    def maybe_enqueue(self, uri: str) -> bool:
        """
        Queue a link for crawling if recursion allows it.

        Returns:
            True if the link was queued
        """
        if not self.recursive or not self.in_scope(uri) or uri in self.checked_pages:
            return False

        self.queue.append(uri)
        logger.debug("page_queued", url=uri, queue_size=len(self.queue))
        return True

    def is_link_checked(self, uri: str) -> bool:
        return uri in self.checked_links

    def mark_link_checked(self, uri: str) -> None:
        self.checked_links.add(uri)

    def record_bad_link(self, bad_link: BadLink) -> None:
        self.bad_links.append(bad_link)

    def is_empty(self) -> bool:
        """Check if queue is empty."""
        return len(self.queue) == 0
