"""End-of-run summary for a crawl session."""

from collections import Counter
from typing import Any

from linkwalk.models import BadLink
from linkwalk.scheduler import CrawlSession

MAX_EXIT_CODE = 255


class CrawlReport:
    """Summarizes the outcome of a crawl session."""

    def __init__(self, pages_crawled: int, links_checked: int, bad_links: list[BadLink]):
        self.pages_crawled = pages_crawled
        self.links_checked = links_checked
        self.bad_links = bad_links

    @classmethod
    def from_session(cls, session: CrawlSession) -> "CrawlReport":
        return cls(
            pages_crawled=len(session.checked_pages),
            links_checked=len(session.checked_links),
            bad_links=list(session.bad_links),
        )

    @property
    def exit_code(self) -> int:
        """Number of broken links, capped so it never wraps to 0."""
        return min(len(self.bad_links), MAX_EXIT_CODE)

    def compute(self) -> dict[str, Any]:
        """
        Compute summary statistics.

        Returns:
            Dictionary with counts and a breakdown of broken links by status
        """
        by_status = Counter(
            str(link.status_code) if link.status_code is not None else link.reason
            for link in self.bad_links
        )
        return {
            "pages_crawled": self.pages_crawled,
            "links_checked": self.links_checked,
            "broken_links": len(self.bad_links),
            "broken_by_status": dict(by_status),
        }

    def format_summary(self) -> str:
        """
        Format the report as human-readable text.

        Returns:
            Formatted summary, one line per broken link
        """
        stats = self.compute()
        lines = [
            "=" * 60,
            "LINKWALK Summary",
            "=" * 60,
            f"Pages crawled: {stats['pages_crawled']:,}",
            f"Links checked: {stats['links_checked']:,}",
            f"Broken links:  {stats['broken_links']:,}",
        ]

        if self.bad_links:
            lines.append("")
            for link in self.bad_links:
                status = link.status_code if link.status_code is not None else link.reason
                lines.append(f"  [{status}] {link.url}")
                if link.referrer:
                    lines.append(f"      found on {link.referrer}")

        lines.append("=" * 60)
        return "\n".join(lines)
