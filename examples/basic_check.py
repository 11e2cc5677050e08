"""
Basic link check example.

This script demonstrates the simplest way to use linkwalk as a library.
"""

import asyncio
import sys
from linkwalk import CheckConfig, Crawler, CrawlReport


async def main(start: str) -> int:
    """Check a docs build and print the broken links."""
    print(f"Checking {start}...")

    crawler = Crawler(CheckConfig(error_status_codes={404, 410}))
    session = await crawler.crawl(start)

    report = CrawlReport.from_session(session)
    print(report.format_summary())
    return report.exit_code


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "docs/index.html")))
