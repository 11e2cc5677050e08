"""
CI pipeline example.

Checks a built site without recursion into external hosts, skips links
listed in an ignore file and annotates warnings for Azure DevOps.
"""

import asyncio
import sys
from linkwalk import CheckConfig, Crawler, CrawlReport
from linkwalk.cli import configure_logging
from linkwalk.filters import IgnoreList


async def main() -> int:
    configure_logging(devops_logging=True)

    config = CheckConfig(
        base_url="https://docs.example.com/latest/",
        error_status_codes={404, 410},
        timeout=30,
    )
    crawler = Crawler(config, ignored=IgnoreList.load(".linkignore"))
    session = await crawler.crawl("https://docs.example.com/latest/index.html")

    report = CrawlReport.from_session(session)
    print(report.format_summary())
    return report.exit_code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
