"""
LINKWALK - Dead-link crawler for documentation sites.

Walks a page, checks every link, follows the ones in scope.
"""

__version__ = "0.1.0"

from linkwalk.crawler import Crawler
from linkwalk.models import BadLink, CheckConfig, HttpResult, PageSource, PageSourceKind
from linkwalk.stats import CrawlReport

__all__ = [
    "Crawler",
    "CheckConfig",
    "BadLink",
    "HttpResult",
    "PageSource",
    "PageSourceKind",
    "CrawlReport",
]
