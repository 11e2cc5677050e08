"""Core crawl driver."""

from typing import Optional
import structlog

from linkwalk.checker import LinkChecker
from linkwalk.fetcher import Fetcher, FetchError, PageLoader
from linkwalk.filters import IgnoreList
from linkwalk.models import CheckConfig
from linkwalk.parser import SCANNERS, LinkExtractor
from linkwalk.resolver import UriResolver, derive_base_url, derive_root_url, to_target_uri
from linkwalk.scheduler import CrawlSession

logger = structlog.get_logger()


class Crawler:
    """Breadth-first link checker over the pages of one site."""

    def __init__(self, config: Optional[CheckConfig] = None, ignored: Optional[IgnoreList] = None):
        """
        Initialize crawler with configuration.

        Args:
            config: Run configuration, uses defaults if None
            ignored: Ignore list, loaded from config.ignore_links_file if None
        """
        self.config = config or CheckConfig()
        self.ignored = ignored
        self.session: Optional[CrawlSession] = None

    def _scope(self, start_uri: str) -> tuple[str, str]:
        """Return (base_url, root_url), deriving whichever is not configured."""
        if self.config.base_url:
            base_url = to_target_uri(self.config.base_url)
        else:
            base_url = derive_base_url(start_uri)

        if self.config.root_url:
            root_url = to_target_uri(self.config.root_url)
        else:
            root_url = derive_root_url(start_uri, base_url)

        return base_url, root_url

    async def crawl(self, start_url: str) -> CrawlSession:
        """
        Check every link reachable from a starting page.

        Args:
            start_url: Local path or http(s) URL of the first page

        Returns:
            The finished crawl session
        """
        start_uri = to_target_uri(start_url)
        base_url, root_url = self._scope(start_uri)

        if self.ignored is None:
            self.ignored = await IgnoreList.load_async(self.config.ignore_links_file)

        extractor = LinkExtractor(
            UriResolver(root_url, self.ignored),
            SCANNERS[self.config.scanner](),
        )
        session = CrawlSession(start_uri, base_url, recursive=self.config.recursive)
        self.session = session

        logger.info(
            "crawl_started",
            url=start_uri,
            base_url=base_url,
            root_url=root_url,
            recursive=self.config.recursive,
            ignored=len(self.ignored),
        )

        async with Fetcher(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
        ) as fetcher:
            loader = PageLoader(fetcher)
            checker = LinkChecker(fetcher, self.config.error_status_codes)

            while True:
                page_uri = session.next_page()
                if page_uri is None:
                    break
                await self._crawl_page(session, page_uri, loader, extractor, checker)

        logger.info(
            "crawl_completed",
            pages_crawled=len(session.checked_pages),
            links_checked=len(session.checked_links),
            broken_links=len(session.bad_links),
        )

        return session

    async def _crawl_page(
        self,
        session: CrawlSession,
        page_uri: str,
        loader: PageLoader,
        extractor: LinkExtractor,
        checker: LinkChecker,
    ) -> None:
        """Scan one page, check its links and queue the ones in scope."""
        try:
            content = await loader.load(page_uri)
        except FetchError as e:
            logger.error(
                "page_fetch_failed",
                url=page_uri,
                reason=e.reason,
                status=e.status_code,
                error=str(e),
            )
            return

        links = extractor.extract(page_uri, content)
        logger.info("page_crawled", url=page_uri, links=len(links), queue=len(session.queue))

        for link in links:
            await checker.check(session, link, referrer=page_uri)
            session.maybe_enqueue(link)
