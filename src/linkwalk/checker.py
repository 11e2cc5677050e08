"""Link existence checks."""

from typing import Iterable, Optional
import aiofiles.os
import structlog

from linkwalk.fetcher import Fetcher, uri_to_path
from linkwalk.models import BadLink
from linkwalk.resolver import is_web_uri
from linkwalk.scheduler import CrawlSession

logger = structlog.get_logger()


class LinkChecker:
    """Checks each distinct link once per session."""

    def __init__(self, fetcher: Fetcher, error_status_codes: Optional[Iterable[int]] = None):
        """
        Initialize checker.

        Args:
            fetcher: HTTP client for web links
            error_status_codes: Status codes counted as broken, {404} if None
        """
        self.fetcher = fetcher
        self.error_status_codes = frozenset(error_status_codes or {404})

    async def check(self, session: CrawlSession, uri: str, referrer: Optional[str] = None) -> None:
        """
        Check a link unless it was already checked in this session.

        Broken links are recorded on the session. Links whose status is
        neither 200 nor a configured error code, and requests that fail
        without a status, are logged but not recorded.

        Args:
            session: Current crawl session
            uri: Normalized link URI
            referrer: Page the link was found on
        """
        if session.is_link_checked(uri):
            return
        session.mark_link_checked(uri)

        if is_web_uri(uri):
            await self._check_web(session, uri, referrer)
        else:
            await self._check_file(session, uri, referrer)

    async def _check_file(self, session: CrawlSession, uri: str, referrer: Optional[str]) -> None:
        path = uri_to_path(uri)
        if await aiofiles.os.path.exists(path):
            logger.info("link_ok", url=uri)
            return

        logger.warning("broken_link", url=uri, path=str(path), page=referrer, reason="missing_file")
        session.record_bad_link(BadLink(url=uri, referrer=referrer, reason="missing_file"))

    async def _check_web(self, session: CrawlSession, uri: str, referrer: Optional[str]) -> None:
        # GET, not HEAD: some servers answer HEAD incorrectly
        result = await self.fetcher.get(uri, read_body=False)

        if result.status is None:
            logger.error("request_failed", url=uri, page=referrer, error=result.error)
        elif result.status == 200:
            logger.info("link_ok", url=uri, status=result.status)
        elif result.status in self.error_status_codes:
            logger.warning("broken_link", url=uri, status=result.status, page=referrer)
            session.record_bad_link(
                BadLink(url=uri, referrer=referrer, status_code=result.status, reason="status")
            )
        else:
            logger.info("link_status", url=uri, status=result.status, page=referrer)
