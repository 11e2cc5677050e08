"""HTTP client and page loading."""

import asyncio
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname
import aiofiles
import aiofiles.os
import aiohttp
import markdown
import structlog

from linkwalk.models import HttpResult, PageSource, PageSourceKind
from linkwalk.resolver import is_web_uri

logger = structlog.get_logger()

MARKDOWN_EXTENSIONS = ["extra"]


class FetchError(Exception):
    """A page could not be loaded."""

    def __init__(
        self,
        uri: str,
        reason: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.uri = uri
        self.reason = reason
        self.status_code = status_code
        self.detail = detail
        message = f"{reason}: {uri}"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class Fetcher:
    """Async HTTP client wrapper."""

    def __init__(self, user_agent: str = "linkwalk/0.1.0", timeout: Optional[int] = None):
        self.user_agent = user_agent
        self.timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Create session on context enter."""
        kwargs = {"headers": {"User-Agent": self.user_agent}}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        self._session = aiohttp.ClientSession(**kwargs)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close session on context exit."""
        if self._session:
            await self._session.close()

    async def get(self, url: str, read_body: bool = True) -> HttpResult:
        """
        GET a URL once, without retries.

        Redirects are followed by the client. Request-level failures are
        returned as a result with ``error`` set rather than raised.

        Args:
            url: The URL to fetch
            read_body: Whether to read and decode the response body

        Returns:
            HttpResult with status and body, or with error
        """
        if not self._session:
            raise RuntimeError("Fetcher must be used as async context manager")

        try:
            async with self._session.get(url) as response:
                body = await response.text(errors="replace") if read_body else ""
                logger.debug("fetched_url", url=url, status=response.status, size=len(body))
                return HttpResult(url=url, status=response.status, body=body)

        except asyncio.TimeoutError:
            return HttpResult(url=url, error="request timed out")

        except (aiohttp.ClientError, ValueError) as e:
            return HttpResult(url=url, error=str(e) or type(e).__name__)


def uri_to_path(uri: str) -> Path:
    """Local filesystem path of a file URI."""
    return Path(url2pathname(urlsplit(uri).path))


def classify_source(uri: str) -> PageSource:
    """
    Decide how a page URI is loaded.

    Raises:
        FetchError: If the URI is neither a web nor a file URI
    """
    if is_web_uri(uri):
        return PageSource(uri=uri, kind=PageSourceKind.REMOTE)

    if urlsplit(uri).scheme != "file":
        raise FetchError(uri, "unsupported_uri")

    path = uri_to_path(uri)
    suffix = path.suffix.lower()
    if suffix == ".md":
        return PageSource(uri=uri, kind=PageSourceKind.MARKDOWN, path=path)
    if suffix == ".html":
        return PageSource(uri=uri, kind=PageSourceKind.HTML, path=path)
    return PageSource(uri=uri, kind=PageSourceKind.DIRECTORY_INDEX, path=path / "index.html")


class PageLoader:
    """Loads page content, one handler per source kind."""

    def __init__(self, fetcher: Fetcher):
        self.fetcher = fetcher
        self._handlers = {
            PageSourceKind.REMOTE: self._load_remote,
            PageSourceKind.HTML: self._load_html,
            PageSourceKind.MARKDOWN: self._load_markdown,
            PageSourceKind.DIRECTORY_INDEX: self._load_directory_index,
        }

    async def load(self, uri: str) -> str:
        """
        Load the HTML content of a page.

        Args:
            uri: Page URI

        Returns:
            HTML text

        Raises:
            FetchError: If the page is unreachable or has an unrecognized shape
        """
        source = classify_source(uri)
        content = await self._handlers[source.kind](source)
        logger.debug("page_loaded", url=uri, kind=source.kind.value, size=len(content))
        return content

    async def _load_remote(self, source: PageSource) -> str:
        result = await self.fetcher.get(source.uri)
        if result.error is not None:
            raise FetchError(source.uri, "request_failed", detail=result.error)
        if not result.ok:
            raise FetchError(source.uri, "status", status_code=result.status)
        return result.body

    async def _load_html(self, source: PageSource) -> str:
        return await self._read(source)

    async def _load_markdown(self, source: PageSource) -> str:
        text = await self._read(source)
        return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)

    async def _load_directory_index(self, source: PageSource) -> str:
        if not await aiofiles.os.path.isfile(source.path):
            raise FetchError(source.uri, "unrecognized_path")
        return await self._read(source)

    async def _read(self, source: PageSource) -> str:
        try:
            async with aiofiles.open(source.path, mode="r", encoding="utf-8", errors="replace") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise FetchError(source.uri, "unrecognized_path", detail=str(e)) from e
        except OSError as e:
            raise FetchError(source.uri, "unreadable_file", detail=str(e)) from e
