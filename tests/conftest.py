"""Pytest configuration and fixtures."""

from collections import Counter

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer as SiteServer


SITE_PAGES = {
    "/": """
        <a href="/about">About</a>
        <a href="guide/">Guide</a>
        <a href="/missing">Missing</a>
        <a href="mailto:docs@example.com">Mail</a>
    """,
    "/about": '<a href="/">Home</a> <a href="/forbidden">Secret</a>',
    "/guide/": "<a href='intro'>Intro</a> <a href=/about#team>Team</a>",
    "/guide/intro": '<a href="../">Back</a> <a href="/gone">Gone</a>',
    "/escaped": '<a href="caf%E9">Caf&eacute;</a> <a href="a%2Fb">Slash</a>',
}


# Served only when requested with exactly this escaping
ESCAPED_PATHS = {"/caf%E9", "/a%2Fb"}


class Site:
    """A local web site served for the duration of a test."""

    def __init__(self, server: SiteServer, hits: Counter):
        self.server = server
        self.hits = hits

    def url(self, path: str = "/") -> str:
        return str(self.server.make_url(path))


def build_site_app(hits: Counter) -> web.Application:
    async def handler(request: web.Request) -> web.Response:
        if request.raw_path in ESCAPED_PATHS:
            hits[request.raw_path] += 1
            return web.Response(text="escaped", content_type="text/html")
        hits[request.path] += 1
        if request.path in SITE_PAGES:
            return web.Response(text=SITE_PAGES[request.path], content_type="text/html")
        if request.path == "/forbidden":
            return web.Response(status=403, text="forbidden")
        if request.path == "/gone":
            return web.Response(status=410, text="gone")
        if request.path == "/moved":
            raise web.HTTPFound("/about")
        return web.Response(status=404, text="not found")

    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", handler)
    return app


@pytest_asyncio.fixture
async def site():
    """Serve SITE_PAGES on a local port."""
    hits: Counter = Counter()
    server = SiteServer(build_site_app(hits))
    await server.start_server()
    yield Site(server, hits)
    await server.close()


@pytest.fixture
def sample_html():
    """Sample HTML for testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head><title>Test Page</title></head>
    <body>
        <a href="/page1">Page 1</a>
        <a class="nav" href='page2.html' title="Page 2">Page 2</a>
        <a href=page3.html>Page 3</a>
        <a href="https://external.com/">External</a>
        <a href="page2.html#section">Page 2 again</a>
        <a href="mailto:someone@example.com">Mail</a>
        <a name="anchor-only">No href</a>
    </body>
    </html>
    """


@pytest.fixture
def docs_dir(tmp_path):
    """
    A small local docs build.

    index.html links to a missing page and to guide.md; guide.md links
    back and to the setup/ directory, whose index links back again.
    """
    docs = tmp_path / "docs"
    (docs / "setup").mkdir(parents=True)
    (docs / "index.html").write_text(
        '<a href="missing.html">Missing</a>\n<a href="guide.md">Guide</a>\n',
        encoding="utf-8",
    )
    (docs / "guide.md").write_text(
        "# Guide\n\n[Home](index.html)\n\n[Setup](setup/)\n",
        encoding="utf-8",
    )
    (docs / "setup" / "index.html").write_text(
        '<a href="../index.html">Back</a> <a href="/guide.md">Guide</a>',
        encoding="utf-8",
    )
    return docs
