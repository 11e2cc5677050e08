"""CLI interface for linkwalk."""

import asyncio
import logging
import sys
import click
import structlog
from pydantic import ValidationError

from linkwalk import __version__
from linkwalk.crawler import Crawler
from linkwalk.models import DEFAULT_IGNORE_FILE, CheckConfig
from linkwalk.stats import CrawlReport


class ChannelLogger:
    """Writes progress to stdout and warnings/errors to stderr."""

    def _write(self, stream, message: str) -> None:
        print(message, file=stream, flush=True)

    def msg(self, message: str) -> None:
        self._write(sys.stdout, message)

    def warning(self, message: str) -> None:
        self._write(sys.stderr, message)

    debug = info = msg
    warn = error = critical = exception = warning


class ChannelLoggerFactory:
    """Creates a ChannelLogger for every bound structlog logger."""

    def __call__(self, *args) -> ChannelLogger:
        return ChannelLogger()


class DevOpsRenderer:
    """
    Renders warnings and errors as Azure DevOps logging commands.

    Other levels fall through to the console renderer.
    """

    ISSUE_TYPES = {"warning": "warning", "error": "error", "critical": "error"}

    def __init__(self):
        self._console = structlog.dev.ConsoleRenderer(colors=False)

    def __call__(self, logger, method_name: str, event_dict: dict) -> str:
        issue_type = self.ISSUE_TYPES.get(event_dict.get("level", method_name))
        if issue_type is None:
            return self._console(logger, method_name, event_dict)

        event = event_dict.pop("event", "")
        details = " ".join(
            f"{key}={value}"
            for key, value in event_dict.items()
            if key not in ("timestamp", "level") and value is not None
        )
        return f"##vso[task.logissue type={issue_type}]{event} {details}".rstrip()


def configure_logging(devops_logging: bool = False, verbose: bool = False) -> None:
    """Configure structured logging for a CLI run."""
    renderer = DevOpsRenderer() if devops_logging else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        logger_factory=ChannelLoggerFactory(),
    )


def parse_status_codes(value: str) -> set[int]:
    """
    Parse a comma-separated list of HTTP status codes.

    Raises:
        ValueError: If an entry is not an integer
    """
    codes = {int(code) for code in (part.strip() for part in value.split(",")) if code}
    if not codes:
        raise ValueError("at least one status code is required")
    return codes


@click.group()
@click.version_option(version=__version__)
def main():
    """
    LINKWALK - Dead-link crawler for documentation sites.

    Walks a page, checks every link, follows the ones in scope.
    """
    pass


@main.command()
@click.argument("url", required=False, default="")
@click.option(
    "--ignore-links-file",
    type=click.Path(dir_okay=False),
    default=str(DEFAULT_IGNORE_FILE),
    help="File of hrefs to skip, one per line, '#' starts a comment",
)
@click.option(
    "--devops-logging",
    is_flag=True,
    help="Emit warnings as Azure DevOps logging commands",
)
@click.option(
    "--recursive/--no-recursive",
    default=True,
    help="Follow links inside the base URL (default: recursive)",
)
@click.option(
    "--base-url",
    help="Scope prefix for recursion (default: directory of URL)",
)
@click.option(
    "--root-url",
    help="Base for links starting with '/' (default: site origin)",
)
@click.option(
    "--error-status-codes",
    default="404",
    help="Comma-separated HTTP status codes counted as broken (default: 404)",
)
@click.option(
    "--user-agent",
    default="linkwalk/0.1.0",
    help="Custom User-Agent string",
)
@click.option(
    "--timeout",
    type=int,
    help="Request timeout in seconds (default: client default)",
)
@click.option(
    "--scanner",
    type=click.Choice(["regex", "soup"], case_sensitive=False),
    default="regex",
    help="How hrefs are found in pages (default: regex)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Log every resolved href and queued page",
)
@click.pass_context
def check(
    ctx: click.Context,
    url: str,
    ignore_links_file: str,
    devops_logging: bool,
    recursive: bool,
    base_url: str,
    root_url: str,
    error_status_codes: str,
    user_agent: str,
    timeout: int,
    scanner: str,
    verbose: bool,
):
    """
    Check the links of a page and, recursively, of its site.

    The exit code is the number of broken links found.

    Examples:

        linkwalk check docs/index.html

        linkwalk check https://example.com/docs/ --error-status-codes 404,410

        linkwalk check _build/html --no-recursive --devops-logging
    """
    if not url.strip():
        click.echo(ctx.get_help())
        ctx.exit(0)

    configure_logging(devops_logging=devops_logging, verbose=verbose)

    try:
        codes = parse_status_codes(error_status_codes)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--error-status-codes")

    try:
        config = CheckConfig(
            base_url=base_url,
            root_url=root_url,
            recursive=recursive,
            error_status_codes=codes,
            devops_logging=devops_logging,
            ignore_links_file=ignore_links_file,
            user_agent=user_agent,
            timeout=timeout,
            scanner=scanner.lower(),
        )
    except ValidationError as e:
        raise click.UsageError(str(e))

    click.echo(f"Checking links from {url}...")

    crawler = Crawler(config=config)
    try:
        session = asyncio.run(crawler.crawl(url))
    except KeyboardInterrupt:
        click.echo("\nCrawl interrupted by user")
        session = crawler.session
        if session is None:
            ctx.exit(130)

    report = CrawlReport.from_session(session)
    click.echo(report.format_summary())
    ctx.exit(report.exit_code)


@main.command()
def version():
    """Show version information."""
    click.echo(f"linkwalk version {__version__}")
    click.echo("Dead-link crawler for documentation sites.")


if __name__ == "__main__":
    main()
