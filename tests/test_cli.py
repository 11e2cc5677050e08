"""Tests for the command line interface."""

import pytest
import structlog
from click.testing import CliRunner

from linkwalk import __version__
from linkwalk.cli import DevOpsRenderer, main, parse_status_codes


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def split_runner():
    """Runner that keeps stdout and stderr apart."""
    try:
        return CliRunner(mix_stderr=False)
    except TypeError:
        # click 8.2 always separates the streams and dropped mix_stderr
        return CliRunner()


class TestCheckCommand:
    """Test the check command."""

    def test_empty_url_prints_usage(self, runner):
        result = runner.invoke(main, ["check"])

        assert result.exit_code == 0
        assert "Usage:" in result.output

    def test_exit_code_counts_broken_links(self, runner, docs_dir):
        result = runner.invoke(main, ["check", str(docs_dir / "index.html")])

        assert result.exit_code == 1
        assert "Broken links:  1" in result.output
        assert "missing.html" in result.output

    def test_clean_docs_exit_zero(self, runner, docs_dir):
        (docs_dir / "missing.html").write_text("<p>here now</p>", encoding="utf-8")

        result = runner.invoke(main, ["check", str(docs_dir / "index.html")])

        assert result.exit_code == 0
        assert "Broken links:  0" in result.output

    def test_ignore_links_file(self, runner, docs_dir, tmp_path):
        ignore_file = tmp_path / "ignore.txt"
        ignore_file.write_text("missing.html\n", encoding="utf-8")

        result = runner.invoke(
            main, ["check", str(docs_dir / "index.html"), "--ignore-links-file", str(ignore_file)]
        )

        assert result.exit_code == 0

    def test_no_recursive(self, runner, docs_dir):
        result = runner.invoke(main, ["check", str(docs_dir / "index.html"), "--no-recursive"])

        assert result.exit_code == 1
        assert "Pages crawled: 1" in result.output

    def test_devops_logging(self, runner, docs_dir):
        result = runner.invoke(main, ["check", str(docs_dir / "index.html"), "--devops-logging"])

        assert result.exit_code == 1
        assert "##vso[task.logissue type=warning]broken_link" in result.output

    def test_warnings_go_to_stderr(self, split_runner, docs_dir):
        """Test progress is on stdout and broken-link warnings on stderr."""
        result = split_runner.invoke(main, ["check", str(docs_dir / "index.html")])

        assert result.exit_code == 1
        assert "broken_link" in result.stderr
        assert "broken_link" not in result.stdout
        assert "page_crawled" in result.stdout
        assert "page_crawled" not in result.stderr
        assert "Broken links:  1" in result.stdout

    def test_devops_annotations_go_to_stderr(self, split_runner, docs_dir):
        result = split_runner.invoke(
            main, ["check", str(docs_dir / "index.html"), "--devops-logging"]
        )

        assert "##vso[task.logissue type=warning]broken_link" in result.stderr
        assert "##vso" not in result.stdout

    def test_invalid_status_codes(self, runner, docs_dir):
        result = runner.invoke(
            main, ["check", str(docs_dir / "index.html"), "--error-status-codes", "404,abc"]
        )

        assert result.exit_code == 2

    def test_out_of_range_status_code(self, runner, docs_dir):
        result = runner.invoke(
            main, ["check", str(docs_dir / "index.html"), "--error-status-codes", "404,999"]
        )

        assert result.exit_code == 2


def test_version_command(runner):
    result = runner.invoke(main, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_parse_status_codes():
    assert parse_status_codes("404") == {404}
    assert parse_status_codes(" 404, 410 ,") == {404, 410}
    with pytest.raises(ValueError):
        parse_status_codes("")


class TestDevOpsRenderer:
    """Test CI annotation rendering."""

    def test_warning(self):
        line = DevOpsRenderer()(
            None,
            "warning",
            {"event": "broken_link", "level": "warning", "url": "https://example.com/x", "page": None},
        )

        assert line == "##vso[task.logissue type=warning]broken_link url=https://example.com/x"

    def test_error(self):
        line = DevOpsRenderer()(None, "error", {"event": "page_fetch_failed", "level": "error"})

        assert line == "##vso[task.logissue type=error]page_fetch_failed"

    def test_info_uses_console(self):
        line = DevOpsRenderer()(None, "info", {"event": "link_ok", "level": "info"})

        assert "##vso" not in line
        assert "link_ok" in line
