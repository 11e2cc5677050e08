"""Ignore list handling."""

from pathlib import Path
from typing import Iterable, Optional, Union
import aiofiles
import aiofiles.os
import structlog

logger = structlog.get_logger()


class IgnoreList:
    """Literal href strings that are never checked or crawled."""

    def __init__(self, links: Optional[Iterable[str]] = None):
        """
        Initialize ignore list.

        Args:
            links: Raw href strings to ignore, matched exactly
        """
        self.links: set[str] = set(links or [])

    def __contains__(self, href: object) -> bool:
        return href in self.links

    def __len__(self) -> int:
        return len(self.links)

    @staticmethod
    def parse_line(line: str) -> Optional[str]:
        """
        Strip a comment and surrounding whitespace from one line.

        Returns:
            The ignored href, or None for blank and comment-only lines
        """
        entry = line.split("#", 1)[0].strip()
        return entry or None

    @classmethod
    def load(cls, path: Union[str, Path]) -> "IgnoreList":
        """
        Load ignore list from a text file.

        A missing file yields an empty list.

        Args:
            path: Path to the ignore file

        Returns:
            IgnoreList instance
        """
        path = Path(path)
        if not path.is_file():
            logger.debug("ignore_list_missing", path=str(path))
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            entries = [entry for entry in map(cls.parse_line, f) if entry]

        logger.debug("ignore_list_loaded", path=str(path), count=len(entries))
        return cls(entries)

    @classmethod
    async def load_async(cls, path: Union[str, Path]) -> "IgnoreList":
        """Load ignore list without blocking the event loop; see load()."""
        path = Path(path)
        if not await aiofiles.os.path.isfile(path):
            logger.debug("ignore_list_missing", path=str(path))
            return cls()

        async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
            entries = [entry for entry in map(cls.parse_line, await f.readlines()) if entry]

        logger.debug("ignore_list_loaded", path=str(path), count=len(entries))
        return cls(entries)


def load_ignore_list(path: Union[str, Path]) -> set[str]:
    """Load an ignore file into a plain set of href strings."""
    return IgnoreList.load(path).links
