"""Data models for linkwalk."""

from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, field_validator

DEFAULT_IGNORE_FILE = Path(__file__).with_name("ignore_links.txt")


class PageSourceKind(str, Enum):
    """How a page's content is obtained."""

    REMOTE = "remote"
    HTML = "html"
    MARKDOWN = "markdown"
    DIRECTORY_INDEX = "directory_index"


class PageSource(BaseModel):
    """A page URI tagged with the handler that loads it."""

    uri: str
    kind: PageSourceKind
    path: Optional[Path] = None


class HttpResult(BaseModel):
    """Outcome of a single HTTP GET: either a status and body, or an error."""

    url: str
    status: Optional[int] = None
    body: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300


class BadLink(BaseModel):
    """A link confirmed broken."""

    url: str
    referrer: Optional[str] = None
    status_code: Optional[int] = None
    reason: str = "status"


class CheckConfig(BaseModel):
    """Configuration for a link-check run."""

    base_url: Optional[str] = Field(default=None, description="Scope prefix for recursion")
    root_url: Optional[str] = Field(default=None, description="Base for root-relative links")
    recursive: bool = Field(default=True, description="Follow links inside base_url")
    error_status_codes: set[int] = Field(
        default_factory=lambda: {404},
        min_length=1,
        description="HTTP status codes treated as broken links",
    )
    devops_logging: bool = Field(default=False, description="Emit CI annotations for warnings")
    ignore_links_file: Path = Field(default=DEFAULT_IGNORE_FILE, description="Ignore list path")
    user_agent: str = Field(default="linkwalk/0.1.0", description="User agent string")
    timeout: Optional[int] = Field(default=None, ge=1, description="Request timeout in seconds")
    scanner: str = Field(default="regex", pattern="^(regex|soup)$", description="Href scanner")

    @field_validator("error_status_codes")
    @classmethod
    def _valid_status_codes(cls, codes: set[int]) -> set[int]:
        for code in codes:
            if not 100 <= code <= 599:
                raise ValueError(f"not an HTTP status code: {code}")
        return codes
