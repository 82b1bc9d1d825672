"""
Input normalization.

The three request shapes (inline HTML, a file on disk, a remote URL) are
reduced to a single ContentSource: either literal markup or a URL to
navigate to. Files are always read to markup; URLs are never fetched here.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import InputNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HtmlInput:
    """Inline HTML markup."""

    html: str


@dataclass(frozen=True)
class FileInput:
    """
    HTML file on the local filesystem.

    ``remove_after_read`` is set for uploaded temp files, which must not
    outlive the request. Files named on the command line are left alone.
    """

    path: Path
    remove_after_read: bool = False


@dataclass(frozen=True)
class UrlInput:
    """Remote page to navigate to."""

    url: str


ConversionRequest = Union[HtmlInput, FileInput, UrlInput]


@dataclass(frozen=True)
class ContentSource:
    """Normalized renderer input: ``kind`` is "html" or "url"."""

    kind: str
    value: str

    @property
    def is_url(self) -> bool:
        return self.kind == "url"

    def describe(self) -> str:
        if self.is_url:
            return f"url={self.value}"
        return f"html ({len(self.value)} chars)"


def read_html_file(path: Path, remove_after_read: bool = False) -> str:
    """
    Read an HTML file as UTF-8 text (undecodable bytes become U+FFFD).

    Args:
        path: File to read
        remove_after_read: Delete the file once read, whether or not reading succeeded

    Raises:
        InputNotFound: If the file does not exist
    """
    path = Path(path)
    if not path.is_file():
        raise InputNotFound(f"HTML file '{path}' not found!")

    try:
        return path.read_text(encoding="utf-8", errors="replace")
    finally:
        if remove_after_read:
            path.unlink(missing_ok=True)
            logger.debug(f"Removed temp upload {path.name}")


def normalize(request: ConversionRequest) -> ContentSource:
    """Convert a ConversionRequest into the single source the renderer accepts."""
    if isinstance(request, HtmlInput):
        return ContentSource(kind="html", value=request.html)
    if isinstance(request, FileInput):
        return ContentSource(
            kind="html",
            value=read_html_file(request.path, request.remove_after_read),
        )
    if isinstance(request, UrlInput):
        return ContentSource(kind="url", value=request.url)
    raise TypeError(f"Unsupported conversion request: {type(request).__name__}")
