"""Classify schema and generator references as local paths or remote URLs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

FILE_SCHEME = "file"


@dataclass(frozen=True)
class SourceLocation:
    reference: str
    is_remote: bool
    location: str | Path


def _parse(reference: str):
    try:
        return urlparse(reference)
    except ValueError:
        return None


def is_url(reference: str) -> bool:
    """True if the reference parses as an absolute network URL."""
    parsed = _parse(reference)
    if parsed is None or parsed.scheme == FILE_SCHEME:
        return False
    # A Windows drive letter parses as a one-letter scheme with no netloc.
    return bool(parsed.scheme) and bool(parsed.netloc)


def resolve(reference: str | Path) -> SourceLocation:
    """Classify a reference without touching the filesystem or network.

    ``file:`` URLs are local: their path is read from disk like any other.
    """
    text = str(reference)
    if is_url(text):
        return SourceLocation(reference=text, is_remote=True, location=text)
    parsed = _parse(text)
    if parsed is not None and parsed.scheme == FILE_SCHEME:
        path = Path(url2pathname(parsed.path))
    else:
        path = Path(text)
    return SourceLocation(
        reference=text,
        is_remote=False,
        location=path.expanduser().resolve(),
    )
