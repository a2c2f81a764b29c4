"""Code formatting for rendered output."""

from __future__ import annotations

from pathlib import PurePath

import black

from .errors import FormatterError

_LANGUAGES = {
    ".py": "python",
    ".pyi": "python",
}


def language_for(name: str) -> str | None:
    """Language hint for an output file name, or None if unknown."""
    return _LANGUAGES.get(PurePath(name).suffix.lower())


def format_python_code(code: str) -> str:
    return black.format_str(code, mode=black.Mode())


_FORMATTERS = {
    "python": format_python_code,
}


def format_source(text: str, language: str | None) -> str:
    """Format ``text`` for ``language``; unknown languages pass through.

    Raises FormatterError when the formatter rejects the text.
    """
    formatter = _FORMATTERS.get(language or "")
    if formatter is None:
        return text
    try:
        return formatter(text)
    except Exception as exc:
        raise FormatterError(f"Could not format output as {language}: {exc}") from exc
