"""
Logging for the generation pipeline.

Usage:
    from openapi_forge.log import Reporter, configure_logging
    configure_logging(LogLevel.VERBOSE)
    reporter = Reporter(LogLevel.VERBOSE)

The root logger name is "openapi_forge". The CLI installs the handler; library
callers may attach their own.
"""

from __future__ import annotations

import logging
import sys
import traceback
from typing import TYPE_CHECKING

from .errors import ForgeError
from .options import LogLevel

if TYPE_CHECKING:
    from .orchestrator import Counters

_LOGGER_NAME = "openapi_forge"

_LEVELS = {
    LogLevel.QUIET: logging.WARNING,
    LogLevel.STANDARD: logging.INFO,
    LogLevel.VERBOSE: logging.DEBUG,
}

DIVIDER = "-" * 51


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a child logger under the openapi_forge hierarchy."""
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    # "openapi_forge.engine" and "engine" both map to "openapi_forge.engine"
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


def configure_logging(level: LogLevel = LogLevel.STANDARD) -> None:
    """
    Configure the openapi_forge logger hierarchy.

    Levels:
        quiet     -> WARNING (failures only)
        standard  -> INFO    (stage headers + summary)
        verbose   -> DEBUG   (per-file detail, state transitions, tracebacks)
    """
    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(_LEVELS[LogLevel(level)])

    # Avoid duplicate handlers when called multiple times
    if root_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_MessageFormatter())
    root_logger.addHandler(handler)
    root_logger.propagate = False


class _MessageFormatter(logging.Formatter):
    """Emit the message as-is."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class Reporter:
    """Level-aware output channel threaded through a run."""

    def __init__(
        self,
        level: LogLevel = LogLevel.STANDARD,
        logger: logging.Logger | None = None,
    ) -> None:
        self.level = LogLevel(level)
        self.logger = logger or get_logger()

    @property
    def is_verbose(self) -> bool:
        return self.level is LogLevel.VERBOSE

    def standard(self, message: str) -> None:
        if self.level is not LogLevel.QUIET:
            self.logger.info(message)

    def verbose(self, message: str) -> None:
        if self.is_verbose:
            self.logger.debug(message)

    def success(self, counters: Counters) -> None:
        self.standard(DIVIDER)
        self.standard("            API generation SUCCESSFUL")
        self.standard(DIVIDER)
        self.standard(f" {counters.model_count} models have been molded")
        self.standard(f" {counters.endpoint_count} endpoints have been cast")
        self.standard(DIVIDER)

    def failure(self, exc: BaseException) -> None:
        """Report a captured error, summary or full detail but never both."""
        self.logger.error(DIVIDER)
        self.logger.error("              API generation FAILED")
        self.logger.error(DIVIDER)
        if self.is_verbose:
            self.logger.error(describe_error(exc))
        else:
            self.logger.error(str(exc) or type(exc).__name__)
        self.logger.error(DIVIDER)


def describe_error(exc: BaseException) -> str:
    """Verbose rendering: classified details, or the traceback otherwise."""
    text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    if isinstance(exc, ForgeError):
        return f"{exc.details()}\n{text}".rstrip()
    return text.rstrip()
