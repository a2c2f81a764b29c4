"""Run configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

# Reserved document key under which the options are exposed to templates
OPTIONS_KEY = "_options"

DEFAULT_OUTPUT = Path("output")


class LogLevel(str, Enum):
    QUIET = "quiet"
    STANDARD = "standard"
    VERBOSE = "verbose"


@dataclass(frozen=True)
class RunOptions:
    """Immutable configuration for one generation run."""

    output: Path = field(default=DEFAULT_OUTPUT)
    exclude: str | None = None
    skip_validation: bool = False
    log_level: LogLevel = LogLevel.STANDARD
    format_output: bool = True

    def __post_init__(self) -> None:
        # Accept plain strings from callers and the CLI.
        object.__setattr__(self, "output", Path(self.output))
        object.__setattr__(self, "log_level", LogLevel(self.log_level))
        if self.exclude == "":
            object.__setattr__(self, "exclude", None)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RunOptions:
        """Build options from a loose mapping, accepting camelCase keys too."""
        aliases = {
            "skipValidation": "skip_validation",
            "logLevel": "log_level",
            "formatOutput": "format_output",
        }
        kwargs = {aliases.get(key, key): value for key, value in data.items()}
        unknown = set(kwargs) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown run options: {', '.join(sorted(unknown))}")
        return cls(**kwargs)

    def as_template_data(self) -> dict[str, Any]:
        """Plain-data view attached to the document for templates."""
        return {
            "output": str(self.output),
            "exclude": self.exclude,
            "skip_validation": self.skip_validation,
            "log_level": self.log_level.value,
            "format_output": self.format_output,
        }
