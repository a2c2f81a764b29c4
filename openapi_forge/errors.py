"""Error taxonomy for a generation run.

Every stage raises one of these and lets it propagate; the orchestrator is the
only place that catches them. Errors raised by transformers or generator
helpers are not wrapped and pass through as whatever they are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class ForgeError(Exception):
    """Base class for classified generation failures."""

    def details(self) -> str:
        """Full diagnostic text, shown in verbose mode."""
        return str(self)


class InvalidGeneratorReferenceError(ForgeError):
    """A remote generator reference that does not point at a git repository."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(
            f"Generator URL '{reference}' does not end with \".git\","
            " check that the URL points to a valid generator"
        )


class InvalidGeneratorError(ForgeError):
    """A generator directory that is missing or has no template folder."""


class GeneratorCloneError(ForgeError):
    """``git clone`` of a remote generator failed."""

    def __init__(self, reference: str, stderr: str = "") -> None:
        self.reference = reference
        self.stderr = stderr.strip()
        super().__init__(f"Failed to clone generator from '{reference}'")

    def details(self) -> str:
        if not self.stderr:
            return str(self)
        return f"{self}\n{self.stderr}"


class SchemaError(ForgeError):
    """Base class for schema acquisition and validation failures."""


class SchemaFetchError(SchemaError):
    def __init__(self, reference: str, status: int | None = None) -> None:
        self.reference = reference
        self.status = status
        message = f"Failed to load schema from {reference}"
        if status is not None:
            message += f" (HTTP {status})"
        super().__init__(message)


class SchemaReadError(SchemaError):
    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Failed to read schema file {reference}: {reason}")


class SchemaParseError(SchemaError):
    def __init__(self, reference: str, diagnostic: str) -> None:
        self.reference = reference
        self.diagnostic = diagnostic
        super().__init__(f"Failed to parse schema {reference}: {diagnostic}")


@dataclass(frozen=True)
class Violation:
    """One structural problem found in a schema."""

    message: str
    path: tuple[Any, ...] | None = None

    @property
    def location(self) -> str | None:
        if not self.path:
            return None
        # JSON pointer, so "/pets" stays one segment
        return "/" + "/".join(
            str(part).replace("~", "~0").replace("/", "~1") for part in self.path
        )

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.message} at {self.location}"


class SchemaInvalidError(SchemaError):
    """Aggregates every violation reported for a schema."""

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = list(violations)
        count = len(self.violations)
        noun = "error" if count == 1 else "errors"
        super().__init__(f"Schema validation failed with {count} {noun}")

    def details(self) -> str:
        lines = [str(self)]
        lines.extend(f"  - {violation}" for violation in self.violations)
        return "\n".join(lines)


class FormatterError(ForgeError):
    """Rendered text could not be reformatted. Never fatal to a run."""
