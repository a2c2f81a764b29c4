"""Structural validation of an OpenAPI schema.

The algorithm itself comes from openapi-spec-validator. This module picks the
validator for the document's version, runs it on a deep copy and collects every
reported error into a single SchemaInvalidError.
"""

from __future__ import annotations

import copy
from typing import Any

from openapi_spec_validator import (
    OpenAPIV2SpecValidator,
    OpenAPIV30SpecValidator,
    OpenAPIV31SpecValidator,
)

from .errors import SchemaInvalidError, Violation


def _validator_cls(document: dict[str, Any]):
    if "swagger" in document:
        if str(document["swagger"]).startswith("2."):
            return OpenAPIV2SpecValidator
        raise SchemaInvalidError(
            [Violation(f"Unsupported swagger version {document['swagger']!r}", ("swagger",))]
        )

    version = str(document.get("openapi", ""))
    if version.startswith("3.0"):
        return OpenAPIV30SpecValidator
    if version.startswith("3.1"):
        return OpenAPIV31SpecValidator
    if not version:
        message = "Missing 'openapi' version field"
    else:
        message = f"Unsupported openapi version {version!r}"
    raise SchemaInvalidError([Violation(message, ("openapi",))])


def _to_violation(error: Any) -> Violation:
    message = getattr(error, "message", None) or str(error)
    path = getattr(error, "absolute_path", None) or getattr(error, "path", None)
    return Violation(message=message, path=tuple(path) if path else None)


def validate_schema(document: dict[str, Any]) -> None:
    """Raise SchemaInvalidError listing every structural violation."""
    # Some validators normalize in place; never let that reach the caller.
    candidate = copy.deepcopy(document)
    validator_cls = _validator_cls(candidate)

    violations: list[Violation] = []
    try:
        for error in validator_cls(candidate).iter_errors():
            violations.append(_to_violation(error))
    except Exception as exc:
        # e.g. an unresolvable $ref aborts iteration; keep what was found so far
        violations.append(Violation(f"{type(exc).__name__}: {exc}"))
        raise SchemaInvalidError(violations) from exc

    if violations:
        raise SchemaInvalidError(violations)
