"""Load and parse an OpenAPI schema.

Reads a local file or fetches a URL, then parses it as YAML or JSON
depending on the reference's extension.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import yaml

from . import locator
from .errors import SchemaFetchError, SchemaInvalidError, SchemaParseError, SchemaReadError, Violation

YAML_SUFFIXES = (".yml", ".yaml")
LOCAL_REF_PREFIX = "#/"


def load_schema(
    reference: str | Path,
    client: httpx.Client | None = None,
) -> dict[str, Any]:
    """Load the OpenAPI schema from a path or URL."""
    source = locator.resolve(reference)
    if source.is_remote:
        text = _fetch(source.reference, client)
    else:
        text = _read(source.location)
    return parse_schema(text, source.reference)


def _fetch(url: str, client: httpx.Client | None) -> str:
    try:
        if client is None:
            response = httpx.get(url, follow_redirects=True)
        else:
            response = client.get(url, follow_redirects=True)
    except httpx.HTTPError as exc:
        raise SchemaFetchError(url) from exc
    if response.status_code != 200:
        raise SchemaFetchError(url, response.status_code)
    return response.text


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SchemaReadError(str(path), "file does not exist") from exc
    except OSError as exc:
        raise SchemaReadError(str(path), exc.strerror or str(exc)) from exc


def is_yaml(reference: str) -> bool:
    # Ignore any query string on a URL
    return reference.split("?", 1)[0].lower().endswith(YAML_SUFFIXES)


def parse_schema(text: str, reference: str) -> dict[str, Any]:
    """Parse schema text as YAML or strict JSON."""
    try:
        if is_yaml(reference):
            document = yaml.safe_load(text)
        else:
            document = json.loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        raise SchemaParseError(reference, str(exc)) from exc

    if not isinstance(document, dict):
        raise SchemaParseError(
            reference, f"expected a mapping at the top level, got {type(document).__name__}"
        )
    return document


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths") or {}


def get_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract component schemas from the spec."""
    return (spec.get("components") or {}).get("schemas") or {}


def resolve_ref(spec: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve a local $ref pointer in the spec.

    Raises SchemaInvalidError for a reference into another document and for
    one that points at nothing.
    """
    if not isinstance(ref, str) or not ref.startswith(LOCAL_REF_PREFIX):
        raise SchemaInvalidError([Violation(f"Only local references are supported, got {ref!r}")])
    node: Any = spec
    for part in ref.removeprefix(LOCAL_REF_PREFIX).split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        try:
            node = node[part]
        except (KeyError, TypeError) as exc:
            raise SchemaInvalidError([Violation(f"Unresolvable reference {ref!r}")]) from exc
    return node
