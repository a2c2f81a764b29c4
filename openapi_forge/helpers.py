"""Built-in template helpers.

Registered as both Jinja filters and globals before any generator helper, so
a generator can override any of them by shipping a helper of the same name.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from . import naming
from .transformers import ref_name, resolve_schema_type


def to_json(value: Any, indent: int | None = None) -> str:
    return json.dumps(value, indent=indent, sort_keys=indent is not None, default=str)


BUILTIN_HELPERS: dict[str, Callable[..., Any]] = {
    "snake_case": naming.snake_case,
    "camel_case": naming.camel_case,
    "pascal_case": naming.pascal_case,
    "kebab_case": naming.kebab_case,
    "pluralize": naming.pluralize,
    "singularize": naming.singularize,
    "ref_name": ref_name,
    "type_hint": resolve_schema_type,
    "to_json": to_json,
}
