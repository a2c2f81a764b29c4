"""Identifier conversions used by templates and the default transformers.

Operation names follow {verb}_{resource}:
  - GET collection      -> list_{plural}
  - GET collection/{id} -> get_{singular}
  - POST collection     -> create_{singular}
  - PUT collection/{id} -> update_{singular}
  - DELETE col/{id}     -> delete_{singular}

Examples:
  GET    /pets               -> list_pets
  GET    /pets/{petId}       -> get_pet
  POST   /pets               -> create_pet
  DELETE /stores/{id}/orders -> delete_stores_orders
"""

from __future__ import annotations

import re

_METHOD_VERBS: dict[str, str] = {
    "get": "list",
    "post": "create",
    "put": "update",
    "delete": "delete",
    "patch": "update",
}

_IRREGULAR_PLURALS: dict[str, str] = {
    "person": "people",
    "child": "children",
    "index": "indices",
    "status": "statuses",
    "address": "addresses",
}

_IRREGULAR_SINGULARS: dict[str, str] = {v: k for k, v in _IRREGULAR_PLURALS.items()}

# Version-like prefixes that carry no meaning in an operation name
_PREFIX_SEGMENTS = re.compile(r"^(api|v\d+)$")


def pluralize(word: str) -> str:
    """Return the plural form of a resource name."""
    if word in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[word]
    if word in _IRREGULAR_SINGULARS:
        return word
    if word.endswith("y") and word[-2:-1] not in ("a", "e", "i", "o", "u"):
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "ch", "sh")):
        return word if word.endswith("s") and not word.endswith("ss") else word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """Return the singular form of a resource name."""
    if word in _IRREGULAR_SINGULARS:
        return _IRREGULAR_SINGULARS[word]
    if word in _IRREGULAR_PLURALS:
        return word
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith(("ches", "shes", "xes", "sses")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def _words(name: str) -> list[str]:
    """Split camelCase, PascalCase, snake_case, kebab-case or spaced text."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", name)
    s2 = re.sub(r"([a-z\d])([A-Z])", r"\1 \2", s1)
    return [w for w in re.split(r"[^A-Za-z0-9]+", s2) if w]


def snake_case(name: str) -> str:
    """Convert any identifier-ish text to snake_case."""
    return "_".join(w.lower() for w in _words(name))


def kebab_case(name: str) -> str:
    return "-".join(w.lower() for w in _words(name))


def _capitalize(word: str) -> str:
    # Acronyms become "Http", mixed-case words keep their inner capitals
    if word.isupper():
        word = word.lower()
    return word[:1].upper() + word[1:]


def pascal_case(name: str) -> str:
    return "".join(_capitalize(w) for w in _words(name))


def camel_case(name: str) -> str:
    pascal = pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def python_identifier(name: str) -> str:
    """snake_case that is always a valid Python identifier."""
    ident = snake_case(name) or "_"
    if ident[0].isdigit():
        ident = f"_{ident}"
    return ident


def _extract_path_parts(path: str) -> list[str]:
    """Meaningful path segments, without {params} or api/version prefixes."""
    parts = [p for p in path.split("/") if p and not p.startswith("{")]
    while parts and _PREFIX_SEGMENTS.match(parts[0].lower()):
        parts = parts[1:]
    return parts


def build_operation_name(method: str, path: str) -> str:
    """Build an operation name from HTTP method and path.

    Returns a name like 'list_pets' or 'get_pet'.
    """
    method_lower = method.lower()
    parts = _extract_path_parts(path)
    has_id = any(p.startswith("{") for p in path.split("/") if p)

    if method_lower == "get":
        verb = "get" if has_id else "list"
    else:
        verb = _METHOD_VERBS.get(method_lower, method_lower)

    if not parts:
        return f"{verb}_root"

    clean_parts = [snake_case(p) for p in parts]

    # Single-segment paths: standard CRUD
    if len(clean_parts) == 1:
        resource = clean_parts[0]
        if verb == "list":
            resource = pluralize(resource)
        elif has_id or verb == "create":
            resource = singularize(resource)
        return f"{verb}_{resource}"

    # Multi-segment paths: join with underscores
    return f"{verb}_{'_'.join(clean_parts)}"
