"""Schema transformation pipeline and the default transformer chain.

A transformer is any callable taking the document and mutating it in place.
The chain is an explicit, ordered sequence chosen by the caller; order is part
of the chain's contract, not of the pipeline.

The default chain enriches the document with keys prefixed by ``_`` so that
templates don't need to re-derive them:
  - components.schemas.<Model>._name
  - components.schemas.<Model>.properties.<prop>._type / ._required
  - _operations: flat list of every (method, path) operation
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from .errors import SchemaInvalidError, Violation
from .loader import get_paths, get_schemas, resolve_ref
from .naming import build_operation_name, pascal_case, python_identifier

Transformer = Callable[[dict[str, Any]], None]

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def apply_transformers(document: dict[str, Any], transformers: Iterable[Transformer]) -> None:
    """Run each transformer in order. Exceptions propagate untouched."""
    for transformer in transformers:
        transformer(document)


# ---------------------------------------------------------------------------
# Type resolution
# ---------------------------------------------------------------------------

def ref_name(ref: str) -> str:
    """'#/components/schemas/Pet' -> 'Pet'"""
    return ref.rsplit("/", 1)[-1]


def resolve_schema_type(schema: dict[str, Any] | bool | None) -> str:
    """Resolve an OpenAPI schema to a Python type-hint string."""
    # 3.1 allows boolean schemas, e.g. ``items: true``
    if not isinstance(schema, dict) or not schema:
        return "Any"

    if "$ref" in schema:
        return pascal_case(ref_name(schema["$ref"]))

    if "allOf" in schema:
        refs = [sub for sub in schema["allOf"] if isinstance(sub, dict) and "$ref" in sub]
        if len(refs) == 1 and len(schema["allOf"]) == 1:
            return resolve_schema_type(refs[0])
        return "dict"

    for key in ("oneOf", "anyOf"):
        if key in schema:
            options = []
            for sub in schema[key]:
                t = resolve_schema_type(sub)
                if t not in options:
                    options.append(t)
            if not options:
                return "Any"
            return options[0] if len(options) == 1 else " | ".join(options)

    if "enum" in schema:
        return "str" if schema.get("type", "string") == "string" else _primitive(schema.get("type"))

    schema_type = schema.get("type")
    # OpenAPI 3.1 allows a list of types, e.g. ["string", "null"]
    if isinstance(schema_type, list):
        types = [t for t in schema_type if t != "null"]
        base = resolve_schema_type({**schema, "type": types[0]}) if types else "None"
        return f"{base} | None" if "null" in schema_type and types else base

    if schema_type == "array":
        item_type = resolve_schema_type(schema.get("items"))
        return f"list[{item_type}]"
    if schema_type == "object" or "properties" in schema:
        additional = schema.get("additionalProperties")
        if isinstance(additional, dict) and not schema.get("properties"):
            return f"dict[str, {resolve_schema_type(additional)}]"
        return "dict"

    return _primitive(schema_type)


def _primitive(schema_type: Any) -> str:
    return {
        "string": "str",
        "integer": "int",
        "number": "float",
        "boolean": "bool",
        "null": "None",
    }.get(schema_type, "Any")


def get_response_type(spec: dict[str, Any], operation: dict[str, Any]) -> str:
    """Classify the success response of an operation as array, object, or none."""
    responses = operation.get("responses") or {}
    success = responses.get("200") or responses.get("201") or {}
    if "$ref" in success:
        success = resolve_ref(spec, success["$ref"])
    content = success.get("content") or {}

    for ct in ("application/json", "text/json", "text/plain"):
        if ct in content:
            schema = (content[ct] or {}).get("schema") or {}
            if not isinstance(schema, dict):
                return "primitive"
            if "$ref" in schema:
                schema = resolve_ref(spec, schema["$ref"])
            if schema.get("type") == "array":
                return "array"
            if schema.get("type") == "object" or "properties" in schema:
                return "object"
            if schema:
                return "primitive"
    return "none"


def parse_parameters(
    spec: dict[str, Any],
    path_item: dict[str, Any],
    operation: dict[str, Any],
    where: tuple[str, ...] = (),
) -> list[dict[str, Any]]:
    """Path-level and operation-level parameters; the operation wins on clashes.

    ``where`` locates the operation in the document, e.g. ``("paths", "/pets", "get")``,
    and is used to point at a parameter without a name.
    """
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    sources = (
        (where[:-1], path_item.get("parameters") or []),
        (where, operation.get("parameters") or []),
    )
    for prefix, params in sources:
        for index, param in enumerate(params):
            param = _parameter(spec, param, (*prefix, "parameters", index))
            location = param.get("in", "query")
            merged[(param["name"], location)] = {
                "name": param["name"],
                "identifier": python_identifier(param["name"]),
                "location": location,
                "type": resolve_schema_type(param.get("schema")),
                "required": bool(param.get("required", location == "path")),
                "description": param.get("description", ""),
            }
    return list(merged.values())


def _parameter(spec: dict[str, Any], param: Any, pointer: tuple[Any, ...]) -> dict[str, Any]:
    if isinstance(param, dict) and "$ref" in param:
        param = resolve_ref(spec, param["$ref"])
    if not isinstance(param, dict) or not isinstance(param.get("name"), str):
        raise SchemaInvalidError([Violation("Parameter has no 'name'", pointer)])
    return param


def get_body_type(spec: dict[str, Any], operation: dict[str, Any]) -> str | None:
    """Python type of the JSON request body, or None when there is none."""
    request_body = operation.get("requestBody") or {}
    if "$ref" in request_body:
        request_body = resolve_ref(spec, request_body["$ref"])
    content = request_body.get("content") or {}
    json_content = content.get("application/json")
    if json_content is None:
        return None
    return resolve_schema_type(json_content.get("schema"))


# ---------------------------------------------------------------------------
# Default transformers
# ---------------------------------------------------------------------------

def name_models(document: dict[str, Any]) -> None:
    """Record each component schema's key on the schema itself."""
    for name, model in get_schemas(document).items():
        if isinstance(model, dict):
            model["_name"] = name


def annotate_property_types(document: dict[str, Any]) -> None:
    """Attach a Python type hint and required flag to every model property."""
    for model in get_schemas(document).values():
        if not isinstance(model, dict):
            continue
        required = set(model.get("required") or [])
        for prop_name, prop_schema in (model.get("properties") or {}).items():
            if not isinstance(prop_schema, dict):
                continue
            prop_schema["_type"] = resolve_schema_type(prop_schema)
            prop_schema["_required"] = prop_name in required


def collect_operations(document: dict[str, Any]) -> None:
    """Flatten paths into a list of operations under ``_operations``."""
    operations: list[dict[str, Any]] = []

    for path, path_item in sorted(get_paths(document).items()):
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue

            operation_id = operation.get("operationId")
            if operation_id:
                name = python_identifier(operation_id)
            else:
                name = build_operation_name(method, path)

            operations.append({
                "name": name,
                "method": method,
                "path": path,
                "operation": operation,
                "parameters": parse_parameters(
                    document, path_item, operation, ("paths", path, method)
                ),
                "body_type": get_body_type(document, operation),
                "tags": operation.get("tags", []),
                "response_type": get_response_type(document, operation),
            })

    _deduplicate_names(operations)
    document["_operations"] = operations


def _deduplicate_names(operations: list[dict[str, Any]]) -> None:
    """Rename clashing operations in place.

    The first operation to claim a name keeps it. Later ones get the HTTP method
    appended, then a counter, skipping every name any operation already uses.
    """
    taken = {op["name"] for op in operations}
    claimed: set[str] = set()
    for op in operations:
        base = op["name"]
        if base not in claimed:
            claimed.add(base)
            continue
        candidate = f"{base}_{op['method']}"
        counter = 2
        while candidate in taken:
            candidate = f"{base}_{op['method']}_{counter}"
            counter += 1
        taken.add(candidate)
        op["name"] = candidate


DEFAULT_TRANSFORMERS: tuple[Transformer, ...] = (
    name_models,
    annotate_property_types,
    collect_operations,
)
