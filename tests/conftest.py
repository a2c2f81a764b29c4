"""Shared fixtures for the openapi_forge test suite.

Generators are built on the fly under tmp_path; nothing here touches the
network or runs git.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml


def _response(description: str, ref: str | None = None, array: bool = False) -> dict[str, Any]:
    response: dict[str, Any] = {"description": description}
    if ref is not None:
        schema: dict[str, Any] = {"$ref": ref}
        if array:
            schema = {"type": "array", "items": schema}
        response["content"] = {"application/json": {"schema": schema}}
    return response


# Valid OpenAPI 3.0 document: 3 models, 5 paths
PETSTORE: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "tags": ["pets"],
                "responses": {"200": _response("All pets", "#/components/schemas/Pet", array=True)},
            },
            "post": {
                "operationId": "createPet",
                "tags": ["pets"],
                "requestBody": {
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
                    }
                },
                "responses": {"201": _response("Created", "#/components/schemas/Pet")},
            },
        },
        "/pets/{petId}": {
            "parameters": [
                {"name": "petId", "in": "path", "required": True, "schema": {"type": "integer"}}
            ],
            "get": {
                "operationId": "getPet",
                "responses": {"200": _response("A pet", "#/components/schemas/Pet")},
            },
            "delete": {
                "responses": {"204": _response("Deleted")},
            },
        },
        "/stores": {
            "get": {
                "responses": {"200": _response("Stores", "#/components/schemas/Store", array=True)},
            },
        },
        "/stores/{storeId}/orders": {
            "parameters": [
                {"name": "storeId", "in": "path", "required": True, "schema": {"type": "string"}}
            ],
            "get": {
                "responses": {"200": _response("Orders")},
            },
        },
        "/health": {
            "get": {
                "responses": {"200": _response("Healthy")},
            },
        },
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "required": ["id", "name"],
                "properties": {
                    "id": {"type": "integer"},
                    "name": {"type": "string"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                    "store": {"$ref": "#/components/schemas/Store"},
                },
            },
            "Store": {
                "type": "object",
                "properties": {
                    "address": {"type": "string", "nullable": True},
                },
            },
            "Error": {
                "type": "object",
                "properties": {
                    "code": {"type": "integer"},
                    "message": {"type": "string"},
                },
            },
        }
    },
}


@pytest.fixture
def petstore() -> dict[str, Any]:
    """A fresh deep copy of the petstore document."""
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def schema_files(tmp_path: Path, petstore: dict[str, Any]) -> dict[str, Path]:
    """The petstore document written as JSON and as YAML."""
    json_path = tmp_path / "openapi.json"
    json_path.write_text(json.dumps(petstore), encoding="utf-8")
    yaml_path = tmp_path / "openapi.yaml"
    yaml_path.write_text(yaml.safe_dump(petstore, sort_keys=False), encoding="utf-8")
    return {"json": json_path, "yaml": yaml_path}


GeneratorFactory = Callable[..., Path]


@pytest.fixture
def make_generator(tmp_path: Path) -> GeneratorFactory:
    """Return a callable that writes a generator directory.

    Usage::

        root = make_generator({"a.py.j2": "x = 1"}, helpers={"shout.py": "..."})
    """
    counter = {"n": 0}

    def _make(
        templates: dict[str, str] | None = None,
        helpers: dict[str, str] | None = None,
        partials: dict[str, str] | None = None,
        with_template_dir: bool = True,
    ) -> Path:
        counter["n"] += 1
        root = tmp_path / f"generator{counter['n']}"
        root.mkdir()
        if with_template_dir:
            (root / "template").mkdir()
        for folder, files in (("template", templates), ("helpers", helpers), ("partials", partials)):
            for name, content in (files or {}).items():
                path = root / folder / name
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture(autouse=True)
def _reset_forge_logger():
    """Undo configure_logging() so caplog keeps seeing records."""
    yield
    logger = logging.getLogger("openapi_forge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
