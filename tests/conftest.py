"""Shared fixtures for contract derivation tests.

``raw_spec`` is a small in-memory document covering references, composition,
enums and cycles; ``sample_spec`` is the repo's spec/openapi.yaml.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from contractgen.loader import load_spec
from contractgen.registry import SchemaRegistry

SAMPLE_SPEC_PATH = Path(__file__).parent.parent / "spec" / "openapi.yaml"


def _schemas() -> dict[str, Any]:
    return {
        "A": {
            "type": "object",
            "properties": {"x": {"type": "string"}},
            "required": ["x"],
        },
        "B": {
            "type": "object",
            "properties": {"y": {"type": "integer"}},
        },
        "C": {
            "allOf": [
                {"$ref": "#/components/schemas/A"},
                {"$ref": "#/components/schemas/B"},
                {
                    "type": "object",
                    "properties": {"z": {"type": "boolean"}},
                    "required": ["z"],
                },
            ],
        },
        "Status": {"type": "string", "enum": ["open", "closed"]},
        "LineItem": {
            "type": "object",
            "required": ["sku"],
            "properties": {
                "sku": {"type": "string"},
                "quantity": {"type": "integer"},
            },
        },
        "Order": {
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "integer"},
                "status": {"$ref": "#/components/schemas/Status"},
                "items": {
                    "type": "array",
                    "items": {"$ref": "#/components/schemas/LineItem"},
                },
            },
        },
        "User": {
            "type": "object",
            "required": ["id", "name"],
            "properties": {
                "id": {"type": "string"},
                "name": {"type": "string"},
            },
        },
        # Direct and mutual cycles
        "Node": {
            "type": "object",
            "properties": {
                "children": {
                    "type": "array",
                    "items": {"$ref": "#/components/schemas/Node"},
                },
            },
        },
        "Ping": {
            "type": "object",
            "properties": {"pong": {"$ref": "#/components/schemas/Pong"}},
        },
        "Pong": {
            "type": "object",
            "properties": {"ping": {"$ref": "#/components/schemas/Ping"}},
        },
        # Self reference through an inline allOf wrapper
        "Branch": {
            "type": "object",
            "properties": {
                "label": {"type": "string"},
                "parent": {"allOf": [{"$ref": "#/components/schemas/Branch"}], "nullable": True},
            },
        },
        "Loop": {
            "allOf": [
                {"$ref": "#/components/schemas/Loop"},
                {"type": "object", "properties": {"n": {"type": "integer"}}},
            ],
        },
        "Dangling": {
            "type": "object",
            "properties": {"ghost": {"$ref": "#/components/schemas/Ghost"}},
        },
    }


@pytest.fixture
def raw_spec() -> dict[str, Any]:
    """A minimal document with only named schemas and an empty path table."""
    return {"paths": {}, "components": {"schemas": _schemas()}}


@pytest.fixture
def registry(raw_spec) -> SchemaRegistry:
    return SchemaRegistry.from_spec(raw_spec)


@pytest.fixture(scope="session")
def sample_spec() -> dict[str, Any]:
    return load_spec(SAMPLE_SPEC_PATH)


def json_body(schema: dict[str, Any]) -> dict[str, Any]:
    """Wrap a schema as ``application/json`` content."""
    return {"content": {"application/json": {"schema": schema}}}


def ok(schema: dict[str, Any], status: str = "200") -> dict[str, Any]:
    """A responses map with one JSON success body."""
    return {status: {"description": "OK", **json_body(schema)}}


def ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}
