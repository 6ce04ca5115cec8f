"""Immutable dictionary of named schema definitions.

Built once per run from the document and shared read-only by every
resolution call.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .errors import UnknownReference
from .loader import parse_schemas
from .models import SchemaDefinition


class SchemaRegistry(Mapping[str, SchemaDefinition]):
    """Read-only name -> ``SchemaDefinition`` mapping."""

    def __init__(self, schemas: Mapping[str, SchemaDefinition] | None = None):
        self._schemas = MappingProxyType(dict(schemas or {}))

    @classmethod
    def from_spec(cls, spec: dict[str, Any]) -> SchemaRegistry:
        return cls(parse_schemas(spec))

    def lookup(self, name: str) -> SchemaDefinition:
        """Return the named schema, raising ``UnknownReference`` if absent."""
        try:
            return self._schemas[name]
        except KeyError:
            raise UnknownReference(name) from None

    def __getitem__(self, name: str) -> SchemaDefinition:
        return self._schemas[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def __repr__(self) -> str:
        return f"SchemaRegistry({sorted(self._schemas)!r})"
