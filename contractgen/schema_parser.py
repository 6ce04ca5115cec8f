"""Resolve schema definitions into flattened contract types.

Handles:
- $ref resolution (nominal: a reference becomes a ``named`` type bound to
  the registry entry, never an in-place expansion)
- allOf composition (right-biased property merge, union of required sets,
  reference members recorded as nominal supertypes)
- objects, free-form objects, arrays
- primitives and enumerated values (closed literal unions)
- transitive collection of every schema name a type reaches

Each call works on its own accumulator and returns what it collected, so the
result never depends on what was resolved before.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from .errors import Diagnostic, UnknownReference
from .models import (
    UNKNOWN,
    ContractKind,
    ContractType,
    Field,
    Resolution,
    SchemaDefinition,
    SchemaKind,
)
from .registry import SchemaRegistry

logger = logging.getLogger(__name__)

_PRIMITIVES: dict[str, ContractKind] = {
    "integer": ContractKind.NUMBER,
    "number": ContractKind.NUMBER,
    "string": ContractKind.STRING,
    "boolean": ContractKind.BOOLEAN,
}


class _Resolver:
    """Single-use accumulator for one resolution."""

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry
        self.referenced: set[str] = set()
        self.missing: set[str] = set()
        # Schema names whose bodies are being flattened right now
        self.expanding: set[str] = set()
        self.diagnostics: list[Diagnostic] = []

    def diagnose(self, code: str, message: str) -> None:
        logger.debug("%s: %s", code, message)
        self.diagnostics.append(Diagnostic(code, message))

    def lookup(self, name: str) -> SchemaDefinition | None:
        if name in self.missing:
            return None
        try:
            return self.registry.lookup(name)
        except UnknownReference as exc:
            self.missing.add(name)
            self.diagnose(exc.code, str(exc))
            return None

    # -- reference accumulation ------------------------------------------

    def reach(self, name: str) -> bool:
        """Record ``name`` and everything reachable from it.

        Returns False when the name is not in the registry.
        """
        if name in self.referenced:
            return True
        target = self.lookup(name)
        if target is None:
            return False
        self.referenced.add(name)
        self._walk(target)
        return True

    def _walk(self, schema: SchemaDefinition) -> None:
        if schema.kind is SchemaKind.REFERENCE:
            self.reach(schema.ref)
        elif schema.kind is SchemaKind.COMPOSITE:
            for member in schema.members:
                self._walk(member)
        elif schema.kind is SchemaKind.OBJECT:
            for prop in schema.properties.values():
                self._walk(prop)
        elif schema.kind is SchemaKind.ARRAY and schema.items is not None:
            self._walk(schema.items)

    # -- resolution ------------------------------------------------------

    def resolve(self, schema: SchemaDefinition | None) -> ContractType:
        if schema is None:
            return UNKNOWN
        if schema.kind is SchemaKind.REFERENCE:
            return self.reference(schema.ref)
        if schema.kind is SchemaKind.COMPOSITE:
            return self.composite(schema)
        if schema.kind is SchemaKind.OBJECT:
            return self.object(schema)
        if schema.kind is SchemaKind.ARRAY:
            item = self.resolve(schema.items) if schema.items is not None else UNKNOWN
            return ContractType(ContractKind.ARRAY, item=item)
        return self.primitive(schema)

    def reference(self, name: str) -> ContractType:
        if not self.reach(name):
            return UNKNOWN
        return ContractType(ContractKind.NAMED, name=name, ref=name)

    def object(self, schema: SchemaDefinition) -> ContractType:
        if not schema.properties:
            return ContractType(ContractKind.RECORD)
        fields = tuple(
            Field(prop, self.resolve(sub), prop in schema.required)
            for prop, sub in schema.properties.items()
        )
        return ContractType(ContractKind.OBJECT, fields=fields)

    def primitive(self, schema: SchemaDefinition) -> ContractType:
        if schema.enum:
            return ContractType(ContractKind.LITERAL_UNION, literals=schema.enum)
        if schema.primitive is None:
            return UNKNOWN
        kind = _PRIMITIVES.get(schema.primitive)
        if kind is None:
            self.diagnose(
                "UnsupportedSchemaType",
                f"unsupported schema type {schema.primitive!r}",
            )
            return UNKNOWN
        return ContractType(kind)

    def composite(self, schema: SchemaDefinition) -> ContractType:
        entered = bool(schema.name) and schema.name not in self.expanding
        if entered:
            self.expanding.add(schema.name)
        try:
            properties, required = self._flatten(schema)
        finally:
            if entered:
                self.expanding.discard(schema.name)
        bases = tuple(
            member.ref
            for member in schema.members
            if member.kind is SchemaKind.REFERENCE and member.ref in self.referenced
        )
        fields = tuple(
            Field(prop, contract, prop in required)
            for prop, contract in properties.items()
        )
        return ContractType(ContractKind.OBJECT, fields=fields, bases=bases)

    def _flatten(self, schema: SchemaDefinition) -> tuple[dict[str, ContractType], set[str]]:
        """Collect the properties and required names a composite member adds."""
        if schema.kind is SchemaKind.REFERENCE:
            if not self.reach(schema.ref):
                return {}, set()
            if schema.ref in self.expanding:
                self.diagnose(
                    "CyclicComposition",
                    f"schema {schema.ref!r} composes itself",
                )
                return {}, set()
            self.expanding.add(schema.ref)
            try:
                return self._flatten(self.registry[schema.ref])
            finally:
                self.expanding.discard(schema.ref)

        if schema.kind is SchemaKind.COMPOSITE:
            properties: dict[str, ContractType] = {}
            required: set[str] = set()
            for member in schema.members:
                member_props, member_required = self._flatten(member)
                # Right-biased: later members win on name collision
                properties.update(member_props)
                required |= member_required
            return properties, required

        if schema.kind is SchemaKind.OBJECT:
            properties = {prop: self.resolve(sub) for prop, sub in schema.properties.items()}
            return properties, set(schema.required)

        if schema.kind is SchemaKind.PRIMITIVE and schema.primitive is None and not schema.enum:
            # Annotation-only member (description, nullable ...)
            return {}, set()
        self.diagnose(
            "UnsupportedSchemaType",
            f"composition member of kind {schema.kind.value!r} contributes no properties",
        )
        return {}, set()

    def result(self, contract: ContractType) -> Resolution:
        return Resolution(
            contract=contract,
            referenced=frozenset(self.referenced),
            diagnostics=tuple(self.diagnostics),
        )


def resolve_schema(schema: SchemaDefinition | None, registry: SchemaRegistry) -> Resolution:
    """Resolve a named reference or inline schema into a contract type."""
    resolver = _Resolver(registry)
    return resolver.result(resolver.resolve(schema))


def referenced_closure(names: Iterable[str], registry: SchemaRegistry) -> Resolution:
    """Return every schema name reachable from ``names``.

    The contract of the result is ``unknown``; only ``referenced`` and
    ``diagnostics`` are meaningful.
    """
    resolver = _Resolver(registry)
    for name in names:
        resolver.reach(name)
    return resolver.result(UNKNOWN)


def resolve_registry(registry: SchemaRegistry) -> dict[str, Resolution]:
    """Resolve every named schema to its declaration, sorted by name.

    Unlike resolving a reference to a schema (which yields a ``named`` type),
    this expands each entry's own definition so a schema renderer can emit
    its fields and supertypes.
    """
    resolved: dict[str, Resolution] = {}
    for name in sorted(registry):
        resolver = _Resolver(registry)
        resolver.expanding.add(name)
        contract = resolver.resolve(registry[name])
        resolved[name] = resolver.result(replace(contract, name=name))
    return resolved
