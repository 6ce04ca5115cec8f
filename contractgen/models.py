"""Data model for API descriptions and the contracts derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import Diagnostic, NamingCollision

# ---------------------------------------------------------------------------
# Input side: parsed API description
# ---------------------------------------------------------------------------


class SchemaKind(str, Enum):
    OBJECT = "object"
    ARRAY = "array"
    PRIMITIVE = "primitive"
    REFERENCE = "reference"
    COMPOSITE = "composite"


@dataclass(frozen=True)
class SchemaDefinition:
    """One schema node, named (registry entry) or inline.

    ``primitive`` holds the declared type string for primitive nodes and is
    ``None`` for an empty schema. Unsupported composition forms such as
    ``oneOf`` are kept as primitives with ``primitive`` set to the keyword so
    the resolver can report them.
    """

    kind: SchemaKind
    name: str | None = None
    properties: dict[str, SchemaDefinition] = field(default_factory=dict)
    required: frozenset[str] = frozenset()
    items: SchemaDefinition | None = None
    members: tuple[SchemaDefinition, ...] = ()
    ref: str | None = None
    primitive: str | None = None
    format: str | None = None
    enum: tuple[Any, ...] = ()


@dataclass(frozen=True)
class Parameter:
    name: str
    location: str
    schema: SchemaDefinition | None = None
    required: bool = False


@dataclass(frozen=True)
class OperationSpec:
    """One HTTP verb of an endpoint.

    ``request_body`` and each entry of ``responses`` map a content encoding
    (``application/json``, ``text/plain`` ...) to its schema. A response
    without content maps to an empty dict.
    """

    verb: str
    parameters: tuple[Parameter, ...] = ()
    request_body: dict[str, SchemaDefinition] | None = None
    responses: dict[str, dict[str, SchemaDefinition]] = field(default_factory=dict)
    operation_id: str | None = None


@dataclass(frozen=True)
class EndpointSpec:
    path: str
    operations: dict[str, OperationSpec] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Output side: contract types
# ---------------------------------------------------------------------------


class ContractKind(str, Enum):
    """Closed set of shapes a contract type can take."""

    OBJECT = "object"
    RECORD = "record"
    ARRAY = "array"
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    LITERAL_UNION = "literal_union"
    NAMED = "named"
    UNKNOWN = "unknown"
    EMPTY = "empty"


@dataclass(frozen=True)
class Field:
    name: str
    type: ContractType
    required: bool = False


@dataclass(frozen=True)
class ContractType:
    """A resolved structural type.

    ``ref`` is the registry schema this type was bound to (``named`` kinds,
    and request/response contracts aliasing a schema). ``bases`` lists the
    nominal supertypes of a composite.
    """

    kind: ContractKind
    name: str | None = None
    fields: tuple[Field, ...] = ()
    item: ContractType | None = None
    literals: tuple[Any, ...] = ()
    ref: str | None = None
    bases: tuple[str, ...] = ()

    def get_field(self, name: str) -> Field | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def required_fields(self) -> frozenset[str]:
        return frozenset(f.name for f in self.fields if f.required)


UNKNOWN = ContractType(ContractKind.UNKNOWN)
EMPTY = ContractType(ContractKind.EMPTY)
STRING = ContractType(ContractKind.STRING)


@dataclass(frozen=True)
class Resolution:
    """Result of resolving one schema: the type plus what it touched."""

    contract: ContractType
    referenced: frozenset[str] = frozenset()
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class OperationContract:
    verb: str
    semantic_verb: str
    method_name: str
    response: ContractType
    request: ContractType | None = None
    query_params: ContractType | None = None
    path_params: tuple[Field, ...] = ()
    referenced_schema_names: frozenset[str] = frozenset()

    @property
    def request_type_name(self) -> str | None:
        return self.request.name if self.request else None

    @property
    def response_type_name(self) -> str:
        return self.response.name or ""

    @property
    def query_params_type_name(self) -> str | None:
        return self.query_params.name if self.query_params else None


@dataclass(frozen=True)
class ContractModel:
    """Every contract one endpoint exposes, keyed by lower-case verb."""

    path: str
    entity_name: str
    endpoint_key: str
    class_name: str
    operations: dict[str, OperationContract] = field(default_factory=dict)
    referenced_schema_names: frozenset[str] = frozenset()
    diagnostics: tuple[Diagnostic, ...] = ()

    def operation(self, verb: str) -> OperationContract:
        return self.operations[verb.lower()]


@dataclass(frozen=True)
class EndpointOutcome:
    """Result of processing one endpoint of a document."""

    path: str
    model: ContractModel | None = None
    diagnostics: tuple[Diagnostic, ...] = ()
    error: NamingCollision | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
