"""Build per-endpoint contract models from the parsed API description.

Combines the schema resolver and the naming functions into one
``ContractModel`` per endpoint, and drives that over a whole document.
Endpoints are independent: nothing is cached between them, and a failure in
one never stops the others.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any

from . import naming
from .errors import Diagnostic, MissingResponseBody, NamingCollision, UnsupportedContentEncoding
from .loader import parse_endpoints, parse_operation
from .models import (
    STRING,
    ContractKind,
    ContractModel,
    ContractType,
    EndpointOutcome,
    EndpointSpec,
    Field,
    OperationContract,
    OperationSpec,
    Parameter,
    Resolution,
    SchemaDefinition,
)
from .registry import SchemaRegistry
from .schema_parser import resolve_schema

logger = logging.getLogger(__name__)

_PREFERRED_ENCODING = "application/json"

_SUCCESS_STATUS = re.compile(r"^2(\d\d|XX)$", re.IGNORECASE)


def _is_structured(encoding: str) -> bool:
    """True for JSON-like media types (``application/json``, ``*/*+json``)."""
    media = encoding.split(";")[0].strip().lower()
    return media.endswith("/json") or media.endswith("+json")


def resolve_parameter(schema: SchemaDefinition | None, registry: SchemaRegistry) -> Resolution:
    """Type a path or query parameter; undeclared parameters are strings."""
    if schema is None:
        return Resolution(STRING)
    return resolve_schema(schema, registry)


class _OperationBuilder:
    """Builds one verb's contract, collecting names and diagnostics."""

    def __init__(self, path: str, verb: str, operation: OperationSpec, registry: SchemaRegistry):
        self.path = path
        self.verb = verb.lower()
        self.operation = operation
        self.registry = registry
        self.referenced: set[str] = set()
        self.diagnostics: list[Diagnostic] = []

    def diagnose(self, code: str, message: str) -> None:
        self.diagnostics.append(Diagnostic(code, message, self.path, self.verb))

    def absorb(self, resolution: Resolution) -> ContractType:
        self.referenced |= resolution.referenced
        self.diagnostics.extend(d.located(self.path, self.verb) for d in resolution.diagnostics)
        return resolution.contract

    def parameter_fields(self, params: Iterable[Parameter]) -> tuple[Field, ...]:
        return tuple(
            Field(p.name, self.absorb(resolve_parameter(p.schema, self.registry)), p.required)
            for p in params
        )

    def select_encoding(
        self,
        content: Mapping[str, SchemaDefinition],
        what: str,
    ) -> SchemaDefinition | None:
        """Pick the structured encoding; every other one is dropped."""
        structured = [enc for enc in content if _is_structured(enc)]
        if _PREFERRED_ENCODING in content:
            chosen = _PREFERRED_ENCODING
        else:
            chosen = structured[0] if structured else None
        for encoding in content:
            if encoding != chosen:
                self.diagnose(
                    UnsupportedContentEncoding.code,
                    f"{what}: ignoring {encoding!r} encoding",
                )
        return content[chosen] if chosen is not None else None

    def first_success_body(self) -> tuple[str, SchemaDefinition] | None:
        """Schema of the first 2xx response with a structured body.

        Explicit codes are tried in numeric order, ``2XX`` ranges last.
        """
        codes = sorted(
            (code for code in self.operation.responses if _SUCCESS_STATUS.match(code)),
            key=lambda code: (code.upper() == "2XX", code),
        )
        for code in codes:
            content = self.operation.responses[code]
            if not content:
                continue
            schema = self.select_encoding(content, f"response {code}")
            if schema is not None:
                return code, schema
        return None

    def build(self) -> OperationContract:
        params = self.operation.parameters
        declared_path = [p for p in params if p.location == "path"]
        query = [p for p in params if p.location == "query"]

        if declared_path:
            path_names = [p.name for p in declared_path]
            path_fields = self.parameter_fields(declared_path)
        else:
            path_names = naming.path_parameters(self.path)
            path_fields = tuple(Field(name, STRING, True) for name in path_names)

        names = naming.derive_names(
            self.path,
            self.verb,
            path_names,
            operation_id=self.operation.operation_id,
            has_query=bool(query),
        )

        query_params = None
        if query:
            query_params = ContractType(
                ContractKind.OBJECT,
                name=names.query_params_type_name,
                fields=self.parameter_fields(query),
            )

        request = None
        body = self.operation.request_body
        if names.request_type_name is None:
            if body is not None:
                self.diagnose(
                    "IgnoredRequestBody",
                    f"{self.verb.upper()} carries no request body; declared body ignored",
                )
        elif body:
            schema = self.select_encoding(body, "request body")
            if schema is not None:
                contract = self.absorb(resolve_schema(schema, self.registry))
                request = replace(contract, name=names.request_type_name)

        success = self.first_success_body()
        if success is None:
            self.diagnose(MissingResponseBody.code, "no 2xx response declares a body")
            response = ContractType(ContractKind.EMPTY, name=names.response_type_name)
        else:
            contract = self.absorb(resolve_schema(success[1], self.registry))
            response = replace(contract, name=names.response_type_name)

        return OperationContract(
            verb=self.verb,
            semantic_verb=names.semantic_verb,
            method_name=names.method_name,
            response=response,
            request=request,
            query_params=query_params,
            path_params=path_fields,
            referenced_schema_names=frozenset(self.referenced),
        )


def build_contract_model(
    path: str,
    verb_map: Mapping[str, OperationSpec | dict[str, Any]],
    registry: SchemaRegistry,
) -> ContractModel:
    """Build the contract model of one endpoint.

    ``verb_map`` maps HTTP verbs to parsed operations (raw operation dicts
    are parsed on the fly). Raises ``NamingCollision`` if two verbs derive
    the same method name.
    """
    operations: dict[str, OperationContract] = {}
    owners: dict[str, str] = {}
    referenced: set[str] = set()
    diagnostics: list[Diagnostic] = []

    for verb, operation in verb_map.items():
        if not isinstance(operation, OperationSpec):
            operation = parse_operation(verb, operation)
        builder = _OperationBuilder(path, verb, operation, registry)
        contract = builder.build()
        diagnostics.extend(builder.diagnostics)

        owner = owners.get(contract.method_name)
        if owner is not None:
            raise NamingCollision(path, contract.method_name, (owner, verb), tuple(diagnostics))
        owners[contract.method_name] = verb

        operations[contract.verb] = contract
        referenced |= contract.referenced_schema_names

    return ContractModel(
        path=path,
        entity_name=naming.entity_name(path),
        endpoint_key=naming.endpoint_key(path),
        class_name=naming.class_name(path),
        operations=operations,
        referenced_schema_names=frozenset(referenced),
        diagnostics=tuple(diagnostics),
    )


def build_endpoint(endpoint: EndpointSpec, registry: SchemaRegistry) -> EndpointOutcome:
    """Build one endpoint, turning a naming collision into a failed outcome."""
    logger.debug("Building contracts for %s", endpoint.path)
    try:
        model = build_contract_model(endpoint.path, endpoint.operations, registry)
    except NamingCollision as exc:
        logger.error("Skipping %s: %s", endpoint.path, exc)
        return EndpointOutcome(endpoint.path, diagnostics=exc.diagnostics, error=exc)

    for diagnostic in model.diagnostics:
        logger.warning("%s", diagnostic)
    return EndpointOutcome(endpoint.path, model=model, diagnostics=model.diagnostics)


def build_contracts(spec: dict[str, Any]) -> list[EndpointOutcome]:
    """Build contract models for every endpoint of a loaded document."""
    registry = SchemaRegistry.from_spec(spec)
    outcomes = [build_endpoint(endpoint, registry) for endpoint in parse_endpoints(spec)]
    failed = sum(1 for outcome in outcomes if not outcome.ok)
    logger.info(
        "Built %d endpoint contract models (%d failed, %d schemas)",
        len(outcomes) - failed,
        failed,
        len(registry),
    )
    return outcomes


def union_referenced_names(models: Iterable[ContractModel]) -> frozenset[str]:
    """Deduplicate referenced schema names across endpoints."""
    names: set[str] = set()
    for model in models:
        names |= model.referenced_schema_names
    return frozenset(names)
