"""Turn contract models into a plain JSON manifest and write it to disk.

The manifest is what renderers (handlers, proxies, stubs, route tables)
consume: per endpoint, the entity name and per-verb names and shapes, plus
every named schema resolved to its declaration.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .contract_builder import union_referenced_names
from .errors import Diagnostic
from .models import ContractModel, ContractType, EndpointOutcome, Field, OperationContract, Resolution

logger = logging.getLogger(__name__)


def contract_to_dict(contract: ContractType) -> dict[str, Any]:
    """Serialize a contract type, omitting empty attributes."""
    data: dict[str, Any] = {"kind": contract.kind.value}
    if contract.name:
        data["name"] = contract.name
    if contract.ref:
        data["ref"] = contract.ref
    if contract.bases:
        data["bases"] = list(contract.bases)
    if contract.fields:
        data["fields"] = [field_to_dict(f) for f in contract.fields]
    if contract.item is not None:
        data["item"] = contract_to_dict(contract.item)
    if contract.literals:
        data["literals"] = list(contract.literals)
    return data


def field_to_dict(field: Field) -> dict[str, Any]:
    return {
        "name": field.name,
        "required": field.required,
        "type": contract_to_dict(field.type),
    }


def diagnostic_to_dict(diagnostic: Diagnostic) -> dict[str, Any]:
    return {
        "code": diagnostic.code,
        "message": diagnostic.message,
        "path": diagnostic.path,
        "verb": diagnostic.verb,
    }


def operation_to_dict(operation: OperationContract) -> dict[str, Any]:
    return {
        "verb": operation.verb,
        "semanticVerb": operation.semantic_verb,
        "methodName": operation.method_name,
        "requestTypeName": operation.request_type_name,
        "responseTypeName": operation.response_type_name,
        "queryParamsTypeName": operation.query_params_type_name,
        "pathParams": [field_to_dict(f) for f in operation.path_params],
        "request": contract_to_dict(operation.request) if operation.request else None,
        "response": contract_to_dict(operation.response),
        "queryParams": (
            contract_to_dict(operation.query_params) if operation.query_params else None
        ),
        "referencedSchemaNames": sorted(operation.referenced_schema_names),
    }


def model_to_dict(model: ContractModel) -> dict[str, Any]:
    return {
        "path": model.path,
        "entityName": model.entity_name,
        "endpointKey": model.endpoint_key,
        "className": model.class_name,
        "operations": {verb: operation_to_dict(op) for verb, op in model.operations.items()},
        "referencedSchemaNames": sorted(model.referenced_schema_names),
    }


def build_manifest(
    outcomes: list[EndpointOutcome],
    schemas: dict[str, Resolution],
    version: str = "unknown",
) -> dict[str, Any]:
    """Assemble the manifest document."""
    models = [o.model for o in outcomes if o.model is not None]
    return {
        "version": version,
        "endpoints": [model_to_dict(m) for m in models],
        "schemas": {
            name: {
                "type": contract_to_dict(resolution.contract),
                "referencedSchemaNames": sorted(resolution.referenced),
            }
            for name, resolution in schemas.items()
        },
        "referencedSchemaNames": sorted(union_referenced_names(models)),
        "failures": [
            {"path": o.path, "code": o.error.code, "message": str(o.error)}
            for o in outcomes
            if o.error is not None
        ],
        "diagnostics": [diagnostic_to_dict(d) for o in outcomes for d in o.diagnostics],
    }


def write_manifest(manifest: dict[str, Any], output_path: Path) -> Path:
    """Write the manifest as JSON, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(manifest, indent=2, default=str) + "\n")
    logger.info("Wrote %s (%d endpoints)", output_path, len(manifest["endpoints"]))
    return output_path
