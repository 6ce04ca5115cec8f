"""Load an API description and parse it into schema and endpoint models.

Reads a JSON or YAML document and extracts the path table and the named
schema dictionary. Schema references stay nominal (``Order``, not the
expanded body); parameter, request-body and response references are
dereferenced in place since they carry no type name of their own.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .errors import SpecLoadError
from .models import (
    EndpointSpec,
    OperationSpec,
    Parameter,
    SchemaDefinition,
    SchemaKind,
)

logger = logging.getLogger(__name__)

# Path-item keys that are not HTTP verbs
_NON_OPERATION_KEYS = {"summary", "description", "servers", "parameters", "$ref"}

# Specification extensions (x-internal, x-codegen ...)
_EXTENSION_PREFIX = "x-"

# Composition keywords the resolver does not merge
_UNSUPPORTED_COMPOSITION = ("oneOf", "anyOf", "not")


def load_spec(path: Path | str) -> dict[str, Any]:
    """Load the API description from disk (``.json``, ``.yaml`` or ``.yml``)."""
    spec_file = Path(path)
    try:
        with open(spec_file, encoding="utf-8") as f:
            if spec_file.suffix.lower() == ".json":
                spec = json.load(f)
            else:
                spec = yaml.safe_load(f)
    except OSError as exc:
        raise SpecLoadError(f"cannot read {spec_file}: {exc}") from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SpecLoadError(f"cannot parse {spec_file}: {exc}") from exc

    if not isinstance(spec, dict) or not isinstance(spec.get("paths"), dict):
        raise SpecLoadError(f"{spec_file} is not an API description: no 'paths' found")
    logger.debug("Loaded %s (%d paths)", spec_file, len(spec["paths"]))
    return spec


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract the path table from the document."""
    return spec.get("paths", {})


def get_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract named schemas (``components.schemas``, or Swagger 2 ``definitions``)."""
    schemas = spec.get("components", {}).get("schemas")
    if schemas is None:
        schemas = spec.get("definitions", {})
    return schemas or {}


def resolve_ref(spec: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve a local ``$ref`` pointer in the document."""
    parts = ref.lstrip("#/").split("/")
    node = spec
    for part in parts:
        node = node[part.replace("~1", "/").replace("~0", "~")]
    return node


def ref_name(ref: str) -> str:
    """Return the schema name a ``$ref`` points at (its last segment)."""
    return ref.rstrip("/").split("/")[-1]


def _declared_type(raw: dict[str, Any]) -> str | None:
    declared = raw.get("type")
    if isinstance(declared, list):
        # OpenAPI 3.1 nullable form: ["string", "null"]
        non_null = [t for t in declared if t != "null"]
        return non_null[0] if non_null else None
    return declared


def parse_schema(raw: Any, name: str | None = None) -> SchemaDefinition:
    """Parse one raw schema node into a ``SchemaDefinition``."""
    if not isinstance(raw, dict) or not raw:
        return SchemaDefinition(SchemaKind.PRIMITIVE, name=name)

    if "$ref" in raw:
        return SchemaDefinition(SchemaKind.REFERENCE, name=name, ref=ref_name(raw["$ref"]))

    if "allOf" in raw:
        members = [parse_schema(sub) for sub in raw["allOf"]]
        # Properties or required names declared next to allOf act as a
        # trailing inline member
        if "properties" in raw or "required" in raw:
            rest = {k: raw[k] for k in ("properties", "required") if k in raw}
            members.append(parse_schema({"type": "object", **rest}))
        return SchemaDefinition(SchemaKind.COMPOSITE, name=name, members=tuple(members))

    for keyword in _UNSUPPORTED_COMPOSITION:
        if keyword in raw:
            return SchemaDefinition(SchemaKind.PRIMITIVE, name=name, primitive=keyword)

    declared = _declared_type(raw)
    if declared == "array" or (declared is None and "items" in raw):
        items = raw.get("items")
        return SchemaDefinition(
            SchemaKind.ARRAY,
            name=name,
            items=parse_schema(items) if items else None,
        )

    if declared == "object" or (declared is None and "properties" in raw):
        properties = {
            prop: parse_schema(sub) for prop, sub in (raw.get("properties") or {}).items()
        }
        required = raw.get("required")
        return SchemaDefinition(
            SchemaKind.OBJECT,
            name=name,
            properties=properties,
            required=frozenset(required) if isinstance(required, list) else frozenset(),
        )

    return SchemaDefinition(
        SchemaKind.PRIMITIVE,
        name=name,
        primitive=declared,
        format=raw.get("format"),
        enum=tuple(raw.get("enum") or ()),
    )


def parse_schemas(spec: dict[str, Any]) -> dict[str, SchemaDefinition]:
    """Parse the named schema dictionary."""
    return {name: parse_schema(raw, name=name) for name, raw in get_schemas(spec).items()}


def _deref(spec: dict[str, Any], node: Any) -> Any:
    """Follow a non-schema ``$ref`` (parameter, requestBody, response)."""
    seen: set[str] = set()
    while isinstance(node, dict) and "$ref" in node:
        ref = node["$ref"]
        if ref in seen:
            logger.warning("Circular reference %s", ref)
            return None
        seen.add(ref)
        try:
            node = resolve_ref(spec, ref)
        except (KeyError, TypeError):
            logger.warning("Unresolvable reference %s", ref)
            return None
    return node


def _parse_content(content: Any) -> dict[str, SchemaDefinition]:
    if not isinstance(content, dict):
        return {}
    return {
        encoding: parse_schema((media or {}).get("schema"))
        for encoding, media in content.items()
    }


def _parse_parameters(spec: dict[str, Any], raw_params: Any) -> list[Parameter]:
    params: list[Parameter] = []
    for raw in raw_params or ():
        param = _deref(spec, raw)
        if not isinstance(param, dict) or "name" not in param:
            continue
        location = param.get("in", "query")
        if location not in ("path", "query"):
            logger.debug("Skipping %s parameter %s", location, param["name"])
            continue
        schema = param.get("schema")
        if schema is None and "type" in param:
            # Swagger 2 puts the type on the parameter itself
            schema = {k: param[k] for k in ("type", "items", "enum", "format") if k in param}
        params.append(Parameter(
            name=param["name"],
            location=location,
            schema=parse_schema(schema) if schema else None,
            required=bool(param.get("required", location == "path")),
        ))
    return params


def parse_operation(
    verb: str,
    operation: dict[str, Any],
    spec: dict[str, Any] | None = None,
    inherited: list[Parameter] | None = None,
) -> OperationSpec:
    """Parse one operation object; ``inherited`` are path-level parameters."""
    spec = spec or {}
    own = _parse_parameters(spec, operation.get("parameters"))
    overridden = {(p.name, p.location) for p in own}
    params = [p for p in inherited or () if (p.name, p.location) not in overridden] + own

    request_body = None
    raw_body = _deref(spec, operation.get("requestBody"))
    if isinstance(raw_body, dict):
        request_body = _parse_content(raw_body.get("content"))

    responses: dict[str, dict[str, SchemaDefinition]] = {}
    for status, raw_response in (operation.get("responses") or {}).items():
        response = _deref(spec, raw_response)
        if not isinstance(response, dict):
            responses[str(status)] = {}
            continue
        content = _parse_content(response.get("content"))
        if not content and "schema" in response:
            # Swagger 2 response body
            content = {"application/json": parse_schema(response["schema"])}
        responses[str(status)] = content

    return OperationSpec(
        verb=verb,
        parameters=tuple(params),
        request_body=request_body,
        responses=responses,
        operation_id=operation.get("operationId"),
    )


def parse_endpoint(spec: dict[str, Any], path: str, path_item: dict[str, Any]) -> EndpointSpec:
    """Parse one path-table entry into an ``EndpointSpec``."""
    path_item = _deref(spec, path_item) or {}
    inherited = _parse_parameters(spec, path_item.get("parameters"))
    operations = {
        verb: parse_operation(verb, operation, spec, inherited)
        for verb, operation in path_item.items()
        if verb not in _NON_OPERATION_KEYS
        and not verb.startswith(_EXTENSION_PREFIX)
        and isinstance(operation, dict)
    }
    return EndpointSpec(path=path, operations=operations)


def parse_endpoints(spec: dict[str, Any]) -> list[EndpointSpec]:
    """Parse the whole path table, sorted by path."""
    return [
        parse_endpoint(spec, path, path_item or {})
        for path, path_item in sorted(get_paths(spec).items())
    ]
