"""Derive every identifier an endpoint exposes from its path and verb.

Pattern: {semanticVerb}{Segment...}{By<Param>...}
  - entity name is the last static segment, singular, PascalCase
  - every static segment takes part in the method name, so nested
    resources that share a trailing entity never collide
  - request/response types use the HTTP verb, not the semantic verb

Examples:
  GET    /users                        -> readUser
  GET    /users/{userId}               -> readUserByUserId
  POST   /users                        -> createUser,  PostUserRequest
  PATCH  /users/{userId}               -> modifyUserByUserId
  GET    /users/{userId}/orders        -> readUserOrderByUserId
  GET    /shops/{shopId}/orders        -> readShopOrderByShopId
  DELETE /users/{userId}/orders/{id}   -> deleteUserOrderByUserIdById

These functions are pure. Handler, proxy, stub and route builders call them
independently and must all get byte-identical names.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from .casing import capitalize, pascal_case, singularize

_SEMANTIC_VERBS: dict[str, str] = {
    "post": "create",
    "get": "read",
    "put": "replace",
    "patch": "modify",
    "delete": "delete",
}

# Verbs whose operations never carry a request body
NO_BODY_VERBS = frozenset({"get", "delete", "head", "options"})

_PLACEHOLDER = re.compile(r"^\{(.+)\}$")


def _segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s]


def _static_segments(path: str) -> list[str]:
    return [s for s in _segments(path) if not _PLACEHOLDER.match(s)]


def path_parameters(path: str) -> list[str]:
    """Return the ``{placeholder}`` names of a path template, in order."""
    names = []
    for segment in _segments(path):
        match = _PLACEHOLDER.match(segment)
        if match:
            names.append(match.group(1))
    return names


def entity_name(path: str) -> str:
    """Return the singular PascalCase noun of the trailing static segment.

    ``/users`` and ``/users/{userId}`` both give ``User``.
    """
    static = _static_segments(path)
    if not static:
        return "Root"
    return pascal_case(singularize(static[-1])) or "Root"


def semantic_verb(verb: str) -> str:
    """Map an HTTP verb to the action it names; unknown verbs pass through."""
    verb = verb.lower()
    return _SEMANTIC_VERBS.get(verb, verb)


def method_name(path: str, verb: str, path_params: Sequence[str] = ()) -> str:
    """Build the method identifier for one verb of an endpoint."""
    resource = "".join(pascal_case(singularize(s)) for s in _static_segments(path))
    suffix = "".join(f"By{pascal_case(p)}" for p in path_params)
    return f"{semantic_verb(verb)}{resource or 'Root'}{suffix}"


def _type_base(path: str, verb: str, operation_id: str | None) -> str:
    if operation_id:
        return pascal_case(operation_id)
    return f"{capitalize(verb.lower())}{entity_name(path)}"


def request_type_name(path: str, verb: str, operation_id: str | None = None) -> str | None:
    """Name of the request-body type, or None for verbs without a body."""
    if verb.lower() in NO_BODY_VERBS:
        return None
    return f"{_type_base(path, verb, operation_id)}Request"


def response_type_name(path: str, verb: str, operation_id: str | None = None) -> str:
    return f"{_type_base(path, verb, operation_id)}Response"


def query_params_type_name(path: str, verb: str, path_params: Sequence[str] = ()) -> str:
    return f"{capitalize(method_name(path, verb, path_params))}QueryParams"


def endpoint_key(path: str) -> str:
    """Normalize a path into a file-system friendly key.

    ``/users/{userId}`` -> ``users_userid``; ``/`` -> ``root``.
    """
    key = path.strip("/").replace("/", "_")
    key = re.sub(r"[{}]", "", key).lower()
    key = re.sub(r"[^a-z0-9_]", "_", key)
    return re.sub(r"_+", "_", key).strip("_") or "root"


def class_name(path: str) -> str:
    """PascalCase base for per-endpoint classes (``UsersUserid`` + ``Proxy``)."""
    return "".join(capitalize(part) for part in endpoint_key(path).split("_"))


@dataclass(frozen=True)
class OperationNames:
    entity_name: str
    semantic_verb: str
    method_name: str
    request_type_name: str | None
    response_type_name: str
    query_params_type_name: str | None


def derive_names(
    path: str,
    verb: str,
    path_params: Sequence[str] = (),
    operation_id: str | None = None,
    has_query: bool = False,
) -> OperationNames:
    """Every name for one (path, verb) in a single record."""
    return OperationNames(
        entity_name=entity_name(path),
        semantic_verb=semantic_verb(verb),
        method_name=method_name(path, verb, path_params),
        request_type_name=request_type_name(path, verb, operation_id),
        response_type_name=response_type_name(path, verb, operation_id),
        query_params_type_name=(
            query_params_type_name(path, verb, path_params) if has_query else None
        ),
    )
