"""Error taxonomy and diagnostic records.

Only ``NamingCollision`` (per endpoint) and ``SpecLoadError`` (per run) stop
work. Every other condition is recorded as a ``Diagnostic`` and the affected
type degrades to an open or empty contract.
"""

from __future__ import annotations

from dataclasses import dataclass


class ContractError(Exception):
    """Base class for contract derivation errors."""

    code = "ContractError"


class SpecLoadError(ContractError):
    """The input document could not be read or is not an API description."""

    code = "SpecLoadError"


class UnknownReference(ContractError):
    """A schema reference names an entry missing from the registry."""

    code = "UnknownReference"

    def __init__(self, name: str):
        super().__init__(f"unknown schema reference {name!r}")
        self.name = name


class UnsupportedContentEncoding(ContractError):
    code = "UnsupportedContentEncoding"


class MissingResponseBody(ContractError):
    code = "MissingResponseBody"


class NamingCollision(ContractError):
    """Two operations on one endpoint derive the same method name."""

    code = "NamingCollision"

    def __init__(
        self,
        path: str,
        method_name: str,
        verbs: tuple[str, str],
        diagnostics: tuple[Diagnostic, ...] = (),
    ):
        super().__init__(
            f"{path}: {verbs[0].upper()} and {verbs[1].upper()} both resolve"
            f" to method name {method_name!r}"
        )
        self.path = path
        self.method_name = method_name
        self.verbs = verbs
        # Diagnostics gathered before construction halted
        self.diagnostics = diagnostics


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while deriving contracts."""

    code: str
    message: str
    path: str | None = None
    verb: str | None = None

    def located(self, path: str, verb: str | None = None) -> Diagnostic:
        """Return a copy tagged with the endpoint (and verb) it belongs to."""
        return Diagnostic(
            self.code,
            self.message,
            self.path or path,
            self.verb or verb,
        )

    def __str__(self) -> str:
        where = " ".join(p for p in (self.verb and self.verb.upper(), self.path) if p)
        return f"[{self.code}] {where}: {self.message}" if where else f"[{self.code}] {self.message}"
