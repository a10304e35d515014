"""Document tree slot types and resolution results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, TypeAlias, Union

from .layout import HTTP_METHODS, is_extension_key

JSONPrimitive: TypeAlias = Union[str, int, float, bool, None]
JSONValue: TypeAlias = Union[JSONPrimitive, list["JSONValue"], Mapping[str, "JSONValue"]]
JSONObject: TypeAlias = Mapping[str, JSONValue]
MutableJSONObject: TypeAlias = dict[str, JSONValue]


class ErrorKind(Enum):
    """Externally observable failure categories."""

    MALFORMED_POINTER = "MalformedPointer"
    UNKNOWN_COMPONENT = "UnknownComponent"
    KIND_MISMATCH = "KindMismatch"
    DUPLICATE_COMPONENT = "DuplicateComponent"
    TOO_DEEP = "TooDeep"


@dataclass(frozen=True)
class Reference:
    """An unresolved Reference Object sitting in a referenceable slot."""

    pointer: str
    summary: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ReferenceMarker:
    """Unexpanded stand-in for a target already being expanded on the same path."""

    pointer: str


@dataclass(frozen=True)
class ResolvedReference:
    """A reference slot together with the value it resolved to.

    ``value`` is the dereferenced target, or a :class:`ReferenceMarker` when
    the target was already being expanded higher up the same path.
    """

    reference: Reference
    value: Union[DocumentNode, ReferenceMarker]

    @property
    def pointer(self) -> str:
        """Original ``$ref`` string."""
        return self.reference.pointer


@dataclass(frozen=True)
class BrokenReference:
    """A reference slot that could not be resolved."""

    reference: Reference
    error: ErrorKind

    @property
    def pointer(self) -> str:
        """Original ``$ref`` string."""
        return self.reference.pointer


DocumentNode: TypeAlias = Union[
    JSONPrimitive,
    list["DocumentNode"],
    dict[str, "DocumentNode"],
    Reference,
    ResolvedReference,
    BrokenReference,
]
DocumentTree: TypeAlias = dict[str, DocumentNode]


@dataclass(frozen=True)
class ResolutionIssue:
    """A per-slot failure recorded during resolution."""

    location: str
    kind: ErrorKind
    pointer: str
    message: str


def resolved_value(slot: Any) -> Optional[Mapping[str, Any]]:
    """Return the mapping a slot stands for, or ``None`` when it has none.

    Direct mappings are returned as-is, resolved references yield their value,
    and cycle markers, broken or unresolved references yield ``None``.
    """
    if isinstance(slot, ResolvedReference):
        slot = slot.value
    if isinstance(slot, Mapping):
        return slot
    return None


@dataclass(frozen=True)
class DereferencedDocument:
    """A fully walked document tree and the issues found while walking it."""

    root: DocumentTree
    issues: tuple[ResolutionIssue, ...]

    @property
    def is_clean(self) -> bool:
        """Whether every reference slot resolved."""
        return not self.issues

    def servers(self) -> list[JSONObject]:
        """Collect Server Objects declared at root, path item and operation level."""
        servers = _server_list(self.root)
        paths = self.root.get("paths")
        if not isinstance(paths, Mapping):
            return servers
        for key, path_item_slot in paths.items():
            if is_extension_key(key):
                continue
            path_item = resolved_value(path_item_slot)
            if path_item is None:
                continue
            servers.extend(_server_list(path_item))
            for method in HTTP_METHODS:
                operation = path_item.get(method)
                if isinstance(operation, Mapping):
                    servers.extend(_server_list(operation))
        return servers


def _server_list(node: Mapping[str, Any]) -> list[JSONObject]:
    raw = node.get("servers")
    if not isinstance(raw, list):
        return []
    return [server for server in raw if isinstance(server, Mapping)]
