"""Declarative layout of the OpenAPI 3.x object graph.

The layout names, for every node kind that can contain references, the fields
holding nested nodes: their arity (a single node, a list or a name-keyed map)
and whether each position is a referenceable slot, i.e. may hold either a
direct value or a Reference Object.  Both the tree builder and the resolver
walk documents through this table, so the expected kind of every ``$ref`` is
decided by where it sits, never by what it points at.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class NodeKind(Enum):
    """Kinds of OpenAPI objects the walk distinguishes."""

    DOCUMENT = "document"
    COMPONENTS = "components"
    PATHS = "paths"
    PATH_ITEM = "path item"
    OPERATION = "operation"
    RESPONSES = "responses"
    MEDIA_TYPE = "media type"
    ENCODING = "encoding"
    SCHEMA = "schema"
    RESPONSE = "response"
    PARAMETER = "parameter"
    EXAMPLE = "example"
    REQUEST_BODY = "request body"
    HEADER = "header"
    SECURITY_SCHEME = "security scheme"
    LINK = "link"
    CALLBACK = "callback"


class Arity(Enum):
    """How many nodes a field holds."""

    ONE = "one"
    LIST = "list"
    MAP = "map"


@dataclass(frozen=True)
class LayoutField:
    """A field of an OpenAPI object that holds nested nodes."""

    key: str
    kind: NodeKind
    arity: Arity = Arity.ONE
    referenceable: bool = True


# Component section name -> kind of the objects stored in it.
SECTION_KINDS: dict[str, NodeKind] = {
    "schemas": NodeKind.SCHEMA,
    "responses": NodeKind.RESPONSE,
    "parameters": NodeKind.PARAMETER,
    "examples": NodeKind.EXAMPLE,
    "requestBodies": NodeKind.REQUEST_BODY,
    "headers": NodeKind.HEADER,
    "securitySchemes": NodeKind.SECURITY_SCHEME,
    "links": NodeKind.LINK,
    "callbacks": NodeKind.CALLBACK,
    "pathItems": NodeKind.PATH_ITEM,
}

HTTP_METHODS: tuple[str, ...] = (
    "get",
    "put",
    "post",
    "delete",
    "options",
    "head",
    "patch",
    "trace",
)

_SCHEMA_ONE_KEYS: tuple[str, ...] = (
    "not",
    "items",
    "additionalItems",
    "additionalProperties",
    "contains",
    "propertyNames",
    "if",
    "then",
    "else",
    "unevaluatedItems",
    "unevaluatedProperties",
)
_SCHEMA_LIST_KEYS: tuple[str, ...] = ("allOf", "oneOf", "anyOf", "prefixItems")
_SCHEMA_MAP_KEYS: tuple[str, ...] = (
    "properties",
    "patternProperties",
    "dependentSchemas",
    "$defs",
)

_PARAMETER_FIELDS: tuple[LayoutField, ...] = (
    LayoutField("schema", NodeKind.SCHEMA),
    LayoutField("examples", NodeKind.EXAMPLE, Arity.MAP),
    LayoutField("content", NodeKind.MEDIA_TYPE, Arity.MAP, referenceable=False),
)

LAYOUT: dict[NodeKind, tuple[LayoutField, ...]] = {
    NodeKind.DOCUMENT: (
        LayoutField("paths", NodeKind.PATHS, referenceable=False),
        LayoutField("webhooks", NodeKind.PATHS, referenceable=False),
        LayoutField("components", NodeKind.COMPONENTS, referenceable=False),
    ),
    NodeKind.COMPONENTS: tuple(
        LayoutField(section, kind, Arity.MAP) for section, kind in SECTION_KINDS.items()
    ),
    NodeKind.PATH_ITEM: (
        LayoutField("parameters", NodeKind.PARAMETER, Arity.LIST),
        *(
            LayoutField(method, NodeKind.OPERATION, referenceable=False)
            for method in HTTP_METHODS
        ),
    ),
    NodeKind.OPERATION: (
        LayoutField("parameters", NodeKind.PARAMETER, Arity.LIST),
        LayoutField("requestBody", NodeKind.REQUEST_BODY),
        LayoutField("responses", NodeKind.RESPONSES, referenceable=False),
        LayoutField("callbacks", NodeKind.CALLBACK, Arity.MAP),
    ),
    NodeKind.PARAMETER: _PARAMETER_FIELDS,
    NodeKind.HEADER: _PARAMETER_FIELDS,
    NodeKind.REQUEST_BODY: (
        LayoutField("content", NodeKind.MEDIA_TYPE, Arity.MAP, referenceable=False),
    ),
    NodeKind.MEDIA_TYPE: (
        LayoutField("schema", NodeKind.SCHEMA),
        LayoutField("examples", NodeKind.EXAMPLE, Arity.MAP),
        LayoutField("encoding", NodeKind.ENCODING, Arity.MAP, referenceable=False),
    ),
    NodeKind.ENCODING: (LayoutField("headers", NodeKind.HEADER, Arity.MAP),),
    NodeKind.RESPONSE: (
        LayoutField("headers", NodeKind.HEADER, Arity.MAP),
        LayoutField("content", NodeKind.MEDIA_TYPE, Arity.MAP, referenceable=False),
        LayoutField("links", NodeKind.LINK, Arity.MAP),
    ),
    NodeKind.SCHEMA: (
        *(LayoutField(key, NodeKind.SCHEMA, Arity.LIST) for key in _SCHEMA_LIST_KEYS),
        *(LayoutField(key, NodeKind.SCHEMA, Arity.MAP) for key in _SCHEMA_MAP_KEYS),
        *(LayoutField(key, NodeKind.SCHEMA) for key in _SCHEMA_ONE_KEYS),
    ),
}

# Map-shaped objects whose every (non-extension) entry is a slot of one kind.
ENTRY_KINDS: dict[NodeKind, NodeKind] = {
    NodeKind.PATHS: NodeKind.PATH_ITEM,
    NodeKind.RESPONSES: NodeKind.RESPONSE,
    NodeKind.CALLBACK: NodeKind.PATH_ITEM,
}


def fields_for(kind: NodeKind) -> tuple[LayoutField, ...]:
    """Return the nested-node fields declared for ``kind``."""
    return LAYOUT.get(kind, ())


def entry_kind_for(kind: NodeKind) -> Optional[NodeKind]:
    """Return the slot kind of every entry of a map-shaped object, if any."""
    return ENTRY_KINDS.get(kind)


def is_extension_key(key: Any) -> bool:
    """Return whether ``key`` names an OpenAPI extension (``x-*``)."""
    return isinstance(key, str) and key.startswith("x-")
