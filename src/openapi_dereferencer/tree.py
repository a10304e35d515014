"""Typed document tree construction from raw OpenAPI JSON."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Optional

from .config import DEFAULT_MAX_DEPTH
from .errors import TooDeepError
from .layout import Arity, LayoutField, NodeKind, entry_kind_for, fields_for, is_extension_key
from .model_types import DocumentNode, DocumentTree, JSONObject, Reference

logger = logging.getLogger(__name__)


def join_location(parent: str, key: Any) -> str:
    """Append one key or list index to a dotted document location."""
    return f"{parent}.{key}" if parent else str(key)


def copy_data(value: Any, *, location: str, depth: int, max_depth: int) -> Any:
    """Deep-copy opaque JSON data, counting its nesting against ``max_depth``.

    Example payloads, defaults and extension values are not walked through the
    layout, but they are bounded the same way so that deeply nested data fails
    with ``TooDeepError``.
    """
    if isinstance(value, Mapping):
        _check_depth(location, depth, max_depth)
        return {
            key: copy_data(
                item, location=join_location(location, key), depth=depth + 1, max_depth=max_depth
            )
            for key, item in value.items()
        }
    if isinstance(value, list):
        _check_depth(location, depth, max_depth)
        return [
            copy_data(
                item,
                location=join_location(location, index),
                depth=depth + 1,
                max_depth=max_depth,
            )
            for index, item in enumerate(value)
        ]
    return value


def _check_depth(location: str, depth: int, max_depth: int) -> None:
    if depth > max_depth:
        raise TooDeepError(
            f"Document nesting exceeds {max_depth} levels at {location or '<root>'}",
            location=location,
        )


def build_document_tree(
    document: JSONObject,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> DocumentTree:
    """Build the typed document tree for a raw OpenAPI document.

    The raw document is deep-copied; every ``{"$ref": "..."}`` mapping found at
    a referenceable slot becomes a :class:`Reference`.  ``$ref`` keys anywhere
    else (example payloads, extension values) stay plain data.  Sibling keys of
    a Reference Object other than ``summary`` and ``description`` are ignored,
    as OpenAPI specifies.

    Args:
        document (JSONObject): Parsed OpenAPI document.
        max_depth (int): Maximum node nesting before ``TooDeepError``.

    Returns:
        DocumentTree: The typed tree, independent of ``document``.
    """
    if not isinstance(document, Mapping):
        raise TypeError(f"OpenAPI document must be a mapping, got {type(document)!r}")
    tree = _build_node(document, NodeKind.DOCUMENT, location="", depth=0, max_depth=max_depth)
    logger.debug("Built document tree with %d top-level keys", len(tree))
    return tree


def _build_node(
    node: Any,
    kind: NodeKind,
    *,
    location: str,
    depth: int,
    max_depth: int,
) -> DocumentNode:
    if not isinstance(node, Mapping):
        return copy_data(node, location=location, depth=depth, max_depth=max_depth)
    _check_depth(location, depth, max_depth)

    fields = {field.key: field for field in fields_for(kind)}
    entry_kind = entry_kind_for(kind)
    result: dict[str, DocumentNode] = {}
    for key, value in node.items():
        child_location = join_location(location, key)
        field = fields.get(key)
        if field is not None:
            result[key] = _build_field(
                value, field, location=child_location, depth=depth + 1, max_depth=max_depth
            )
        elif entry_kind is not None and not is_extension_key(key):
            result[key] = _build_slot(
                value, entry_kind, location=child_location, depth=depth + 1, max_depth=max_depth
            )
        else:
            result[key] = copy_data(
                value, location=child_location, depth=depth + 1, max_depth=max_depth
            )
    return result


def _build_field(
    value: Any,
    field: LayoutField,
    *,
    location: str,
    depth: int,
    max_depth: int,
) -> DocumentNode:
    build = _build_slot if field.referenceable else _build_node
    if field.arity is Arity.ONE:
        return build(value, field.kind, location=location, depth=depth, max_depth=max_depth)
    if field.arity is Arity.LIST and isinstance(value, list):
        return [
            build(
                item,
                field.kind,
                location=join_location(location, index),
                depth=depth,
                max_depth=max_depth,
            )
            for index, item in enumerate(value)
        ]
    if field.arity is Arity.MAP and isinstance(value, Mapping):
        return {
            name: build(
                item,
                field.kind,
                location=join_location(location, name),
                depth=depth,
                max_depth=max_depth,
            )
            for name, item in value.items()
        }
    # Wrong container shape; keep it as opaque data.
    return copy_data(value, location=location, depth=depth, max_depth=max_depth)


def _build_slot(
    value: Any,
    kind: NodeKind,
    *,
    location: str,
    depth: int,
    max_depth: int,
) -> DocumentNode:
    if isinstance(value, Mapping) and isinstance(value.get("$ref"), str):
        return Reference(
            pointer=value["$ref"],
            summary=_optional_str(value.get("summary")),
            description=_optional_str(value.get("description")),
        )
    return _build_node(value, kind, location=location, depth=depth, max_depth=max_depth)


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None
