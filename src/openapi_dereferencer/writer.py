"""Rendering dereferenced trees back to plain JSON and writing them out."""

from __future__ import annotations

from collections.abc import Mapping
import json
from pathlib import Path
from typing import Any

import yaml

from .model_types import (
    BrokenReference,
    DereferencedDocument,
    JSONValue,
    MutableJSONObject,
    Reference,
    ReferenceMarker,
    ResolvedReference,
)

RESOLVED_REF_KEY = "x-resolved-ref"

_YAML_SUFFIXES: frozenset[str] = frozenset({".yaml", ".yml"})


class WriteError(RuntimeError):
    """Raised when output files cannot be written."""


def render_node(node: Any, *, annotate: bool = False) -> JSONValue:
    """Convert a (possibly dereferenced) tree into plain JSON values.

    Resolved slots render as their value; with ``annotate`` set, resolved
    mapping values also carry the original pointer under ``x-resolved-ref``.
    Cycle markers and unresolved or broken references render as Reference
    Objects.

    Args:
        node (Any): Tree node to render.
        annotate (bool): Whether to record original pointers on resolved values.

    Returns:
        JSONValue: A JSON-compatible copy of ``node``.
    """
    if isinstance(node, ResolvedReference):
        rendered = render_node(node.value, annotate=annotate)
        if annotate and isinstance(rendered, dict):
            rendered[RESOLVED_REF_KEY] = node.pointer
        return rendered
    if isinstance(node, BrokenReference):
        return _render_reference(node.reference)
    if isinstance(node, Reference):
        return _render_reference(node)
    if isinstance(node, ReferenceMarker):
        return {"$ref": node.pointer}
    if isinstance(node, Mapping):
        return {str(key): render_node(value, annotate=annotate) for key, value in node.items()}
    if isinstance(node, (list, tuple)):
        return [render_node(item, annotate=annotate) for item in node]
    return node


def _render_reference(reference: Reference) -> MutableJSONObject:
    rendered: MutableJSONObject = {"$ref": reference.pointer}
    if reference.summary is not None:
        rendered["summary"] = reference.summary
    if reference.description is not None:
        rendered["description"] = reference.description
    return rendered


def dump_document(document: DereferencedDocument, *, as_yaml: bool, annotate: bool = False) -> str:
    """Serialize a dereferenced document as YAML or indented JSON text."""
    payload = render_node(document.root, annotate=annotate)
    if as_yaml:
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def write_document(path: Path, document: DereferencedDocument, *, annotate: bool = False) -> None:
    """Write a dereferenced document to ``path``.

    YAML is written for ``.yaml``/``.yml`` suffixes, JSON otherwise.

    Args:
        path (Path): Destination file; parent directories are created.
        document (DereferencedDocument): Document to write.
        annotate (bool): Whether to record original pointers on resolved values.
    """
    content = dump_document(
        document,
        as_yaml=path.suffix.lower() in _YAML_SUFFIXES,
        annotate=annotate,
    )
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Failed to write file {path}: {exc}") from exc
