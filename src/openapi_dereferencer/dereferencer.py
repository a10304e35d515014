"""High-level dereferencing orchestration."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Optional

from .config import ResolverConfig
from .index import ComponentIndex
from .loader import (
    OpenAPILoadError,
    ensure_supported_version,
    get_openapi_version,
    load_openapi_document,
)
from .model_types import DereferencedDocument, JSONObject
from .resolver import Resolver
from .tree import build_document_tree
from .writer import WriteError, write_document

__all__ = [
    "DereferenceRun",
    "OpenAPILoadError",
    "WriteError",
    "dereference_document",
    "run_dereference",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DereferenceRun:
    """Dereferenced document with the paths it was read from and written to."""

    input_path: Path
    output_path: Optional[Path]
    version: str
    document: DereferencedDocument


def dereference_document(
    document: JSONObject,
    *,
    config: Optional[ResolverConfig] = None,
) -> DereferencedDocument:
    """Dereference a parsed OpenAPI document.

    Args:
        document (JSONObject): Parsed OpenAPI document.
        config (Optional[ResolverConfig]): Resolver tunables.

    Returns:
        DereferencedDocument: Dereferenced tree and per-slot issues.

    Raises:
        DuplicateComponentError: If two components share a canonical pointer.
        TooDeepError: If nesting exceeds ``config.max_depth``.
    """
    config = config or ResolverConfig()
    tree = build_document_tree(document, max_depth=config.max_depth)
    index = ComponentIndex.build(tree)
    return Resolver(index, config=config).resolve(tree)


def run_dereference(
    *,
    input_path: Path,
    output_path: Optional[Path] = None,
    config: Optional[ResolverConfig] = None,
    annotate: bool = False,
    validate: bool = True,
) -> DereferenceRun:
    """Load, dereference and optionally write an OpenAPI document.

    Args:
        input_path (Path): Path to the input OpenAPI document.
        output_path (Optional[Path]): Where to write the result, if anywhere.
        config (Optional[ResolverConfig]): Resolver tunables.
        annotate (bool): Whether written output records original pointers.
        validate (bool): Whether to validate the input's structure on load.

    Returns:
        DereferenceRun: The dereferenced document and run metadata.
    """
    document = load_openapi_document(input_path, validate=validate)
    version = get_openapi_version(document)
    ensure_supported_version(version)

    dereferenced = dereference_document(document, config=config)
    logger.info(
        "Dereferenced %s (OpenAPI %s) with %d unresolved references",
        input_path,
        version,
        len(dereferenced.issues),
    )

    if output_path is not None:
        write_document(output_path, dereferenced, annotate=annotate)
        logger.info("Wrote dereferenced document to %s", output_path)

    return DereferenceRun(
        input_path=input_path,
        output_path=output_path,
        version=version,
        document=dereferenced,
    )
