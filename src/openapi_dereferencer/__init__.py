"""In-document ``$ref`` resolution for OpenAPI documents."""

from __future__ import annotations

from .cli import main
from .config import ResolverConfig
from .dereferencer import DereferenceRun, dereference_document, run_dereference
from .errors import (
    DereferenceError,
    DuplicateComponentError,
    KindMismatchError,
    MalformedPointerError,
    TooDeepError,
    UnknownComponentError,
)
from .index import ComponentIndex
from .model_types import (
    BrokenReference,
    DereferencedDocument,
    ErrorKind,
    Reference,
    ReferenceMarker,
    ResolutionIssue,
    ResolvedReference,
)
from .resolver import Resolver, resolve_document
from .tree import build_document_tree

__all__ = [
    "BrokenReference",
    "ComponentIndex",
    "DereferenceError",
    "DereferenceRun",
    "DereferencedDocument",
    "DuplicateComponentError",
    "ErrorKind",
    "KindMismatchError",
    "MalformedPointerError",
    "Reference",
    "ReferenceMarker",
    "ResolutionIssue",
    "ResolvedReference",
    "Resolver",
    "ResolverConfig",
    "TooDeepError",
    "UnknownComponentError",
    "build_document_tree",
    "dereference_document",
    "main",
    "resolve_document",
    "run_dereference",
]
