"""Exceptions raised while indexing and resolving references."""

from __future__ import annotations

from typing import ClassVar, Optional

from .layout import NodeKind
from .model_types import ErrorKind


class DereferenceError(RuntimeError):
    """Base class for reference resolution failures."""

    kind: ClassVar[ErrorKind]

    def __init__(
        self,
        message: str,
        *,
        pointer: Optional[str] = None,
        location: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.pointer = pointer
        self.location = location


class ComponentLookupError(DereferenceError):
    """Raised by index lookups; recorded per slot rather than aborting."""


class MalformedPointerError(ComponentLookupError):
    """Raised when a pointer is not an in-document component pointer."""

    kind = ErrorKind.MALFORMED_POINTER


class UnknownComponentError(ComponentLookupError):
    """Raised when a pointer names a component the document does not define."""

    kind = ErrorKind.UNKNOWN_COMPONENT


class KindMismatchError(ComponentLookupError):
    """Raised when a pointer targets a section of the wrong kind for its slot."""

    kind = ErrorKind.KIND_MISMATCH

    def __init__(
        self,
        message: str,
        *,
        expected: NodeKind,
        actual: NodeKind,
        pointer: Optional[str] = None,
        location: Optional[str] = None,
    ) -> None:
        super().__init__(message, pointer=pointer, location=location)
        self.expected = expected
        self.actual = actual


class DuplicateComponentError(DereferenceError):
    """Raised when two components map to the same canonical pointer."""

    kind = ErrorKind.DUPLICATE_COMPONENT


class TooDeepError(DereferenceError):
    """Raised when nesting exceeds the configured depth bound."""

    kind = ErrorKind.TOO_DEEP
