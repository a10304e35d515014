"""Component lookup table keyed by canonical in-document pointer."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
import logging
from typing import Any
from urllib.parse import unquote

from .errors import (
    DuplicateComponentError,
    KindMismatchError,
    MalformedPointerError,
    UnknownComponentError,
)
from .layout import SECTION_KINDS, NodeKind
from .model_types import DocumentNode
from .tree import join_location

logger = logging.getLogger(__name__)

_COMPONENTS = "components"


@dataclass(frozen=True)
class ComponentEntry:
    """One named component registered in the index."""

    pointer: str
    section: str
    name: str
    kind: NodeKind
    location: str
    node: DocumentNode


def escape_token(token: str) -> str:
    """Escape a JSON Pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


def unescape_token(token: str) -> str:
    """Unescape a JSON Pointer reference token (RFC 6901)."""
    return token.replace("~1", "/").replace("~0", "~")


def canonical_pointer(section: str, name: str) -> str:
    """Return the canonical pointer of component ``name`` in ``section``."""
    return f"#/{_COMPONENTS}/{section}/{escape_token(name)}"


def parse_pointer(pointer: str) -> tuple[str, str]:
    """Split a component pointer into its ``(section, name)`` pair.

    The fragment is percent-decoded before it is split, as RFC 6901 prescribes
    for JSON Pointers carried in URI fragments.

    Args:
        pointer (str): A ``$ref`` value.

    Returns:
        tuple[str, str]: Component section and unescaped component name.

    Raises:
        MalformedPointerError: If the pointer is not of the form
            ``#/components/<section>/<name>`` with a known section.
    """
    if not pointer.startswith("#/"):
        raise MalformedPointerError(
            f"References must be in the same document and start with '#/', found {pointer!r}",
            pointer=pointer,
        )
    tokens = [unescape_token(token) for token in unquote(pointer[2:]).split("/")]
    if len(tokens) != 3 or tokens[0] != _COMPONENTS or not tokens[2]:
        raise MalformedPointerError(
            f"Expected a pointer of the form '#/components/<section>/<name>', found {pointer!r}",
            pointer=pointer,
        )
    section, name = tokens[1], tokens[2]
    if section not in SECTION_KINDS:
        raise MalformedPointerError(
            f"Unknown component section {section!r} in {pointer!r}",
            pointer=pointer,
        )
    return section, name


class ComponentIndex:
    """Read-only mapping from canonical pointer to component node."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], ComponentEntry] = {}

    @classmethod
    def build(cls, document: Mapping[str, Any]) -> ComponentIndex:
        """Index every named entry of every known component section.

        A document without a ``components`` mapping yields an empty index.

        Args:
            document (Mapping[str, Any]): Typed document tree.

        Returns:
            ComponentIndex: The populated index.

        Raises:
            DuplicateComponentError: If two entries share a canonical pointer.
        """
        index = cls()
        components = document.get(_COMPONENTS)
        if not isinstance(components, Mapping):
            logger.debug("Document has no components section; index is empty")
            return index

        for section in SECTION_KINDS:
            entries = components.get(section)
            if not isinstance(entries, Mapping):
                continue
            for name, node in entries.items():
                index._register(section, str(name), node)

        logger.debug("Indexed %d components", len(index))
        return index

    def _register(self, section: str, name: str, node: DocumentNode) -> None:
        pointer = canonical_pointer(section, name)
        location = join_location(join_location(_COMPONENTS, section), name)
        key = (section, name)
        if key in self._entries:
            raise DuplicateComponentError(
                f"Component {pointer} is defined more than once",
                pointer=pointer,
                location=location,
            )
        self._entries[key] = ComponentEntry(
            pointer=pointer,
            section=section,
            name=name,
            kind=SECTION_KINDS[section],
            location=location,
            node=node,
        )

    def lookup(self, pointer: str, expected: NodeKind) -> ComponentEntry:
        """Find the component ``pointer`` names, checking it suits the slot.

        Args:
            pointer (str): The ``$ref`` value found in the slot.
            expected (NodeKind): Kind of object the slot holds.

        Returns:
            ComponentEntry: The registered component.

        Raises:
            MalformedPointerError: If the pointer is not a component pointer.
            KindMismatchError: If the pointer's section holds another kind.
            UnknownComponentError: If no such component is defined.
        """
        section, name = parse_pointer(pointer)
        actual = SECTION_KINDS[section]
        if actual is not expected:
            raise KindMismatchError(
                f"{pointer} refers to a {actual.value} where a {expected.value} is expected",
                expected=expected,
                actual=actual,
                pointer=pointer,
            )
        entry = self._entries.get((section, name))
        if entry is None:
            raise UnknownComponentError(
                f"{pointer} does not name a component defined in this document",
                pointer=pointer,
            )
        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ComponentEntry]:
        return iter(self._entries.values())

    def __contains__(self, pointer: Any) -> bool:
        if not isinstance(pointer, str):
            return False
        try:
            key = parse_pointer(pointer)
        except MalformedPointerError:
            return False
        return key in self._entries
