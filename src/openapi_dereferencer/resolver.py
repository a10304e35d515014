"""Reference resolution over the typed document tree.

The resolver walks a document depth-first through the OpenAPI layout and
rewrites every referenceable slot:

* direct values are recursed into and stay direct;
* a :class:`~.model_types.Reference` becomes a
  :class:`~.model_types.ResolvedReference` carrying the original reference and
  the recursively resolved target;
* a reference that cannot be looked up becomes a
  :class:`~.model_types.BrokenReference` and a
  :class:`~.model_types.ResolutionIssue` is recorded, without stopping the walk;
* slots that are already resolved or broken are left untouched, so resolving
  a resolved document is a no-op.

Cycles are expanded once.  While a component is being expanded its pointer is
on the active path; a reference back to any pointer on that path becomes a
resolved slot whose value is a :class:`~.model_types.ReferenceMarker` instead
of a second expansion.  Component sections are walked with their own pointer
on the path, so a self-referencing schema reads the same under
``components`` as at every site that references it.

Expansions that did not run into a pointer outside themselves are memoised for
the rest of the call.  A memoised expansion is shared by every later slot that
references it while none of the pointers it expanded is on the active path;
otherwise it is expanded afresh so that the cut lands where the path requires.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
import sys
from typing import Any, Optional

from .config import ResolverConfig
from .errors import ComponentLookupError, TooDeepError
from .index import ComponentIndex, canonical_pointer
from .layout import (
    SECTION_KINDS,
    Arity,
    LayoutField,
    NodeKind,
    entry_kind_for,
    fields_for,
    is_extension_key,
)
from .model_types import (
    BrokenReference,
    DereferencedDocument,
    DocumentNode,
    Reference,
    ReferenceMarker,
    ResolutionIssue,
    ResolvedReference,
)
from .tree import copy_data, join_location

logger = logging.getLogger(__name__)

_NO_CYCLE = sys.maxsize


@dataclass(frozen=True)
class _Expansion:
    """A memoised component expansion and every pointer expanded inside it."""

    value: DocumentNode
    pointers: frozenset[str]


@dataclass
class _ResolutionContext:
    """Transient state of one ``resolve`` call."""

    # Pointer -> position on the active expansion path.
    active: dict[str, int] = field(default_factory=dict)
    depth: int = 0
    # Lowest active-path position a cycle returned to inside the current expansion.
    lowest_cycle: int = _NO_CYCLE
    # Pointers expanded inside the current expansion, including memo hits.
    expanded: set[str] = field(default_factory=set)
    memo: dict[str, _Expansion] = field(default_factory=dict)
    issues: list[ResolutionIssue] = field(default_factory=list)
    reported: set[tuple[str, str, str]] = field(default_factory=set)

    def record(self, issue: ResolutionIssue) -> None:
        key = (issue.location, issue.kind.value, issue.pointer)
        if key in self.reported:
            return
        self.reported.add(key)
        self.issues.append(issue)
        logger.warning("Unresolved reference at %s: %s", issue.location, issue.message)


class Resolver:
    """Dereference every slot of a document against a component index."""

    def __init__(self, index: ComponentIndex, *, config: Optional[ResolverConfig] = None) -> None:
        self._index = index
        self._config = config or ResolverConfig()

    def resolve(self, document: Mapping[str, Any]) -> DereferencedDocument:
        """Resolve every referenceable slot of ``document``.

        Args:
            document (Mapping[str, Any]): Typed document tree, as built by
                :func:`~.tree.build_document_tree` or returned by a previous
                resolution.

        Returns:
            DereferencedDocument: New tree plus the per-slot issues, in walk
            order.

        Raises:
            TooDeepError: If nesting exceeds ``config.max_depth``.
        """
        context = _ResolutionContext()
        root = self._resolve_node(document, NodeKind.DOCUMENT, "", context)
        logger.debug(
            "Resolved document: %d expansions memoised, %d issues",
            len(context.memo),
            len(context.issues),
        )
        return DereferencedDocument(root=root, issues=tuple(context.issues))

    @contextmanager
    def _descend(self, location: str, context: _ResolutionContext) -> Iterator[None]:
        if context.depth >= self._config.max_depth:
            raise TooDeepError(
                f"Nesting exceeds {self._config.max_depth} levels at {location or '<root>'}",
                location=location,
            )
        context.depth += 1
        try:
            yield
        finally:
            context.depth -= 1

    def _resolve_node(
        self,
        node: Any,
        kind: NodeKind,
        location: str,
        context: _ResolutionContext,
    ) -> DocumentNode:
        if not isinstance(node, Mapping):
            return self._copy(node, location, context)

        with self._descend(location, context):
            resolved: dict[Any, DocumentNode] = {}
            if kind is NodeKind.COMPONENTS:
                self._resolve_components(node, location, context, into=resolved)
            else:
                for layout_field in fields_for(kind):
                    if layout_field.key in node:
                        resolved[layout_field.key] = self._resolve_field(
                            node[layout_field.key],
                            layout_field,
                            join_location(location, layout_field.key),
                            context,
                        )
                entry_kind = entry_kind_for(kind)
                if entry_kind is not None:
                    for key, value in node.items():
                        if not is_extension_key(key):
                            resolved[key] = self._resolve_slot(
                                value, entry_kind, join_location(location, key), context
                            )

            return {
                key: (
                    resolved[key]
                    if key in resolved
                    else self._copy(value, join_location(location, key), context)
                )
                for key, value in node.items()
            }

    def _copy(self, value: Any, location: str, context: _ResolutionContext) -> DocumentNode:
        return copy_data(
            value,
            location=location,
            depth=context.depth + 1,
            max_depth=self._config.max_depth,
        )

    def _resolve_components(
        self,
        node: Mapping[str, Any],
        location: str,
        context: _ResolutionContext,
        *,
        into: dict[Any, DocumentNode],
    ) -> None:
        for section, kind in SECTION_KINDS.items():
            entries = node.get(section)
            if not isinstance(entries, Mapping):
                continue
            section_location = join_location(location, section)
            into[section] = {
                name: self._expand(
                    canonical_pointer(section, str(name)),
                    slot,
                    kind,
                    join_location(section_location, name),
                    context,
                )
                for name, slot in entries.items()
            }

    def _resolve_field(
        self,
        value: Any,
        layout_field: LayoutField,
        location: str,
        context: _ResolutionContext,
    ) -> DocumentNode:
        resolve = self._resolve_slot if layout_field.referenceable else self._resolve_node
        kind = layout_field.kind
        if layout_field.arity is Arity.ONE:
            return resolve(value, kind, location, context)
        if layout_field.arity is Arity.LIST and isinstance(value, list):
            return [
                resolve(item, kind, join_location(location, position), context)
                for position, item in enumerate(value)
            ]
        if layout_field.arity is Arity.MAP and isinstance(value, Mapping):
            return {
                name: resolve(item, kind, join_location(location, name), context)
                for name, item in value.items()
            }
        return self._copy(value, location, context)

    def _resolve_slot(
        self,
        slot: Any,
        kind: NodeKind,
        location: str,
        context: _ResolutionContext,
    ) -> DocumentNode:
        if isinstance(slot, (ResolvedReference, BrokenReference)):
            return slot
        if isinstance(slot, Reference):
            return self._resolve_reference(slot, kind, location, context)
        return self._resolve_node(slot, kind, location, context)

    def _resolve_reference(
        self,
        reference: Reference,
        kind: NodeKind,
        location: str,
        context: _ResolutionContext,
    ) -> DocumentNode:
        try:
            entry = self._index.lookup(reference.pointer, kind)
        except ComponentLookupError as exc:
            context.record(
                ResolutionIssue(
                    location=location,
                    kind=exc.kind,
                    pointer=reference.pointer,
                    message=str(exc),
                )
            )
            return BrokenReference(reference=reference, error=exc.kind)

        if entry.pointer in context.active:
            context.lowest_cycle = min(context.lowest_cycle, context.active[entry.pointer])
            logger.debug("Cycle through %s at %s; not expanding again", entry.pointer, location)
            return ResolvedReference(reference=reference, value=ReferenceMarker(entry.pointer))

        target = self._expand(entry.pointer, entry.node, entry.kind, entry.location, context)
        if isinstance(target, BrokenReference):
            return BrokenReference(reference=reference, error=target.error)
        if isinstance(target, ResolvedReference):
            return ResolvedReference(reference=reference, value=target.value)
        return ResolvedReference(reference=reference, value=target)

    def _expand(
        self,
        pointer: str,
        slot: Any,
        kind: NodeKind,
        location: str,
        context: _ResolutionContext,
    ) -> DocumentNode:
        """Resolve a component body with its own pointer on the active path."""
        cached = context.memo.get(pointer)
        if cached is not None and context.active.keys().isdisjoint(cached.pointers):
            logger.debug("Reusing expansion of %s", pointer)
            context.expanded |= cached.pointers
            return cached.value

        position = len(context.active)
        outer_lowest = context.lowest_cycle
        outer_expanded = context.expanded
        context.lowest_cycle = _NO_CYCLE
        context.expanded = {pointer}
        context.active[pointer] = position
        try:
            with self._descend(location, context):
                result = self._resolve_slot(slot, kind, location, context)
        finally:
            del context.active[pointer]

        lowest = context.lowest_cycle
        pointers = frozenset(context.expanded)
        context.lowest_cycle = min(outer_lowest, lowest)
        outer_expanded |= pointers
        context.expanded = outer_expanded
        # Expansions cut short by a pointer further out depend on the path taken.
        if lowest >= position:
            context.memo[pointer] = _Expansion(value=result, pointers=pointers)
        return result


def resolve_document(
    document: Mapping[str, Any],
    index: ComponentIndex,
    *,
    config: Optional[ResolverConfig] = None,
) -> DereferencedDocument:
    """Resolve ``document`` against ``index``; see :meth:`Resolver.resolve`."""
    return Resolver(index, config=config).resolve(document)
