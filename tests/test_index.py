"""Unit tests for the component index."""

from __future__ import annotations

import pytest

from openapi_dereferencer.errors import (
    DuplicateComponentError,
    KindMismatchError,
    MalformedPointerError,
    UnknownComponentError,
)
from openapi_dereferencer.index import (
    ComponentIndex,
    canonical_pointer,
    parse_pointer,
)
from openapi_dereferencer.layout import NodeKind
from openapi_dereferencer.model_types import ErrorKind, Reference
from openapi_dereferencer.tree import build_document_tree
from .fixture_helpers import load_fixture


def test_index_registers_every_component_section() -> None:
    """Every named entry of every known section gets a canonical pointer."""
    index = ComponentIndex.build(build_document_tree(load_fixture("petstore.yaml")))

    pointers = {entry.pointer for entry in index}
    assert "#/components/schemas/Pet" in pointers
    assert "#/components/parameters/Limit" in pointers
    assert "#/components/headers/NextPage" in pointers
    assert "#/components/responses/Error" in pointers
    assert "#/components/requestBodies/NewPet" in pointers
    assert "#/components/examples/Rex" in pointers
    assert "#/components/links/GetPet" in pointers
    assert "#/components/callbacks/PetCreated" in pointers
    assert "#/components/securitySchemes/ApiKey" in pointers
    assert len(index) == 12


def test_lookup_returns_entry_with_kind_and_location() -> None:
    """Lookups expose the component node together with where it was defined."""
    index = ComponentIndex.build(build_document_tree(load_fixture("petstore.yaml")))

    entry = index.lookup("#/components/schemas/Pet", NodeKind.SCHEMA)

    assert entry.section == "schemas"
    assert entry.name == "Pet"
    assert entry.kind is NodeKind.SCHEMA
    assert entry.location == "components.schemas.Pet"
    assert isinstance(entry.node, dict)
    assert entry.node["properties"]["owner"] == Reference(pointer="#/components/schemas/Owner")


def test_document_without_components_yields_empty_index() -> None:
    """A missing components section is a valid, empty index."""
    index = ComponentIndex.build({"openapi": "3.1.0", "paths": {}})

    assert len(index) == 0
    with pytest.raises(UnknownComponentError):
        index.lookup("#/components/schemas/Pet", NodeKind.SCHEMA)


def test_index_ignores_unknown_sections_and_non_mapping_sections() -> None:
    """Extension sections and malformed section values are not indexed."""
    index = ComponentIndex.build(
        {
            "components": {
                "x-internal": {"Thing": {"type": "string"}},
                "schemas": ["not", "a", "mapping"],
                "parameters": {"Limit": {"name": "limit", "in": "query"}},
            }
        }
    )

    assert [entry.pointer for entry in index] == ["#/components/parameters/Limit"]


def test_duplicate_canonical_pointer_is_rejected() -> None:
    """YAML keys ``1`` and ``"1"`` collapse onto one pointer and must fail."""
    document = {"components": {"schemas": {1: {"type": "string"}, "1": {"type": "integer"}}}}

    with pytest.raises(DuplicateComponentError) as exc_info:
        ComponentIndex.build(document)

    assert exc_info.value.kind is ErrorKind.DUPLICATE_COMPONENT
    assert exc_info.value.pointer == "#/components/schemas/1"
    assert exc_info.value.location == "components.schemas.1"


@pytest.mark.parametrize(
    "pointer",
    [
        "shared.yaml#/components/schemas/Pet",
        "https://example.com/openapi.json#/components/schemas/Pet",
        "//elsewhere/components/parameters/pagination-before",
        "#/paths/~1pets",
        "#/components/widgets/Pet",
        "#/components/schemas",
        "#/components/schemas/",
        "#/components/schemas/Pet/properties/name",
        "",
    ],
)
def test_malformed_pointers_are_rejected(pointer: str) -> None:
    """Only ``#/components/<section>/<name>`` pointers can be looked up."""
    index = ComponentIndex.build({"components": {"schemas": {"Pet": {"type": "object"}}}})

    with pytest.raises(MalformedPointerError) as exc_info:
        index.lookup(pointer, NodeKind.SCHEMA)

    assert exc_info.value.kind is ErrorKind.MALFORMED_POINTER
    assert exc_info.value.pointer == pointer


def test_kind_mismatch_is_reported_with_both_kinds() -> None:
    """A schema pointer in a parameter slot is a mismatch, not a substitution."""
    index = ComponentIndex.build({"components": {"schemas": {"Pet": {"type": "object"}}}})

    with pytest.raises(KindMismatchError) as exc_info:
        index.lookup("#/components/schemas/Pet", NodeKind.PARAMETER)

    assert exc_info.value.expected is NodeKind.PARAMETER
    assert exc_info.value.actual is NodeKind.SCHEMA
    assert exc_info.value.kind is ErrorKind.KIND_MISMATCH


def test_kind_mismatch_is_checked_before_existence() -> None:
    """The section decides the kind even when the name is not defined."""
    index = ComponentIndex.build({})

    with pytest.raises(KindMismatchError):
        index.lookup("#/components/schemas/Missing", NodeKind.RESPONSE)


def test_escaped_and_percent_encoded_names_resolve() -> None:
    """RFC 6901 escapes and URI percent-encoding map back to the raw name."""
    index = ComponentIndex.build(
        {"components": {"schemas": {"a/b~c": {"type": "string"}, "My Pet": {"type": "object"}}}}
    )

    slashed = index.lookup("#/components/schemas/a~1b~0c", NodeKind.SCHEMA)
    spaced = index.lookup("#/components/schemas/My%20Pet", NodeKind.SCHEMA)

    assert slashed.name == "a/b~c"
    assert slashed.pointer == "#/components/schemas/a~1b~0c"
    assert spaced.name == "My Pet"
    assert spaced.pointer == "#/components/schemas/My Pet"


def test_pointer_helpers_round_trip_names() -> None:
    """Canonical pointers parse back into their section and name."""
    pointer = canonical_pointer("requestBodies", "pet/new")

    assert pointer == "#/components/requestBodies/pet~1new"
    assert parse_pointer(pointer) == ("requestBodies", "pet/new")


def test_contains_accepts_any_pointer_form() -> None:
    """Membership checks never raise, even for malformed pointers."""
    index = ComponentIndex.build({"components": {"examples": {"Rex": {"value": 1}}}})

    assert "#/components/examples/Rex" in index
    assert "#/components/examples/Fido" not in index
    assert "other.yaml#/components/examples/Rex" not in index
    assert 42 not in index
