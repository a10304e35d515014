"""Tests for loading OpenAPI documents."""

from __future__ import annotations

from pathlib import Path

import pytest

from openapi_dereferencer.loader import (
    OpenAPILoadError,
    ensure_supported_version,
    get_openapi_version,
    load_openapi_document,
    load_openapi_text,
)
from .fixture_helpers import fixture_path


def test_load_document_from_yaml_file() -> None:
    """Fixture files load into plain mappings."""
    document = load_openapi_document(fixture_path("petstore.yaml"))

    assert document["info"]["title"] == "Petstore"
    assert "/pets" in document["paths"]


def test_load_document_from_json_file(tmp_path: Path) -> None:
    """JSON is a subset of YAML and loads the same way."""
    source = tmp_path / "api.json"
    source.write_text(
        '{"openapi": "3.0.3", "info": {"title": "T", "version": "1"}, "paths": {}}',
        encoding="utf-8",
    )

    assert load_openapi_document(source)["openapi"] == "3.0.3"


def test_missing_file_is_a_load_error(tmp_path: Path) -> None:
    with pytest.raises(OpenAPILoadError, match="Failed to read"):
        load_openapi_document(tmp_path / "missing.yaml")


def test_invalid_yaml_is_a_load_error(tmp_path: Path) -> None:
    source = tmp_path / "broken.yaml"
    source.write_text("openapi: [3.1.0\n", encoding="utf-8")

    with pytest.raises(OpenAPILoadError, match="Failed to parse YAML"):
        load_openapi_document(source)


def test_non_mapping_documents_are_rejected() -> None:
    """Top-level lists and scalars are not OpenAPI documents."""
    with pytest.raises(OpenAPILoadError, match="must deserialize to a mapping"):
        load_openapi_text("- openapi\n- 3.1.0\n")


def test_structural_validation_can_be_skipped(tmp_path: Path) -> None:
    """Documents missing required fields only fail when validation is on."""
    source = tmp_path / "partial.yaml"
    source.write_text("openapi: 3.1.0\npaths: {}\n", encoding="utf-8")

    with pytest.raises(OpenAPILoadError, match="validation failed"):
        load_openapi_document(source)
    assert load_openapi_document(source, validate=False) == {"openapi": "3.1.0", "paths": {}}


def test_text_loading_does_not_validate_by_default() -> None:
    assert load_openapi_text("openapi: 3.1.0\n") == {"openapi": "3.1.0"}


def test_version_helpers() -> None:
    """Only OpenAPI 3 and later documents are accepted."""
    assert get_openapi_version({"openapi": " 3.1.0 "}) == "3.1.0"
    ensure_supported_version("3.0.3")

    with pytest.raises(OpenAPILoadError, match="Missing or invalid"):
        get_openapi_version({"swagger": "2.0"})
    with pytest.raises(OpenAPILoadError, match="Unsupported OpenAPI version"):
        ensure_supported_version("2.0")
    with pytest.raises(OpenAPILoadError, match="Unable to parse"):
        ensure_supported_version("three")
