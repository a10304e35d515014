"""Fixture-based OpenAPI validation tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from openapi_dereferencer.loader import OpenAPILoadError, load_openapi_document
from .fixture_helpers import fixture_dir, parametrize_fixtures


def test_fixture_directory_exists() -> None:
    """Ensure the fixtures directory is present."""
    assert fixture_dir().is_dir(), f"Fixture directory not found: {fixture_dir()}"


@parametrize_fixtures()
def test_fixture_is_valid_openapi(fixture_path: Path) -> None:
    """Each fixture is structurally valid, even where its references are not."""
    try:
        load_openapi_document(fixture_path, validate=True)
    except OpenAPILoadError as exc:
        pytest.fail(f"OpenAPI validation failed for {fixture_path}:\n{exc}")
