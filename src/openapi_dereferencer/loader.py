"""OpenAPI document loading and basic validation."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from openapi_python_client.schema import OpenAPI
from pydantic import ValidationError

from .model_types import JSONObject, JSONValue

logger = logging.getLogger(__name__)


class OpenAPILoadError(RuntimeError):
    """Raised when a source OpenAPI document cannot be loaded."""


def load_openapi_document(path: Path, *, validate: bool = True) -> JSONObject:
    """Load an OpenAPI document from a YAML or JSON file.

    Args:
        path (Path): Path to the document.
        validate (bool): Whether to check the document's structure against the
            OpenAPI object model before returning it.

    Returns:
        JSONObject: The parsed document.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as exc:
        raise OpenAPILoadError(f"Failed to read OpenAPI file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise OpenAPILoadError(f"Failed to parse YAML in {path}: {exc}") from exc

    document = _ensure_mapping(payload)
    if validate:
        _validate_structure(document, source=str(path))
    logger.debug("Loaded OpenAPI document from %s", path)
    return document


def load_openapi_text(text: str, *, validate: bool = False) -> JSONObject:
    """Load an OpenAPI document from YAML or JSON text."""
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise OpenAPILoadError(f"Failed to parse OpenAPI text: {exc}") from exc

    document = _ensure_mapping(payload)
    if validate:
        _validate_structure(document, source="<text>")
    return document


def _ensure_mapping(payload: JSONValue) -> JSONObject:
    if not isinstance(payload, dict):
        raise OpenAPILoadError(
            f"OpenAPI document must deserialize to a mapping, got {type(payload)!r}"
        )
    return payload


def _validate_structure(document: JSONObject, *, source: str) -> None:
    try:
        OpenAPI.model_validate(document)
    except ValidationError as exc:
        raise OpenAPILoadError(f"OpenAPI schema validation failed for {source}: {exc}") from exc


def get_openapi_version(document: JSONObject) -> str:
    """Return the declared OpenAPI version string."""
    version = document.get("openapi")
    if not isinstance(version, str) or not version.strip():
        raise OpenAPILoadError("Missing or invalid 'openapi' version field")
    return version.strip()


def ensure_supported_version(version: str) -> None:
    """Validate that the input version is OpenAPI v3+."""
    major_text = version.split(".", maxsplit=1)[0]
    try:
        major = int(major_text)
    except ValueError as exc:
        raise OpenAPILoadError(f"Unable to parse OpenAPI version: {version}") from exc
    if major < 3:
        raise OpenAPILoadError(f"Unsupported OpenAPI version {version}; only v3+ is supported")
