"""Resolver configuration."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_MAX_DEPTH = 128
# Keeps the recursive walk well inside the interpreter recursion limit.
MAX_DEPTH_LIMIT = 200


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be loaded."""


class ResolverConfig(BaseModel):
    """Tunables for one resolution run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        le=MAX_DEPTH_LIMIT,
        description="Maximum nesting of nodes and reference expansions along one path",
    )


def load_config(path: Path) -> ResolverConfig:
    """Load resolver configuration from a YAML file.

    A missing file yields the defaults.

    Args:
        path (Path): Path to the YAML configuration file.

    Returns:
        ResolverConfig: Parsed configuration.
    """
    if not path.exists():
        return ResolverConfig()
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data)!r}")

    try:
        return ResolverConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc
