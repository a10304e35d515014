"""Command line interface for OpenAPI dereferencing."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from pydantic import ValidationError

from .config import ConfigError, ResolverConfig, load_config
from .dereferencer import OpenAPILoadError, WriteError, run_dereference
from .errors import DereferenceError
from .writer import dump_document


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="openapi-dereferencer",
        description="Resolve in-document $ref pointers of an OpenAPI document",
    )
    parser.add_argument("--input", required=True, help="Path to an OpenAPI YAML or JSON file")
    parser.add_argument(
        "--output",
        help="Output file (.yaml/.yml for YAML, JSON otherwise); defaults to JSON on stdout",
    )
    parser.add_argument("--config", help="Path to a YAML resolver configuration file")
    parser.add_argument(
        "--max-depth",
        type=int,
        help="Override the maximum nesting depth of the walk",
    )
    parser.add_argument(
        "--annotate-refs",
        action="store_true",
        help="Record each resolved value's original pointer under x-resolved-ref",
    )
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip structural validation of the input document",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def _resolve_config(args: argparse.Namespace) -> ResolverConfig:
    config = load_config(Path(args.config)) if args.config else ResolverConfig()
    if args.max_depth is not None:
        try:
            config = ResolverConfig.model_validate(
                {**config.model_dump(), "max_depth": args.max_depth}
            )
        except ValidationError as exc:
            raise ConfigError(f"Invalid --max-depth {args.max_depth}: {exc}") from exc
    return config


def main(argv: list[str] | None = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    output_path = Path(args.output) if args.output else None
    try:
        run = run_dereference(
            input_path=Path(args.input),
            output_path=output_path,
            config=_resolve_config(args),
            annotate=bool(args.annotate_refs),
            validate=not args.no_validate,
        )
    except (OpenAPILoadError, WriteError, ConfigError, DereferenceError) as exc:
        parser.error(str(exc))
        return 2

    if output_path is None:
        rendered = dump_document(run.document, as_yaml=False, annotate=bool(args.annotate_refs))
        print(rendered, end="")

    for issue in run.document.issues:
        print(
            f"Warning: {issue.location}: {issue.kind.value}: {issue.message}",
            file=sys.stderr,
        )

    return 0 if run.document.is_clean else 1


if __name__ == "__main__":
    raise SystemExit(main())
