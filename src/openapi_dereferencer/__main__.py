"""Module entry point for ``python -m openapi_dereferencer``."""

from __future__ import annotations

from .cli import main

raise SystemExit(main())
