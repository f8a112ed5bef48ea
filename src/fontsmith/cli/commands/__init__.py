"""CLI command implementations exposed via `fontsmith.cli`."""

from __future__ import annotations

from .build import build
from .cache import cache_app


__all__ = ["build", "cache_app"]
