"""Cache inspection and maintenance commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer

from fontsmith.cache import CacheManager
from fontsmith.logging import FontPipelineLogger

from .._options import ConfigArgument, RootOption, VerboseOption
from ..presenter import present_cache_stats
from ..state import set_cli_state
from ..utils import load_project_options


cache_app = typer.Typer(help="Inspect and maintain the font cache.", no_args_is_help=True)


def _manager(
    config: Path | None, root: Path, logger: FontPipelineLogger
) -> tuple[CacheManager, dict[str, Any]]:
    options = load_project_options(config, root, logger=logger, required=False)
    manager = CacheManager(
        root,
        options.resolve(root, options.cache_dir),
        ttl=options.cache_ttl,
        logger=logger.child("cache"),
    )
    return manager, {"requests": options.fonts, "settings": options.stylesheet_settings()}


@cache_app.command("info")
def info(
    ctx: typer.Context,
    config: ConfigArgument = None,
    root: RootOption = Path("."),
    verbose: VerboseOption = 0,
) -> None:
    """Show the cache location, size, age and validity."""
    state = set_cli_state(ctx=ctx, verbosity=verbose)
    root = root.resolve()
    manager, current = _manager(config, root, FontPipelineLogger(verbose=verbose > 0))
    stats = manager.stats(current["requests"], current["settings"])
    present_cache_stats(state, stats, manager.cache_file)


@cache_app.command("clear")
def clear(
    ctx: typer.Context,
    config: ConfigArgument = None,
    root: RootOption = Path("."),
    verbose: VerboseOption = 0,
) -> None:
    """Delete the cache file after saving a timestamped backup."""
    state = set_cli_state(ctx=ctx, verbosity=verbose)
    root = root.resolve()
    manager, _current = _manager(config, root, FontPipelineLogger(verbose=verbose > 0))
    backup = manager.clear()
    if backup is None:
        state.console.print("No cache to clear.")
        return
    state.console.print(f"Cache cleared, backup saved to {backup.name}", markup=False)


@cache_app.command("prune")
def prune(
    ctx: typer.Context,
    config: ConfigArgument = None,
    root: RootOption = Path("."),
    keep: Annotated[
        int, typer.Option("--keep", min=0, help="Number of backups to keep.")
    ] = 5,
    verbose: VerboseOption = 0,
) -> None:
    """Remove old backups and compact an oversized cache file."""
    state = set_cli_state(ctx=ctx, verbosity=verbose)
    root = root.resolve()
    manager, _current = _manager(config, root, FontPipelineLogger(verbose=verbose > 0))
    report = manager.maintain(keep_backups=keep)
    state.console.print(
        f"Removed {len(report.removed_backups)} backup(s)"
        + (", compacted cache file" if report.compacted else "")
    )


__all__ = ["cache_app", "clear", "info", "prune"]
