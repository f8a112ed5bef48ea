"""Build command: publish fonts and write the stylesheet."""

from __future__ import annotations

from pathlib import Path

import typer

from fontsmith.exceptions import StylesheetWriteError
from fontsmith.logging import FontPipelineLogger
from fontsmith.pipeline import FontPipeline

from .._options import ConfigArgument, DebugOption, ForceOption, RootOption, VerboseOption
from ..presenter import present_build_summary
from ..state import emit_error, set_cli_state
from ..utils import load_project_options


def build(
    ctx: typer.Context,
    config: ConfigArgument = None,
    root: RootOption = Path("."),
    force: ForceOption = False,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Publish the configured fonts and generate their stylesheet.

    Fonts that fail are reported individually; the command only fails when
    the configuration or the stylesheet cannot be handled.
    """
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)
    root = root.resolve()
    logger = FontPipelineLogger(verbose=verbose > 0)
    options = load_project_options(config, root, logger=logger)
    if options.verbose and not logger.verbose:
        logger = FontPipelineLogger(verbose=True)

    pipeline = FontPipeline(options, root, logger=logger)
    try:
        result = pipeline.run(force=force)
    except StylesheetWriteError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    present_build_summary(state, result)
    if result.from_cache and result.failures:
        logger.info("Cached failures are reused until the cache expires; use --force to retry.")


__all__ = ["build"]
