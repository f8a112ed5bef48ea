"""Helpers shared by CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer

from fontsmith.config import DEFAULT_CONFIG_NAME, PipelineOptions, load_options
from fontsmith.exceptions import ConfigError
from fontsmith.logging import FontPipelineLogger

from .state import emit_error


def resolve_config_path(config: Path | None, root: Path) -> Path:
    if config is None:
        return root / DEFAULT_CONFIG_NAME
    return config if config.is_absolute() else Path.cwd() / config


def load_project_options(
    config: Path | None,
    root: Path,
    *,
    logger: FontPipelineLogger,
    required: bool = True,
) -> PipelineOptions:
    """Load the project configuration, exiting with status 1 when it is unusable.

    When ``required`` is false a missing default configuration yields the
    built-in defaults instead of an error.
    """
    path = resolve_config_path(config, root)
    if not required and config is None and not path.exists():
        return PipelineOptions()
    try:
        options, issues = load_options(path, logger=logger)
    except ConfigError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc
    if issues:
        logger.debug("Ignored %d invalid font entries in %s", len(issues), path.name)
    return options


__all__ = ["load_project_options", "resolve_config_path"]
