"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


PROJECT_PANEL = "Project"
DIAGNOSTICS_PANEL = "Diagnostics"

ConfigArgument = Annotated[
    Path | None,
    typer.Argument(
        metavar="CONFIG",
        help="YAML configuration file (defaults to fontsmith.yaml in the project root).",
        dir_okay=False,
        show_default=False,
    ),
]

RootOption = Annotated[
    Path,
    typer.Option(
        "--root",
        help="Project root holding node_modules and receiving the outputs.",
        file_okay=False,
        rich_help_panel=PROJECT_PANEL,
    ),
]

ForceOption = Annotated[
    bool,
    typer.Option(
        "--force",
        "-f",
        help="Ignore the cache and process every font again.",
        rich_help_panel=PROJECT_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
