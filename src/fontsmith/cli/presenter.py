"""Rich presenters for CLI summaries."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich import box
from rich.table import Table
from rich.text import Text

from fontsmith.cache import CacheStats
from fontsmith.logging import format_duration
from fontsmith.pipeline import PipelineResult

from .state import CLIState


def _build_table(*, title: str | None, columns: Sequence[str]) -> Table:
    """Create a Rich table with the house style."""
    table = Table(
        title=title or None,
        box=box.SQUARE,
        show_edge=True,
        header_style="bold cyan",
    )
    for column in columns:
        table.add_column(column)
    return table


def _format_path(path: Path) -> str:
    """Format a path relative to the current working directory when possible."""
    resolved = path.resolve()
    try:
        return str(resolved.relative_to(Path.cwd()))
    except ValueError:
        return str(resolved)


def _format_size(size: float) -> str:
    if size < 1024:
        return f"{int(size)} B"
    size /= 1024
    if size < 1024:
        return f"{size:.1f} KB"
    return f"{size / 1024:.1f} MB"


def present_build_summary(state: CLIState, result: PipelineResult) -> None:
    """Print one row per font with its outcome."""
    title = "Fonts (cached)" if result.from_cache else "Fonts"
    table = _build_table(title=title, columns=("Family", "Package", "Files", "Size", "Status"))
    for font in result.fonts:
        if font.ok:
            status = Text("ok", style="green")
            size = _format_size(sum(item.size for item in font.files))
        else:
            status = Text("; ".join(font.errors), style="red")
            size = "-"
        table.add_row(font.family, font.request.package, str(len(font.files)), size, status)
    state.console.print(table)
    if result.stylesheet_path is not None:
        state.console.print(f"Stylesheet: {_format_path(result.stylesheet_path)}", markup=False)


def present_cache_stats(state: CLIState, stats: CacheStats, cache_file: Path) -> None:
    table = _build_table(title="Font cache", columns=("Property", "Value"))
    table.add_row("File", _format_path(cache_file))
    table.add_row("Exists", "yes" if stats.exists else "no")
    table.add_row("Size", _format_size(stats.size))
    table.add_row("Age", format_duration(stats.age_ms / 1000) if stats.exists else "-")
    valid = Text("yes", style="green") if stats.valid else Text("no", style="yellow")
    table.add_row("Valid", valid)
    state.console.print(table)


__all__ = ["present_build_summary", "present_cache_stats"]
