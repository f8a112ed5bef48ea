"""Small logging helpers that integrate with the fontsmith CLI."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
import logging
import time
from typing import Any


_LOG = logging.getLogger("fontsmith")


def _resolve_state() -> object | None:
    from fontsmith.cli.state import get_cli_state

    try:
        return get_cli_state(create=False)
    except RuntimeError:
        return None


def format_duration(seconds: float) -> str:
    """Return a short human readable duration."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, rest = divmod(int(seconds), 60)
    return f"{minutes}m {rest}s"


@dataclass(slots=True)
class FontPipelineLogger:
    """Light wrapper around the CLI console with a `logging` fallback.

    Components receive their logger through their constructor and derive
    scoped loggers with `child`, so no logger state is shared between them.
    """

    verbose: bool = False
    scope: str | None = None
    _state: object | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._state = _resolve_state()

    def child(self, scope: str) -> FontPipelineLogger:
        """Return a logger whose messages carry an additional scope prefix."""
        nested = f"{self.scope}/{scope}" if self.scope else scope
        return replace(self, scope=nested)

    def _render_message(self, message: str, args: tuple[Any, ...]) -> str:
        if args:
            try:
                message = message % args
            except (TypeError, ValueError):
                message = " ".join([message, *(str(arg) for arg in args)])
        if self.scope:
            message = f"[{self.scope}] {message}"
        return message

    def _console_log(self, message: str, style: str | None = None) -> bool:
        if self._state is None:
            return False
        console = self._state.console
        console.log(message, style=style, markup=False)
        return True

    def info(self, message: str, *args: Any) -> None:
        message = self._render_message(message, args)
        if not self._console_log(message):
            _LOG.info(message)

    def success(self, message: str, *args: Any) -> None:
        """Report a completed operation."""
        message = self._render_message(message, args)
        if not self._console_log(message, style="green"):
            _LOG.info(message)

    def warning(self, message: str, *args: Any) -> None:
        message = self._render_message(message, args)
        if self._state is not None:
            from fontsmith.cli.state import emit_warning

            emit_warning(message)
            return
        _LOG.warning(message)

    def error(self, message: str, *args: Any, exc: BaseException | None = None) -> None:
        message = self._render_message(message, args)
        if self._state is not None:
            from fontsmith.cli.state import emit_error

            emit_error(message, exception=exc)
            return
        _LOG.error(message, exc_info=exc if self.verbose else None)

    def debug(self, message: str, *args: Any) -> None:
        """Emit a debug/verbose message when verbose mode is enabled."""
        if not self.verbose:
            return
        message = self._render_message(message, args)
        if not self._console_log(message, style="dim"):
            _LOG.debug(message)

    @contextmanager
    def timer(self, label: str, *, slow_after: float = 5.0) -> Iterator[None]:
        """Report how long the wrapped block took."""
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - started
            if elapsed > slow_after:
                self.info("%s took %s", label, format_duration(elapsed))
            else:
                self.debug("%s finished in %s", label, format_duration(elapsed))

    @contextmanager
    def progress(self, task: str, total: int | None = None) -> Iterator[Callable[[int], None]]:
        """Yield a progress updater, rendered with Rich when a CLI console is active."""
        if self._state is None:
            count = 0

            def _count(step: int = 1) -> None:
                nonlocal count
                count += step
                self.debug("%s: %s/%s", task, count, total if total is not None else "?")

            yield _count
            return

        from rich.progress import (
            BarColumn,
            Progress,
            SpinnerColumn,
            TaskID,
            TextColumn,
            TimeElapsedColumn,
        )

        with Progress(
            SpinnerColumn(),
            TextColumn(f"[bold cyan]{task}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}" if total else "{task.completed}"),
            TimeElapsedColumn(),
            console=self._state.console,
            transient=not self.verbose,
        ) as progress:
            task_id: TaskID = progress.add_task(task, total=total)

            def _advance(step: int = 1) -> None:
                progress.update(task_id, advance=step)

            yield _advance


__all__ = ["FontPipelineLogger", "format_duration"]
