"""Naming grammar of packaged web font files.

Files follow ``<family tokens>-<subset>-<variant>-<style>.<ext>`` where the
fields are separated by ``-`` and ``variant`` is a numeric weight for static
fonts, the joined axis tags (``wght``, ``wght-ital``...) for variable fonts, or
the literal ``full`` for icon packages shipping every axis in one file.

Parsing reads the fields from the end: the last one is the style, the
third-from-last the subset and, for static fonts, the second-from-last the
weight. Names with fewer than `MIN_FIELDS` fields are rejected.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass


DELIMITER = "-"
MIN_FIELDS = 3
# Ordered by preference: the first format wins when both exist.
FONT_EXTENSIONS = (".woff2", ".woff")
ICON_LIBRARY_MARKER = "material-symbols"
ICON_PACKAGE_MARKERS = ("icon", "symbols")
FULL_AXES_TOKEN = "full"
DEFAULT_AXES = ("wght",)


@dataclass(frozen=True, slots=True)
class FontFileName:
    """Structured view of a font file name."""

    stem: str
    extension: str
    subset: str
    style: str
    weight: int | None = None


def split_extension(name: str) -> tuple[str, str] | None:
    """Split a recognised font extension off ``name``."""
    lowered = name.lower()
    for extension in FONT_EXTENSIONS:
        if lowered.endswith(extension) and len(name) > len(extension):
            return name[: -len(extension)], extension
    return None


def parse_font_filename(
    name: str,
    *,
    variable: bool,
    subsets: Iterable[str] = (),
) -> FontFileName | None:
    """Parse ``name`` according to the naming grammar.

    ``subsets`` lists subset names that may themselves contain the delimiter
    (``latin-ext``); when the leading fields end with one of them it is taken
    whole instead of its last token. Returns ``None`` for unrecognised
    extensions and names with too few fields.
    """
    split = split_extension(name)
    if split is None:
        return None
    stem, extension = split
    parts = stem.split(DELIMITER)
    if len(parts) < MIN_FIELDS:
        return None

    style = parts[-1]
    leading = parts[:-2]
    subset = parts[-3]
    for candidate in sorted(subsets, key=lambda value: value.count(DELIMITER), reverse=True):
        tokens = candidate.split(DELIMITER)
        if len(tokens) > 1 and len(leading) > len(tokens) and leading[-len(tokens) :] == tokens:
            subset = candidate
            break

    weight: int | None = None
    if not variable:
        token = parts[-2]
        if token.isdigit():
            weight = int(token)

    return FontFileName(
        stem=stem,
        extension=extension,
        subset=subset,
        style=style,
        weight=weight,
    )


def is_icon_library(package: str) -> bool:
    """Return True for icon libraries using the ``full`` naming convention."""
    return ICON_LIBRARY_MARKER in package


def is_icon_package(package: str) -> bool:
    """Return True for icon-style packages (blocking display, neutral metrics)."""
    return any(marker in package for marker in ICON_PACKAGE_MARKERS)


@dataclass(frozen=True, slots=True)
class PatternGroup:
    """Glob patterns for one (subset, style) combination.

    ``fallback`` patterns are only consulted when no ``primary`` pattern
    matches a file.
    """

    subset: str
    style: str
    primary: tuple[str, ...]
    fallback: tuple[str, ...] = ()


def _with_extensions(stems: Iterable[str]) -> tuple[str, ...]:
    stems = list(dict.fromkeys(stems))
    return tuple(f"{stem}{extension}" for extension in FONT_EXTENSIONS for stem in stems)


def build_patterns(
    *,
    package: str,
    variable: bool,
    subsets: Sequence[str],
    styles: Sequence[str],
    weights: Sequence[int],
    axes: Sequence[str] | None = None,
) -> list[PatternGroup]:
    """Build the glob patterns matching the requested files."""
    groups: list[PatternGroup] = []
    axes = tuple(axes or DEFAULT_AXES)
    for subset in subsets:
        for style in styles:
            if variable:
                variant = FULL_AXES_TOKEN if is_icon_library(package) else DELIMITER.join(axes)
                primary = [f"*-{subset}-{variant}-{style}"]
                fallback = [f"*-{subset}-{axis}-{style}" for axis in axes]
            else:
                primary = [f"*-{subset}-{weight}-{style}" for weight in weights]
                fallback = [f"*-{subset}-*-{style}"]
            groups.append(
                PatternGroup(
                    subset=subset,
                    style=style,
                    primary=_with_extensions(primary),
                    fallback=_with_extensions(fallback),
                )
            )
    return groups


__all__ = [
    "DEFAULT_AXES",
    "DELIMITER",
    "FONT_EXTENSIONS",
    "FULL_AXES_TOKEN",
    "ICON_LIBRARY_MARKER",
    "MIN_FIELDS",
    "FontFileName",
    "PatternGroup",
    "build_patterns",
    "is_icon_library",
    "is_icon_package",
    "parse_font_filename",
    "split_extension",
]
