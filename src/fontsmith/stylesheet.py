"""Render the font stylesheet from processed fonts."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from fontsmith.config import PipelineOptions
from fontsmith.fallback import FallbackMetrics, FallbackMetricsProvider
from fontsmith.metadata import FontMetadata
from fontsmith.naming import is_icon_library, is_icon_package
from fontsmith.publisher import PublishedFile, family_slug
from fontsmith.results import ProcessedFont
from fontsmith.unicode_ranges import unicode_range_for


TOOL_NAME = "fontsmith"
FALLBACK_SUFFIX = " Fallback"

ICON_AXIS_DEFAULTS: dict[str, float] = {"FILL": 0, "wght": 400, "GRAD": 0, "opsz": 24}
ICON_WEIGHTS: tuple[tuple[str, int], ...] = (
    ("thin", 100),
    ("light", 300),
    ("regular", 400),
    ("medium", 500),
    ("bold", 700),
)
ICON_SIZES = (20, 24, 40, 48)
ICON_BASE_DECLARATIONS = (
    "font-weight: normal;",
    "font-style: normal;",
    "font-size: 24px;",
    "line-height: 1;",
    "letter-spacing: normal;",
    "text-transform: none;",
    "display: inline-block;",
    "white-space: nowrap;",
    "word-wrap: normal;",
    "direction: ltr;",
    "-webkit-font-smoothing: antialiased;",
    "-moz-osx-font-smoothing: grayscale;",
    "text-rendering: optimizeLegibility;",
    "font-feature-settings: 'liga';",
)

PERFORMANCE_NOTES = """/* Performance Optimization Tips:
 * - Critical fonts are preloaded automatically
 * - Fonts are served with immutable cache headers
 * - Variable fonts reduce total file size
 * - Fallback fonts minimize layout shift
 * - Unicode ranges enable progressive loading
 */
"""


def _number(value: float) -> str:
    return f"{value:g}"


def _quote(family: str) -> str:
    return "'" + family.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _comment(text: str) -> str:
    return text.replace("*/", "* /")


def _block(selector: str, declarations: Iterable[str]) -> str:
    body = "".join(f"  {line}\n" for line in declarations)
    return f"{selector} {{\n{body}}}\n\n"


def generic_family(font: ProcessedFont) -> str:
    """Return the generic keyword closing the custom property of ``font``."""
    if font.request.fallback:
        return font.request.fallback
    return "serif" if "serif" in font.family.lower() else "sans-serif"


class StylesheetGenerator:
    """Build the stylesheet text.

    Output only depends on the processed fonts, the options and the header
    timestamp; the timestamp can be injected to make output reproducible.
    """

    def __init__(
        self,
        options: PipelineOptions | None = None,
        *,
        metrics: FallbackMetricsProvider | None = None,
    ) -> None:
        self.options = options or PipelineOptions()
        self.metrics = metrics or FallbackMetricsProvider()

    def generate(
        self,
        results: Sequence[ProcessedFont],
        *,
        generated_at: datetime | None = None,
    ) -> str:
        sections = [
            self.header(generated_at),
            self.font_faces(results),
            self.custom_properties(results) if self.options.custom_properties else "",
            self.utilities(results) if self.options.utilities else "",
            PERFORMANCE_NOTES,
        ]
        return "\n".join(section for section in sections if section)

    def header(self, generated_at: datetime | None = None) -> str:
        stamp = (generated_at or datetime.now(timezone.utc)).isoformat(timespec="seconds")
        return (
            f"/* Generated by {TOOL_NAME} */\n"
            "/* Do not edit this file directly - it will be overwritten */\n"
            f"/* Generated at: {stamp} */\n"
        )

    # -- Face declarations --------------------------------------------------

    def _fallback_metrics(self, font: ProcessedFont) -> FallbackMetrics | None:
        if not (self.options.fallbacks and font.request.variable):
            return None
        metrics = self.metrics.metrics_for(font.family, font.request.fallback)
        return metrics if metrics.local_sources() else None

    def _display(self, font: ProcessedFont) -> str:
        if is_icon_package(font.request.package):
            return "block"
        return font.request.display or self.options.display or "swap"

    def _weight(self, font: ProcessedFont, file: PublishedFile) -> str:
        if font.request.variable:
            axis = font.metadata.axis("wght") if font.metadata is not None else None
            if axis is not None:
                return f"{_number(axis.min)} {_number(axis.max)}"
            weights = sorted(set(font.request.weights or ()))
            if len(weights) > 1:
                return f"{weights[0]} {weights[-1]}"
        if file.weight:
            return str(file.weight)
        return "400"

    def font_face(self, font: ProcessedFont, file: PublishedFile) -> str:
        fmt = f"{file.format}-variations" if font.request.variable else file.format
        declarations = [
            f"font-family: {_quote(font.family)};",
            f"font-style: {file.style};",
            f"font-display: {self._display(font)};",
            f"font-weight: {self._weight(font, file)};",
            f"src: url('{file.url}') format('{fmt}');",
        ]
        unicode_range = unicode_range_for(font.metadata, file.subset)
        if unicode_range:
            declarations.append(f"unicode-range: {unicode_range};")
        return _block("@font-face", declarations)

    def fallback_face(self, font: ProcessedFont, metrics: FallbackMetrics) -> str:
        sources = ", ".join(f"local({_quote(name)})" for name in metrics.local_sources())
        return f"/* Fallback font for {_comment(font.family)} */\n" + _block(
            "@font-face",
            [
                f"font-family: {_quote(font.family + FALLBACK_SUFFIX)};",
                f"src: {sources};",
                f"size-adjust: {metrics.size_adjust};",
                f"ascent-override: {metrics.ascent_override};",
                f"descent-override: {metrics.descent_override};",
                f"line-gap-override: {metrics.line_gap_override};",
            ],
        )

    def font_faces(self, results: Sequence[ProcessedFont]) -> str:
        parts: list[str] = []
        for font in results:
            if not font.ok:
                errors = _comment(", ".join(font.errors))
                parts.append(f"/* Error processing {_comment(font.family)}: {errors} */\n\n")
                continue
            parts.append(f"/* {_comment(font.family)} - {_comment(font.request.package)} */\n")
            parts.extend(self.font_face(font, file) for file in font.files)
            metrics = self._fallback_metrics(font)
            if metrics is not None:
                parts.append(self.fallback_face(font, metrics))
            parts.append("\n")
        return "".join(parts)

    # -- Custom properties --------------------------------------------------

    def custom_properties(self, results: Sequence[ProcessedFont]) -> str:
        lines: list[str] = []
        for font in results:
            if not font.ok:
                continue
            slug = family_slug(font.family)
            stack = [_quote(font.family)]
            if self._fallback_metrics(font) is not None:
                stack.append(_quote(font.family + FALLBACK_SUFFIX))
            stack.append(generic_family(font))
            lines.append(f"--font-{slug}: {', '.join(stack)};")
            if font.request.variable and font.metadata is not None:
                for tag, axis in font.metadata.axes.items():
                    lines.append(f"--font-{slug}-{tag}-min: {_number(axis.min)};")
                    lines.append(f"--font-{slug}-{tag}-max: {_number(axis.max)};")
                    lines.append(f"--font-{slug}-{tag}-default: {_number(axis.default)};")
        if not lines:
            return ""
        return "/* CSS Custom Properties */\n" + _block(":root", lines)

    # -- Utilities ----------------------------------------------------------

    def utilities(self, results: Sequence[ProcessedFont]) -> str:
        return "".join(
            self.icon_utilities(font)
            for font in results
            if font.ok and is_icon_library(font.request.package)
        )

    @staticmethod
    def _axis_defaults(metadata: FontMetadata | None) -> dict[str, float]:
        values = dict(ICON_AXIS_DEFAULTS)
        if metadata is not None:
            for tag in values:
                axis = metadata.axis(tag)
                if axis is not None:
                    values[tag] = axis.default
        return values

    @staticmethod
    def _variation_settings(values: dict[str, float]) -> str:
        settings = ", ".join(f"'{tag}' {_number(value)}" for tag, value in values.items())
        return f"font-variation-settings: {settings};"

    def icon_utilities(self, font: ProcessedFont) -> str:
        slug = family_slug(font.family)
        defaults = self._axis_defaults(font.metadata)
        css = [f"/* {_comment(font.family)} Utilities */\n"]
        css.append(
            _block(
                f".{slug}",
                [
                    f"font-family: var(--font-{slug}, {_quote(font.family)});",
                    *ICON_BASE_DECLARATIONS,
                    self._variation_settings(defaults),
                ],
            )
        )
        css.append(_block(f".{slug}.filled", [self._variation_settings({**defaults, "FILL": 1})]))
        for name, weight in ICON_WEIGHTS:
            css.append(
                _block(f".{slug}.{name}", [self._variation_settings({**defaults, "wght": weight})])
            )
        for size in ICON_SIZES:
            css.append(
                _block(
                    f".{slug}.size-{size}",
                    [f"font-size: {size}px;", self._variation_settings({**defaults, "opsz": size})],
                )
            )
        return "".join(css)


__all__ = ["PERFORMANCE_NOTES", "StylesheetGenerator", "generic_family"]
