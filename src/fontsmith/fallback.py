"""Metric-adjusted fallback fonts.

A fallback face renders a locally installed font scaled to occupy the same
space as the web font, which reduces layout shift while the web font loads.
Metrics come from a curated table of popular families, then from a category
inferred from the family name.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


GENERIC_FAMILIES = frozenset(
    {
        "serif",
        "sans-serif",
        "monospace",
        "cursive",
        "fantasy",
        "system-ui",
        "ui-serif",
        "ui-sans-serif",
        "ui-monospace",
        "ui-rounded",
        "emoji",
        "math",
        "fangsong",
        "-apple-system",
        "BlinkMacSystemFont",
    }
)
VARIABLE_SUFFIX = " Variable"


@dataclass(frozen=True, slots=True)
class FallbackMetrics:
    """Fallback stack and the overrides applied to it."""

    fallback: str
    size_adjust: str
    ascent_override: str
    descent_override: str
    line_gap_override: str

    def local_sources(self) -> list[str]:
        """Return the concrete family names of the stack, generic keywords dropped."""
        names = []
        for entry in self.fallback.split(","):
            name = entry.strip().strip("'\"")
            if name and name not in GENERIC_FAMILIES:
                names.append(name)
        return names


_SANS = "Arial, Helvetica Neue, Helvetica, sans-serif"
_SERIF = "Georgia, Times New Roman, Times, serif"
_MONO = "Courier New, Courier, monospace"
_NARROW = "Arial Narrow, Arial, sans-serif"
_SYSTEM = "-apple-system, BlinkMacSystemFont, Segoe UI, Helvetica, Arial, sans-serif"

SANS_SERIF_DEFAULT = FallbackMetrics("Arial, Helvetica, sans-serif", "100%", "93%", "24%", "0%")
SERIF_DEFAULT = FallbackMetrics(_SERIF, "100%", "92%", "25%", "0%")
MONOSPACE_DEFAULT = FallbackMetrics(_MONO, "98%", "94%", "25%", "0%")
ICON_DEFAULT = FallbackMetrics("sans-serif", "100%", "normal", "normal", "normal")


def _entries() -> dict[str, FallbackMetrics]:
    base = {
        # Sans-serif
        "Montserrat": FallbackMetrics(_SANS, "106.25%", "95%", "23%", "0%"),
        "Inter": FallbackMetrics(_SANS, "107.5%", "90%", "22.5%", "0%"),
        "Roboto": FallbackMetrics(_SANS, "100.3%", "92.7%", "24.4%", "0%"),
        "Open Sans": FallbackMetrics(_SANS, "104.5%", "93%", "24.3%", "0%"),
        "Raleway": FallbackMetrics(_SANS, "105.2%", "94.2%", "23.1%", "0%"),
        "Poppins": FallbackMetrics(_SANS, "111.5%", "91%", "21.5%", "0%"),
        "Source Sans Pro": FallbackMetrics(_SANS, "101.2%", "91.8%", "23.8%", "0%"),
        "Source Sans 3": FallbackMetrics(_SANS, "101.2%", "91.8%", "23.8%", "0%"),
        # Serif
        "Lora": FallbackMetrics(_SERIF, "97.5%", "93%", "25%", "0%"),
        "Merriweather": FallbackMetrics(_SERIF, "92.3%", "96.5%", "26.8%", "0%"),
        "Playfair Display": FallbackMetrics(_SERIF, "108.7%", "88%", "22%", "0%"),
        "PT Serif": FallbackMetrics(_SERIF, "98.6%", "91.5%", "24.5%", "0%"),
        "Noto Serif": FallbackMetrics(_SERIF, "101.1%", "91%", "24%", "0%"),
        "Crimson Text": FallbackMetrics(_SERIF, "93.8%", "94.5%", "26.2%", "0%"),
        # Monospace
        "Fira Code": FallbackMetrics(_MONO, "97.5%", "95%", "24%", "0%"),
        "JetBrains Mono": FallbackMetrics(_MONO, "95.3%", "96.8%", "25.2%", "0%"),
        "Source Code Pro": FallbackMetrics(_MONO, "96.8%", "94.2%", "24.8%", "0%"),
        "Roboto Mono": FallbackMetrics(_MONO, "99.2%", "93.5%", "24.5%", "0%"),
        "IBM Plex Mono": FallbackMetrics(_MONO, "98.5%", "94%", "25%", "0%"),
        # Display
        "Bebas Neue": FallbackMetrics(_NARROW, "119.5%", "82%", "16%", "0%"),
        "Oswald": FallbackMetrics(_NARROW, "105.8%", "92.5%", "20.5%", "0%"),
        # System UI
        "DM Sans": FallbackMetrics(_SYSTEM, "102.3%", "92%", "24%", "0%"),
        "Work Sans": FallbackMetrics(_SYSTEM, "103.8%", "91.5%", "23.5%", "0%"),
        # Icons
        "Material Icons": ICON_DEFAULT,
        "Material Icons Rounded": ICON_DEFAULT,
        "Material Symbols Rounded": ICON_DEFAULT,
        "Font Awesome": ICON_DEFAULT,
    }
    table = dict(base)
    for family, metrics in base.items():
        table[f"{family}{VARIABLE_SUFFIX}"] = metrics
    table["Source Code Variable"] = base["Source Code Pro"]
    return table


CURATED_METRICS: dict[str, FallbackMetrics] = _entries()


def infer_category(family: str) -> str:
    """Guess the category of a family from its name."""
    lowered = family.lower()
    if "mono" in lowered or "code" in lowered:
        return "monospace"
    if "serif" in lowered and "sans" not in lowered:
        return "serif"
    if "icon" in lowered or "symbols" in lowered:
        return "icon"
    return "sans-serif"


_CATEGORY_DEFAULTS = {
    "monospace": MONOSPACE_DEFAULT,
    "serif": SERIF_DEFAULT,
    "icon": ICON_DEFAULT,
    "sans-serif": SANS_SERIF_DEFAULT,
}


class FallbackMetricsProvider:
    """Look up fallback metrics for a family."""

    def __init__(self, table: dict[str, FallbackMetrics] | None = None) -> None:
        self.table = CURATED_METRICS if table is None else table

    def lookup(self, family: str) -> FallbackMetrics | None:
        """Return the curated entry of ``family`` or of its non-variable name."""
        metrics = self.table.get(family)
        if metrics is None and family.endswith(VARIABLE_SUFFIX):
            metrics = self.table.get(family[: -len(VARIABLE_SUFFIX)])
        return metrics

    def metrics_for(self, family: str, custom_fallback: str | None = None) -> FallbackMetrics:
        metrics = self.lookup(family) or _CATEGORY_DEFAULTS[infer_category(family)]
        if custom_fallback:
            return replace(metrics, fallback=custom_fallback)
        return metrics


@dataclass(frozen=True, slots=True)
class FontMetrics:
    """Vertical metrics of a font, in font units."""

    units_per_em: int
    ascent: int
    descent: int
    line_gap: int = 0


def _percent(value: float) -> str:
    return f"{value:.1f}%"


def compute_fallback_metrics(
    font: FontMetrics,
    fallback: FontMetrics,
    stack: str,
) -> FallbackMetrics:
    """Derive overrides from the vertical metrics of a web font and its fallback.

    The metrics are supplied by the caller; no font file is read here.
    """
    if font.units_per_em <= 0 or fallback.units_per_em <= 0:
        raise ValueError("units_per_em must be positive")
    return FallbackMetrics(
        fallback=stack,
        size_adjust=_percent(fallback.units_per_em / font.units_per_em * 100),
        ascent_override=_percent(font.ascent / font.units_per_em * 100),
        descent_override=_percent(abs(font.descent) / font.units_per_em * 100),
        line_gap_override=_percent(font.line_gap / font.units_per_em * 100),
    )


__all__ = [
    "CURATED_METRICS",
    "GENERIC_FAMILIES",
    "FallbackMetrics",
    "FallbackMetricsProvider",
    "FontMetrics",
    "compute_fallback_metrics",
    "infer_category",
]
