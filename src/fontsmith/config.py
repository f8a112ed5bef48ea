"""Configuration models for the font publishing pipeline.

FontRequest

`package` (`str`)
: Name of the installed font package, e.g. `@fontsource-variable/inter`.
  Scoped names are supported.

`family` (`str`)
: Font family name as it will be used in the stylesheet.

`variable` (`bool`)
: Whether the package ships variable font files.

`preload` (`bool`)
: Ask the runtime collaborator to preload the representative file.

`weights` / `styles` / `subsets` / `axes` (`tuple | None`)
: Selection of files to publish. When omitted, the package metadata decides,
  then the built-in defaults (`400`, `normal`, `latin`).

`display` (`str | None`)
: `font-display` strategy; falls back to the pipeline default.

`fallback` (`str | None`)
: Custom fallback stack replacing the computed one.

`priority` (`int`)
: Fonts with a higher priority are processed first.

`unicode_ranges` (`dict[str, str] | None`)
: Per-subset unicode ranges overriding the package metadata.

PipelineOptions

`fonts` (`list[FontRequest]`)
: Fonts to publish.

`output_dir` (`Path`)
: Directory receiving the content-hashed assets, relative to the project root.

`css_path` (`Path`)
: Location of the generated stylesheet.

`public_path` (`str`)
: URL prefix under which `output_dir` is served.

`caching` / `cache_ttl` / `cache_dir`
: Enable the change-aware cache, its time-to-live in seconds and its location.

`display` (`str`)
: Default `font-display` strategy.

`fallbacks` / `custom_properties` / `utilities` (`bool`)
: Toggle the optional stylesheet sections.

`preconnect` / `crossorigin`
: Hints forwarded to the runtime injection collaborator.

`search_paths` (`list[Path]`)
: Additional directories searched for installed packages.

`verbose` (`bool`)
: Emit debug messages.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from slugify import slugify
import yaml

from fontsmith.exceptions import ConfigError
from fontsmith.logging import FontPipelineLogger


Display = Literal["auto", "block", "swap", "fallback", "optional"]
Style = Literal["normal", "italic"]

DEFAULT_CONFIG_NAME = "fontsmith.yaml"


class FontRequest(BaseModel):
    """One requested font family."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    package: str
    family: str
    variable: bool = False
    preload: bool = False
    weights: tuple[int, ...] | None = None
    styles: tuple[Style, ...] | None = None
    subsets: tuple[str, ...] | None = None
    axes: tuple[str, ...] | None = None
    display: Display | None = None
    fallback: str | None = None
    priority: int = 0
    unicode_ranges: dict[str, str] | None = Field(default=None, alias="unicodeRanges")

    @field_validator("package")
    @classmethod
    def _check_package(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("package must not be empty")
        if value.startswith("/") or ".." in PurePosixPath(value).parts:
            raise ValueError(f"invalid package name '{value}'")
        return value

    @field_validator("family")
    @classmethod
    def _check_family(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("family must not be empty")
        if not slugify(value):
            raise ValueError(f"family '{value}' has no letters or digits to name assets after")
        return value

    @field_validator("weights")
    @classmethod
    def _check_weights(cls, value: tuple[int, ...] | None) -> tuple[int, ...] | None:
        if value is None:
            return None
        for weight in value:
            if not 1 <= weight <= 1000:
                raise ValueError(f"font weight {weight} is outside 1..1000")
        return value


class PipelineOptions(BaseModel):
    """Options steering a pipeline run."""

    model_config = ConfigDict(extra="forbid")

    fonts: list[FontRequest] = Field(default_factory=list)
    output_dir: Path = Path("public/fonts")
    css_path: Path = Path("assets/css/fonts.css")
    public_path: str = "/fonts"
    caching: bool = True
    cache_ttl: int = Field(default=86_400, ge=0, description="Cache time-to-live in seconds")
    cache_dir: Path = Path(".fontsmith/cache")
    display: Display = "swap"
    fallbacks: bool = True
    custom_properties: bool = True
    utilities: bool = True
    preconnect: bool = True
    crossorigin: Literal["anonymous", "use-credentials"] = "anonymous"
    search_paths: list[Path] = Field(default_factory=list)
    verbose: bool = False

    @field_validator("public_path")
    @classmethod
    def _strip_public_path(cls, value: str) -> str:
        value = "/" + value.strip().strip("/")
        return value.rstrip("/") or "/"

    def resolve(self, root: Path, value: Path) -> Path:
        """Resolve a configured path against the project root."""
        return value if value.is_absolute() else root / value

    def resolve_paths(self, root: Path) -> dict[str, Path]:
        """Return the output, stylesheet and cache locations under ``root``."""
        return {
            "output_dir": self.resolve(root, self.output_dir),
            "css_path": self.resolve(root, self.css_path),
            "cache_dir": self.resolve(root, self.cache_dir),
        }

    def stylesheet_settings(self) -> dict[str, Any]:
        """Return the options that change the generated stylesheet."""
        return {
            "public_path": self.public_path,
            "display": self.display,
            "fallbacks": self.fallbacks,
            "custom_properties": self.custom_properties,
            "utilities": self.utilities,
        }


@dataclass(frozen=True, slots=True)
class ConfigIssue:
    """A font entry rejected while loading configuration."""

    index: int
    package: str | None
    message: str

    def describe(self) -> str:
        label = self.package or f"entry #{self.index}"
        return f"Ignoring font {label}: {self.message}"


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def parse_font_requests(
    entries: Any,
    *,
    logger: FontPipelineLogger | None = None,
) -> tuple[list[FontRequest], list[ConfigIssue]]:
    """Validate font entries one by one, quarantining malformed ones."""
    logger = logger or FontPipelineLogger()
    if entries is None:
        return [], []
    if not isinstance(entries, list):
        raise ConfigError("'fonts' must be a list of font entries")

    requests: list[FontRequest] = []
    issues: list[ConfigIssue] = []
    for index, entry in enumerate(entries):
        package = entry.get("package") if isinstance(entry, Mapping) else None
        try:
            requests.append(FontRequest.model_validate(entry))
        except ValidationError as exc:
            issue = ConfigIssue(
                index=index,
                package=package if isinstance(package, str) else None,
                message=_format_validation_error(exc),
            )
            logger.warning(issue.describe())
            issues.append(issue)
    return requests, issues


def load_options(
    source: Path | Mapping[str, Any],
    *,
    logger: FontPipelineLogger | None = None,
) -> tuple[PipelineOptions, list[ConfigIssue]]:
    """Load pipeline options from a YAML file or an already parsed mapping."""
    if isinstance(source, Path):
        try:
            data = yaml.safe_load(source.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Unable to read configuration '{source}': {exc}") from exc
    else:
        data = dict(source)

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigError("Configuration root must be a mapping")

    payload = dict(data)
    requests, issues = parse_font_requests(payload.pop("fonts", None), logger=logger)
    try:
        options = PipelineOptions.model_validate({**payload, "fonts": requests})
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {_format_validation_error(exc)}") from exc
    return options, issues


__all__ = [
    "DEFAULT_CONFIG_NAME",
    "ConfigIssue",
    "Display",
    "FontRequest",
    "PipelineOptions",
    "Style",
    "load_options",
    "parse_font_requests",
]
