"""Font package metadata models and loader."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from fontsmith.config import FontRequest
from fontsmith.exceptions import MetadataInvalidError, MetadataMissingError


METADATA_FILENAMES = ("metadata.json", "font-metadata.json")


class AxisRange(BaseModel):
    """Range of a single variation axis."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    min: float
    max: float
    default: float

    @model_validator(mode="before")
    @classmethod
    def _default_to_min(cls, data: Any) -> Any:
        if isinstance(data, dict) and "default" not in data and "min" in data:
            return {**data, "default": data["min"]}
        return data

    @field_validator("min", "max", "default", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        # Some packages publish axis bounds as strings.
        if isinstance(value, str):
            return float(value.strip())
        return value


class FontVariation(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    axes: dict[str, AxisRange] = Field(default_factory=dict)
    instances: dict[str, dict[str, float]] | None = None


class FontMetadata(BaseModel):
    """Metadata declared by a font package."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    family: str
    id: str | None = None
    subsets: list[str] = Field(default_factory=list)
    weights: list[int] = Field(default_factory=list)
    styles: list[str] = Field(default_factory=list)
    def_subset: str = Field(default="latin", alias="defSubset")
    variable: FontVariation | None = None
    unicode_range: dict[str, str] = Field(default_factory=dict, alias="unicodeRange")
    category: str | None = None
    last_modified: str | None = Field(default=None, alias="lastModified")
    version: str | None = None

    @field_validator("variable", mode="before")
    @classmethod
    def _ignore_flag_only_variable(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return None
        if "axes" not in value:
            # Flat layout: {"wght": {"min": ..., "max": ..., "default": ...}}
            return {"axes": value}
        return value

    @field_validator("unicode_range", mode="before")
    @classmethod
    def _default_ranges(cls, value: Any) -> Any:
        return value or {}

    @property
    def axes(self) -> dict[str, AxisRange]:
        return self.variable.axes if self.variable is not None else {}

    def axis(self, tag: str) -> AxisRange | None:
        return self.axes.get(tag)

    def with_unicode_ranges(self, overrides: dict[str, str] | None) -> FontMetadata:
        """Return a copy whose unicode ranges are overridden per subset."""
        if not overrides:
            return self
        return self.model_copy(update={"unicode_range": {**self.unicode_range, **overrides}})


def find_metadata_file(package_dir: Path) -> Path | None:
    """Return the metadata file shipped by a package, if any."""
    for name in METADATA_FILENAMES:
        candidate = package_dir / name
        if candidate.is_file():
            return candidate
    return None


def read_metadata(package_dir: Path, request: FontRequest) -> tuple[FontMetadata, Path]:
    """Read, validate and enrich the metadata of a located package."""
    path = find_metadata_file(package_dir)
    if path is None:
        raise MetadataMissingError(f"No metadata found for {request.package}")

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MetadataInvalidError(f"Unreadable metadata for {request.package}: {exc}") from exc
    if not isinstance(payload, dict):
        raise MetadataInvalidError(f"Metadata for {request.package} is not a JSON object")

    try:
        metadata = FontMetadata.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in error.get("loc", ())) or "<root>"
            for error in exc.errors()
        )
        raise MetadataInvalidError(
            f"Invalid metadata for {request.package} (fields: {fields})"
        ) from exc

    return metadata.with_unicode_ranges(request.unicode_ranges), path


__all__ = [
    "METADATA_FILENAMES",
    "AxisRange",
    "FontMetadata",
    "FontVariation",
    "find_metadata_file",
    "read_metadata",
]
