"""Per-font processing outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fontsmith.config import FontRequest
from fontsmith.metadata import FontMetadata
from fontsmith.publisher import PublishedFile


def _relative(path: Path, base: Path | None) -> str:
    if base is not None:
        try:
            return path.relative_to(base).as_posix()
        except ValueError:
            pass
    return str(path)


def _absolute(value: str, base: Path | None) -> Path:
    path = Path(value)
    if base is None or path.is_absolute():
        return path
    return base / path


def describe_error(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


@dataclass(slots=True)
class ProcessedFont:
    """Outcome of processing one font request.

    A font carrying errors never carries published files.
    """

    request: FontRequest
    metadata: FontMetadata | None = None
    files: list[PublishedFile] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    metadata_path: Path | None = None

    def __post_init__(self) -> None:
        if self.errors and self.files:
            raise ValueError("a failed font cannot carry published files")

    @classmethod
    def failed(cls, request: FontRequest, exc: BaseException) -> ProcessedFont:
        return cls(request=request, errors=[describe_error(exc)])

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def family(self) -> str:
        return self.request.family

    def to_dict(self, relative_to: Path | None = None) -> dict[str, Any]:
        """Serialise to JSON compatible data, paths relative to ``relative_to``."""
        return {
            "request": self.request.model_dump(mode="json", by_alias=True, exclude_none=True),
            "metadata": (
                self.metadata.model_dump(mode="json", by_alias=True)
                if self.metadata is not None
                else None
            ),
            "metadataPath": (
                _relative(self.metadata_path, relative_to)
                if self.metadata_path is not None
                else None
            ),
            "files": [
                {
                    "path": _relative(item.path, relative_to),
                    "fileName": item.file_name,
                    "subset": item.subset,
                    "style": item.style,
                    "weight": item.weight,
                    "variable": item.variable,
                    "size": item.size,
                    "hash": item.hash,
                    "url": item.url,
                    "destination": _relative(item.destination, relative_to),
                }
                for item in self.files
            ],
            "errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any], base: Path | None = None) -> ProcessedFont:
        """Rebuild a font from `to_dict` output, resolving paths against ``base``."""
        metadata = payload.get("metadata")
        metadata_path = payload.get("metadataPath")
        return cls(
            request=FontRequest.model_validate(payload["request"]),
            metadata=FontMetadata.model_validate(metadata) if metadata is not None else None,
            files=[
                PublishedFile(
                    path=_absolute(item["path"], base),
                    file_name=item["fileName"],
                    subset=item["subset"],
                    style=item["style"],
                    weight=item.get("weight"),
                    variable=bool(item.get("variable", False)),
                    size=int(item.get("size", 0)),
                    hash=item["hash"],
                    url=item["url"],
                    destination=_absolute(item["destination"], base),
                )
                for item in payload.get("files", [])
            ],
            errors=list(payload.get("errors", [])),
            metadata_path=_absolute(metadata_path, base) if metadata_path else None,
        )


__all__ = ["ProcessedFont", "describe_error"]
