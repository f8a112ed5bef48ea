"""Select the font files of a package matching a request."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from fontsmith.config import FontRequest
from fontsmith.exceptions import NoFilesFoundError
from fontsmith.logging import FontPipelineLogger
from fontsmith.metadata import FontMetadata
from fontsmith.naming import build_patterns, parse_font_filename


FILES_DIRNAME = "files"
DEFAULT_SUBSETS = ("latin",)
DEFAULT_STYLES = ("normal",)
DEFAULT_WEIGHTS = (400,)


@dataclass(frozen=True, slots=True)
class ResolvedFile:
    """A font file selected from a package."""

    path: Path
    file_name: str
    subset: str
    style: str
    weight: int | None
    variable: bool
    size: int

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()

    @property
    def format(self) -> str:
        return "woff2" if self.extension == ".woff2" else "woff"


@dataclass(frozen=True, slots=True)
class Selection:
    subsets: tuple[str, ...]
    styles: tuple[str, ...]
    weights: tuple[int, ...]


def effective_selection(request: FontRequest, metadata: FontMetadata | None) -> Selection:
    """Return the subsets, styles and weights to publish.

    Each dimension comes from the request, then from the package metadata,
    then from the built-in defaults.
    """
    subsets = request.subsets or (tuple(metadata.subsets) if metadata else ()) or DEFAULT_SUBSETS
    styles = request.styles or (tuple(metadata.styles) if metadata else ()) or DEFAULT_STYLES
    weights = request.weights or (tuple(metadata.weights) if metadata else ()) or DEFAULT_WEIGHTS
    return Selection(subsets=tuple(subsets), styles=tuple(styles), weights=tuple(weights))


class FontFileResolver:
    """Match a package's ``files`` directory against the naming grammar."""

    def __init__(self, logger: FontPipelineLogger | None = None) -> None:
        self.logger = logger or FontPipelineLogger()

    def _match(self, files_dir: Path, patterns: tuple[str, ...]) -> list[Path]:
        matches: list[Path] = []
        for pattern in patterns:
            matches.extend(sorted(path for path in files_dir.glob(pattern) if path.is_file()))
        return matches

    def resolve(
        self,
        package_dir: Path,
        request: FontRequest,
        metadata: FontMetadata,
    ) -> list[ResolvedFile]:
        files_dir = package_dir / FILES_DIRNAME
        if not files_dir.is_dir():
            raise NoFilesFoundError(f"No files directory found in {package_dir}")

        selection = effective_selection(request, metadata)
        groups = build_patterns(
            package=request.package,
            variable=request.variable,
            subsets=selection.subsets,
            styles=selection.styles,
            weights=selection.weights,
            axes=request.axes,
        )

        candidates: list[Path] = []
        for group in groups:
            found = self._match(files_dir, group.primary)
            if not found and group.fallback:
                self.logger.debug(
                    "No primary match for %s/%s, trying fallback patterns",
                    group.subset,
                    group.style,
                )
                found = self._match(files_dir, group.fallback)
            candidates.extend(found)

        resolved: list[ResolvedFile] = []
        seen_paths: set[Path] = set()
        seen_stems: set[str] = set()
        for path in candidates:
            if path in seen_paths:
                continue
            seen_paths.add(path)
            parsed = parse_font_filename(
                path.name, variable=request.variable, subsets=selection.subsets
            )
            if parsed is None:
                self.logger.debug("Skipping unrecognised file %s", path.name)
                continue
            if parsed.subset not in selection.subsets or parsed.style not in selection.styles:
                continue
            # woff2 patterns are matched first, so the woff twin is dropped.
            if parsed.stem in seen_stems:
                continue
            seen_stems.add(parsed.stem)
            resolved.append(
                ResolvedFile(
                    path=path,
                    file_name=path.name,
                    subset=parsed.subset,
                    style=parsed.style,
                    weight=parsed.weight,
                    variable=request.variable,
                    size=path.stat().st_size,
                )
            )

        default_subset = metadata.def_subset if metadata is not None else DEFAULT_SUBSETS[0]
        resolved.sort(key=lambda item: (item.subset != default_subset, item.style != "normal"))

        if not resolved:
            raise NoFilesFoundError(
                f"No font files found for {request.package} with the specified configuration. "
                "Check your subsets, styles, and axes settings."
            )
        self.logger.debug("Resolved %d file(s) for %s", len(resolved), request.package)
        return resolved


__all__ = [
    "DEFAULT_STYLES",
    "DEFAULT_SUBSETS",
    "DEFAULT_WEIGHTS",
    "FILES_DIRNAME",
    "FontFileResolver",
    "ResolvedFile",
    "Selection",
    "effective_selection",
]
