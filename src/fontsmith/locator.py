"""Locate installed font packages on disk."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import glob
from pathlib import Path, PurePosixPath

from fontsmith.exceptions import PackageNotFoundError
from fontsmith.logging import FontPipelineLogger


MODULES_DIRNAME = "node_modules"
PNPM_STORE_DIRNAME = ".pnpm"


def _is_safe_name(package: str) -> bool:
    if not package or package.startswith("/"):
        return False
    parts = PurePosixPath(package).parts
    return ".." not in parts and "." not in parts


class PackageLocator:
    """Resolve package names to directories across package-manager layouts.

    Search order for each base directory (the project root, the configured
    search paths, then the parents of the project root):

    1. ``<base>/node_modules/<package>``
    2. ``<base>/node_modules/.pnpm/<package with "/" as "+">@*/node_modules/<package>``

    When several version-suffixed store entries match, the lexicographically
    greatest directory name wins. This is not semver aware: ``2.0.0`` sorts
    after ``10.0.0``.
    """

    def __init__(
        self,
        root: Path,
        *,
        search_paths: Iterable[Path] | None = None,
        include_parents: bool = True,
        logger: FontPipelineLogger | None = None,
    ) -> None:
        self.root = root
        self.search_paths = [Path(path) for path in search_paths or ()]
        self.include_parents = include_parents
        self.logger = logger or FontPipelineLogger()

    def _bases(self) -> Iterator[Path]:
        seen: set[Path] = set()
        candidates = [self.root, *self.search_paths]
        if self.include_parents:
            candidates.extend(self.root.resolve().parents)
        for base in candidates:
            key = base.resolve()
            if key in seen:
                continue
            seen.add(key)
            yield base

    def candidates(self, package: str) -> list[Path]:
        """Return the plain (non-store) candidate directories in search order."""
        if not _is_safe_name(package):
            return []
        return [base / MODULES_DIRNAME / package for base in self._bases()]

    def _store_match(self, base: Path, package: str) -> Path | None:
        store = base / MODULES_DIRNAME / PNPM_STORE_DIRNAME
        if not store.is_dir():
            return None
        prefix = glob.escape(package.replace("/", "+"))
        matches = {
            entry.name: entry / MODULES_DIRNAME / package
            for entry in store.glob(f"{prefix}@*")
            if (entry / MODULES_DIRNAME / package).is_dir()
        }
        if not matches:
            return None
        return matches[max(matches)]

    def locate(self, package: str) -> Path:
        """Return the directory of ``package`` or raise `PackageNotFoundError`."""
        if _is_safe_name(package):
            for base in self._bases():
                direct = base / MODULES_DIRNAME / package
                if direct.is_dir():
                    self.logger.debug("Resolved %s to %s", package, direct)
                    return direct
                stored = self._store_match(base, package)
                if stored is not None:
                    self.logger.debug("Resolved %s to store entry %s", package, stored)
                    return stored
        raise PackageNotFoundError(
            f"Package {package} not found. Please install it with: npm install {package}"
        )


__all__ = ["MODULES_DIRNAME", "PNPM_STORE_DIRNAME", "PackageLocator"]
