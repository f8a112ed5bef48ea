"""Change-aware cache of pipeline results.

The cache stores the outcome of the last run together with a hash of the
normalized font requests. A later run reuses it only while the module version,
the time-to-live, the request hash and the files on disk all still agree with
the snapshot. Any read problem is a cache miss; write problems are logged and
otherwise ignored.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import hashlib
import json
import os
from pathlib import Path
import shutil
import tempfile
import time
from typing import Any

from pydantic import ValidationError

from fontsmith.config import FontRequest
from fontsmith.exceptions import CacheReadError, CacheWriteError
from fontsmith.logging import FontPipelineLogger
from fontsmith.results import ProcessedFont
from fontsmith.version import get_version


CACHE_SCHEMA = 1
CACHE_FILENAME = "cache.json"
BACKUP_PREFIX = "cache.backup."
KEEP_BACKUPS = 5
COMPACT_THRESHOLD = 1024 * 1024
# Filesystems with coarse timestamps may report a metadata mtime slightly
# ahead of the cache file written in the same second.
MTIME_TOLERANCE = 1.0


def default_cache_version() -> str:
    return f"{CACHE_SCHEMA}:{get_version()}"


def _canonical(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def normalize_requests(requests: Iterable[FontRequest]) -> list[dict[str, Any]]:
    """Return requests as canonical data independent of cosmetic ordering.

    Array fields are sorted and de-duplicated, then the list is sorted by
    package and by canonical JSON text.
    """
    normalized: list[dict[str, Any]] = []
    for request in requests:
        data = request.model_dump(mode="json")
        for key, value in data.items():
            if isinstance(value, list):
                data[key] = sorted(set(value))
        normalized.append(data)
    normalized.sort(key=lambda item: (item["package"], _canonical(item)))
    return normalized


def config_hash(
    requests: Iterable[FontRequest],
    settings: Mapping[str, Any] | None = None,
) -> str:
    """Return the SHA-256 of the normalized requests (and optional settings)."""
    payload: Any = normalize_requests(requests)
    if settings is not None:
        payload = {"fonts": payload, "settings": dict(settings)}
    return hashlib.sha256(_canonical(payload).encode("utf-8")).hexdigest()


@dataclass(slots=True)
class CacheSnapshot:
    """Persisted outcome of a pipeline run."""

    timestamp: int
    config_hash: str
    fonts: list[ProcessedFont] = field(default_factory=list)
    version: str = ""

    def to_dict(self, relative_to: Path | None = None) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "configHash": self.config_hash,
            "fonts": [font.to_dict(relative_to=relative_to) for font in self.fonts],
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, payload: Any, base: Path | None = None) -> CacheSnapshot:
        if not isinstance(payload, dict):
            raise CacheReadError("cache root is not an object")
        try:
            return cls(
                timestamp=int(payload["timestamp"]),
                config_hash=str(payload["configHash"]),
                fonts=[ProcessedFont.from_dict(item, base=base) for item in payload["fonts"]],
                version=str(payload["version"]),
            )
        except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as exc:
            raise CacheReadError(f"malformed cache entry: {exc}") from exc


@dataclass(frozen=True, slots=True)
class CacheStats:
    exists: bool
    size: int
    age_ms: int
    valid: bool


@dataclass(frozen=True, slots=True)
class MaintenanceReport:
    removed_backups: tuple[Path, ...] = ()
    compacted: bool = False


class CacheManager:
    """Read, validate and persist cache snapshots for one project."""

    def __init__(
        self,
        root: Path,
        cache_dir: Path | None = None,
        *,
        ttl: float = 86_400,
        logger: FontPipelineLogger | None = None,
        version: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.root = root
        self.cache_dir = cache_dir if cache_dir is not None else root / ".fontsmith" / "cache"
        self.cache_file = self.cache_dir / CACHE_FILENAME
        self.ttl = ttl
        self.logger = logger or FontPipelineLogger()
        self.version = version or default_cache_version()
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    # -- Reading ------------------------------------------------------------

    def read(self) -> CacheSnapshot | None:
        """Return the stored snapshot, ``None`` when absent.

        Raises `CacheReadError` when the file exists but cannot be used.
        """
        if not self.cache_file.exists():
            return None
        try:
            payload = json.loads(self.cache_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CacheReadError(f"unable to read {self.cache_file}: {exc}") from exc
        return CacheSnapshot.from_dict(payload, base=self.root)

    def load_results(self) -> list[ProcessedFont] | None:
        try:
            snapshot = self.read()
        except CacheReadError as exc:
            self.logger.debug("Failed to read cached data: %s", exc)
            return None
        return snapshot.fonts if snapshot is not None else None

    def _files_changed(self, snapshot: CacheSnapshot) -> str | None:
        try:
            cache_mtime = self.cache_file.stat().st_mtime
        except OSError:
            cache_mtime = 0.0
        for font in snapshot.fonts:
            if not font.ok:
                continue
            for item in font.files:
                if not item.path.exists():
                    return f"font file missing: {item.path}"
                try:
                    published_size = item.destination.stat().st_size
                except OSError:
                    return f"published file missing: {item.destination}"
                if published_size != item.size:
                    return f"published file incomplete: {item.destination}"
            if font.metadata_path is not None:
                try:
                    modified = font.metadata_path.stat().st_mtime
                except OSError:
                    return f"metadata missing: {font.metadata_path}"
                if modified > cache_mtime + MTIME_TOLERANCE:
                    return f"package {font.request.package} has been modified"
        return None

    def is_valid(
        self,
        requests: Sequence[FontRequest],
        settings: Mapping[str, Any] | None = None,
    ) -> bool:
        try:
            snapshot = self.read()
        except CacheReadError as exc:
            self.logger.debug("Cache miss: %s", exc)
            return False
        if snapshot is None:
            self.logger.debug("Cache miss: no cache file found")
            return False
        if snapshot.version != self.version:
            self.logger.debug(
                "Cache miss: version mismatch (%s != %s)", snapshot.version, self.version
            )
            return False
        age_ms = self._now_ms() - snapshot.timestamp
        if age_ms > self.ttl * 1000:
            self.logger.debug("Cache miss: cache expired (age: %ss)", round(age_ms / 1000))
            return False
        if snapshot.config_hash != config_hash(requests, settings):
            self.logger.debug("Cache miss: configuration changed")
            return False
        reason = self._files_changed(snapshot)
        if reason is not None:
            self.logger.debug("Cache miss: %s", reason)
            return False
        self.logger.debug("Cache hit (age: %ss)", round(age_ms / 1000))
        return True

    # -- Writing ------------------------------------------------------------

    def _write(self, payload: dict[str, Any], *, indent: int | None = 2) -> None:
        tmp_name: str | None = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.cache_dir,
                prefix=".cache.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                json.dump(payload, handle, indent=indent, ensure_ascii=False)
            os.replace(tmp_name, self.cache_file)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise CacheWriteError(f"unable to write {self.cache_file}: {exc}") from exc

    def update(
        self,
        requests: Sequence[FontRequest],
        results: Sequence[ProcessedFont],
        settings: Mapping[str, Any] | None = None,
    ) -> bool:
        """Persist a fresh snapshot; return False when it could not be written."""
        snapshot = CacheSnapshot(
            timestamp=self._now_ms(),
            config_hash=config_hash(requests, settings),
            fonts=list(results),
            version=self.version,
        )
        try:
            self._write(snapshot.to_dict(relative_to=self.root))
        except CacheWriteError as exc:
            self.logger.warning("Failed to update cache: %s", exc)
            return False
        self.logger.debug("Cache updated (%d font(s))", len(snapshot.fonts))
        return True

    def clear(self) -> Path | None:
        """Back up then delete the cache file, returning the backup path."""
        if not self.cache_file.exists():
            return None
        backup = self.cache_dir / f"{BACKUP_PREFIX}{self._now_ms()}.json"
        try:
            shutil.copy2(self.cache_file, backup)
            self.cache_file.unlink()
        except OSError as exc:
            self.logger.warning("Failed to clear cache: %s", exc)
            return None
        self.logger.info("Cache cleared (backup: %s)", backup.name)
        return backup

    # -- Diagnostics --------------------------------------------------------

    def stats(
        self,
        requests: Sequence[FontRequest] | None = None,
        settings: Mapping[str, Any] | None = None,
    ) -> CacheStats:
        """Summarise the cache file.

        Without ``requests`` validity only reflects the time-to-live.
        """
        try:
            snapshot = self.read()
        except CacheReadError as exc:
            self.logger.debug("Unreadable cache: %s", exc)
            return CacheStats(exists=True, size=self._size(), age_ms=0, valid=False)
        if snapshot is None:
            return CacheStats(exists=False, size=0, age_ms=0, valid=False)
        age_ms = self._now_ms() - snapshot.timestamp
        if requests is not None:
            valid = self.is_valid(requests, settings)
        else:
            valid = snapshot.version == self.version and age_ms <= self.ttl * 1000
        return CacheStats(exists=True, size=self._size(), age_ms=age_ms, valid=valid)

    def _size(self) -> int:
        try:
            return self.cache_file.stat().st_size
        except OSError:
            return 0

    def backups(self) -> list[Path]:
        """Return backup files, oldest first."""
        if not self.cache_dir.is_dir():
            return []

        def _stamp(path: Path) -> int:
            token = path.name[len(BACKUP_PREFIX) :].split(".", 1)[0]
            return int(token) if token.isdigit() else 0

        found = [
            path
            for path in self.cache_dir.glob(f"{BACKUP_PREFIX}*.json")
            if path.is_file()
        ]
        return sorted(found, key=lambda path: (_stamp(path), path.name))

    def maintain(
        self,
        *,
        keep_backups: int = KEEP_BACKUPS,
        compact_over: int = COMPACT_THRESHOLD,
    ) -> MaintenanceReport:
        """Prune old backups and compact an oversized cache file."""
        removed: list[Path] = []
        backups = self.backups()
        stale = backups[: max(len(backups) - keep_backups, 0)]
        for path in stale:
            try:
                path.unlink()
            except OSError as exc:
                self.logger.debug("Unable to remove backup %s: %s", path.name, exc)
                continue
            removed.append(path)
            self.logger.debug("Removed old backup: %s", path.name)

        compacted = False
        if self._size() > compact_over:
            try:
                payload = json.loads(self.cache_file.read_text(encoding="utf-8"))
                self._write(payload, indent=None)
            except (OSError, json.JSONDecodeError, CacheWriteError) as exc:
                self.logger.debug("Cache maintenance error: %s", exc)
            else:
                compacted = True
                self.logger.debug("Compacted cache file")
        return MaintenanceReport(removed_backups=tuple(removed), compacted=compacted)


__all__ = [
    "BACKUP_PREFIX",
    "CACHE_FILENAME",
    "CACHE_SCHEMA",
    "CacheManager",
    "CacheSnapshot",
    "CacheStats",
    "MaintenanceReport",
    "config_hash",
    "default_cache_version",
    "normalize_requests",
]
