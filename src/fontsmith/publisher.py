"""Copy resolved font files to the public output directory under hashed names."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import hashlib
import os
from pathlib import Path
import tempfile

from slugify import slugify

from fontsmith.logging import FontPipelineLogger
from fontsmith.resolver import ResolvedFile


HASH_LENGTH = 8


def content_hash(data: bytes) -> str:
    """Return the short content hash used in published file names."""
    return hashlib.sha256(data).hexdigest()[:HASH_LENGTH]


def family_slug(family: str) -> str:
    """Return the filesystem and CSS friendly slug of a family name."""
    return slugify(family, separator="-")


def _is_complete(target: Path, size: int) -> bool:
    try:
        return target.stat().st_size == size
    except OSError:
        return False


@dataclass(frozen=True, slots=True)
class PublishedFile(ResolvedFile):
    """A resolved file copied to the output directory."""

    hash: str
    url: str
    destination: Path

    @classmethod
    def from_resolved(
        cls, file: ResolvedFile, *, hash: str, url: str, destination: Path
    ) -> PublishedFile:
        fields = {name: getattr(file, name) for name in ResolvedFile.__dataclass_fields__}
        return cls(**fields, hash=hash, url=url, destination=destination)


class AssetPublisher:
    """Publish font files as content-addressed assets.

    The destination name only depends on the family, subset, style and file
    bytes, so an existing destination of the expected size already holds the
    right content and is not copied again. Assets are written to a temporary
    file and renamed into place, which makes interrupted runs safe to resume.
    Assets that are no longer referenced are left in place.
    """

    def __init__(
        self,
        output_dir: Path,
        public_path: str = "/fonts",
        *,
        logger: FontPipelineLogger | None = None,
    ) -> None:
        self.output_dir = output_dir
        self.public_path = public_path
        self.logger = logger or FontPipelineLogger()

    def url_for(self, name: str) -> str:
        return f"{self.public_path.rstrip('/')}/{name}"

    def _write(self, target: Path, data: bytes) -> None:
        # Readers never observe a partially written asset under its final name.
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb",
                dir=self.output_dir,
                prefix=".publish.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise

    def publish(self, files: Iterable[ResolvedFile], family: str) -> list[PublishedFile]:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        slug = family_slug(family)
        published: list[PublishedFile] = []
        for file in files:
            data = file.path.read_bytes()
            digest = content_hash(data)
            name = f"{slug}-{file.subset}-{file.style}-{digest}{file.extension}"
            target = self.output_dir / name
            if _is_complete(target, len(data)):
                self.logger.debug("Reusing %s", name)
            else:
                self._write(target, data)
                self.logger.debug("Published %s -> %s", file.file_name, name)
            published.append(
                PublishedFile.from_resolved(
                    file,
                    hash=digest,
                    url=self.url_for(name),
                    destination=target,
                )
            )
        return published


__all__ = ["HASH_LENGTH", "AssetPublisher", "PublishedFile", "content_hash", "family_slug"]
