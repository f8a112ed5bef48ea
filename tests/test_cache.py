from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import pytest

from fontsmith.cache import (
    BACKUP_PREFIX,
    CacheManager,
    config_hash,
    default_cache_version,
)
from fontsmith.config import FontRequest
from fontsmith.exceptions import PackageNotFoundError
from fontsmith.logging import FontPipelineLogger
from fontsmith.metadata import read_metadata
from fontsmith.publisher import AssetPublisher
from fontsmith.resolver import FontFileResolver
from fontsmith.results import ProcessedFont


NOW = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def request_a() -> FontRequest:
    return FontRequest(package="pkg-a", family="Demo", variable=True)


@pytest.fixture
def processed(tmp_path: Path, demo_package: Path, request_a: FontRequest) -> ProcessedFont:
    metadata, metadata_path = read_metadata(demo_package, request_a)
    files = FontFileResolver().resolve(demo_package, request_a, metadata)
    published = AssetPublisher(tmp_path / "public" / "fonts").publish(files, request_a.family)
    return ProcessedFont(
        request=request_a, metadata=metadata, files=published, metadata_path=metadata_path
    )


def _manager(root: Path, clock: FakeClock, **kwargs) -> CacheManager:
    kwargs.setdefault("logger", FontPipelineLogger(verbose=True))
    return CacheManager(root, ttl=60, clock=clock, **kwargs)


def test_hash_ignores_cosmetic_ordering() -> None:
    a = FontRequest(package="a", family="A", weights=(700, 400), subsets=("latin-ext", "latin"))
    a_sorted = FontRequest(
        package="a", family="A", weights=(400, 700, 400), subsets=("latin", "latin-ext")
    )
    b = FontRequest(package="b", family="B")
    assert config_hash([a, b]) == config_hash([b, a_sorted])
    assert config_hash([a]) != config_hash([a.model_copy(update={"variable": True})])


def test_hash_covers_stylesheet_settings(request_a: FontRequest) -> None:
    base = config_hash([request_a], {"display": "swap"})
    assert base == config_hash([request_a], {"display": "swap"})
    assert base != config_hash([request_a], {"display": "block"})


def test_missing_cache_is_a_miss(tmp_path: Path, clock: FakeClock, request_a, caplog) -> None:
    manager = _manager(tmp_path, clock)
    with caplog.at_level(logging.DEBUG, logger="fontsmith"):
        assert manager.is_valid([request_a]) is False
    assert "no cache file found" in caplog.text
    assert manager.load_results() is None


def test_fresh_cache_round_trip(
    tmp_path: Path, clock: FakeClock, request_a, processed: ProcessedFont
) -> None:
    manager = _manager(tmp_path, clock)
    assert manager.update([request_a], [processed], {"display": "swap"}) is True

    stored = json.loads(manager.cache_file.read_text(encoding="utf-8"))
    assert stored["version"] == default_cache_version()
    assert stored["timestamp"] == int(NOW * 1000)
    destination = stored["fonts"][0]["files"][0]["destination"]
    assert destination.startswith("public/fonts/demo-latin-normal-")

    assert manager.is_valid([request_a], {"display": "swap"}) is True
    (cached,) = manager.load_results()
    assert cached.files[0].destination == processed.files[0].destination
    assert cached.files[0].url == processed.files[0].url
    assert cached.metadata == processed.metadata
    assert cached.metadata_path == processed.metadata_path


def test_changed_requests_invalidate(
    tmp_path: Path, clock: FakeClock, request_a, processed, caplog
) -> None:
    manager = _manager(tmp_path, clock)
    manager.update([request_a], [processed])
    changed = request_a.model_copy(update={"weights": (400,)})
    with caplog.at_level(logging.DEBUG, logger="fontsmith"):
        assert manager.is_valid([changed]) is False
    assert "configuration changed" in caplog.text


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("package", "pkg-b"),
        ("family", "Demo Two"),
        ("variable", False),
        ("preload", True),
        ("weights", (400, 700)),
        ("styles", ("italic",)),
        ("subsets", ("latin-ext",)),
        ("axes", ("wght", "opsz")),
        ("display", "block"),
        ("fallback", "Georgia, serif"),
        ("priority", 3),
        ("unicode_ranges", {"latin": "U+0000-00FF"}),
    ],
)
def test_any_request_field_change_invalidates(
    tmp_path: Path, clock: FakeClock, request_a, processed, field: str, value
) -> None:
    manager = _manager(tmp_path, clock)
    manager.update([request_a], [processed])
    assert manager.is_valid([request_a]) is True
    assert manager.is_valid([request_a.model_copy(update={field: value})]) is False


def test_ttl_expiry(tmp_path: Path, clock: FakeClock, request_a, processed) -> None:
    manager = _manager(tmp_path, clock)
    manager.update([request_a], [processed])
    clock.now += 59
    assert manager.is_valid([request_a]) is True
    clock.now += 2
    assert manager.is_valid([request_a]) is False


def test_version_mismatch(tmp_path: Path, clock: FakeClock, request_a, processed) -> None:
    _manager(tmp_path, clock, version="0:old").update([request_a], [processed])
    assert _manager(tmp_path, clock).is_valid([request_a]) is False


def test_missing_published_file_invalidates(
    tmp_path: Path, clock: FakeClock, request_a, processed
) -> None:
    manager = _manager(tmp_path, clock)
    manager.update([request_a], [processed])
    processed.files[0].destination.unlink()
    assert manager.is_valid([request_a]) is False


def test_truncated_published_file_invalidates(
    tmp_path: Path, clock: FakeClock, request_a, processed
) -> None:
    manager = _manager(tmp_path, clock)
    manager.update([request_a], [processed])
    processed.files[0].destination.write_bytes(b"\x01" * 10)
    assert manager.is_valid([request_a]) is False


def test_missing_source_file_invalidates(
    tmp_path: Path, clock: FakeClock, request_a, processed
) -> None:
    manager = _manager(tmp_path, clock)
    manager.update([request_a], [processed])
    processed.files[0].path.unlink()
    assert manager.is_valid([request_a]) is False


def test_touched_metadata_invalidates(
    tmp_path: Path, clock: FakeClock, request_a, processed
) -> None:
    manager = _manager(tmp_path, clock)
    manager.update([request_a], [processed])
    later = manager.cache_file.stat().st_mtime + 120
    os.utime(processed.metadata_path, (later, later))
    assert manager.is_valid([request_a]) is False


def test_cached_failures_are_not_checked_against_disk(
    tmp_path: Path, clock: FakeClock, request_a
) -> None:
    failed = ProcessedFont.failed(request_a, PackageNotFoundError("Package pkg-a not found."))
    manager = _manager(tmp_path, clock)
    manager.update([request_a], [failed])
    assert manager.is_valid([request_a]) is True
    (cached,) = manager.load_results()
    assert cached.errors == ["PackageNotFoundError: Package pkg-a not found."]


def test_corrupt_cache_is_a_miss(tmp_path: Path, clock: FakeClock, request_a) -> None:
    manager = _manager(tmp_path, clock)
    manager.cache_dir.mkdir(parents=True)
    manager.cache_file.write_text("{not json", encoding="utf-8")
    assert manager.is_valid([request_a]) is False
    assert manager.load_results() is None
    stats = manager.stats()
    assert stats.exists is True
    assert stats.valid is False


def test_wrong_shape_is_a_miss(tmp_path: Path, clock: FakeClock, request_a) -> None:
    manager = _manager(tmp_path, clock)
    manager.cache_dir.mkdir(parents=True)
    manager.cache_file.write_text(json.dumps({"timestamp": 1, "fonts": "x"}), encoding="utf-8")
    assert manager.is_valid([request_a]) is False


def test_write_failure_is_logged_not_raised(
    tmp_path: Path, clock: FakeClock, request_a, caplog
) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    manager = CacheManager(tmp_path, blocker / "cache", clock=clock)
    with caplog.at_level(logging.WARNING, logger="fontsmith"):
        assert manager.update([request_a], []) is False
    assert "Failed to update cache" in caplog.text


def test_clear_keeps_a_backup(tmp_path: Path, clock: FakeClock, request_a) -> None:
    manager = _manager(tmp_path, clock)
    assert manager.clear() is None
    manager.update([request_a], [])
    content = manager.cache_file.read_text(encoding="utf-8")

    backup = manager.clear()
    assert backup is not None
    assert backup.name == f"{BACKUP_PREFIX}{int(NOW * 1000)}.json"
    assert backup.read_text(encoding="utf-8") == content
    assert not manager.cache_file.exists()
    assert manager.backups() == [backup]


def test_stats(tmp_path: Path, clock: FakeClock, request_a) -> None:
    manager = _manager(tmp_path, clock)
    empty = manager.stats()
    assert (empty.exists, empty.size, empty.valid) == (False, 0, False)

    manager.update([request_a], [])
    clock.now += 30
    stats = manager.stats()
    assert stats.exists is True
    assert stats.size == manager.cache_file.stat().st_size
    assert stats.age_ms == 30_000
    assert stats.valid is True

    other = FontRequest(package="pkg-b", family="Other")
    assert manager.stats([other]).valid is False


def test_maintain_prunes_and_compacts(tmp_path: Path, clock: FakeClock, request_a) -> None:
    manager = _manager(tmp_path, clock)
    manager.update([request_a], [])
    for stamp in range(7):
        (manager.cache_dir / f"{BACKUP_PREFIX}{1000 + stamp}.json").write_text("{}", "utf-8")

    report = manager.maintain(keep_backups=5, compact_over=0)
    assert [path.name for path in report.removed_backups] == [
        f"{BACKUP_PREFIX}1000.json",
        f"{BACKUP_PREFIX}1001.json",
    ]
    assert len(manager.backups()) == 5
    assert report.compacted is True
    assert "\n" not in manager.cache_file.read_text(encoding="utf-8")
    assert manager.is_valid([request_a]) is True
