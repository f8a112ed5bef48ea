from __future__ import annotations

from collections.abc import Callable, Mapping
import json
from pathlib import Path
from typing import Any

import pytest

from fontsmith.cli.state import reset_cli_state


PackageFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def _isolated_cli_state():
    reset_cli_state()
    yield
    reset_cli_state()


def write_package(
    root: Path,
    package: str,
    *,
    metadata: Mapping[str, Any] | None,
    files: Mapping[str, bytes],
    metadata_name: str = "metadata.json",
    store_version: str | None = None,
) -> Path:
    """Create a fake installed font package under ``root/node_modules``."""
    if store_version is not None:
        store_entry = f"{package.replace('/', '+')}@{store_version}"
        package_dir = root / "node_modules" / ".pnpm" / store_entry / "node_modules" / package
    else:
        package_dir = root / "node_modules" / package
    package_dir.mkdir(parents=True, exist_ok=True)
    if metadata is not None:
        (package_dir / metadata_name).write_text(json.dumps(metadata), encoding="utf-8")
    if files:
        files_dir = package_dir / "files"
        files_dir.mkdir(exist_ok=True)
        for name, payload in files.items():
            (files_dir / name).write_bytes(payload)
    return package_dir


@pytest.fixture
def make_package(tmp_path: Path) -> PackageFactory:
    def _make(package: str, **kwargs: Any) -> Path:
        root = kwargs.pop("root", tmp_path)
        kwargs.setdefault("metadata", {"family": package})
        kwargs.setdefault("files", {})
        return write_package(root, package, **kwargs)

    return _make


@pytest.fixture
def demo_package(make_package: PackageFactory) -> Path:
    """Variable font package with a single latin/normal weight-axis file."""
    return make_package(
        "pkg-a",
        metadata={
            "family": "Demo",
            "subsets": ["latin"],
            "weights": [400, 700],
            "styles": ["normal"],
            "defSubset": "latin",
            "variable": {"wght": {"min": 400, "max": 700, "default": 400}},
        },
        files={"demo-latin-wght-normal.woff2": b"\x01" * 1000},
    )
