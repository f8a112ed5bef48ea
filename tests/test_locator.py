from __future__ import annotations

from pathlib import Path

import pytest

from fontsmith.exceptions import PackageNotFoundError
from fontsmith.locator import PackageLocator


def test_locates_plain_package(tmp_path: Path, make_package) -> None:
    expected = make_package("@fontsource/inter")
    assert PackageLocator(tmp_path).locate("@fontsource/inter") == expected


def test_locates_pnpm_store_entry_and_prefers_greatest_name(tmp_path: Path, make_package) -> None:
    make_package("@fontsource-variable/inter", store_version="5.0.1")
    newest = make_package("@fontsource-variable/inter", store_version="5.2.0")
    located = PackageLocator(tmp_path).locate("@fontsource-variable/inter")
    assert located == newest


def test_store_selection_is_lexicographic(tmp_path: Path, make_package) -> None:
    lexically_last = make_package("pkg-a", store_version="2.0.0")
    make_package("pkg-a", store_version="10.0.0")
    assert PackageLocator(tmp_path).locate("pkg-a") == lexically_last


def test_store_prefix_does_not_match_longer_names(tmp_path: Path, make_package) -> None:
    make_package("pkg-ab", store_version="1.0.0")
    with pytest.raises(PackageNotFoundError):
        PackageLocator(tmp_path, include_parents=False).locate("pkg-a")


def test_plain_layout_wins_over_store(tmp_path: Path, make_package) -> None:
    plain = make_package("pkg-a")
    make_package("pkg-a", store_version="1.0.0")
    assert PackageLocator(tmp_path).locate("pkg-a") == plain


def test_searches_parent_directories(tmp_path: Path, make_package) -> None:
    expected = make_package("pkg-hoisted")
    nested = tmp_path / "apps" / "site"
    nested.mkdir(parents=True)
    assert PackageLocator(nested).locate("pkg-hoisted").resolve() == expected.resolve()


def test_parents_can_be_disabled(tmp_path: Path, make_package) -> None:
    make_package("pkg-hoisted")
    nested = tmp_path / "apps" / "site"
    nested.mkdir(parents=True)
    with pytest.raises(PackageNotFoundError):
        PackageLocator(nested, include_parents=False).locate("pkg-hoisted")


def test_extra_search_paths(tmp_path: Path, make_package) -> None:
    vendor = tmp_path / "vendor"
    expected = make_package("pkg-vendored", root=vendor)
    project = tmp_path / "project"
    project.mkdir()
    locator = PackageLocator(project, search_paths=[vendor])
    assert locator.locate("pkg-vendored") == expected
    assert locator.candidates("pkg-vendored")[:2] == [
        project / "node_modules" / "pkg-vendored",
        vendor / "node_modules" / "pkg-vendored",
    ]


def test_missing_package_message(tmp_path: Path) -> None:
    with pytest.raises(PackageNotFoundError) as excinfo:
        PackageLocator(tmp_path, include_parents=False).locate("pkg-missing")
    assert str(excinfo.value) == (
        "Package pkg-missing not found. Please install it with: npm install pkg-missing"
    )


@pytest.mark.parametrize("name", ["", "/abs/pkg", "../escape", "a/../../b"])
def test_unsafe_names_never_resolve(tmp_path: Path, name: str) -> None:
    (tmp_path / "escape").mkdir()
    locator = PackageLocator(tmp_path / "project", include_parents=False)
    assert locator.candidates(name) == []
    with pytest.raises(PackageNotFoundError):
        locator.locate(name)
