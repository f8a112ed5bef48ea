from __future__ import annotations

from pathlib import Path

import pytest

from fontsmith.config import FontRequest, PipelineOptions
from fontsmith.exceptions import StylesheetWriteError
from fontsmith.pipeline import FontPipeline, PipelineResult, run_pipeline
from fontsmith.publisher import content_hash


DEMO = FontRequest(package="pkg-a", family="Demo", variable=True, preload=True)


def _options(*fonts: FontRequest, **kwargs) -> PipelineOptions:
    return PipelineOptions(fonts=list(fonts), **kwargs)


def test_end_to_end_variable_font(tmp_path: Path, demo_package: Path) -> None:
    result = run_pipeline(_options(DEMO), tmp_path)

    digest = content_hash(b"\x01" * 1000)
    (font,) = result.fonts
    assert font.ok
    (published,) = font.files
    assert published.url == f"/fonts/demo-latin-normal-{digest}.woff2"
    assert (tmp_path / "public" / "fonts" / f"demo-latin-normal-{digest}.woff2").is_file()

    assert result.stylesheet_path == tmp_path / "assets" / "css" / "fonts.css"
    css = result.stylesheet_path.read_text(encoding="utf-8")
    assert "font-family: 'Demo';" in css
    assert "font-weight: 400 700;" in css
    assert f"url('/fonts/demo-latin-normal-{digest}.woff2') format('woff2-variations')" in css
    assert "--font-demo: 'Demo', 'Demo Fallback', sans-serif;" in css


def test_missing_package_is_recorded(tmp_path: Path) -> None:
    missing = FontRequest(package="pkg-missing", family="Ghost")
    result = run_pipeline(_options(missing), tmp_path)

    (font,) = result.fonts
    assert not font.ok
    assert font.files == []
    assert "Package pkg-missing not found" in font.errors[0]
    assert result.failures == [font]

    css = result.stylesheet_path.read_text(encoding="utf-8")
    assert "/* Error processing Ghost: PackageNotFoundError: Package pkg-missing not found" in css
    output = tmp_path / "public" / "fonts"
    assert not output.exists() or not any(output.iterdir())


def test_failures_do_not_stop_the_batch(tmp_path: Path, demo_package: Path) -> None:
    missing = FontRequest(package="pkg-missing", family="Ghost")
    result = run_pipeline(_options(missing, DEMO), tmp_path)
    assert [font.family for font in result.failures] == ["Ghost"]
    assert [font.family for font in result.succeeded] == ["Demo"]


def test_second_run_is_served_from_cache(tmp_path: Path, demo_package: Path) -> None:
    options = _options(DEMO)
    first = run_pipeline(options, tmp_path)
    assert first.from_cache is False
    output = tmp_path / "public" / "fonts"
    before = {path.name: path.stat().st_mtime_ns for path in output.iterdir()}

    second = run_pipeline(options, tmp_path)
    assert second.from_cache is True
    assert second.fonts[0].files[0].url == first.fonts[0].files[0].url
    assert {path.name: path.stat().st_mtime_ns for path in output.iterdir()} == before

    forced = run_pipeline(options, tmp_path, force=True)
    assert forced.from_cache is False


def test_changed_settings_bypass_cache(tmp_path: Path, demo_package: Path) -> None:
    run_pipeline(_options(DEMO), tmp_path)
    result = run_pipeline(_options(DEMO, display="optional"), tmp_path)
    assert result.from_cache is False
    assert "font-display: optional;" in result.stylesheet_path.read_text(encoding="utf-8")


def test_deleted_stylesheet_bypasses_cache(tmp_path: Path, demo_package: Path) -> None:
    first = run_pipeline(_options(DEMO), tmp_path)
    first.stylesheet_path.unlink()
    assert run_pipeline(_options(DEMO), tmp_path).from_cache is False


def test_caching_disabled(tmp_path: Path, demo_package: Path) -> None:
    options = _options(DEMO, caching=False)
    run_pipeline(options, tmp_path)
    assert run_pipeline(options, tmp_path).from_cache is False
    assert not (tmp_path / ".fontsmith").exists()


def test_priority_orders_processing(tmp_path: Path, make_package) -> None:
    for name in ("pkg-low", "pkg-mid", "pkg-high"):
        make_package(name, files={f"{name}-latin-400-normal.woff2": name.encode()})
    requests = [
        FontRequest(package="pkg-low", family="Low"),
        FontRequest(package="pkg-mid", family="Mid", priority=5),
        FontRequest(package="pkg-high", family="High", priority=10),
        FontRequest(package="pkg-mid", family="Mid Twin", priority=5),
    ]
    pipeline = FontPipeline(_options(*requests), tmp_path)
    assert [request.family for request in pipeline.ordered_requests()] == [
        "High",
        "Mid",
        "Mid Twin",
        "Low",
    ]
    result = pipeline.run()
    css = result.stylesheet_path.read_text(encoding="utf-8")
    assert css.index("/* High - pkg-high */") < css.index("/* Mid - pkg-mid */")
    assert css.index("/* Mid - pkg-mid */") < css.index("/* Low - pkg-low */")


def test_stylesheet_write_failure_leaves_cache_untouched(
    tmp_path: Path, demo_package: Path
) -> None:
    (tmp_path / "assets").write_text("not a directory", encoding="utf-8")
    pipeline = FontPipeline(_options(DEMO), tmp_path)
    with pytest.raises(StylesheetWriteError, match="Unable to write stylesheet"):
        pipeline.run()
    assert not pipeline.cache.cache_file.exists()


def test_generated_at_comes_from_clock(tmp_path: Path, demo_package: Path) -> None:
    pipeline = FontPipeline(_options(DEMO), tmp_path, clock=lambda: 0.0)
    css = pipeline.run().stylesheet_path.read_text(encoding="utf-8")
    assert "/* Generated at: 1970-01-01T00:00:00+00:00 */" in css


def test_head_links(tmp_path: Path, demo_package: Path) -> None:
    options = _options(DEMO, crossorigin="use-credentials")
    result = run_pipeline(options, tmp_path)
    preconnect, preload = result.head_links(options)
    assert preconnect == {
        "rel": "preconnect",
        "href": "/fonts",
        "crossorigin": "use-credentials",
    }
    assert preload == {
        "rel": "preload",
        "as": "font",
        "type": "font/woff2",
        "href": result.fonts[0].files[0].url,
        "crossorigin": "use-credentials",
    }


def test_head_links_skip_failed_and_unpreloaded_fonts() -> None:
    options = PipelineOptions(preconnect=False)
    assert PipelineResult().head_links(options) == []


def test_forced_run_repairs_truncated_asset(tmp_path: Path, demo_package: Path) -> None:
    digest = content_hash(b"\x01" * 1000)
    output = tmp_path / "public" / "fonts"
    output.mkdir(parents=True)
    (output / f"demo-latin-normal-{digest}.woff2").write_bytes(b"\x01" * 10)

    result = run_pipeline(_options(DEMO), tmp_path, force=True)

    assert result.fonts[0].files[0].destination.stat().st_size == 1000
