"""Orchestrate locating, publishing and describing the configured fonts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
import time

from fontsmith.cache import CacheManager
from fontsmith.config import FontRequest, PipelineOptions
from fontsmith.exceptions import FontProcessingError, StylesheetWriteError
from fontsmith.locator import PackageLocator
from fontsmith.logging import FontPipelineLogger
from fontsmith.metadata import read_metadata
from fontsmith.publisher import AssetPublisher
from fontsmith.resolver import FontFileResolver
from fontsmith.results import ProcessedFont
from fontsmith.stylesheet import StylesheetGenerator


@dataclass(slots=True)
class PipelineResult:
    """Outcome of a pipeline run."""

    fonts: list[ProcessedFont] = field(default_factory=list)
    stylesheet_path: Path | None = None
    from_cache: bool = False

    @property
    def failures(self) -> list[ProcessedFont]:
        return [font for font in self.fonts if not font.ok]

    @property
    def succeeded(self) -> list[ProcessedFont]:
        return [font for font in self.fonts if font.ok]

    def head_links(self, options: PipelineOptions) -> list[dict[str, str]]:
        """Return the link hints a page head should carry for these fonts.

        The first published file of a preloaded font is its default-subset
        normal-style file, since resolved files are ordered that way.
        """
        links: list[dict[str, str]] = []
        if options.preconnect:
            links.append(
                {
                    "rel": "preconnect",
                    "href": options.public_path,
                    "crossorigin": options.crossorigin,
                }
            )
        for font in self.succeeded:
            if not font.request.preload or not font.files:
                continue
            main = font.files[0]
            links.append(
                {
                    "rel": "preload",
                    "as": "font",
                    "type": f"font/{main.format}",
                    "href": main.url,
                    "crossorigin": options.crossorigin,
                }
            )
        return links


class FontPipeline:
    """Run the font publishing pipeline for one project.

    Collaborators are built from the options unless supplied, so tests can
    inject isolated instances.
    """

    def __init__(
        self,
        options: PipelineOptions,
        root: Path,
        *,
        logger: FontPipelineLogger | None = None,
        cache: CacheManager | None = None,
        locator: PackageLocator | None = None,
        resolver: FontFileResolver | None = None,
        publisher: AssetPublisher | None = None,
        generator: StylesheetGenerator | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.options = options
        self.root = root
        self.logger = logger or FontPipelineLogger(verbose=options.verbose)
        paths = options.resolve_paths(root)
        self.css_path = paths["css_path"]
        self.clock = clock
        self.cache = cache or CacheManager(
            root,
            paths["cache_dir"],
            ttl=options.cache_ttl,
            logger=self.logger.child("cache"),
            clock=clock,
        )
        self.locator = locator or PackageLocator(
            root,
            search_paths=[options.resolve(root, path) for path in options.search_paths],
            logger=self.logger.child("locator"),
        )
        self.resolver = resolver or FontFileResolver(logger=self.logger.child("resolver"))
        self.publisher = publisher or AssetPublisher(
            paths["output_dir"],
            options.public_path,
            logger=self.logger.child("publisher"),
        )
        self.generator = generator or StylesheetGenerator(options)

    def ordered_requests(self) -> list[FontRequest]:
        """Return requests by descending priority, keeping configuration order on ties."""
        return sorted(self.options.fonts, key=lambda request: -request.priority)

    def process_font(self, request: FontRequest) -> ProcessedFont:
        """Turn one request into published files, or a failed result."""
        self.logger.info("Processing %s...", request.package)
        try:
            package_dir = self.locator.locate(request.package)
            metadata, metadata_path = read_metadata(package_dir, request)
            resolved = self.resolver.resolve(package_dir, request, metadata)
            published = self.publisher.publish(resolved, request.family)
        except (FontProcessingError, OSError) as exc:
            self.logger.error("Failed to process %s: %s", request.package, exc, exc=exc)
            return ProcessedFont.failed(request, exc)
        self.logger.success("Processed %s: %d files", request.family, len(published))
        return ProcessedFont(
            request=request,
            metadata=metadata,
            files=published,
            metadata_path=metadata_path,
        )

    def write_stylesheet(self, css: str) -> Path:
        try:
            self.css_path.parent.mkdir(parents=True, exist_ok=True)
            self.css_path.write_text(css, encoding="utf-8")
        except OSError as exc:
            raise StylesheetWriteError(
                f"Unable to write stylesheet '{self.css_path}': {exc}"
            ) from exc
        return self.css_path

    def _cached(self) -> PipelineResult | None:
        if not (self.options.caching and self.css_path.exists()):
            return None
        settings = self.options.stylesheet_settings()
        if not self.cache.is_valid(self.options.fonts, settings):
            return None
        fonts = self.cache.load_results()
        if fonts is None:
            return None
        self.logger.info("Using cached fonts (%d families)", len(fonts))
        return PipelineResult(fonts=fonts, stylesheet_path=self.css_path, from_cache=True)

    def run(self, *, force: bool = False) -> PipelineResult:
        """Process every configured font and write the stylesheet.

        Per-font failures are recorded on the results. Only a stylesheet
        write failure aborts the run, before the cache is touched.
        """
        if not force:
            cached = self._cached()
            if cached is not None:
                return cached

        results: list[ProcessedFont] = []
        requests = self.ordered_requests()
        with self.logger.timer("Font processing"):
            with self.logger.progress("Processing fonts", total=len(requests)) as advance:
                for request in requests:
                    results.append(self.process_font(request))
                    advance(1)

        generated_at = datetime.fromtimestamp(self.clock(), tz=timezone.utc)
        css = self.generator.generate(results, generated_at=generated_at)
        path = self.write_stylesheet(css)
        self.logger.debug("Wrote stylesheet %s", path)

        if self.options.caching:
            self.cache.update(self.options.fonts, results, self.options.stylesheet_settings())

        failed = sum(1 for font in results if not font.ok)
        if failed:
            self.logger.warning("%d of %d font(s) failed", failed, len(results))
        else:
            self.logger.success("Processed %d font families", len(results))
        return PipelineResult(fonts=results, stylesheet_path=path, from_cache=False)


def run_pipeline(
    options: PipelineOptions,
    root: Path,
    *,
    force: bool = False,
    logger: FontPipelineLogger | None = None,
) -> PipelineResult:
    """Convenience wrapper building a `FontPipeline` and running it."""
    return FontPipeline(options, root, logger=logger).run(force=force)


__all__ = ["FontPipeline", "PipelineResult", "run_pipeline"]
