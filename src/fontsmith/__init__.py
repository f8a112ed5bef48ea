"""Web font publishing façade.

Architecture
: `PackageLocator` finds installed font packages across npm, workspace and
  pnpm layouts. `read_metadata` loads and validates the metadata they ship.
: `FontFileResolver` selects the package files matching a `FontRequest`
  through the naming grammar of `fontsmith.naming`; `AssetPublisher` copies
  them under content-hashed names so URLs change only when bytes change.
: `StylesheetGenerator` renders `@font-face` blocks, metric-adjusted fallback
  faces (`FallbackMetricsProvider`), custom properties and icon utilities.
: `CacheManager` remembers the last run and lets `FontPipeline` skip all the
  work while configuration and packages are unchanged.

Goal
: Turn a list of font requests into reproducible, cache-busting assets and a
  stylesheet, reporting failures per font instead of failing the batch.
"""

from fontsmith.cache import CacheManager, CacheSnapshot, CacheStats, config_hash, normalize_requests
from fontsmith.config import FontRequest, PipelineOptions, load_options
from fontsmith.exceptions import (
    FontProcessingError,
    FontSmithError,
    NoFilesFoundError,
    PackageNotFoundError,
    StylesheetWriteError,
)
from fontsmith.fallback import FallbackMetrics, FallbackMetricsProvider
from fontsmith.locator import PackageLocator
from fontsmith.logging import FontPipelineLogger
from fontsmith.metadata import FontMetadata, read_metadata
from fontsmith.pipeline import FontPipeline, PipelineResult, run_pipeline
from fontsmith.publisher import AssetPublisher, PublishedFile
from fontsmith.resolver import FontFileResolver, ResolvedFile
from fontsmith.results import ProcessedFont
from fontsmith.stylesheet import StylesheetGenerator
from fontsmith.version import get_version


__version__ = get_version()

__all__ = [
    "AssetPublisher",
    "CacheManager",
    "CacheSnapshot",
    "CacheStats",
    "FallbackMetrics",
    "FallbackMetricsProvider",
    "FontFileResolver",
    "FontMetadata",
    "FontPipeline",
    "FontPipelineLogger",
    "FontProcessingError",
    "FontRequest",
    "FontSmithError",
    "NoFilesFoundError",
    "PackageLocator",
    "PackageNotFoundError",
    "PipelineOptions",
    "PipelineResult",
    "ProcessedFont",
    "PublishedFile",
    "ResolvedFile",
    "StylesheetGenerator",
    "StylesheetWriteError",
    "__version__",
    "config_hash",
    "get_version",
    "load_options",
    "normalize_requests",
    "read_metadata",
    "run_pipeline",
]
