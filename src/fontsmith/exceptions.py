"""Exception hierarchy for the font publishing pipeline.

Errors deriving from `FontProcessingError` are recoverable: the orchestrator
records them on the offending font and carries on with the batch. Cache errors
never leave the cache manager. Only `StylesheetWriteError` and `ConfigError`
are allowed to abort a run.
"""

from __future__ import annotations


class FontSmithError(RuntimeError):
    """Base exception for fontsmith failures."""


class FontProcessingError(FontSmithError):
    """Raised when a single font request cannot be turned into assets."""


class PackageNotFoundError(FontProcessingError):
    """Raised when the source package of a font cannot be located."""


class MetadataMissingError(FontProcessingError):
    """Raised when a located package ships no metadata file."""


class MetadataInvalidError(FontProcessingError):
    """Raised when a metadata file exists but cannot be parsed or validated."""


class NoFilesFoundError(FontProcessingError):
    """Raised when no font file matches the requested subsets, styles and axes."""


class CacheError(FontSmithError):
    """Base class for cache persistence failures."""


class CacheReadError(CacheError):
    """Raised when the cache file is unreadable or corrupt."""


class CacheWriteError(CacheError):
    """Raised when the cache snapshot cannot be persisted."""


class StylesheetWriteError(FontSmithError):
    """Raised when the generated stylesheet cannot be written."""


class ConfigError(FontSmithError):
    """Raised when a configuration file cannot be read or validated."""


__all__ = [
    "CacheError",
    "CacheReadError",
    "CacheWriteError",
    "ConfigError",
    "FontProcessingError",
    "FontSmithError",
    "MetadataInvalidError",
    "MetadataMissingError",
    "NoFilesFoundError",
    "PackageNotFoundError",
    "StylesheetWriteError",
]
