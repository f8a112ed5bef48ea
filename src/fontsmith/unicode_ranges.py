"""Unicode ranges of the common web font subsets."""

from __future__ import annotations

from fontsmith.metadata import FontMetadata


SUBSET_UNICODE_RANGES: dict[str, str] = {
    "latin": (
        "U+0000-00FF, U+0131, U+0152-0153, U+02BB-02BC, U+02C6, U+02DA, U+02DC, "
        "U+0304, U+0308, U+0329, U+2000-206F, U+2074, U+20AC, U+2122, U+2191, "
        "U+2193, U+2212, U+2215, U+FEFF, U+FFFD"
    ),
    "latin-ext": (
        "U+0100-02AF, U+0304, U+0308, U+0329, U+1E00-1E9F, U+1EF2-1EFF, U+2020, "
        "U+20A0-20AB, U+20AD-20C0, U+2113, U+2C60-2C7F, U+A720-A7FF"
    ),
    "cyrillic": "U+0301, U+0400-045F, U+0490-0491, U+04B0-04B1, U+2116",
    "cyrillic-ext": (
        "U+0460-052F, U+1C80-1C88, U+20B4, U+2DE0-2DFF, U+A640-A69F, U+FE2E-FE2F"
    ),
    "greek": "U+0370-0377, U+037A-037F, U+0384-038A, U+038C, U+038E-03A1, U+03A3-03FF",
    "greek-ext": "U+1F00-1FFF",
    "vietnamese": (
        "U+0102-0103, U+0110-0111, U+0128-0129, U+0168-0169, U+01A0-01A1, "
        "U+01AF-01B0, U+0300-0301, U+0303-0304, U+0308-0309, U+0323, U+0329, "
        "U+1EA0-1EF9, U+20AB"
    ),
    "arabic": (
        "U+0600-06FF, U+200C-200E, U+2010-2011, U+204F, U+2E41, U+FB50-FDFF, U+FE80-FEFC"
    ),
    "hebrew": "U+0590-05FF, U+200C-2010, U+20AA, U+25CC, U+FB1D-FB4F",
    "thai": (
        "U+0E01-0E5B, U+200C-200D, U+2013-2014, U+2018-2019, U+201C-201D, U+2022, "
        "U+2026, U+2039-203A, U+2060, U+2066-2069, U+207F, U+20A8, U+2219, U+25CC"
    ),
}


def unicode_range_for(metadata: FontMetadata | None, subset: str) -> str | None:
    """Return the unicode range of ``subset``, preferring the package metadata."""
    if metadata is not None:
        declared = metadata.unicode_range.get(subset)
        if declared:
            return declared
    return SUBSET_UNICODE_RANGES.get(subset)


__all__ = ["SUBSET_UNICODE_RANGES", "unicode_range_for"]
