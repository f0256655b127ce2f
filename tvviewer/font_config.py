"""Font metrics and display geometry for the viewer.

This module defines how wide a glyph is and how many rows fit on screen.
Widths are expressed in display units: pixels for a pixel renderer, or
character cells for the terminal renderer (one unit per cell, font size 1).
"""

import unicodedata
from dataclasses import dataclass
from typing import Callable

from .constants import ViewerConstants
from .errors import MeasurementError


# Extra vertical space between rows of a pixel font, in pixels
ROW_SPACING_PIXELS = 4

# Advance of a narrow monospace glyph relative to the font size
MONOSPACE_ADVANCE_RATIO = 0.5

# Categories that occupy no horizontal space
_ZERO_WIDTH_CATEGORIES = frozenset({"Mn", "Me", "Cf", "Cc"})

# Categories that cannot be resolved to a glyph
_UNMEASURABLE_CATEGORIES = frozenset({"Cn", "Cs"})


@dataclass(frozen=True)
class DisplayGeometry:
    """Size of the text area and the font drawn into it.

    Attributes:
        width_pixels: Width available to text rows
        height_pixels: Height available to text rows
        font_size_pixels: Nominal font size
    """
    width_pixels: int
    height_pixels: int
    font_size_pixels: int

    @property
    def is_valid(self) -> bool:
        return (
            self.width_pixels > 0
            and self.height_pixels > 0
            and self.font_size_pixels > 0
        )

    def invalidates_wrap(self, other: "DisplayGeometry | None") -> bool:
        """Check whether moving from ``other`` to this geometry needs a re-wrap."""
        if other is None:
            return True
        return (
            self.width_pixels != other.width_pixels
            or self.font_size_pixels != other.font_size_pixels
        )


@dataclass(frozen=True)
class FontMetrics:
    """Glyph measurement for a fixed-pitch font.

    Attributes:
        font_size: Nominal font size in display units
        advance: Width of a narrow glyph
        line_height: Height of one visual row
        fallback_width: Width used when a glyph cannot be measured
        tab_width: Number of narrow glyphs a tab occupies
    """
    font_size: int
    advance: int
    line_height: int
    fallback_width: int = ViewerConstants.FALLBACK_GLYPH_WIDTH
    tab_width: int = ViewerConstants.TAB_WIDTH

    def measure(self, char: str) -> int:
        """Return the width of ``char``.

        Raises:
            MeasurementError: If the character is unassigned or a lone
                surrogate and has no glyph.
        """
        if char == "\t":
            return self.tab_width * self.advance
        category = unicodedata.category(char)
        if category in _UNMEASURABLE_CATEGORIES:
            raise MeasurementError(char)
        if category in _ZERO_WIDTH_CATEGORIES:
            return 0
        if unicodedata.east_asian_width(char) in ("W", "F"):
            return 2 * self.advance
        return self.advance

    def visible_row_count(self, geometry: DisplayGeometry) -> int:
        """Number of whole rows that fit in ``geometry``, at least one."""
        if geometry.height_pixels <= 0:
            return 1
        return max(1, geometry.height_pixels // self.line_height)

    @classmethod
    def for_terminal(cls, tab_width: int = ViewerConstants.TAB_WIDTH,
                     fallback_width: int = ViewerConstants.FALLBACK_GLYPH_WIDTH) -> 'FontMetrics':
        """Metrics for a character-cell terminal.

        One unit per cell; wide CJK glyphs take two cells.
        """
        return cls(
            font_size=1,
            advance=1,
            line_height=1,
            fallback_width=fallback_width,
            tab_width=tab_width,
        )

    @classmethod
    def for_font_size(cls, font_size: int, tab_width: int = ViewerConstants.TAB_WIDTH,
                      fallback_width: int | None = None) -> 'FontMetrics':
        """Approximate metrics for a monospace pixel font of ``font_size`` px.

        A 20px font has 10px wide glyphs and 24px rows.
        """
        advance = max(1, round(font_size * MONOSPACE_ADVANCE_RATIO))
        return cls(
            font_size=font_size,
            advance=advance,
            line_height=font_size + ROW_SPACING_PIXELS,
            fallback_width=advance if fallback_width is None else fallback_width,
            tab_width=tab_width,
        )


MetricsFactory = Callable[[int], FontMetrics]


def terminal_metrics_factory(tab_width: int = ViewerConstants.TAB_WIDTH,
                             fallback_width: int = ViewerConstants.FALLBACK_GLYPH_WIDTH) -> MetricsFactory:
    """Build a metrics factory that ignores font size, for terminal output."""
    metrics = FontMetrics.for_terminal(tab_width=tab_width, fallback_width=fallback_width)

    def factory(font_size: int) -> FontMetrics:
        del font_size  # Cells do not scale
        return metrics

    return factory
