"""Reflow logical lines into visual rows.

The wrapper runs once per geometry change, never per frame. It walks the
whole buffer left to right and measures every character at most once, so a
rebuild is linear in the size of the text. Wrapping a multi-megabyte buffer
is still noticeably slower than the unwrapped layout; callers pay that cost
up front on each width or font change.
"""

import logging
from enum import Enum
from collections.abc import Sequence
from typing import Callable, Iterator, NamedTuple

from .constants import ViewerConstants
from .errors import InvalidGeometryError, MeasurementError
from .model import LogicalLine

logger = logging.getLogger(__name__)


class WrapPolicy(Enum):
    """Where a long line may be broken."""
    WORD = "word"  # After whitespace, falling back to characters for long words
    CHARACTER = "character"  # At any character


class VisualRow(NamedTuple):
    """One on-screen row: a half-open range inside a single logical line."""
    start: int
    end: int
    line_index: int
    is_continuation: bool = False

    def __len__(self) -> int:
        return self.end - self.start


class RowIndex(Sequence):
    """Ordered visual rows for a source buffer.

    A RowIndex is built in one piece and never mutated; a geometry change
    produces a new one.
    """

    def __init__(self, source: str, rows: list[VisualRow], wrap_width: int | None = None):
        self._source = source
        self._rows = rows
        self.wrap_width = wrap_width

    @property
    def is_wrapped(self) -> bool:
        return self.wrap_width is not None

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, index):
        return self._rows[index]

    def __iter__(self) -> Iterator[VisualRow]:
        return iter(self._rows)

    def text(self, row: VisualRow) -> str:
        return self._source[row.start:row.end]

    def row_at_offset(self, offset: int) -> int:
        """Return the index of the row that shows source position ``offset``.

        Row starts strictly increase, so this is a binary search for the last
        row starting at or before ``offset``. A separator belongs to the row
        before it.
        """
        lo, hi = 0, len(self._rows)
        while lo < hi:
            mid = (lo + hi) // 2
            if self._rows[mid].start <= offset:
                lo = mid + 1
            else:
                hi = mid
        return max(0, lo - 1)


def unwrapped_rows(source: str, lines: Sequence[LogicalLine]) -> RowIndex:
    """One row per logical line."""
    rows = [VisualRow(line.start, line.end, i) for i, line in enumerate(lines)]
    return RowIndex(source, rows)


class _CachedMeasure:
    """Memoize a glyph measure and substitute a fallback width on failure."""

    def __init__(self, measure: Callable[[str], int], fallback_width: int):
        self._measure = measure
        self._fallback_width = fallback_width
        self._widths: dict[str, int] = {}

    def __call__(self, char: str) -> int:
        width = self._widths.get(char)
        if width is None:
            try:
                width = self._measure(char)
            except MeasurementError:
                width = -1
            if width < 0:
                logger.debug(
                    f"No width for U+{ord(char):04X}, using fallback {self._fallback_width}"
                )
                width = self._fallback_width
            self._widths[char] = width
        return width


def _wrap_line(source: str, line: LogicalLine, line_index: int, max_width: int,
               measure: Callable[[str], int], word_wrap: bool,
               rows: list[VisualRow]) -> None:
    """Append the rows for one logical line to ``rows``."""
    row_start = line.start
    width = 0
    # Offset just past the last whitespace in the current row, and the row
    # width at that point
    break_at = -1
    width_at_break = 0
    i = line.start
    end = line.end
    while i < end:
        char = source[i]
        char_width = measure(char)
        if width + char_width > max_width and i > row_start:
            is_space = char.isspace()
            if word_wrap and not is_space and break_at > row_start:
                row_end = break_at
                width -= width_at_break
            else:
                row_end = i
                width = 0
            rows.append(VisualRow(row_start, row_end, line_index, row_start != line.start))
            row_start = row_end
            break_at = -1
            # Re-check the same character against the fresh row
            continue
        width += char_width
        i += 1
        if word_wrap and char.isspace():
            break_at = i
            width_at_break = width
    rows.append(VisualRow(row_start, end, line_index, row_start != line.start))


def wrap_lines(source: str, lines: Sequence[LogicalLine], max_width: int,
               measure: Callable[[str], int],
               policy: WrapPolicy = WrapPolicy.WORD,
               fallback_width: int = ViewerConstants.FALLBACK_GLYPH_WIDTH) -> RowIndex:
    """Wrap every logical line to ``max_width``.

    Args:
        source: The full source buffer
        lines: Logical line index of ``source``
        max_width: Maximum row width in display units
        measure: Glyph width function; may raise MeasurementError
        policy: Word or character breaking
        fallback_width: Width substituted for glyphs that cannot be measured

    Returns:
        A new RowIndex. Every row fits in ``max_width`` unless it holds a
        single character that is wider on its own. Empty lines produce one
        empty row.

    Raises:
        InvalidGeometryError: If ``max_width`` is not positive.
    """
    if max_width <= 0:
        raise InvalidGeometryError(f"Wrap width must be positive, got {max_width}")

    cached = _CachedMeasure(measure, fallback_width)
    word_wrap = policy is WrapPolicy.WORD
    rows: list[VisualRow] = []
    for line_index, line in enumerate(lines):
        if line.start == line.end:
            rows.append(VisualRow(line.start, line.end, line_index))
            continue
        _wrap_line(source, line, line_index, max_width, cached, word_wrap, rows)
    return RowIndex(source, rows, wrap_width=max_width)
