"""Scroll state over a RowIndex.

Every operation takes a ViewportState and returns a new one with ``top_row``
clamped into ``[0, max(0, total_rows - visible_row_count)]``.
"""

from dataclasses import dataclass, replace
from typing import Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ViewportState:
    top_row: int = 0
    visible_row_count: int = 1
    total_rows: int = 1

    @property
    def max_top_row(self) -> int:
        return max(0, self.total_rows - self.visible_row_count)

    @property
    def can_scroll(self) -> bool:
        return self.total_rows > self.visible_row_count

    @property
    def at_top(self) -> bool:
        return self.top_row == 0

    @property
    def at_bottom(self) -> bool:
        return self.top_row >= self.max_top_row

    @classmethod
    def create(cls, visible_row_count: int, total_rows: int, top_row: int = 0) -> 'ViewportState':
        """Build a clamped state; row counts below one are raised to one."""
        return _clamped(cls(
            top_row=top_row,
            visible_row_count=max(1, visible_row_count),
            total_rows=max(1, total_rows),
        ))


def _clamped(state: ViewportState) -> ViewportState:
    top = min(max(0, state.top_row), state.max_top_row)
    if top == state.top_row:
        return state
    return replace(state, top_row=top)


def scroll(state: ViewportState, delta: int) -> ViewportState:
    """Move the view by ``delta`` rows (negative scrolls up)."""
    return _clamped(replace(state, top_row=state.top_row + delta))


def page_scroll(state: ViewportState, direction: int) -> ViewportState:
    """Move one screenful in ``direction`` (+1 down, -1 up).

    Consecutive pages overlap by one row so the reader keeps context.
    """
    step = max(1, state.visible_row_count - 1)
    if direction < 0:
        step = -step
    elif direction == 0:
        return state
    return scroll(state, step)


def jump_home(state: ViewportState) -> ViewportState:
    return _clamped(replace(state, top_row=0))


def jump_end(state: ViewportState) -> ViewportState:
    return replace(state, top_row=state.max_top_row)


def resize(state: ViewportState, visible_row_count: int, total_rows: int) -> ViewportState:
    """Apply new geometry, keeping ``top_row`` where it is if still valid."""
    return ViewportState.create(
        visible_row_count=visible_row_count,
        total_rows=total_rows,
        top_row=state.top_row,
    )


def visible_rows(state: ViewportState, row_index: Sequence[T]) -> list[T]:
    """Rows shown for ``state``: at most ``visible_row_count`` from ``top_row``."""
    top = min(state.top_row, len(row_index))
    count = max(0, min(state.visible_row_count, len(row_index) - top))
    return list(row_index[top:top + count])
