"""Tests for scroll state clamping and paging."""

import math

import pytest

from tvviewer.viewport import (
    ViewportState,
    jump_end,
    jump_home,
    page_scroll,
    resize,
    scroll,
    visible_rows,
)


def test_create_clamps_top_row():
    state = ViewportState.create(visible_row_count=10, total_rows=25, top_row=99)
    assert state.top_row == 15
    state = ViewportState.create(visible_row_count=10, total_rows=25, top_row=-3)
    assert state.top_row == 0


def test_create_raises_counts_to_one():
    state = ViewportState.create(visible_row_count=0, total_rows=0)
    assert state.visible_row_count == 1
    assert state.total_rows == 1
    assert state.top_row == 0


def test_no_scrolling_when_everything_fits():
    state = ViewportState.create(visible_row_count=10, total_rows=5)
    assert not state.can_scroll
    assert scroll(state, 3).top_row == 0
    assert page_scroll(state, 1).top_row == 0
    assert jump_end(state).top_row == 0


def test_scroll_clamps_both_ends():
    state = ViewportState.create(visible_row_count=5, total_rows=20)
    assert scroll(state, -1).top_row == 0
    state = scroll(state, 7)
    assert state.top_row == 7
    assert scroll(state, 100).top_row == 15
    assert scroll(state, -100).top_row == 0


def test_page_scroll_keeps_one_row_of_overlap():
    state = ViewportState.create(visible_row_count=10, total_rows=100)
    state = page_scroll(state, 1)
    assert state.top_row == 9
    state = page_scroll(state, 1)
    assert state.top_row == 18
    state = page_scroll(state, -1)
    assert state.top_row == 9


def test_page_scroll_with_single_visible_row_still_moves():
    state = ViewportState.create(visible_row_count=1, total_rows=3)
    assert page_scroll(state, 1).top_row == 1


def test_page_scroll_zero_direction_is_noop():
    state = ViewportState.create(visible_row_count=4, total_rows=30, top_row=5)
    assert page_scroll(state, 0) == state


@pytest.mark.parametrize("total,visible", [
    (100, 10), (101, 10), (10, 3), (7, 2), (1000, 37), (50, 49),
])
def test_page_down_reaches_end_without_overshoot(total, visible):
    state = ViewportState.create(visible_row_count=visible, total_rows=total)
    for _ in range(math.ceil(total / (visible - 1))):
        state = page_scroll(state, 1)
        assert state.top_row <= total - visible
    assert state.top_row == total - visible


def test_home_and_end():
    state = ViewportState.create(visible_row_count=5, total_rows=12, top_row=3)
    assert jump_end(state).top_row == 7
    assert jump_home(state).top_row == 0
    assert jump_end(state).at_bottom
    assert jump_home(state).at_top


def test_resize_preserves_place():
    state = ViewportState.create(visible_row_count=10, total_rows=100, top_row=40)
    resized = resize(state, 20, 100)
    assert resized.top_row == 40
    assert resized.visible_row_count == 20


def test_resize_reclamps_when_bounds_shrink():
    state = ViewportState.create(visible_row_count=10, total_rows=100, top_row=90)
    resized = resize(state, 10, 50)
    assert resized.top_row == 40
    resized = resize(state, 200, 100)
    assert resized.top_row == 0


@pytest.mark.parametrize("top", [0, 1, 5, 50, 99])
@pytest.mark.parametrize("visible", [0, 1, 3, 10, 200])
@pytest.mark.parametrize("total", [0, 1, 2, 10, 100])
def test_resize_stays_in_bounds(top, visible, total):
    state = ViewportState.create(visible_row_count=10, total_rows=100, top_row=top)
    resized = resize(state, visible, total)
    assert 0 <= resized.top_row <= max(0, resized.total_rows - resized.visible_row_count)


def test_visible_rows_slice():
    rows = list(range(12))
    state = ViewportState.create(visible_row_count=5, total_rows=12, top_row=3)
    assert visible_rows(state, rows) == [3, 4, 5, 6, 7]
    state = jump_end(state)
    assert visible_rows(state, rows) == [7, 8, 9, 10, 11]


def test_visible_rows_short_document():
    state = ViewportState.create(visible_row_count=5, total_rows=2)
    assert visible_rows(state, ["a", "b"]) == ["a", "b"]


def test_visible_rows_never_out_of_bounds():
    # State built for a longer index than the one passed in
    state = ViewportState.create(visible_row_count=5, total_rows=50, top_row=45)
    assert visible_rows(state, list(range(47))) == [45, 46]
    assert visible_rows(state, list(range(10))) == []
