"""Tests for the viewing session: layout, geometry changes and outputs."""

import logging

from tvviewer.font_config import DisplayGeometry, terminal_metrics_factory
from tvviewer.navigation import ExitDecision, ExitKind, NavEvent
from tvviewer.session import RenderRow, ScrollPosition, SessionOptions, ViewerSession
from tvviewer.wrapping import WrapPolicy


def _session(text, wrap=False, confirm=False, live=False, **kwargs):
    return ViewerSession(
        text,
        options=SessionOptions(wrap_lines=wrap, confirm_available=confirm, **kwargs),
        metrics_factory=terminal_metrics_factory(),
        live_output=live,
    )


def _geometry(width, height):
    return DisplayGeometry(width_pixels=width, height_pixels=height, font_size_pixels=1)


def test_hello_world_unwrapped():
    s = _session("hello\nworld")
    s.set_geometry(_geometry(80, 2))
    assert len(s.document.lines) == 2
    assert len(s.rows) == 2
    assert s.visible_rows() == [RenderRow("hello", False), RenderRow("world", False)]


def test_fixed_width_wrap_rows():
    s = _session("aaaaaaaaaa", wrap=True)
    s.set_geometry(_geometry(4, 10))
    assert [len(r.text) for r in s.visible_rows()] == [4, 4, 2]
    assert [r.is_wrapped_continuation for r in s.visible_rows()] == [False, True, True]


def test_empty_buffer():
    s = _session("")
    s.set_geometry(_geometry(80, 24))
    assert len(s.document.lines) == 1
    assert s.visible_rows() == [RenderRow("", False)]
    assert s.scroll_position().total_rows == 1
    for event in (NavEvent.SCROLL_DOWN, NavEvent.PAGE_DOWN, NavEvent.END, NavEvent.SCROLL_UP):
        s.handle_events([event])
        assert s.scroll_position().top_row == 0


def test_cancel_with_queued_events():
    s = _session("\n".join(str(i) for i in range(100)))
    s.set_geometry(_geometry(80, 10))
    decision = s.handle_events([
        NavEvent.CANCEL, NavEvent.SCROLL_DOWN, NavEvent.PAGE_DOWN, NavEvent.END,
    ])
    assert decision == ExitDecision(ExitKind.CANCEL, 0)
    assert s.exit_decision() == decision
    assert s.scroll_position().top_row == 0


def test_scroll_position_reports_viewport():
    s = _session("\n".join(str(i) for i in range(30)))
    s.set_geometry(_geometry(80, 10))
    s.handle_events([NavEvent.PAGE_DOWN])
    assert s.scroll_position() == ScrollPosition(top_row=9, total_rows=30, visible_row_count=10)
    assert s.visible_rows()[0].text == "9"


def test_same_geometry_is_not_reapplied():
    s = _session("abc", wrap=True)
    assert s.set_geometry(_geometry(10, 5))
    rows = s.rows
    assert not s.set_geometry(_geometry(10, 5))
    assert s.rows is rows


def test_height_change_does_not_rewrap():
    s = _session("word " * 50, wrap=True)
    s.set_geometry(_geometry(20, 5))
    rows = s.rows
    s.handle_events([NavEvent.SCROLL_DOWN, NavEvent.SCROLL_DOWN])
    s.set_geometry(_geometry(20, 6))
    assert s.rows is rows
    assert s.scroll_position().top_row == 2
    assert s.scroll_position().visible_row_count == 6


def test_width_change_rewraps_and_keeps_top_line():
    text = "\n".join(f"line {i} " + "x" * 30 for i in range(40))
    s = _session(text, wrap=True)
    s.set_geometry(_geometry(10, 5))
    s.handle_events([NavEvent.END])
    s.handle_events([NavEvent.HOME])
    for _ in range(25):
        s.handle_events([NavEvent.SCROLL_DOWN])
    top_line = s.rows[s.scroll_position().top_row].line_index
    rows = s.rows
    s.set_geometry(_geometry(60, 5))
    assert s.rows is not rows
    assert len(s.rows) == 40
    assert s.scroll_position().top_row == top_line


def test_width_change_inside_long_line_keeps_place():
    s = _session("word " * 2000, wrap=True)
    s.set_geometry(_geometry(40, 20))
    assert len(s.rows) == 250
    for _ in range(10):
        s.handle_events([NavEvent.PAGE_DOWN])
    top_row = s.scroll_position().top_row
    assert top_row == 190
    offset = s.rows[top_row].start

    s.set_geometry(_geometry(39, 20))
    top_row = s.scroll_position().top_row
    assert top_row > 0
    assert s.rows[top_row].start <= offset < s.rows[top_row + 1].start
    assert s.rows[top_row].line_index == 0


def test_unwrapped_session_ignores_width_changes():
    s = _session("a" * 100)
    s.set_geometry(_geometry(10, 5))
    rows = s.rows
    s.set_geometry(_geometry(20, 5))
    assert s.rows is rows
    assert s.visible_rows() == [RenderRow("a" * 100, False)]


def test_invalid_geometry_falls_back_to_unwrapped(caplog):
    s = _session("aaaaaaaaaa", wrap=True)
    s.set_geometry(_geometry(4, 10))
    assert len(s.rows) == 3
    with caplog.at_level(logging.WARNING, logger="tvviewer"):
        s.set_geometry(_geometry(0, 10))
    assert "Invalid display geometry" in caplog.text
    assert len(s.rows) == 1
    assert not s.rows.is_wrapped
    # Still navigable and exitable
    assert s.handle_events([NavEvent.CANCEL]).kind is ExitKind.CANCEL


def test_recovers_after_invalid_geometry():
    s = _session("aaaaaaaaaa", wrap=True)
    s.set_geometry(_geometry(-1, 10))
    assert len(s.rows) == 1
    s.set_geometry(_geometry(4, 10))
    assert len(s.rows) == 3


def test_invalid_font_size_uses_unwrapped_layout():
    s = _session("aaaaaaaaaa", wrap=True)
    s.set_geometry(DisplayGeometry(4, 10, 0))
    assert len(s.rows) == 1


def test_live_output_starts_at_end():
    s = _session("\n".join(str(i) for i in range(50)), live=True)
    s.set_geometry(_geometry(80, 10))
    assert s.scroll_position().top_row == 40
    assert s.visible_rows()[-1].text == "49"
    # Later geometry changes keep the reader's place
    s.handle_events([NavEvent.HOME])
    s.set_geometry(_geometry(80, 12))
    assert s.scroll_position().top_row == 0


def test_character_policy_option():
    s = _session("hello world", wrap=True, wrap_policy=WrapPolicy.CHARACTER)
    s.set_geometry(_geometry(8, 5))
    assert [r.text for r in s.visible_rows()] == ["hello wo", "rld"]


def test_confirm_offered_only_in_confirm_mode():
    s = _session("text", confirm=True, confirm_exit_code=21)
    s.set_geometry(_geometry(80, 5))
    assert s.handle_events([NavEvent.CONFIRM]) == ExitDecision(ExitKind.CONFIRM, 21)

    s = _session("text")
    s.set_geometry(_geometry(80, 5))
    assert s.handle_events([NavEvent.CONFIRM]) is None


def test_pixel_metrics_visible_rows():
    s = ViewerSession("\n".join("x" for _ in range(100)))
    # Default pixel metrics: 20px font -> 24px rows
    s.set_geometry(DisplayGeometry(800, 240, 20))
    assert s.scroll_position().visible_row_count == 10
