"""Tests for the viewer frame loop."""

import os
from unittest.mock import MagicMock, PropertyMock, patch

import blessed
import pytest

from tvviewer.font_config import terminal_metrics_factory
from tvviewer.keyboard import KeyEvent, KeyType
from tvviewer.session import SessionOptions, ViewerSession
from tvviewer.terminal import TerminalInterface
from tvviewer.viewer import Viewer


def key(value, key_type=KeyType.REGULAR):
    return KeyEvent(key_type=key_type, value=value, raw=value)


QUIT = key('q')
END = key('end', KeyType.SPECIAL)
ENTER = key('enter', KeyType.SPECIAL)


@pytest.fixture
def size():
    return {'width': 40, 'height': 12}


def make_viewer(text="line\n" * 50, **options):
    session = ViewerSession(text, SessionOptions(**options), metrics_factory=terminal_metrics_factory())
    term = blessed.Terminal(force_styling=None)
    return Viewer(session, "Info", terminal=TerminalInterface(term))


def run_viewer(viewer, size, select_results, keys, has_input=True):
    term_type = type(viewer.terminal.term)
    with patch.object(viewer.terminal, 'setup'), \
            patch.object(viewer.terminal, 'cleanup'), \
            patch.object(type(viewer.terminal), 'has_input', PropertyMock(return_value=has_input)), \
            patch.object(viewer.terminal, 'update_frame') as update_frame, \
            patch.object(term_type, 'width', PropertyMock(side_effect=lambda: size['width'])), \
            patch.object(term_type, 'height', PropertyMock(side_effect=lambda: size['height'])), \
            patch.object(viewer.keyboard, 'get_key_event', side_effect=keys) as get_key_event, \
            patch('tvviewer.viewer.select.select', side_effect=select_results) as mock_select:
        code = viewer.run()
    return code, update_frame, get_key_event, mock_select


def test_quit_key_returns_cancel_code(size):
    viewer = make_viewer()
    code, update_frame, get_key_event, _ = run_viewer(
        viewer, size, [([0], [], [])], [QUIT, None])
    assert code == 0
    update_frame.assert_called_once()
    get_key_event.assert_called_with(timeout=0)


def test_confirm_returns_confirm_code(size):
    viewer = make_viewer(confirm_available=True)
    code, _, _, _ = run_viewer(viewer, size, [([0], [], [])], [ENTER, None])
    assert code == 21


def test_confirm_ignored_without_yes_button(size):
    viewer = make_viewer()
    code, _, _, mock_select = run_viewer(
        viewer, size, [([0], [], []), ([0], [], [])], [ENTER, None, QUIT, None])
    assert code == 0
    assert mock_select.call_count == 2


def test_events_in_one_frame_apply_in_order(size):
    viewer = make_viewer()
    code, _, _, _ = run_viewer(viewer, size, [([0], [], [])], [END, QUIT, None])
    assert code == 0
    assert viewer.session.viewport.at_bottom


def test_idle_frames_keep_drawing(size):
    viewer = make_viewer()
    code, update_frame, get_key_event, _ = run_viewer(
        viewer, size, [([], [], []), ([], [], []), ([0], [], [])], [QUIT, None])
    assert code == 0
    assert update_frame.call_count == 3
    assert get_key_event.call_count == 2


def test_sigint_cancels(size):
    viewer = make_viewer(confirm_available=True)

    def fake_select(readers, writers, errors, timeout):
        os.write(viewer._signal_pipe_w, b'C')
        return [viewer._signal_pipe_r], [], []

    code, _, get_key_event, _ = run_viewer(viewer, size, fake_select, [])
    assert code == 0
    get_key_event.assert_not_called()


def test_resize_rewraps(size):
    viewer = make_viewer(text="word " * 200, wrap_lines=True)

    def fake_select(readers, writers, errors, timeout):
        if fake_select.calls == 0:
            fake_select.calls += 1
            assert viewer.session.rows.wrap_width == 38
            size['width'] = 30
            os.write(viewer._signal_pipe_w, b'R')
            return [viewer._signal_pipe_r], [], []
        return [0], [], []
    fake_select.calls = 0

    with patch.object(viewer.terminal, 'invalidate_frame', MagicMock()) as invalidate:
        code, _, _, _ = run_viewer(viewer, size, fake_select, [QUIT, None])
    assert code == 0
    assert viewer.session.rows.wrap_width == 28
    assert invalidate.call_count == 2


def test_tiny_terminal_shows_message(size):
    size['height'] = 2
    viewer = make_viewer()
    with patch.object(viewer.terminal, 'draw_message') as draw_message:
        code, update_frame, _, _ = run_viewer(viewer, size, [([0], [], [])], [QUIT, None])
    assert code == 0
    draw_message.assert_called_once_with("Terminal too small")
    update_frame.assert_not_called()


def test_stdin_not_polled_without_keyboard(size):
    viewer = make_viewer()

    def fake_select(readers, writers, errors, timeout):
        assert readers == [viewer._signal_pipe_r]
        os.write(viewer._signal_pipe_w, b'C')
        return [viewer._signal_pipe_r], [], []

    code, _, get_key_event, mock_select = run_viewer(
        viewer, size, fake_select, [], has_input=False)
    assert code == 0
    mock_select.assert_called_once()
    get_key_event.assert_not_called()


def test_stdin_polled_with_keyboard(size):
    viewer = make_viewer()

    def fake_select(readers, writers, errors, timeout):
        assert readers == [0, viewer._signal_pipe_r]
        return [0], [], []

    code, _, _, _ = run_viewer(viewer, size, fake_select, [QUIT, None])
    assert code == 0


def test_signal_pipe_open_only_while_running(size):
    viewer = make_viewer(confirm_available=True)
    assert viewer._signal_pipe_r is None
    assert viewer._signal_pipe_w is None
    opened = []

    def fake_select(readers, writers, errors, timeout):
        opened.append((viewer._signal_pipe_r, viewer._signal_pipe_w))
        return [0], [], []

    code, _, _, _ = run_viewer(viewer, size, fake_select, [ENTER, None])
    assert code == 21
    read_fd, write_fd = opened[0]
    assert read_fd is not None and write_fd is not None
    assert viewer._signal_pipe_r is None
    assert viewer._signal_pipe_w is None
    with pytest.raises(OSError):
        os.fstat(read_fd)

    # A finished session returns its decision again without another frame
    code, _, _, mock_select = run_viewer(viewer, size, [], [])
    assert code == 21
    mock_select.assert_not_called()
