"""Main viewer controller: the frame loop."""

import logging
import os
import select
import signal
from typing import Optional

from .constants import ViewerConstants
from .font_config import DisplayGeometry
from .keyboard import KeyboardHandler, translate_key_event
from .navigation import NavEvent
from .session import ViewerSession
from .terminal import TerminalInterface

logger = logging.getLogger(__name__)


class Viewer:
    """Full-screen text viewer application controller.

    Each pass of the loop applies the current terminal geometry, draws the
    visible rows, waits for input or a resize, and hands every pending
    navigation event to the session in arrival order. The loop ends as soon
    as the session has an exit decision.
    """

    def __init__(self, session: ViewerSession, title: str,
                 terminal: Optional[TerminalInterface] = None,
                 error_display: bool = False,
                 mark_continuations: bool = True,
                 frame_timeout: float = ViewerConstants.FRAME_TIMEOUT):
        self.session = session
        self.title = title
        self.terminal = terminal or TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.error_display = error_display
        self.mark_continuations = mark_continuations
        self.frame_timeout = frame_timeout
        self._pending: list[NavEvent] = []
        # Resize and interrupt signaling pipe, open only while running
        self._signal_pipe_r: Optional[int] = None
        self._signal_pipe_w: Optional[int] = None

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame  # Unused
        # Write to pipe to wake up select()
        os.write(self._signal_pipe_w, ViewerConstants.RESIZE_PIPE_MARKER)

    def _handle_sigint(self, signum, frame):
        """Handle SIGINT (Ctrl-C) - treat as cancel."""
        del signum, frame  # Unused
        os.write(self._signal_pipe_w, ViewerConstants.INTERRUPT_PIPE_MARKER)

    def current_geometry(self) -> DisplayGeometry:
        """Text area of the terminal, one display unit per cell."""
        return DisplayGeometry(
            width_pixels=self.terminal.text_width,
            height_pixels=self.terminal.text_height,
            font_size_pixels=1,
        )

    def run(self) -> int:
        """Run the frame loop and return the process exit code."""
        self._signal_pipe_r, self._signal_pipe_w = os.pipe()
        self.terminal.setup()

        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)
        original_int_handler = signal.signal(signal.SIGINT, self._handle_sigint)

        try:
            while self.session.exit_decision() is None:
                self._frame()
        finally:
            # Restore original signal handlers
            signal.signal(signal.SIGWINCH, original_winch_handler)
            signal.signal(signal.SIGINT, original_int_handler)
            os.close(self._signal_pipe_r)
            os.close(self._signal_pipe_w)
            self._signal_pipe_r = self._signal_pipe_w = None
            self.terminal.cleanup()

        decision = self.session.exit_decision()
        return decision.code

    def _frame(self) -> None:
        """One pass: layout, draw, wait, dispatch."""
        if self.session.set_geometry(self.current_geometry()):
            self.terminal.invalidate_frame()
        self._draw()

        # Poll stdin only while raw keyboard input is open
        readers = [0, self._signal_pipe_r] if self.terminal.has_input else [self._signal_pipe_r]
        ready, _, _ = select.select(readers, [], [], self.frame_timeout)
        if self._signal_pipe_r in ready:
            data = os.read(self._signal_pipe_r, 1024)
            if ViewerConstants.INTERRUPT_PIPE_MARKER in data:
                self._pending.append(NavEvent.CANCEL)
            # A resize is picked up by set_geometry on the next pass
        if 0 in ready:
            self._drain_input()

        if self._pending:
            events, self._pending = self._pending, []
            self.session.handle_events(events)

    def _drain_input(self) -> None:
        """Translate every key that is already waiting, without blocking."""
        key_event = self.keyboard.get_key_event(timeout=0)
        while key_event is not None:
            nav_event = translate_key_event(key_event)
            if nav_event is not None:
                self._pending.append(nav_event)
            else:
                logger.debug(f"Unbound key {key_event.raw!r}")
            key_event = self.keyboard.get_key_event(timeout=0)

    def _draw(self) -> None:
        """Draw the current session state to the terminal."""
        if self.terminal.text_height < 1 or self.terminal.text_width < 1:
            self.terminal.draw_message("Terminal too small")
            return
        lines = self.terminal.compose_frame(
            self.title,
            self.session.visible_rows(),
            self.session.scroll_position(),
            error_display=self.error_display,
            confirm_available=self.session.options.confirm_available,
            mark_continuations=self.mark_continuations,
        )
        self.terminal.update_frame(lines)
