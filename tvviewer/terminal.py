"""Terminal interface using Blessed for display and Curtsies for input."""

import blessed
import logging
import select
import sys
import unicodedata
from typing import Optional, Sequence

from .constants import ViewerConstants
from .errors import MeasurementError
from .font_config import FontMetrics
from .session import RenderRow, ScrollPosition

logger = logging.getLogger(__name__)


def sanitize_row_text(text: str, tab_width: int = ViewerConstants.TAB_WIDTH) -> str:
    """Expand tabs and drop control characters that would move the cursor."""
    if text.isprintable():
        return text
    out = []
    for ch in text:
        if ch == '\t':
            out.append(' ' * tab_width)
        elif unicodedata.category(ch) != 'Cc':
            out.append(ch)
    return ''.join(out)


def fit_to_width(text: str, width: int, metrics: FontMetrics) -> str:
    """Truncate ``text`` to ``width`` cells and pad it with spaces."""
    used = 0
    end = len(text)
    for i, ch in enumerate(text):
        try:
            w = metrics.measure(ch)
        except MeasurementError:
            w = metrics.fallback_width
        if used + w > width:
            end = i
            break
        used += w
    return text[:end] + ' ' * (width - used)


def scrollbar_cells(scroll: ScrollPosition, height: int) -> list[bool]:
    """Return which of ``height`` cells belong to the scroll thumb."""
    if height <= 0:
        return []
    if scroll.total_rows <= scroll.visible_row_count:
        return [True] * height
    thumb = max(1, scroll.visible_row_count * height // scroll.total_rows)
    max_start = max(0, height - thumb)
    max_top = scroll.total_rows - scroll.visible_row_count
    start = (scroll.top_row * max_start + max_top // 2) // max_top
    return [start <= y < start + thumb for y in range(height)]


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None,
                 metrics: Optional[FontMetrics] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.metrics = metrics or FontMetrics.for_terminal()
        self.is_fullscreen = False
        self._curtsies_input: Optional[object] = None
        self._curtsies_active: bool = False
        # Virtual screen state for minimal updates
        self._last_lines: list[str] | None = None
        self._last_size: tuple[int, int] | None = None

    def setup(self):
        """Enter fullscreen mode and prepare terminal."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.hide_cursor, end='')
        print(self.term.clear, end='', flush=True)
        self.is_fullscreen = True
        if self._curtsies_input is None:
            try:
                from curtsies import Input  # type: ignore
                # Enter raw mode immediately so reads work
                self._curtsies_input = Input(keynames='curtsies', sigint_event=False)  # type: ignore
                self._curtsies_input.__enter__()
                self._curtsies_active = True
            except Exception as e:
                # No raw mode available; draw without keyboard input
                logger.warning(f"Keyboard input unavailable: {e}")
                self._curtsies_input = None
                self._curtsies_active = False

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self.is_fullscreen:
            print(self.term.normal + self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False
        if self._curtsies_input is not None:
            try:
                if self._curtsies_active:
                    # Exit raw mode context
                    self._curtsies_input.__exit__(None, None, None)  # type: ignore
            except Exception as e:
                logger.warning(f"Could not leave raw mode cleanly: {e}")
            finally:
                self._curtsies_input = None
                self._curtsies_active = False

    def invalidate_frame(self) -> None:
        """Invalidate cached frame so next update does a full clear."""
        self._last_lines = None
        self._last_size = None

    def compose_frame(
        self,
        title: str,
        rows: Sequence[RenderRow],
        scroll: ScrollPosition,
        error_display: bool = False,
        confirm_available: bool = False,
        mark_continuations: bool = True,
    ) -> list[str]:
        """Build the display string for every screen line.

        Layout: title bar, text rows (gutter + text + scroll indicator),
        button bar.
        """
        width = self.term.width
        text_height = self.text_height
        text_width = self.text_width
        term = self.term

        title_style = term.bold_white_on_red if error_display else term.bold_reverse
        title_text = fit_to_width(title.center(width), width, self.metrics)
        lines = [title_style + title_text + term.normal]

        thumb = scrollbar_cells(scroll, text_height)
        show_scrollbar = scroll.total_rows > scroll.visible_row_count
        for y in range(text_height):
            if y < len(rows):
                row = rows[y]
                marker = ViewerConstants.CONTINUATION_MARKER if (
                    mark_continuations and row.is_wrapped_continuation) else ' '
                body = fit_to_width(sanitize_row_text(row.text, self.metrics.tab_width),
                                    text_width, self.metrics)
            else:
                marker = ' '
                body = ' ' * text_width
            if show_scrollbar:
                bar = term.reverse(' ') if thumb[y] else term.dim('│')
            else:
                bar = ' '
            lines.append(term.dim(marker) + body + bar)

        buttons = ViewerConstants.CONFIRM_BUTTONS if confirm_available else ViewerConstants.CLOSE_BUTTON
        status = self._position_text(scroll)
        gap = max(1, width - len(status) - len(buttons) - 2)
        bar_text = fit_to_width(' ' + status + ' ' * gap + buttons, width, self.metrics)
        lines.append(term.reverse + bar_text + term.normal)
        return lines

    def _position_text(self, scroll: ScrollPosition) -> str:
        first = scroll.top_row + 1
        last = min(scroll.total_rows, scroll.top_row + scroll.visible_row_count)
        if scroll.total_rows <= scroll.visible_row_count:
            percent = 100
        else:
            percent = scroll.top_row * 100 // (scroll.total_rows - scroll.visible_row_count)
        return f"{first}-{last}/{scroll.total_rows} {percent}%"

    def update_frame(self, lines: list[str]) -> None:
        """Diff against last frame and write only changes.

        Falls back to a full clear on first paint or when the terminal size
        changed.
        """
        size = (self.term.width, self.term.height)
        need_full_clear = (
            self._last_lines is None
            or self._last_size != size
            or len(self._last_lines) != len(lines)
        )
        if need_full_clear:
            print(self.term.home + self.term.clear, end='')
            self._last_lines = ["" for _ in range(len(lines))]
            self._last_size = size

        out = []
        for y, line in enumerate(lines):
            if line != self._last_lines[y]:
                out.append(self.term.move(y, 0) + line)
                self._last_lines[y] = line
        print(''.join(out), end='', flush=True)

    def draw_message(self, message: str) -> None:
        """Draw a single centered message, used when the screen is too small."""
        print(self.term.home + self.term.clear, end='')
        y = max(0, self.term.height // 2)
        x = max(0, (self.term.width - len(message)) // 2)
        print(self.term.move(y, x) + message[:max(0, self.term.width)], end='', flush=True)
        self.invalidate_frame()

    def get_key(self, timeout=None):
        """Get a single keypress from the user.

        Args:
            timeout: Timeout in seconds (None for blocking, 0 for non-blocking)

        Returns:
            The curtsies key token as a string, or None.
        """
        if self._curtsies_input is None:
            return None
        if timeout is None:
            return str(next(self._curtsies_input))
        r, _, _ = select.select([sys.stdin], [], [], float(timeout))
        if not r:
            return None
        return str(next(self._curtsies_input))

    @property
    def has_input(self) -> bool:
        """True once raw keyboard input is available."""
        return self._curtsies_input is not None

    @property
    def text_width(self) -> int:
        """Columns available to text between the gutter and scroll indicator."""
        return max(0, self.term.width - 1 - ViewerConstants.SCROLLBAR_COLUMNS)

    @property
    def text_height(self) -> int:
        """Rows available to text between the title and button bars."""
        return max(0, self.term.height - ViewerConstants.TITLE_ROWS - ViewerConstants.BUTTON_ROWS)
