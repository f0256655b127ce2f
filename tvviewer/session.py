"""One viewing session: document, layout, scroll state and exit decision.

The session is the only object the frame loop talks to. It owns the
RowIndex and the NavigationController exclusively; neither is touched from
anywhere else.
"""

import logging
import time
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional

from .constants import ViewerConstants
from .errors import InvalidGeometryError
from .font_config import DisplayGeometry, FontMetrics, MetricsFactory
from .model import TextDocument
from .navigation import ExitDecision, NavEvent, NavigationController
from .viewport import ViewportState, jump_end, visible_rows
from .wrapping import RowIndex, WrapPolicy, unwrapped_rows, wrap_lines

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionOptions:
    """Mode flags fixed at session start."""
    wrap_lines: bool = False
    confirm_available: bool = False
    wrap_policy: WrapPolicy = WrapPolicy.WORD
    cancel_exit_code: int = ViewerConstants.CANCEL_EXIT_CODE
    confirm_exit_code: int = ViewerConstants.CONFIRM_EXIT_CODE
    scroll_step: int = ViewerConstants.SCROLL_STEP


class RenderRow(NamedTuple):
    text: str
    is_wrapped_continuation: bool


class ScrollPosition(NamedTuple):
    top_row: int
    total_rows: int
    visible_row_count: int


class ViewerSession:
    """Lay out a document for a display and track navigation over it."""

    def __init__(self, text: str, options: Optional[SessionOptions] = None,
                 metrics_factory: MetricsFactory = FontMetrics.for_font_size,
                 live_output: bool = False):
        self.options = options or SessionOptions()
        self.document = TextDocument(text, live_output=live_output)
        self._metrics_factory = metrics_factory
        self._metrics: Optional[FontMetrics] = None
        self._geometry: Optional[DisplayGeometry] = None
        self._placed = False
        self.rows: RowIndex = unwrapped_rows(self.document.text, self.document.lines)
        self.controller = NavigationController(
            ViewportState.create(visible_row_count=1, total_rows=len(self.rows)),
            confirm_available=self.options.confirm_available,
            cancel_exit_code=self.options.cancel_exit_code,
            confirm_exit_code=self.options.confirm_exit_code,
            scroll_step=self.options.scroll_step,
        )

    @property
    def viewport(self) -> ViewportState:
        return self.controller.viewport

    @property
    def geometry(self) -> Optional[DisplayGeometry]:
        return self._geometry

    def set_geometry(self, geometry: DisplayGeometry) -> bool:
        """Apply display geometry, re-wrapping only if width or font changed.

        Returns:
            True if the geometry differed from the one already applied.
        """
        if geometry == self._geometry:
            return False
        previous = self._geometry
        self._geometry = geometry

        top_offset = self._top_offset()
        visible_count = self.viewport.visible_row_count
        rows_before = self.rows
        if not geometry.is_valid:
            logger.warning(f"Invalid display geometry {geometry}, using unwrapped layout")
            self._metrics = None
            if self.rows.is_wrapped:
                self.rows = unwrapped_rows(self.document.text, self.document.lines)
        else:
            self._metrics = self._metrics_factory(geometry.font_size_pixels)
            visible_count = self._metrics.visible_row_count(geometry)
            if self.options.wrap_lines and (
                    not self.rows.is_wrapped or geometry.invalidates_wrap(previous)):
                self.rows = self._build_rows(geometry, self._metrics)

        if self.rows is rows_before:
            self.controller.resize(visible_count, len(self.rows))
        else:
            # Keep the text that was at the top in place
            self.controller.viewport = ViewportState.create(
                visible_row_count=visible_count,
                total_rows=len(self.rows),
                top_row=self.rows.row_at_offset(top_offset),
            )
        if not self._placed:
            self._placed = True
            if self.document.live_output:
                self.controller.viewport = jump_end(self.controller.viewport)
        return True

    def handle_events(self, events: Iterable[NavEvent]) -> Optional[ExitDecision]:
        return self.controller.process_frame(events)

    def visible_rows(self) -> list[RenderRow]:
        return [
            RenderRow(self.rows.text(row), row.is_continuation)
            for row in visible_rows(self.viewport, self.rows)
        ]

    def scroll_position(self) -> ScrollPosition:
        state = self.viewport
        return ScrollPosition(state.top_row, state.total_rows, state.visible_row_count)

    def exit_decision(self) -> Optional[ExitDecision]:
        return self.controller.exit_decision

    def _top_offset(self) -> int:
        """Source position of the first character on screen."""
        if not self.rows:
            return 0
        return self.rows[min(self.viewport.top_row, len(self.rows) - 1)].start

    def _build_rows(self, geometry: DisplayGeometry, metrics: FontMetrics) -> RowIndex:
        started = time.perf_counter()
        try:
            rows = wrap_lines(
                self.document.text,
                self.document.lines,
                geometry.width_pixels,
                metrics.measure,
                policy=self.options.wrap_policy,
                fallback_width=metrics.fallback_width,
            )
        except InvalidGeometryError as e:
            logger.warning(f"Cannot wrap: {e}; using unwrapped layout")
            return unwrapped_rows(self.document.text, self.document.lines)
        elapsed = time.perf_counter() - started
        logger.debug(
            f"Wrapped {len(self.document)} lines into {len(rows)} rows "
            f"at width {geometry.width_pixels} in {elapsed * 1000:.1f} ms"
        )
        return rows
