"""Navigation state machine: abstract input events to viewport changes and exit."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .constants import ViewerConstants
from . import viewport as vp
from .viewport import ViewportState

logger = logging.getLogger(__name__)


class NavEvent(Enum):
    """Device-independent navigation commands."""
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    CONFIRM = "confirm"
    CANCEL = "cancel"


class ExitKind(Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"


@dataclass(frozen=True)
class ExitDecision:
    """How the session ended and which process exit code to use."""
    kind: ExitKind
    code: int


class ControllerState(Enum):
    VIEWING = "viewing"
    EXITED = "exited"


MOVEMENT_EVENTS = frozenset({
    NavEvent.SCROLL_UP,
    NavEvent.SCROLL_DOWN,
    NavEvent.PAGE_UP,
    NavEvent.PAGE_DOWN,
    NavEvent.HOME,
    NavEvent.END,
})


class NavigationController:
    """Apply navigation events to a viewport until the user exits.

    Confirm is only accepted when the session offers an accept action. The
    first Confirm or Cancel of a frame ends the session; anything queued
    behind it is dropped.
    """

    def __init__(self, viewport: ViewportState, confirm_available: bool = False,
                 cancel_exit_code: int = ViewerConstants.CANCEL_EXIT_CODE,
                 confirm_exit_code: int = ViewerConstants.CONFIRM_EXIT_CODE,
                 scroll_step: int = ViewerConstants.SCROLL_STEP):
        self.viewport = viewport
        self.confirm_available = confirm_available
        self.cancel_exit_code = cancel_exit_code
        self.confirm_exit_code = confirm_exit_code
        self.scroll_step = max(1, scroll_step)
        self.state = ControllerState.VIEWING
        self.exit_decision: Optional[ExitDecision] = None

    @property
    def accepted_events(self) -> frozenset[NavEvent]:
        if self.state is ControllerState.EXITED:
            return frozenset()
        if self.confirm_available:
            return MOVEMENT_EVENTS | {NavEvent.CANCEL, NavEvent.CONFIRM}
        return MOVEMENT_EVENTS | {NavEvent.CANCEL}

    @property
    def exited(self) -> bool:
        return self.state is ControllerState.EXITED

    def process_frame(self, events: Iterable[NavEvent]) -> Optional[ExitDecision]:
        """Consume one frame's events in arrival order.

        Returns:
            The exit decision, once one has been made.
        """
        accepted = self.accepted_events
        for event in events:
            if self.exited:
                break
            if event not in accepted:
                logger.debug(f"Ignoring {event.value} event")
                continue
            self._apply(event)
        return self.exit_decision

    def resize(self, visible_row_count: int, total_rows: int) -> None:
        self.viewport = vp.resize(self.viewport, visible_row_count, total_rows)

    def _apply(self, event: NavEvent) -> None:
        if event is NavEvent.CANCEL:
            self._exit(ExitDecision(ExitKind.CANCEL, self.cancel_exit_code))
        elif event is NavEvent.CONFIRM:
            self._exit(ExitDecision(ExitKind.CONFIRM, self.confirm_exit_code))
        elif event is NavEvent.SCROLL_UP:
            self.viewport = vp.scroll(self.viewport, -self.scroll_step)
        elif event is NavEvent.SCROLL_DOWN:
            self.viewport = vp.scroll(self.viewport, self.scroll_step)
        elif event is NavEvent.PAGE_UP:
            self.viewport = vp.page_scroll(self.viewport, -1)
        elif event is NavEvent.PAGE_DOWN:
            self.viewport = vp.page_scroll(self.viewport, 1)
        elif event is NavEvent.HOME:
            self.viewport = vp.jump_home(self.viewport)
        elif event is NavEvent.END:
            self.viewport = vp.jump_end(self.viewport)

    def _exit(self, decision: ExitDecision) -> None:
        self.exit_decision = decision
        self.state = ControllerState.EXITED
        logger.info(f"Exit requested: {decision.kind.value} (code {decision.code})")
