"""tvviewer - A full-screen text viewer for keyboard-only consoles."""

from .model import LogicalLine, TextDocument, build_line_index
from .wrapping import RowIndex, VisualRow, WrapPolicy, unwrapped_rows, wrap_lines
from .viewport import ViewportState
from .navigation import ExitDecision, ExitKind, NavEvent, NavigationController
from .session import RenderRow, ScrollPosition, SessionOptions, ViewerSession

__all__ = [
    'LogicalLine',
    'TextDocument',
    'build_line_index',
    'RowIndex',
    'VisualRow',
    'WrapPolicy',
    'unwrapped_rows',
    'wrap_lines',
    'ViewportState',
    'ExitDecision',
    'ExitKind',
    'NavEvent',
    'NavigationController',
    'RenderRow',
    'ScrollPosition',
    'SessionOptions',
    'ViewerSession',
]
