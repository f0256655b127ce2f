"""Command-line interface: arguments, logging, config and session startup."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import ViewerConfig, load_config
from .constants import ViewerConstants
from .errors import SourceError
from .font_config import FontMetrics, terminal_metrics_factory
from .session import SessionOptions, ViewerSession
from .sources import (
    capture_script_output,
    determine_title,
    read_text_file,
    replace_escape_sequences,
)
from .wrapping import WrapPolicy

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tvviewer",
        description="tvviewer - a full-screen text viewer",
    )
    parser.add_argument("input_file", nargs="?", help="text file to view")
    parser.add_argument("-s", "--script_file", help="script whose output to view")
    parser.add_argument("-m", "--message", help="text to show instead of viewing a file")
    parser.add_argument("-f", "--font_size", type=int, help="font size in pixels")
    parser.add_argument("-t", "--title", help="window title (filename by default)")
    parser.add_argument("-y", "--yes_button", action="store_true",
                        help="shows a yes button with different exit code")
    parser.add_argument("-e", "--error_display", action="store_true",
                        help="format as error, title bar will be red")
    parser.add_argument("-w", "--wrap_lines", action="store_true",
                        help="wrap long lines of text. WARNING: could be slow for large files!")
    parser.add_argument("--char-wrap", action="store_true",
                        help="wrap at any character instead of at word boundaries")
    parser.add_argument("--config", type=Path, help="config file (JSON)")
    parser.add_argument("--log-file", type=Path, help="write log messages to this file")
    parser.add_argument("--debug", action="store_true", help="log debug messages")
    parser.add_argument("-V", "--version", action="store_true", help="print version and exit")
    parser.add_argument("--keytest", action="store_true",
                        help="show parsed key events instead of viewing text")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse and cross-check arguments; exits with status 2 on misuse."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.version or args.keytest:
        return args
    if not (args.input_file or args.message is not None or args.script_file):
        parser.error("No input given")
    if args.input_file and args.message is not None:
        parser.error("Cannot use input_file and message at the same time")
    if args.font_size is not None and args.font_size <= 0:
        parser.error("font_size must be positive")
    return args


def configure_logging(log_file: Optional[Path], debug: bool = False) -> None:
    """Send log records to ``log_file``; stay silent otherwise.

    The screen belongs to the viewer, so nothing is logged to the terminal.
    """
    root = logging.getLogger("tvviewer")
    if log_file is None:
        root.addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)


def load_text(args: argparse.Namespace) -> str:
    """Produce the text to view from whichever source was given.

    Raises:
        SourceError: If the file or script cannot be read.
    """
    if args.input_file:
        return read_text_file(args.input_file)
    if args.script_file:
        return capture_script_output(args.script_file)
    return replace_escape_sequences(args.message)


def session_options(args: argparse.Namespace, config: ViewerConfig) -> SessionOptions:
    policy = WrapPolicy.CHARACTER if args.char_wrap else config.wrap_policy
    return SessionOptions(
        wrap_lines=args.wrap_lines,
        confirm_available=args.yes_button,
        wrap_policy=policy,
        cancel_exit_code=config.cancel_exit_code,
        confirm_exit_code=config.confirm_exit_code,
        scroll_step=config.scroll_step,
    )


def run_viewer(args: argparse.Namespace) -> int:
    """Load text, build a session and run the viewer; return the exit code."""
    config = load_config(args.config)
    if args.font_size is not None:
        # Terminal cells do not scale; the size only matters to pixel renderers
        logger.info(f"Ignoring font size {args.font_size}px on a terminal")

    try:
        text = load_text(args)
    except SourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ViewerConstants.USAGE_EXIT_CODE

    session = ViewerSession(
        text,
        options=session_options(args, config),
        metrics_factory=terminal_metrics_factory(
            tab_width=config.tab_width,
            fallback_width=config.fallback_glyph_width,
        ),
        live_output=bool(args.script_file),
    )
    title = determine_title(args.title, args.input_file, args.error_display)

    # Lazy import to avoid importing terminal deps for argument errors
    from .terminal import TerminalInterface
    from .viewer import Viewer
    terminal = TerminalInterface(metrics=FontMetrics.for_terminal(
        tab_width=config.tab_width,
        fallback_width=config.fallback_glyph_width,
    ))
    viewer = Viewer(
        session,
        title,
        terminal=terminal,
        error_display=args.error_display,
        mark_continuations=config.mark_continuations,
        frame_timeout=config.frame_timeout,
    )
    return viewer.run()
