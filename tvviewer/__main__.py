"""tvviewer CLI entry point.

Allows running via `python -m tvviewer` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from .cli import configure_logging, parse_args, run_viewer
from .constants import ViewerConstants
from .version import get_version_string


def _escape_bytes(s: str) -> str:
    """Return a printable representation of raw key string."""
    # Represent control/escape characters visibly
    return s.encode('unicode_escape').decode('ascii')


def run_keyboard_test() -> None:
    """Print parsed key events and their navigation commands. Quit with ESC."""
    from .terminal import TerminalInterface
    from .keyboard import KeyboardHandler, KeyType, translate_key_event

    print("Keyboard test mode - press keys to see parsed events.")
    print("Quit with ESC.")

    term = TerminalInterface()
    term.setup()
    print(term.term.normal_cursor, end='', flush=True)
    kb = KeyboardHandler(term)

    try:
        while True:
            ev = kb.get_key_event(timeout=None)
            if not ev:
                continue
            if ev.key_type == KeyType.SPECIAL and ev.value == 'escape':
                break
            nav = translate_key_event(ev)
            parts = [f"type={ev.key_type.value}", f"value={ev.value}", f"raw='{_escape_bytes(ev.raw)}'"]
            if ev.is_ctrl:
                parts.append("flags=ctrl")
            parts.append(f"command={nav.value if nav else '-'}")
            print(' '.join(parts), end='\r\n', flush=True)
    finally:
        term.cleanup()
    print("Exiting keyboard test.")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    if args.version:
        print(get_version_string())
        return 0
    try:
        configure_logging(args.log_file, debug=args.debug)
    except OSError as e:
        print(f"Error: Cannot open log file {args.log_file}: {e.strerror or e}", file=sys.stderr)
        return ViewerConstants.USAGE_EXIT_CODE
    if args.keytest:
        run_keyboard_test()
        return 0
    return run_viewer(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
