"""Keyboard input: curtsies key tokens to key events to navigation events."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum

from .navigation import NavEvent


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    CTRL = "ctrl"
    SPECIAL = "special"


@dataclass
class KeyEvent:
    """Represents a parsed keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'q', 'down', 'page_down')
    raw: str  # The raw key token from curtsies
    is_ctrl: bool = False


# Named keys the viewer cares about, keyed by curtsies base name
_SPECIAL_NAMES = {
    'up': 'up',
    'down': 'down',
    'home': 'home',
    'end': 'end',
    'enter': 'enter',
    'return': 'enter',
    'pageup': 'page_up',
    'page_up': 'page_up',
    'pagedown': 'page_down',
    'page_down': 'page_down',
    'esc': 'escape',
    'escape': 'escape',
}

# Key-to-command table; regular characters are case sensitive
_SPECIAL_BINDINGS = {
    'up': NavEvent.SCROLL_UP,
    'down': NavEvent.SCROLL_DOWN,
    'page_up': NavEvent.PAGE_UP,
    'page_down': NavEvent.PAGE_DOWN,
    'home': NavEvent.HOME,
    'end': NavEvent.END,
    'enter': NavEvent.CONFIRM,
    'escape': NavEvent.CANCEL,
}

_REGULAR_BINDINGS = {
    'k': NavEvent.SCROLL_UP,
    'j': NavEvent.SCROLL_DOWN,
    'b': NavEvent.PAGE_UP,
    ' ': NavEvent.PAGE_DOWN,
    'g': NavEvent.HOME,
    'G': NavEvent.END,
    'y': NavEvent.CONFIRM,
    'q': NavEvent.CANCEL,
    'n': NavEvent.CANCEL,
}

_CTRL_BINDINGS = {
    'c': NavEvent.CANCEL,
    'q': NavEvent.CANCEL,
    'b': NavEvent.PAGE_UP,
    'f': NavEvent.PAGE_DOWN,
    'p': NavEvent.SCROLL_UP,
    'n': NavEvent.SCROLL_DOWN,
}


class KeyboardHandler:
    """Reads keys from a terminal interface and parses curtsies tokens."""

    def __init__(self, terminal_interface):
        """Initialize with a terminal interface."""
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        """Get next key event, or None if nothing arrived within ``timeout``."""
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a curtsies key token into a KeyEvent.

        Args:
            key: Key token such as '<DOWN>', '<Ctrl-c>', '<SPACE>' or 'q'

        Returns:
            Parsed KeyEvent
        """
        key_str = str(key)

        if key_str.startswith('<') and key_str.endswith('>') and len(key_str) > 2:
            name = key_str[1:-1].lower().replace('+', '-')
            parts = name.split('-')
            base = parts[-1]
            mods = set(parts[:-1])
            if base in ('space', 'spc') and not mods:
                return KeyEvent(key_type=KeyType.REGULAR, value=' ', raw=key_str)
            if base == 'tab' and not mods:
                return KeyEvent(key_type=KeyType.REGULAR, value='\t', raw=key_str)
            if 'ctrl' in mods and len(base) == 1:
                # Ctrl-J / Ctrl-M are Enter on every terminal
                if base in ('j', 'm'):
                    return KeyEvent(key_type=KeyType.SPECIAL, value='enter', raw=key_str)
                return KeyEvent(key_type=KeyType.CTRL, value=base, raw=key_str, is_ctrl=True)
            # Case matters for bare letters in tokens such as '<G>'
            if len(base) == 1 and not mods:
                return KeyEvent(key_type=KeyType.REGULAR, value=key_str[1:-1], raw=key_str)
            return KeyEvent(key_type=KeyType.SPECIAL, value=_SPECIAL_NAMES.get(base, base), raw=key_str)

        # Single-byte ASCII control chars (Ctrl-<letter>)
        if len(key_str) == 1:
            o = ord(key_str)
            if o in (10, 13):
                return KeyEvent(key_type=KeyType.SPECIAL, value='enter', raw=key_str)
            if o == 27:
                return KeyEvent(key_type=KeyType.SPECIAL, value='escape', raw=key_str)
            if 1 <= o <= 26 and o != 9:
                ch = chr(ord('a') + o - 1)
                return KeyEvent(key_type=KeyType.CTRL, value=ch, raw=key_str, is_ctrl=True)

        return KeyEvent(key_type=KeyType.REGULAR, value=key_str, raw=key_str)


def translate_key_event(event: KeyEvent) -> Optional[NavEvent]:
    """Map a key event to a navigation command, or None if it has none."""
    if event.key_type == KeyType.SPECIAL:
        return _SPECIAL_BINDINGS.get(event.value)
    if event.key_type == KeyType.CTRL:
        return _CTRL_BINDINGS.get(event.value)
    return _REGULAR_BINDINGS.get(event.value)
