"""Where the text comes from: files, inline messages and script output.

All of this runs before the session starts; nothing here is called from the
frame loop.
"""

import logging
import subprocess
from typing import Optional

from .constants import ViewerConstants
from .errors import SourceError

logger = logging.getLogger(__name__)

_ESCAPES = {
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
    'v': '\v',
    '\\': '\\',
}


def replace_escape_sequences(text: str) -> str:
    """Turn two-character escapes such as ``\\n`` into control characters.

    Unknown escapes and a trailing lone backslash are kept as written.
    """
    if '\\' not in text:
        return text
    out = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '\\' and i + 1 < n and text[i + 1] in _ESCAPES:
            out.append(_ESCAPES[text[i + 1]])
            i += 2
        else:
            out.append(ch)
            i += 1
    return ''.join(out)


def read_text_file(path: str) -> str:
    """Read a UTF-8 text file, replacing undecodable bytes.

    Raises:
        SourceError: If the file cannot be opened or read.
    """
    try:
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            text = f.read()
    except OSError as e:
        raise SourceError(f"Cannot read {path}: {e.strerror or e}") from e
    logger.info(f"Loaded {len(text)} characters from {path}")
    return text


def capture_script_output(command: str) -> str:
    """Run ``command`` through the shell and return its combined output.

    The output is a snapshot taken when the command exits. A non-zero exit
    status is appended as a final line.

    Raises:
        SourceError: If the command cannot be started.
    """
    try:
        result = subprocess.run(
            command,
            shell=True,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as e:
        raise SourceError(f"Cannot run {command}: {e.strerror or e}") from e
    text = result.stdout.decode('utf-8', errors='replace')
    logger.info(f"Script {command!r} exited with status {result.returncode}")
    if result.returncode != 0:
        if text and not text.endswith('\n'):
            text += '\n'
        text += f"[exit status {result.returncode}]"
    return text


def determine_title(title: Optional[str], input_file: Optional[str],
                    error_display: bool) -> str:
    """Pick the title bar text: explicit, file name, error or info."""
    if title:
        return title
    if input_file:
        return input_file
    if error_display:
        return ViewerConstants.ERROR_TITLE
    return ViewerConstants.INFO_TITLE
