"""Source buffer and logical line index."""

from typing import NamedTuple


class LogicalLine(NamedTuple):
    """A span of the source between hard line breaks.

    ``start`` and ``end`` are codepoint offsets into the source buffer; the
    range is half-open and never includes the ``\\n`` terminator.
    """
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


def normalize_newlines(text: str) -> str:
    """Replace CRLF pairs with a single LF."""
    if "\r\n" not in text:
        return text
    return text.replace("\r\n", "\n")


def build_line_index(buffer: str) -> list[LogicalLine]:
    """Split ``buffer`` into logical lines on ``\\n``.

    A trailing unterminated segment is still a line, and a buffer ending in
    ``\\n`` gets a final empty line. An empty buffer yields one empty line.
    """
    lines: list[LogicalLine] = []
    start = 0
    find = buffer.find
    while True:
        end = find("\n", start)
        if end < 0:
            lines.append(LogicalLine(start, len(buffer)))
            return lines
        lines.append(LogicalLine(start, end))
        start = end + 1


class TextDocument:
    """Immutable text being viewed, plus its logical line index.

    Built once per session. Nothing in the viewer mutates ``text`` or
    ``lines`` after construction.
    """

    def __init__(self, text: str, live_output: bool = False):
        self._text = normalize_newlines(text)
        self._lines = tuple(build_line_index(self._text))
        self.live_output = live_output

    @property
    def text(self) -> str:
        return self._text

    @property
    def lines(self) -> tuple[LogicalLine, ...]:
        return self._lines

    def line_text(self, line_index: int) -> str:
        line = self._lines[line_index]
        return self._text[line.start:line.end]

    def __len__(self) -> int:
        return len(self._lines)
