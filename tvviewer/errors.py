"""Exception types raised by the viewer."""


class ViewerError(Exception):
    """Base class for viewer errors."""


class InvalidGeometryError(ViewerError, ValueError):
    """Display width, height or font size is not positive."""


class MeasurementError(ViewerError, LookupError):
    """A glyph width could not be resolved for a character."""

    def __init__(self, char: str):
        super().__init__(f"Cannot measure character U+{ord(char):04X}")
        self.char = char


class SourceError(ViewerError, OSError):
    """The text to view could not be read or produced."""


class ConfigError(ViewerError, ValueError):
    """A configuration value is invalid."""
