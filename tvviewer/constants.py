"""Constants and configuration defaults for the viewer."""

class ViewerConstants:
    """Central configuration constants for the viewer."""

    # Exit codes
    CANCEL_EXIT_CODE = 0  # Close / No
    CONFIRM_EXIT_CODE = 21  # Yes button, only offered with --yes_button
    USAGE_EXIT_CODE = 2  # Bad arguments or unreadable input

    # Layout
    TAB_WIDTH = 4  # Cells per tab stop
    FALLBACK_GLYPH_WIDTH = 1  # Width used when a glyph cannot be measured
    SCROLL_STEP = 1  # Rows per scroll event
    TITLE_ROWS = 1  # Title bar above the text
    BUTTON_ROWS = 1  # Button bar below the text
    SCROLLBAR_COLUMNS = 1  # Scroll indicator on the right edge
    CONTINUATION_MARKER = "↪"  # Drawn in the gutter of wrapped rows

    # Frame loop
    FRAME_TIMEOUT = 0.05  # Upper bound on one wait for input (seconds)

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize
    INTERRUPT_PIPE_MARKER = b'C'  # Byte written to pipe on SIGINT

    # Titles
    ERROR_TITLE = "Error!!"
    INFO_TITLE = "Info"

    # Button bar
    CONFIRM_BUTTONS = "Enter: Yes   Esc: No"
    CLOSE_BUTTON = "Esc: Close"
