"""User configuration for the viewer.

Defaults can be overridden by a JSON file in the user's config directory
(or a path given on the command line). Bad files and bad values never stop
the viewer: they are logged and the defaults are used instead.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import ViewerConstants
from .errors import ConfigError
from .wrapping import WrapPolicy

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


@dataclass(frozen=True)
class ViewerConfig:
    """Tunable viewer settings.

    Attributes:
        cancel_exit_code: Exit code for Close / No
        confirm_exit_code: Exit code for Yes when the yes button is shown
        wrap_policy: Break long lines at words or at any character
        fallback_glyph_width: Width used for glyphs that cannot be measured
        tab_width: Cells per tab
        scroll_step: Rows moved per scroll key
        mark_continuations: Draw a marker in front of wrapped rows
        frame_timeout: Longest wait for input between frames, in seconds
    """
    cancel_exit_code: int = ViewerConstants.CANCEL_EXIT_CODE
    confirm_exit_code: int = ViewerConstants.CONFIRM_EXIT_CODE
    wrap_policy: WrapPolicy = WrapPolicy.WORD
    fallback_glyph_width: int = ViewerConstants.FALLBACK_GLYPH_WIDTH
    tab_width: int = ViewerConstants.TAB_WIDTH
    scroll_step: int = ViewerConstants.SCROLL_STEP
    mark_continuations: bool = True
    frame_timeout: float = ViewerConstants.FRAME_TIMEOUT


def default_config_path() -> Path:
    """Platform-appropriate location of the config file."""
    return Path(platformdirs.user_config_dir("tvviewer")) / CONFIG_FILENAME


def validate_setting(key: str, value: Any) -> Any:
    """Check one setting and convert it to its config type.

    Raises:
        ConfigError: If the key is unknown or the value is unusable.
    """
    # bool is an int subclass; reject it where a number is expected
    if key in ('cancel_exit_code', 'confirm_exit_code'):
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 255:
            raise ConfigError(f"{key} must be an integer between 0 and 255")
        return value
    if key in ('fallback_glyph_width', 'tab_width', 'scroll_step'):
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ConfigError(f"{key} must be a positive integer")
        return value
    if key == 'wrap_policy':
        try:
            return WrapPolicy(value)
        except ValueError:
            choices = ', '.join(p.value for p in WrapPolicy)
            raise ConfigError(f"wrap_policy must be one of: {choices}") from None
    if key == 'mark_continuations':
        if not isinstance(value, bool):
            raise ConfigError("mark_continuations must be true or false")
        return value
    if key == 'frame_timeout':
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 < value <= 1:
            raise ConfigError("frame_timeout must be a number of seconds in (0, 1]")
        return float(value)
    raise ConfigError(f"Unknown setting {key!r}")


def config_from_dict(data: Dict[str, Any], base: Optional[ViewerConfig] = None) -> ViewerConfig:
    """Build a config from ``data``, keeping ``base`` values for bad entries."""
    config = base or ViewerConfig()
    known = {f.name for f in fields(ViewerConfig)}
    updates: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting {key!r}")
            continue
        try:
            updates[key] = validate_setting(key, value)
        except ConfigError as e:
            logger.warning(f"Ignoring setting: {e}")
    return replace(config, **updates)


def load_config(path: Optional[Path] = None) -> ViewerConfig:
    """Load the viewer config.

    Args:
        path: Explicit config file. Defaults to the user config directory.

    Returns:
        The loaded config, or defaults if the file is missing or unreadable.
    """
    config_path = Path(path) if path is not None else default_config_path()
    if not config_path.exists():
        if path is not None:
            logger.warning(f"Config file {config_path} does not exist, using defaults")
        return ViewerConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not load config from {config_path}: {e}")
        return ViewerConfig()

    if not isinstance(data, dict):
        logger.warning("Config file has invalid format (not a dict), ignoring")
        return ViewerConfig()

    logger.debug(f"Loaded config from {config_path}")
    return config_from_dict(data)
