# commentwrap/utils/utils.py
"""
commentwrap.utils.utils
=======================

Small helpers shared across commentwrap.

- Configuration Loading: reads the user's `config.toml` (by default
  `~/.config/commentwrap/config.toml`) so an embedding editor can pass it
  straight to `CommentWrap.setup()`. A missing or broken file never stops
  the plugin: it is logged and an empty configuration is returned, which
  leaves the built-in defaults in force.
- Dictionary Merging: recursive merge used to layer user configuration
  and per-language overrides over the defaults.
- Flag Strings: tiny helpers for editing single-character flag strings
  such as `formatoptions`.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import toml

logger = logging.getLogger("commentwrap")


def default_config_path() -> Path:
    """Location of the user's configuration file."""
    return Path.home() / ".config" / "commentwrap" / "config.toml"


def load_user_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Loads the user's TOML configuration.

    Matchers are referenced by registered name in TOML, e.g.::

        [comment_options]
        text_width = 72
        format_behavior = { add = "tcq", remove = "l" }

        [comment_options.language_overrides.python]
        matcher = "python"

    Args:
        path: File to read; defaults to `default_config_path()`.

    Returns:
        The parsed configuration, or `{}` when the file is missing or cannot
        be parsed.
    """
    config_path = Path(path).expanduser() if path else default_config_path()
    if not config_path.is_file():
        logger.debug(f"No user config at {config_path}; using defaults.")
        return {}
    try:
        user_config = toml.load(config_path)
    except Exception as e:
        logger.error(f"Could not parse user config '{config_path}': {e}. Using defaults.")
        return {}
    logger.info(f"Loaded user config from {config_path}")
    return user_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def add_flags(current: str, flags: str) -> str:
    """Appends every character of `flags` missing from `current`."""
    result = current or ""
    for ch in flags:
        if ch not in result:
            result += ch
    return result


def strip_flags(current: str, flags: str) -> str:
    """Removes every character of `flags` from `current`."""
    return "".join(ch for ch in (current or "") if ch not in flags)
