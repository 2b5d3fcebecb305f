# commentwrap/core/ConfigResolver.py
"""ConfigResolver Module
=====================
This module owns the effective configuration of commentwrap. It merges the
user's configuration over the built-in defaults once, at setup time, and
then answers "which options apply to this buffer" by layering the
per-language override over the shared base set.

Two option sets exist:

- `comment_options`: applied while the cursor is inside a comment.
- `global_options`: applied once when a buffer's language is detected,
  a convenient way to override what the editor's language support sets.

Each set may carry `text_width`, `format_behavior`, `comment_continuation`
and `matcher`, plus a `language_overrides` map of partial sets keyed by
language identifier.

`format_behavior` is either a complete flag string that replaces the
host's flags, or a dict `{"add": ..., "remove": ...}` applied on top of the
host's current flags. When a flag appears in both `add` and `remove`, the
removal wins.

The resolver never performs I/O and never raises on bad user values: they
are logged and replaced with the defaults.
"""

import copy
import logging
from typing import Any, Optional

from commentwrap.core.Matchers import get_matcher
from commentwrap.utils.utils import deep_merge


logger = logging.getLogger("commentwrap.config")

NAMESPACES: tuple[str, ...] = ("comment_options", "global_options")

OPTION_KEYS: tuple[str, ...] = (
    "text_width",
    "format_behavior",
    "comment_continuation",
    "matcher",
)

DEFAULT_TEXT_WIDTH = 74

# Built-in defaults. Never mutated: every resolver works on a deep copy.
DEFAULT_CONFIG: dict[str, Any] = {
    "key_bindings": {
        # Set to "" to disable.
        "toggle_paragraph_wrap": "<C-k>",
    },
    "comment_options": {
        "text_width": DEFAULT_TEXT_WIDTH,
        # A plain string replaces the flags instead of editing them.
        "format_behavior": {"add": "tnjwrcaq", "remove": "l"},
        "comment_continuation": None,
        "matcher": "generic",
        "language_overrides": {
            "python": {
                "comment_continuation": 'b:#,b:##,sfl-3:""",mb: ,e-3:"""',
                "matcher": "python",
            },
        },
    },
    "global_options": {
        "language_overrides": {},
    },
    "debounce_ms": 100,
    "status_marker": "▸",
}


def normalize_flags(flags: Any) -> str:
    """Returns the unique single-character flags of `flags`, in order.

    Accepts a string or any iterable of strings; `None` becomes "".
    """
    if flags is None:
        return ""
    seen: list[str] = []
    for item in flags:
        for ch in str(item):
            if ch not in seen and not ch.isspace():
                seen.append(ch)
    return "".join(seen)


def normalize_format_behavior(value: Any, partial: bool = False) -> Any:
    """Normalises a `format_behavior` value to a str, a pair dict or None.

    With `partial` set, a dict keeps only the keys it names, so that a
    language override merges over the base pair instead of clearing it.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, dict):
        keys = [k for k in ("add", "remove") if k in value] if partial else ["add", "remove"]
        return {k: normalize_flags(value.get(k)) for k in keys}
    logger.warning(
        "Ignoring format_behavior of unsupported type %s.", type(value).__name__
    )
    return None


# ================= ConfigResolver Class ====================
class ConfigResolver:
    """Effective configuration plus per-language option resolution.

    Attributes:
        config (dict): The merged configuration. `toggle_paragraph_wrap`
            edits `config["comment_options"]["format_behavior"]` in place so
            the toggle survives later context transitions.
    """

    def __init__(self, user_config: Optional[dict[str, Any]] = None) -> None:
        merged = deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config or {})
        # deep_merge shares nested values of the override; own everything.
        self.config: dict[str, Any] = copy.deepcopy(merged)
        self._validate()

    def _validate(self) -> None:
        for namespace in NAMESPACES:
            section = self.config.setdefault(namespace, {})
            if not isinstance(section, dict):
                logger.error(
                    "Config section '%s' must be a table, got %s. Using defaults.",
                    namespace,
                    type(section).__name__,
                )
                section = copy.deepcopy(DEFAULT_CONFIG[namespace])
                self.config[namespace] = section
            self._validate_options(namespace, section, is_base=True)

            overrides = section.setdefault("language_overrides", {})
            if not isinstance(overrides, dict):
                logger.error("'%s.language_overrides' must be a table; ignoring it.", namespace)
                section["language_overrides"] = {}
                continue
            for language, partial in list(overrides.items()):
                if not isinstance(partial, dict):
                    logger.error(
                        "Override for language '%s' in '%s' is not a table; ignoring it.",
                        language,
                        namespace,
                    )
                    del overrides[language]
                    continue
                self._validate_options(f"{namespace}.{language}", partial, is_base=False)

        try:
            debounce = int(self.config.get("debounce_ms", 100))
        except (TypeError, ValueError):
            debounce = -1
        if debounce < 0:
            logger.error("Invalid debounce_ms %r; using 100.", self.config.get("debounce_ms"))
            debounce = 100
        self.config["debounce_ms"] = debounce

        if not isinstance(self.config.get("key_bindings"), dict):
            self.config["key_bindings"] = {}

    def _validate_options(self, where: str, options: dict[str, Any], is_base: bool) -> None:
        if "text_width" in options and options["text_width"] is not None:
            width = options["text_width"]
            if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
                logger.error(
                    "Invalid text_width %r in '%s'; must be a positive integer.", width, where
                )
                if is_base and where == "comment_options":
                    options["text_width"] = DEFAULT_TEXT_WIDTH
                else:
                    del options["text_width"]
        if "format_behavior" in options:
            options["format_behavior"] = normalize_format_behavior(
                options["format_behavior"], partial=not is_base
            )

    # ---------------------- Resolution --------------------
    def resolve(self, namespace: str, language: Optional[str]) -> dict[str, Any]:
        """Returns the options of `namespace` for a buffer language.

        The language override, if any, is deep-merged over the base set and
        the `matcher` entry is resolved to a callable.

        Args:
            namespace: "comment_options" or "global_options".
            language: Language identifier of the buffer ("" or None for none).

        Returns:
            dict with the keys of `OPTION_KEYS`; absent values are None.
        """
        if namespace not in NAMESPACES:
            raise ValueError(f"Unknown option namespace: {namespace!r}")
        section = self.config[namespace]
        options = {key: section.get(key) for key in OPTION_KEYS}

        override = section.get("language_overrides", {}).get(language or "")
        if override:
            options = deep_merge(options, {k: v for k, v in override.items() if k in OPTION_KEYS})

        options["format_behavior"] = copy.deepcopy(options["format_behavior"])
        options["matcher"] = get_matcher(options["matcher"])
        return options

    # ---------------------- Accessors --------------------
    @property
    def debounce_ms(self) -> int:
        return self.config["debounce_ms"]

    @property
    def status_marker(self) -> str:
        return str(self.config.get("status_marker", "▸"))

    @property
    def key_bindings(self) -> dict[str, Any]:
        return self.config["key_bindings"]
