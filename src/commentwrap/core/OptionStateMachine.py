# commentwrap/core/OptionStateMachine.py
"""OptionStateMachine Module
=========================
This module holds the only code in commentwrap that writes the host's
formatting options. It tracks, per buffer, the last classification and a
snapshot of the user's own option values, and switches between the
"comment" and "code" option sets only when the classification changes.

Guarantees:
-----------
- Work avoidance: re-evaluating an unchanged context costs one
  classification and nothing else.
- Snapshot integrity: a snapshot is taken on entering a comment only when
  none is held, and restoring always returns exactly the captured values.
- Fail safe: an "unknown" verdict restores the snapshot just like "not in a
  comment"; comment options are never left applied on uncertain context.
- No exception escapes: failing host option calls are logged and skipped.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from commentwrap.core.ContextClassifier import Context, ContextClassifier, describe
from commentwrap.core.Host import (
    COMMENTS,
    FORMATOPTIONS,
    MANAGED_OPTIONS,
    TEXTWIDTH,
    EditorHost,
)
from commentwrap.utils.logging_config import TRANSITION_LOGGER
from commentwrap.utils.utils import add_flags, strip_flags


if TYPE_CHECKING:
    from commentwrap.core.ConfigResolver import ConfigResolver


logger = logging.getLogger("commentwrap.state")

PARAGRAPH_WRAP_FLAG = "w"


class BufferSession:
    """Per-buffer state owned by the state machine.

    Attributes:
        previous_options (dict | None): Host option values captured before
            the first entry into a comment; None when no snapshot is held.
        last_context (Context | None): Last classification; None before the
            first evaluation.
        status (str): Status string for this buffer.
    """

    def __init__(self) -> None:
        self.previous_options: Optional[dict[str, Any]] = None
        self.last_context: Optional[Context] = None
        self.status: str = ""


# ================= OptionStateMachine Class ====================
class OptionStateMachine:
    """Applies and restores managed options on context transitions.

    Attributes:
        host: The `EditorHost` whose options are managed.
        resolver: The `ConfigResolver` supplying option sets.
        classifier: The `ContextClassifier` producing verdicts.
        enabled (bool): Process-wide switch; nothing happens while False.
        sessions (dict): Buffer identifier -> `BufferSession`.
    """

    def __init__(
        self,
        host: EditorHost,
        resolver: "ConfigResolver",
        classifier: ContextClassifier,
    ) -> None:
        self.host = host
        self.resolver = resolver
        self.classifier = classifier
        self.enabled = False
        self.sessions: dict[Any, BufferSession] = {}

    def session(self, buffer: Any) -> BufferSession:
        """Returns the session of `buffer`, creating it if needed."""
        if buffer not in self.sessions:
            self.sessions[buffer] = BufferSession()
        return self.sessions[buffer]

    # ---------------------- Transitions --------------------
    def on_potential_context_change(self, buffer: Any) -> Optional[Context]:
        """Re-evaluates the cursor context of `buffer`.

        Returns:
            The new context when a transition happened, otherwise None.
        """
        if not self.enabled:
            return None

        context = self.classifier.classify(buffer)
        session = self.session(buffer)
        if context == session.last_context:
            return None

        TRANSITION_LOGGER.debug(
            "buffer=%r %s -> %s", buffer, describe(session.last_context), describe(context)
        )
        session.last_context = context

        if context is Context.IN_COMMENT:
            if session.previous_options is None:
                self.capture(buffer)
            options = self.resolver.resolve("comment_options", self.host.get_language(buffer))
            self.apply(buffer, options)
            session.status = self.status_string(buffer)
        else:
            self.restore(buffer)
            session.status = ""
        return context

    def leave(self, buffer: Any) -> None:
        """Restores `buffer` and discards its session."""
        self.restore(buffer)
        self.sessions.pop(buffer, None)

    def reset(self) -> None:
        """Restores every held snapshot and clears all sessions."""
        for buffer in list(self.sessions):
            self.restore(buffer)
        self.sessions.clear()

    # ---------------------- Option access --------------------
    def capture(self, buffer: Any) -> None:
        """Snapshots the managed host options of `buffer`."""
        snapshot: dict[str, Any] = {}
        for name in MANAGED_OPTIONS:
            try:
                snapshot[name] = self.host.get_option(buffer, name)
            except Exception:
                logger.error("Could not read option '%s' of buffer %r.", name, buffer, exc_info=True)
        self.session(buffer).previous_options = snapshot
        logger.debug("Captured options of buffer %r: %s", buffer, snapshot)

    def restore(self, buffer: Any) -> None:
        """Writes the snapshot of `buffer` back and clears it (if held)."""
        session = self.sessions.get(buffer)
        if session is None or session.previous_options is None:
            return
        snapshot = session.previous_options
        session.previous_options = None
        # formatoptions first: some hosts re-derive comments from it.
        for name in (FORMATOPTIONS, TEXTWIDTH, COMMENTS):
            if name in snapshot:
                self._call(self.host.set_option, buffer, name, snapshot[name])
        logger.debug("Restored options of buffer %r: %s", buffer, snapshot)

    def apply(self, buffer: Any, options: dict[str, Any]) -> None:
        """Applies a resolved option set to `buffer`.

        `None` entries are skipped and an empty `comment_continuation`
        leaves the host value alone. A string `format_behavior` replaces
        the flags; an add/remove pair edits them, removal last.
        """
        if options.get("text_width") is not None:
            self._call(self.host.set_option, buffer, TEXTWIDTH, options["text_width"])

        if options.get("comment_continuation"):
            self._call(self.host.set_option, buffer, COMMENTS, options["comment_continuation"])

        behavior = options.get("format_behavior")
        if isinstance(behavior, str):
            self._call(self.host.set_option, buffer, FORMATOPTIONS, behavior)
        elif isinstance(behavior, dict):
            if behavior.get("add"):
                self._call(self.host.append_flags, buffer, FORMATOPTIONS, behavior["add"])
            if behavior.get("remove"):
                self._call(self.host.remove_flags, buffer, FORMATOPTIONS, behavior["remove"])

    def apply_global_options(self, buffer: Any, language: str) -> None:
        """Applies the `global_options` set for a newly detected language."""
        if not self.enabled:
            return
        options = self.resolver.resolve("global_options", language)
        logger.debug("Applying global options for language '%s' to buffer %r.", language, buffer)
        self.apply(buffer, options)

    # ---------------------- Status & toggles --------------------
    def status_string(self, buffer: Any) -> str:
        """Builds the status text for `buffer` from the live option values."""
        session = self.sessions.get(buffer)
        if session is None or session.last_context is not Context.IN_COMMENT:
            return ""
        try:
            width = self.host.get_option(buffer, TEXTWIDTH)
            flags = self.host.get_option(buffer, FORMATOPTIONS) or ""
        except Exception:
            logger.error("Could not read options of buffer %r for status.", buffer, exc_info=True)
            return ""
        status = f"{self.resolver.status_marker}{width}"
        if PARAGRAPH_WRAP_FLAG in flags:
            status += PARAGRAPH_WRAP_FLAG
        return status

    def toggle_paragraph_wrap(self, buffer: Any) -> bool:
        """Flips the paragraph-preserving wrap flag.

        The flag is flipped in the live host option and in the comment
        option defaults, so the choice carries over to later comment
        entries. Only the base `comment_options.format_behavior` is edited:
        a language override with its own `format_behavior` replaces the
        toggled value on the next comment entry.

        Returns:
            True if the flag is now set.
        """
        try:
            flags = self.host.get_option(buffer, FORMATOPTIONS) or ""
        except Exception:
            logger.error("Could not read formatoptions of buffer %r.", buffer, exc_info=True)
            return False

        comment_options = self.resolver.config["comment_options"]
        behavior = comment_options.get("format_behavior")
        turning_on = PARAGRAPH_WRAP_FLAG not in flags

        if turning_on:
            self._call(self.host.append_flags, buffer, FORMATOPTIONS, PARAGRAPH_WRAP_FLAG)
            if isinstance(behavior, str):
                comment_options["format_behavior"] = add_flags(behavior, PARAGRAPH_WRAP_FLAG)
            elif isinstance(behavior, dict):
                behavior["add"] = add_flags(behavior.get("add", ""), PARAGRAPH_WRAP_FLAG)
                # Removal wins over addition, so it must not list the flag.
                behavior["remove"] = strip_flags(behavior.get("remove", ""), PARAGRAPH_WRAP_FLAG)
            else:
                comment_options["format_behavior"] = {"add": PARAGRAPH_WRAP_FLAG, "remove": ""}
        else:
            self._call(self.host.remove_flags, buffer, FORMATOPTIONS, PARAGRAPH_WRAP_FLAG)
            if isinstance(behavior, str):
                comment_options["format_behavior"] = strip_flags(behavior, PARAGRAPH_WRAP_FLAG)
            elif isinstance(behavior, dict):
                behavior["add"] = strip_flags(behavior.get("add", ""), PARAGRAPH_WRAP_FLAG)

        logger.info("Paragraph wrap %s.", "enabled" if turning_on else "disabled")
        session = self.sessions.get(buffer)
        if session is not None:
            session.status = self.status_string(buffer)
        return turning_on

    def _call(self, fn: Callable[..., Any], *args: Any) -> None:
        try:
            fn(*args)
        except Exception:
            logger.error("Host call %s%r failed.", getattr(fn, "__name__", fn), args, exc_info=True)
