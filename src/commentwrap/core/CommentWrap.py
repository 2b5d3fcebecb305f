# commentwrap/core/CommentWrap.py
"""CommentWrap Module
==================
This module defines `CommentWrap`, the public entry point of commentwrap.
It wires the host's lifecycle events to the context classifier and the
option state machine, installs the paragraph-wrap key binding, and exposes
the status string used by status lines.

Event wiring (all under the "commentwrap" subscription group):
--------------------------------------------------------------
- FileType: apply `global_options` for the detected language.
- BufEnter: open (or re-arm) the buffer's session and evaluate the cursor
  context.
- BufLeave / BufDelete: cancel pending work, restore the buffer's options
  and discard its session.
- CursorMoved / CursorMovedI: evaluate the cursor context, debounced.

Example:
--------
    >>> host = BufferHost()
    >>> wrap = CommentWrap(host)
    >>> wrap.setup({"comment_options": {"text_width": 72}})
    >>> wrap.status
    ''
"""

import logging
from typing import Any, Optional

from commentwrap.core.ConfigResolver import ConfigResolver
from commentwrap.core.ContextClassifier import Context, ContextClassifier
from commentwrap.core.Debouncer import Debouncer
from commentwrap.core.Host import (
    EVENT_BUF_DELETE,
    EVENT_BUF_ENTER,
    EVENT_BUF_LEAVE,
    EVENT_CURSOR_MOVED,
    EVENT_CURSOR_MOVED_I,
    EVENT_FILE_TYPE,
    MODE_INSERT,
    MODE_NORMAL,
    EditorHost,
)
from commentwrap.core.OptionStateMachine import OptionStateMachine


logger = logging.getLogger("commentwrap")


# ================= CommentWrap Class ====================
class CommentWrap:
    """Comment-aware line wrapping for one editor host.

    Attributes:
        host: The `EditorHost` being managed.
        resolver: Effective configuration (`ConfigResolver`).
        classifier: `ContextClassifier` bound to the host and resolver.
        state: `OptionStateMachine` owning sessions and the enabled flag.
    """

    GROUP = "commentwrap"
    KEY_MODES: tuple[str, ...] = (MODE_INSERT, MODE_NORMAL)

    def __init__(self, host: EditorHost, config: Optional[dict[str, Any]] = None) -> None:
        self.host = host
        self._bound_keys: list[str] = []
        self._configure(config)

    def _configure(self, config: Optional[dict[str, Any]]) -> None:
        self.resolver = ConfigResolver(config)
        self.classifier = ContextClassifier(self.host, self.resolver)
        self.state = OptionStateMachine(self.host, self.resolver, self.classifier)
        self._debounced_update = Debouncer(self.host, self._update, self.resolver.debounce_ms)

    # ---------------------- Public API --------------------
    @property
    def enabled(self) -> bool:
        return self.state.enabled

    @property
    def config(self) -> dict[str, Any]:
        return self.resolver.config

    @property
    def status(self) -> str:
        """Status text for the focused buffer.

        Empty unless the cursor is in a comment; otherwise the marker and
        the active text width, with a trailing "w" while paragraph-preserving
        wrap is on, e.g. "▸74w".
        """
        if not self.enabled:
            return ""
        session = self.state.sessions.get(self.host.current_buffer())
        return session.status if session is not None else ""

    def setup(self, user_config: Optional[dict[str, Any]] = None) -> None:
        """Merges `user_config` over the defaults and enables the plugin."""
        if self.enabled:
            self.disable()
        self._configure(user_config)
        logger.info("commentwrap configured.")
        self.enable()

    def enable(self) -> None:
        """Starts managing options; calling it again has no effect."""
        if self.enabled:
            return
        self._setup_autocmds()
        self._setup_keys()
        self.state.reset()
        self.state.enabled = True
        logger.info("commentwrap enabled.")
        # A buffer may already have focus with the cursor in a comment.
        self._update()

    def disable(self) -> None:
        """Stops managing options and restores the user's values."""
        if not self.enabled:
            return
        self._debounced_update.cancel()
        self.host.unsubscribe(self.GROUP)
        self._clear_keys()
        self.state.reset()
        self.state.enabled = False
        logger.info("commentwrap disabled.")

    def reload(self) -> None:
        """Disables and re-enables with the current configuration."""
        self.disable()
        self.enable()

    def in_comment(self) -> Context:
        """Classifies the cursor position of the focused buffer."""
        buffer = self.host.current_buffer()
        if buffer is None:
            return Context.UNKNOWN
        return self.classifier.classify(buffer)

    def toggle_paragraph_wrap(self) -> bool:
        """Flips the paragraph-preserving wrap flag ("w").

        Returns:
            True if the flag is now set; False when it was cleared or the
            plugin is disabled.
        """
        if not self.enabled:
            return False
        buffer = self.host.current_buffer()
        if buffer is None:
            return False
        return self.state.toggle_paragraph_wrap(buffer)

    # ---------------------- Lifecycle glue --------------------
    def _update(self, buffer: Any = None) -> None:
        if not self.enabled:
            return
        if buffer is None:
            buffer = self.host.current_buffer()
            if buffer is None:
                return
        self.state.on_potential_context_change(buffer)

    def _on_file_type(self, event: dict[str, Any]) -> None:
        buffer = event["buffer"]
        language = event.get("match") or self.host.get_language(buffer)
        self.state.apply_global_options(buffer, language)

    def _on_buf_enter(self, event: dict[str, Any]) -> None:
        buffer = event["buffer"]
        # Forget the last verdict but keep any snapshot still held.
        self.state.session(buffer).last_context = None
        self._update(buffer)

    def _on_buf_leave(self, event: dict[str, Any]) -> None:
        self._debounced_update.cancel()
        self.state.leave(event["buffer"])

    def _on_cursor_moved(self, event: dict[str, Any]) -> None:
        self._debounced_update(event["buffer"])

    def _setup_autocmds(self) -> None:
        self.host.unsubscribe(self.GROUP)
        handlers = (
            (EVENT_FILE_TYPE, self._on_file_type),
            (EVENT_BUF_ENTER, self._on_buf_enter),
            (EVENT_BUF_LEAVE, self._on_buf_leave),
            (EVENT_BUF_DELETE, self._on_buf_leave),
            (EVENT_CURSOR_MOVED, self._on_cursor_moved),
            (EVENT_CURSOR_MOVED_I, self._on_cursor_moved),
        )
        for event, handler in handlers:
            self.host.subscribe(event, handler, self.GROUP)

    def _setup_keys(self) -> None:
        key = self.resolver.key_bindings.get("toggle_paragraph_wrap")
        if not key:
            return
        try:
            self.host.bind_key(self.KEY_MODES, key, self.toggle_paragraph_wrap)
        except ValueError as e:
            logger.error("Could not bind toggle_paragraph_wrap to %r: %s", key, e)
            return
        self._bound_keys.append(key)

    def _clear_keys(self) -> None:
        for key in self._bound_keys:
            try:
                self.host.unbind_key(self.KEY_MODES, key)
            except ValueError as e:
                logger.error("Could not unbind %r: %s", key, e)
        self._bound_keys = []
