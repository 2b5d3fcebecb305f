# commentwrap/core/BufferHost.py
"""BufferHost Module
=================
This module provides `BufferHost`, a headless, in-memory implementation of
the `EditorHost` interface. It models just enough of an editor for
commentwrap to run: numbered buffers holding lines of text, one cursor per
buffer, per-buffer option values, an event bus, mode-aware key bindings and
a single-threaded timer queue.

Key Features:
-------------
- Language detection with Pygments: by file name first, then by content,
  falling back to plain text. Detection fires the `FileType` event.
- Syntax trees from `TreeSitterBridge`; any object with the same
  `named_node_at` / `captures` / `forget` methods can stand in for it.
- Lifecycle events (`BufEnter`, `BufLeave`, `BufDelete`, `CursorMoved`,
  `CursorMovedI`, `FileType`) dispatched synchronously to subscribers
  grouped by name, so a plugin can drop all of its handlers at once.
- Deferred callbacks driven by `process_timers()`, which the embedding
  main loop calls once per tick. The clock is injectable so tests can
  advance time by hand.

Intended Usage:
---------------
Embed it as the host of a `CommentWrap` instance, feed it text and cursor
motions, and read the managed options back:

    >>> host = BufferHost()
    >>> buf = host.open_buffer("example.py", "# a comment\\nx = 1\\n")
    >>> wrap = CommentWrap(host)
    >>> wrap.setup()
"""

import logging
import time
from typing import Any, Callable, Iterable, Optional

from pygments.lexers import get_lexer_for_filename, guess_lexer
from pygments.util import ClassNotFound

from commentwrap.core.Host import (
    COMMENTS,
    EVENT_BUF_DELETE,
    EVENT_BUF_ENTER,
    EVENT_BUF_LEAVE,
    EVENT_CURSOR_MOVED,
    EVENT_CURSOR_MOVED_I,
    EVENT_FILE_TYPE,
    FORMATOPTIONS,
    MODE_INSERT,
    MODE_NORMAL,
    TEXTWIDTH,
    EditorHost,
    TimerHandle,
    TreeUnavailableError,
)
from commentwrap.integrations import TreeSitterBridge as _ts_bridge
from commentwrap.ui.KeyBinder import KeyBinder
from commentwrap.utils.utils import add_flags, strip_flags


logger = logging.getLogger("commentwrap.host")

PLAIN_TEXT = "text"


class Buffer:
    """One open buffer.

    Attributes:
        number (int): Buffer identifier.
        name (str): File name ("" for an unnamed buffer).
        lines (list[str]): Text, one entry per line, without newlines.
        language (str): Detected or assigned language identifier.
        cursor (tuple[int, int]): (1-based line, 0-based column).
        options (dict): Option name -> value.
    """

    def __init__(
        self, number: int, name: str, lines: list[str], language: str, options: dict[str, Any]
    ) -> None:
        self.number = number
        self.name = name
        self.lines = lines or [""]
        self.language = language
        self.cursor: tuple[int, int] = (1, 0)
        self.options = options


# ================= BufferHost Class ====================
class BufferHost(EditorHost):
    """In-memory editor host.

    Attributes:
        syntax: Syntax-tree provider (a `TreeSitterBridge` by default).
        clock: Zero-argument callable returning seconds (monotonic).
        buffers (dict[int, Buffer]): Open buffers by number.
        key_binder (KeyBinder): Key binding table.
        mode (str): Current key mode, "n" or "i".
    """

    DEFAULT_OPTIONS: dict[str, Any] = {
        TEXTWIDTH: 0,
        COMMENTS: "s1:/*,mb:*,ex:*/,://,b:#,:%,:XCOMM,n:>,fb:-",
        FORMATOPTIONS: "tcqj",
    }

    def __init__(
        self,
        syntax: Optional[Any] = None,
        clock: Callable[[], float] = time.monotonic,
        default_options: Optional[dict[str, Any]] = None,
    ) -> None:
        self.syntax = syntax if syntax is not None else _ts_bridge.TreeSitterBridge()
        self.clock = clock
        self.default_options = dict(self.DEFAULT_OPTIONS)
        if default_options:
            self.default_options.update(default_options)
        self.buffers: dict[int, Buffer] = {}
        self.key_binder = KeyBinder()
        self.mode = MODE_NORMAL
        self._current: Optional[int] = None
        self._next_number = 1
        self._subscriptions: list[tuple[str, str, Callable[[dict[str, Any]], Any]]] = []
        self._timers: list[TimerHandle] = []

    # ---------------------- Buffer management --------------------
    def open_buffer(
        self,
        name: str = "",
        text: str = "",
        language: Optional[str] = None,
        enter: bool = True,
    ) -> int:
        """Creates a buffer, detects its language and optionally focuses it.

        Fires `FileType` once the language is known, then `BufEnter` (and
        `BufLeave` for the previously focused buffer) when `enter` is set.

        Returns:
            The new buffer number.
        """
        number = self._next_number
        self._next_number += 1
        lines = text.split("\n")
        detected = language if language is not None else self.detect_language(name, text)
        self.buffers[number] = Buffer(number, name, lines, detected, dict(self.default_options))
        logger.debug("Opened buffer %d '%s' (language=%s).", number, name, detected)

        self._fire(EVENT_FILE_TYPE, number, match=detected)
        if enter:
            self.enter_buffer(number)
        return number

    def detect_language(self, name: str, text: str) -> str:
        """Detects a language identifier with Pygments.

        Priority: file name, then content, then plain text.
        """
        if name:
            try:
                lexer = get_lexer_for_filename(name)
                logger.debug(f"Pygments: Detected '{lexer.name}' by filename.")
                return self._language_id(lexer)
            except ClassNotFound:
                logger.debug(f"Pygments: No lexer for filename '{name}'.")

        sample = text[:10000]
        if sample.strip():
            try:
                lexer = guess_lexer(sample)
                logger.debug(f"Pygments: Guessed '{lexer.name}' by content.")
                return self._language_id(lexer)
            except ClassNotFound:
                logger.debug("Pygments: Content guess failed.")

        return PLAIN_TEXT

    @staticmethod
    def _language_id(lexer: Any) -> str:
        aliases = getattr(lexer, "aliases", None) or []
        return aliases[0] if aliases else lexer.name.lower()

    def enter_buffer(self, buffer: int) -> None:
        """Focuses a buffer, firing `BufLeave` then `BufEnter`."""
        self._buffer(buffer)
        if self._current == buffer:
            return
        if self._current is not None:
            self._fire(EVENT_BUF_LEAVE, self._current)
        self._current = buffer
        self._fire(EVENT_BUF_ENTER, buffer)

    def close_buffer(self, buffer: int) -> None:
        """Closes a buffer; focus moves to the lowest remaining number."""
        self._buffer(buffer)
        was_current = self._current == buffer
        if was_current:
            self._fire(EVENT_BUF_LEAVE, buffer)
            self._current = None
        self._fire(EVENT_BUF_DELETE, buffer)
        del self.buffers[buffer]
        self.syntax.forget(buffer)
        if was_current and self.buffers:
            self.enter_buffer(min(self.buffers))

    def set_text(self, buffer: int, text: str) -> None:
        self._buffer(buffer).lines = text.split("\n")

    def set_language(self, buffer: int, language: str) -> None:
        """Changes the language of a buffer and fires `FileType`."""
        self._buffer(buffer).language = language
        self._fire(EVENT_FILE_TYPE, buffer, match=language)

    def set_cursor(self, buffer: int, line: int, column: int, insert: bool = False) -> None:
        """Moves the cursor (1-based line) and fires the motion event."""
        buf = self._buffer(buffer)
        line = min(max(line, 1), len(buf.lines))
        column = min(max(column, 0), len(buf.lines[line - 1]))
        buf.cursor = (line, column)
        self.mode = MODE_INSERT if insert else MODE_NORMAL
        self._fire(EVENT_CURSOR_MOVED_I if insert else EVENT_CURSOR_MOVED, buffer)

    def press_key(self, key: str, mode: Optional[str] = None) -> bool:
        """Dispatches a key press to the bound callback, if any."""
        return self.key_binder.handle_input(mode or self.mode, key)

    def _buffer(self, buffer: Any) -> Buffer:
        try:
            return self.buffers[buffer]
        except KeyError:
            raise KeyError(f"No such buffer: {buffer!r}") from None

    # ---------------------- Timers --------------------
    def process_timers(self) -> int:
        """Runs every deferred callback that is due.

        Returns:
            The number of callbacks run.
        """
        now = self.clock()
        due = sorted(
            (t for t in self._timers if not t.cancelled and t.due <= now), key=lambda t: t.due
        )
        self._timers = [t for t in self._timers if not t.cancelled and t.due > now]
        ran = 0
        for timer in due:
            if timer.cancelled:
                continue
            try:
                timer.callback()
            except Exception:
                logger.error("Deferred callback failed.", exc_info=True)
            ran += 1
        return ran

    @property
    def pending_timers(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    # ---------------------- Events --------------------
    def _fire(self, event: str, buffer: Any, match: Optional[str] = None) -> None:
        payload = {"event": event, "buffer": buffer, "match": match}
        for name, _group, callback in list(self._subscriptions):
            if name != event:
                continue
            try:
                callback(payload)
            except Exception:
                logger.error("Handler for %s failed.", event, exc_info=True)

    # ---------------------- EditorHost --------------------
    def current_buffer(self) -> Optional[int]:
        return self._current

    def get_language(self, buffer: Any) -> str:
        return self._buffer(buffer).language

    def get_cursor_position(self, buffer: Any) -> tuple[int, int]:
        return self._buffer(buffer).cursor

    def get_smallest_named_node_at(self, buffer: Any, line: int, column: int) -> Optional[Any]:
        buf = self.buffers.get(buffer)
        if buf is None:
            raise TreeUnavailableError(f"No such buffer: {buffer!r}")
        node = self.syntax.named_node_at(buffer, buf.language, buf.lines, line, column)
        logger.debug("Node at %d:%d in buffer %r: %s", line, column, buffer, _ts_bridge.node_label(node))
        return node

    def run_structural_query(
        self,
        buffer: Any,
        query_source: str,
        search_root: Optional[Any],
        line_window: tuple[int, int],
    ) -> list[Any]:
        buf = self.buffers.get(buffer)
        if buf is None:
            raise TreeUnavailableError(f"No such buffer: {buffer!r}")
        return self.syntax.captures(
            buffer, buf.language, buf.lines, query_source, search_root, line_window
        )

    def get_option(self, buffer: Any, name: str) -> Any:
        return self._buffer(buffer).options[name]

    def set_option(self, buffer: Any, name: str, value: Any) -> None:
        self._buffer(buffer).options[name] = value

    def append_flags(self, buffer: Any, name: str, flags: str) -> None:
        options = self._buffer(buffer).options
        options[name] = add_flags(options.get(name, ""), flags)

    def remove_flags(self, buffer: Any, name: str, flags: str) -> None:
        options = self._buffer(buffer).options
        options[name] = strip_flags(options.get(name, ""), flags)

    def subscribe(self, event: str, callback: Callable[[dict[str, Any]], Any], group: str) -> None:
        self._subscriptions.append((event, group, callback))

    def unsubscribe(self, group: str) -> None:
        self._subscriptions = [s for s in self._subscriptions if s[1] != group]

    def subscriptions(self, group: Optional[str] = None) -> list[str]:
        """Event names subscribed (optionally within one group)."""
        return [event for event, g, _ in self._subscriptions if group is None or g == group]

    def bind_key(self, modes: Iterable[str], key: str, callback: Callable[[], Any]) -> None:
        self.key_binder.bind(modes, key, callback)

    def unbind_key(self, modes: Iterable[str], key: str) -> None:
        self.key_binder.unbind(modes, key)

    def defer(self, delay_ms: int, callback: Callable[[], Any]) -> TimerHandle:
        handle = TimerHandle(self.clock() + max(0, delay_ms) / 1000.0, callback)
        self._timers.append(handle)
        return handle
