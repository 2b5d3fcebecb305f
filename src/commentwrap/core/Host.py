# commentwrap/core/Host.py
"""Host Module
===========
This module defines the `EditorHost` interface: the narrow contract through
which commentwrap talks to the editor that embeds it. The core never touches
buffers, cursors, syntax trees or timers directly; every such access goes
through a host object, so the whole state machine can run against a real
editor binding or against the in-memory `BufferHost`.

Contents:
---------
- Option and event name constants shared by the core and the hosts.
- `CommentWrapError` and the two tree-access failures the classifier folds
  into an "unknown" verdict (`TreeUnavailableError`, `QueryCompileError`).
- `TimerHandle`: the cancellable handle returned by `EditorHost.defer`.
- `EditorHost`: the abstract host interface.

Nodes returned by the host are opaque to the core except for three things:
a `type` attribute (grammar category name), a `parent` attribute and
equality with other nodes of the same tree.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional


# --- Option names ---
TEXTWIDTH = "textwidth"
COMMENTS = "comments"
FORMATOPTIONS = "formatoptions"

MANAGED_OPTIONS: tuple[str, ...] = (TEXTWIDTH, COMMENTS, FORMATOPTIONS)

# --- Lifecycle events ---
EVENT_FILE_TYPE = "FileType"
EVENT_BUF_ENTER = "BufEnter"
EVENT_BUF_LEAVE = "BufLeave"
EVENT_BUF_DELETE = "BufDelete"
EVENT_CURSOR_MOVED = "CursorMoved"
EVENT_CURSOR_MOVED_I = "CursorMovedI"

# --- Key modes ---
MODE_NORMAL = "n"
MODE_INSERT = "i"


# ==================== Errors ====================
class CommentWrapError(Exception):
    """Base class for errors raised inside commentwrap."""


class TreeUnavailableError(CommentWrapError):
    """The syntax-tree provider has no parser or tree for a buffer."""


class QueryCompileError(CommentWrapError):
    """A structural query failed to compile against the buffer's grammar."""


# ==================== TimerHandle ====================
class TimerHandle:
    """Cancellable handle for a callback scheduled through `EditorHost.defer`.

    Attributes:
        due (float): Clock value (seconds) at which the callback becomes due.
        callback: Zero-argument callable to run.
        cancelled (bool): Set by `cancel()`; a cancelled handle never fires.
    """

    def __init__(self, due: float, callback: Callable[[], Any]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


# ==================== EditorHost Interface ====================
class EditorHost(ABC):
    """Abstract editor binding consumed by the commentwrap core.

    A host owns buffers, their cursors and options, the syntax trees for
    their contents, the event bus and key bindings, and a single-threaded
    timer facility. Buffer identifiers are opaque hashable values.

    Option values are plain Python values: `textwidth` is an int,
    `comments` and `formatoptions` are strings. `formatoptions` is a flag
    string and additionally supports `append_flags` / `remove_flags`.
    """

    # ---- buffers and cursor ----
    @abstractmethod
    def current_buffer(self) -> Any:
        """Returns the identifier of the buffer that currently has focus."""

    @abstractmethod
    def get_language(self, buffer: Any) -> str:
        """Returns the detected language identifier of a buffer ("" if none)."""

    @abstractmethod
    def get_cursor_position(self, buffer: Any) -> tuple[int, int]:
        """Returns the cursor as (1-based line, 0-based column)."""

    # ---- syntax tree ----
    @abstractmethod
    def get_smallest_named_node_at(
        self, buffer: Any, line: int, column: int
    ) -> Optional[Any]:
        """Returns the smallest named node spanning a 0-based position.

        Raises:
            TreeUnavailableError: No parser or tree for this buffer.
        """

    @abstractmethod
    def run_structural_query(
        self,
        buffer: Any,
        query_source: str,
        search_root: Optional[Any],
        line_window: tuple[int, int],
    ) -> list[Any]:
        """Runs a structural query and returns every captured node.

        Args:
            buffer: Buffer whose tree is searched.
            query_source: Query in the grammar's pattern language.
            search_root: Node to search under; `None` means the tree root.
            line_window: (first, last) 0-based rows to restrict the search to.

        Raises:
            QueryCompileError: The query does not compile for the grammar.
            TreeUnavailableError: No parser or tree for this buffer.
        """

    # ---- options ----
    @abstractmethod
    def get_option(self, buffer: Any, name: str) -> Any: ...

    @abstractmethod
    def set_option(self, buffer: Any, name: str, value: Any) -> None: ...

    @abstractmethod
    def append_flags(self, buffer: Any, name: str, flags: str) -> None:
        """Adds every flag character in `flags` that is not already set."""

    @abstractmethod
    def remove_flags(self, buffer: Any, name: str, flags: str) -> None:
        """Removes every flag character in `flags` from the option."""

    # ---- events, keys, timers ----
    @abstractmethod
    def subscribe(
        self, event: str, callback: Callable[[dict[str, Any]], Any], group: str
    ) -> None: ...

    @abstractmethod
    def unsubscribe(self, group: str) -> None:
        """Drops every subscription registered under `group`."""

    @abstractmethod
    def bind_key(
        self, modes: Iterable[str], key: str, callback: Callable[[], Any]
    ) -> None: ...

    @abstractmethod
    def unbind_key(self, modes: Iterable[str], key: str) -> None: ...

    @abstractmethod
    def defer(self, delay_ms: int, callback: Callable[[], Any]) -> TimerHandle:
        """Schedules `callback` on the control thread after `delay_ms`."""
