# commentwrap/core/ContextClassifier.py
"""ContextClassifier Module
========================
This module decides whether the cursor of a buffer currently sits inside a
"comment-like" region. It is the only place where the host's syntax tree is
consulted, and the only place where tree-access failures are caught.

Key Features:
-------------
- Tri-state verdict (`Context`): in a comment, not in a comment, or unknown.
  "Unknown" is produced only when the tree provider fails and is kept
  distinct from "not in a comment" for logging and testing.
- One column look-behind: the node is looked up at the column just before
  the cursor, so a cursor resting at the end of a comment line still finds
  the comment instead of the enclosing block.
- Pluggable, per-language matchers resolved through `ConfigResolver`.
"""

import enum
import logging
from typing import TYPE_CHECKING, Any, Optional

from commentwrap.core.Host import (
    EditorHost,
    QueryCompileError,
    TreeUnavailableError,
)
from commentwrap.core.Matchers import matcher_name


if TYPE_CHECKING:
    from commentwrap.core.ConfigResolver import ConfigResolver


logger = logging.getLogger("commentwrap.classifier")


class Context(enum.Enum):
    """Classification of a cursor position."""

    IN_COMMENT = "in_comment"
    NOT_IN_COMMENT = "not_in_comment"
    UNKNOWN = "unknown"


# ================= ContextClassifier Class ====================
class ContextClassifier:
    """Classifies the cursor position of a buffer.

    Attributes:
        host: The `EditorHost` providing cursor and syntax-tree access.
        resolver: The `ConfigResolver` used to pick the matcher for the
            buffer's language.
    """

    # Rows searched on either side of the cursor row by structural queries.
    QUERY_LINE_MARGIN = 1

    def __init__(self, host: EditorHost, resolver: "ConfigResolver") -> None:
        self.host = host
        self.resolver = resolver

    def classify(self, buffer: Any) -> Context:
        """Classifies the cursor position of `buffer`.

        Steps:
        1. Read the cursor and convert the host's 1-based line to 0-based.
        2. Find the smallest named node one column before the cursor.
        3. No node means "not in a comment".
        4. Run the matcher configured for the buffer's language.

        Any failure reaching the syntax tree, whether in the lookup or in a
        query issued by the matcher, yields `Context.UNKNOWN`.

        Args:
            buffer: Host buffer identifier.

        Returns:
            The `Context` verdict.
        """
        try:
            line, column = self._cursor(buffer)
            node = self.host.get_smallest_named_node_at(
                buffer, line, max(0, column - 1)
            )
            if node is None:
                return Context.NOT_IN_COMMENT

            options = self.resolver.resolve("comment_options", self.host.get_language(buffer))
            matcher = options["matcher"]
            logger.debug(
                "classify: buffer=%r node=%s matcher=%s",
                buffer,
                getattr(node, "type", "?"),
                matcher_name(matcher) or getattr(matcher, "__name__", repr(matcher)),
            )
            matched = matcher(node, buffer, self)
        except (TreeUnavailableError, QueryCompileError) as e:
            logger.debug("classify: tree access failed for buffer %r: %s", buffer, e)
            return Context.UNKNOWN
        except Exception:
            logger.warning(
                "classify: unexpected failure for buffer %r", buffer, exc_info=True
            )
            return Context.UNKNOWN

        return Context.IN_COMMENT if matched else Context.NOT_IN_COMMENT

    def query_contains_node(self, buffer: Any, query_source: str, node: Any) -> bool:
        """Returns whether `query_source` captures `node` near the cursor.

        The search is restricted to the cursor row plus `QUERY_LINE_MARGIN`
        rows on either side.

        Raises:
            QueryCompileError: Propagated from the host.
            TreeUnavailableError: Propagated from the host.
        """
        row, _ = self._cursor(buffer)
        window = (max(0, row - self.QUERY_LINE_MARGIN), row + self.QUERY_LINE_MARGIN)
        captures = self.host.run_structural_query(buffer, query_source, None, window)
        return any(captured == node for captured in captures)

    def _cursor(self, buffer: Any) -> tuple[int, int]:
        line, column = self.host.get_cursor_position(buffer)
        return max(0, line - 1), max(0, column)


def describe(context: Optional[Context]) -> str:
    """Short label for logs ("-" before the first evaluation)."""
    return context.value if context is not None else "-"
