# commentwrap/integrations/TreeSitterBridge.py
"""TreeSitterBridge.py
========================
Syntax-tree provider for `BufferHost`, backed by tree-sitter grammars.

The bridge turns buffer text into a tree-sitter `Tree`, answers "smallest
named node at this position" and runs structural queries restricted to a
window of rows. It holds no editor state of its own beyond caches: one
parsed tree per buffer (re-parsed only when the text changes) and one
compiled `Query` per (language, source) pair.

Grammars are looked up by language identifier. Python is mapped out of the
box; any other installed ``tree_sitter_<language>`` package is imported on
demand, and `register_language` accepts a ready `Language` object.

Failures are reported with the core's exception types:
`TreeUnavailableError` when no grammar or tree can be produced and
`QueryCompileError` when a query does not compile for the grammar.
"""

import logging
from importlib import import_module
from typing import Any, Hashable, Optional

from tree_sitter import Language, Node, Parser, Query, QueryCursor, Tree

from commentwrap.core.Host import QueryCompileError, TreeUnavailableError


logger = logging.getLogger("commentwrap.treesitter")


# ================= TreeSitterBridge Class ==============================
class TreeSitterBridge:
    """Parses buffers with tree-sitter and answers node/query lookups."""

    # Language identifier -> grammar package, for names that do not follow
    # the tree_sitter_<language> convention.
    LANGUAGE_MODULES: dict[str, str] = {
        "python": "tree_sitter_python",
        "python3": "tree_sitter_python",
        "py": "tree_sitter_python",
    }

    def __init__(self) -> None:
        self._languages: dict[str, Language] = {}
        self._trees: dict[Hashable, tuple[str, bytes, Tree]] = {}
        self._queries: dict[tuple[str, str], Query] = {}

    # ---------------------- Grammars --------------------
    def register_language(self, language_id: str, language: Language) -> None:
        self._languages[language_id] = language

    def get_language(self, language_id: str) -> Language:
        """Returns the tree-sitter `Language` for an identifier.

        Raises:
            TreeUnavailableError: No grammar is installed for it.
        """
        if not language_id:
            raise TreeUnavailableError("Buffer has no language")
        if language_id in self._languages:
            return self._languages[language_id]

        module_name = self.LANGUAGE_MODULES.get(
            language_id, f"tree_sitter_{language_id.replace('-', '_')}"
        )
        try:
            module = import_module(module_name)
            language = Language(module.language())
        except Exception as e:
            raise TreeUnavailableError(
                f"No tree-sitter grammar for '{language_id}' ({module_name}): {e}"
            ) from e
        logger.debug("Loaded tree-sitter grammar '%s' for '%s'.", module_name, language_id)
        self._languages[language_id] = language
        return language

    # ---------------------- Trees --------------------
    def tree_for(self, key: Hashable, language_id: str, source: str) -> Tree:
        """Returns the parsed tree of a buffer, re-parsing on text changes.

        Raises:
            TreeUnavailableError: No grammar, or parsing failed.
        """
        source_bytes = source.encode("utf-8")
        cached = self._trees.get(key)
        if cached is not None and cached[0] == language_id and cached[1] == source_bytes:
            return cached[2]

        parser = Parser(self.get_language(language_id))
        try:
            tree = parser.parse(source_bytes)
        except Exception as e:
            raise TreeUnavailableError(f"Parsing failed for '{language_id}': {e}") from e
        if tree is None:
            raise TreeUnavailableError(f"Parser returned no tree for '{language_id}'")
        self._trees[key] = (language_id, source_bytes, tree)
        return tree

    def forget(self, key: Hashable) -> None:
        """Drops the cached tree of a closed buffer."""
        self._trees.pop(key, None)

    # ---------------------- Lookups --------------------
    def named_node_at(
        self, key: Hashable, language_id: str, lines: list[str], row: int, column: int
    ) -> Optional[Node]:
        """Returns the smallest named node at a 0-based (row, char column).

        Tree-sitter positions are byte based, so the character column is
        converted using the UTF-8 encoding of the row.
        """
        if row < 0 or row >= len(lines):
            return None
        tree = self.tree_for(key, language_id, "\n".join(lines))
        byte_col = len(lines[row][:column].encode("utf-8"))
        point = (row, byte_col)
        return tree.root_node.named_descendant_for_point_range(point, point)

    def captures(
        self,
        key: Hashable,
        language_id: str,
        lines: list[str],
        query_source: str,
        search_root: Optional[Node],
        line_window: tuple[int, int],
    ) -> list[Node]:
        """Runs a query and returns every captured node within the rows.

        Raises:
            QueryCompileError: The query does not compile.
            TreeUnavailableError: No grammar or tree.
        """
        tree = self.tree_for(key, language_id, "\n".join(lines))
        query = self._compile(language_id, query_source)

        cursor = QueryCursor(query)
        first, last = line_window
        cursor.set_point_range((max(0, first), 0), (max(first, last) + 1, 0))

        root = search_root if search_root is not None else tree.root_node
        found: list[Node] = []
        for nodes in cursor.captures(root).values():
            found.extend(nodes)
        return found

    def _compile(self, language_id: str, query_source: str) -> Query:
        cache_key = (language_id, query_source)
        if cache_key in self._queries:
            return self._queries[cache_key]
        language = self.get_language(language_id)
        try:
            query = Query(language, query_source)
        except Exception as e:
            raise QueryCompileError(f"Query failed to compile for '{language_id}': {e}") from e
        self._queries[cache_key] = query
        return query


def node_label(node: Any) -> str:
    """Short description of a node for log messages."""
    if node is None:
        return "<none>"
    start = getattr(node, "start_point", None)
    return f"{getattr(node, 'type', '?')}@{tuple(start) if start is not None else '?'}"
