# commentwrap/core/Matchers.py
"""Matchers Module
===============
A matcher decides whether a syntax node counts as "comment-like" for the
purpose of line wrapping. Matchers share one signature:

    matcher(node, buffer, classifier) -> bool

`node` is the smallest named node before the cursor, `buffer` the host
buffer identifier and `classifier` the `ContextClassifier` running the
check, which gives matchers access to tree queries through
`classifier.query_contains_node`. Matchers return plain booleans; tree
access failures propagate as exceptions and are turned into an "unknown"
verdict by the classifier.

Matchers are registered by name so that configuration (including TOML
files) can refer to them as strings.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional


if TYPE_CHECKING:
    from commentwrap.core.ContextClassifier import ContextClassifier


Matcher = Callable[[Any, Any, "ContextClassifier"], bool]

logger = logging.getLogger("commentwrap.matchers")


def is_generic_comment(node: Any) -> bool:
    """Returns whether the node's grammar category starts with "comment"."""
    return str(getattr(node, "type", "")).startswith("comment")


def generic(node: Any, buffer: Any, classifier: "ContextClassifier") -> bool:
    """Matches any comment node (`comment`, `comment_block`, ...)."""
    return is_generic_comment(node)


# Python docstrings parse as ordinary strings, so only strings that open a
# function or class body are treated as comments. A leading comment line may
# land inside the block, so the second pair of patterns steps over one.
PYTHON_DOCSTRING_QUERY = """
(class_definition body: (block . (expression_statement . (string) @docstring)))
(function_definition body: (block . (expression_statement . (string) @docstring)))
(class_definition body: (block . (comment) . (expression_statement . (string) @docstring)))
(function_definition body: (block . (comment) . (expression_statement . (string) @docstring)))
"""


def python(node: Any, buffer: Any, classifier: "ContextClassifier") -> bool:
    """Matches comments and docstrings in Python buffers.

    The node under the cursor is usually a child of the string literal
    (`string_content`, `string_start`, ...), in which case the enclosing
    `string` node is checked against the docstring query instead.
    """
    if is_generic_comment(node):
        return True
    node_type = str(getattr(node, "type", ""))
    if not node_type.startswith("string"):
        return False
    if node_type != "string":
        node = getattr(node, "parent", None)
        if node is None:
            return False
    return classifier.query_contains_node(buffer, PYTHON_DOCSTRING_QUERY, node)


# ==================== Registry ====================
_REGISTRY: dict[str, Matcher] = {
    "generic": generic,
    "python": python,
}


def register_matcher(name: str, matcher: Matcher) -> None:
    """Registers (or replaces) a matcher under `name`."""
    if not callable(matcher):
        raise TypeError(f"Matcher '{name}' must be callable, got {type(matcher).__name__}")
    _REGISTRY[name] = matcher
    logger.debug("Registered matcher '%s'.", name)


def get_matcher(spec: Any) -> Matcher:
    """Resolves a matcher from a callable or a registered name.

    Unknown names and unusable values fall back to the generic matcher.
    """
    if callable(spec):
        return spec
    if isinstance(spec, str) and spec in _REGISTRY:
        return _REGISTRY[spec]
    if spec is not None:
        logger.warning("Unknown matcher %r, falling back to 'generic'.", spec)
    return generic


def matcher_name(matcher: Matcher) -> Optional[str]:
    """Returns the registered name of a matcher, if it has one."""
    for name, registered in _REGISTRY.items():
        if registered is matcher:
            return name
    return None
