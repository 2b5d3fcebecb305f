# src/commentwrap/core/__init__.py
"""Public facade for commentwrap.core: re-export main classes from CamelCase modules.

Keeps one-class-per-file module names (CommentWrap.py, BufferHost.py, ...),
but provides flat imports for convenience and stability.
"""

# Re-export classes/symbols from CamelCase modules
from .BufferHost import BufferHost  # noqa: F401
from .CommentWrap import CommentWrap  # noqa: F401
from .ConfigResolver import DEFAULT_CONFIG, ConfigResolver  # noqa: F401
from .ContextClassifier import Context, ContextClassifier  # noqa: F401
from .Debouncer import Debouncer  # noqa: F401
from .Host import (  # noqa: F401
    CommentWrapError,
    EditorHost,
    QueryCompileError,
    TreeUnavailableError,
)
from .Matchers import register_matcher  # noqa: F401
from .OptionStateMachine import BufferSession, OptionStateMachine  # noqa: F401


__all__ = [
    "BufferHost",
    "BufferSession",
    "CommentWrap",
    "CommentWrapError",
    "ConfigResolver",
    "Context",
    "ContextClassifier",
    "DEFAULT_CONFIG",
    "Debouncer",
    "EditorHost",
    "OptionStateMachine",
    "QueryCompileError",
    "TreeUnavailableError",
    "register_matcher",
]
