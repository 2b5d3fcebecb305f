# tests/integrations/test_treesitter_bridge.py
"""Integration tests for `TreeSitterBridge` with the real Python grammar.

These tests parse actual source text, so they exercise the node lookup,
the windowed docstring query and the full plugin on top of BufferHost.
"""

import pytest

pytest.importorskip("tree_sitter_python")

from commentwrap.core.BufferHost import BufferHost  # noqa: E402
from commentwrap.core.CommentWrap import CommentWrap  # noqa: E402
from commentwrap.core.ContextClassifier import Context  # noqa: E402
from commentwrap.core.Host import QueryCompileError, TreeUnavailableError  # noqa: E402
from commentwrap.core.Matchers import PYTHON_DOCSTRING_QUERY  # noqa: E402
from commentwrap.integrations.TreeSitterBridge import TreeSitterBridge, node_label  # noqa: E402
from tests.stubs import ManualClock, settle  # noqa: E402


SOURCE = (
    "def f():\n"
    '    """Docstring here."""\n'
    "\n"
    'x = "plain string"\n'
    "# a comment\n"
    "class K:\n"
    "    '''Class doc.'''\n"
    "    y = 1\n"
)


@pytest.fixture
def bridge() -> TreeSitterBridge:
    return TreeSitterBridge()


@pytest.fixture
def lines() -> list[str]:
    return SOURCE.split("\n")


def test_named_node_at_comment(bridge, lines) -> None:
    node = bridge.named_node_at("buf", "python", lines, 4, 4)
    assert node.type == "comment"


def test_named_node_at_docstring_content(bridge, lines) -> None:
    node = bridge.named_node_at("buf", "python", lines, 1, 9)
    assert node.type.startswith("string")
    string = node if node.type == "string" else node.parent
    assert string.type == "string"


def test_named_node_out_of_range_is_none(bridge, lines) -> None:
    assert bridge.named_node_at("buf", "python", lines, 99, 0) is None


def test_docstring_query_window(bridge, lines) -> None:
    """Only docstrings inside the requested rows are captured."""
    near = bridge.captures("buf", "python", lines, PYTHON_DOCSTRING_QUERY, None, (0, 2))
    assert [n.start_point[0] for n in near] == [1]

    far = bridge.captures("buf", "python", lines, PYTHON_DOCSTRING_QUERY, None, (5, 7))
    assert [n.start_point[0] for n in far] == [6]


def test_plain_string_is_not_captured(bridge, lines) -> None:
    captured = bridge.captures("buf", "python", lines, PYTHON_DOCSTRING_QUERY, None, (2, 3))
    assert captured == []


def test_non_ascii_columns_are_converted_to_bytes(bridge) -> None:
    lines = ['s = "héllo"  # ünïcode comment']
    # Character column 13 is the "#"; its byte column is one larger.
    assert bridge.named_node_at("u", "python", lines, 0, 13).type == "comment"
    assert bridge.named_node_at("u", "python", lines, 0, 6).type.startswith("string")


def test_tree_is_reparsed_only_on_change(bridge, lines) -> None:
    first = bridge.tree_for("buf", "python", SOURCE)
    assert bridge.tree_for("buf", "python", SOURCE) is first
    assert bridge.tree_for("buf", "python", SOURCE + "z = 2\n") is not first

    bridge.forget("buf")
    assert bridge.tree_for("buf", "python", SOURCE) is not first


def test_bad_query_raises_query_compile_error(bridge, lines) -> None:
    with pytest.raises(QueryCompileError):
        bridge.captures("buf", "python", lines, "(no_such_node) @x", None, (0, 1))


def test_unknown_language_raises_tree_unavailable(bridge, lines) -> None:
    with pytest.raises(TreeUnavailableError):
        bridge.named_node_at("buf", "definitely-not-a-language", lines, 0, 0)
    with pytest.raises(TreeUnavailableError):
        bridge.get_language("")


def test_node_label() -> None:
    assert node_label(None) == "<none>"


@pytest.mark.parametrize(
    "line, column, expected",
    [
        (2, 10, Context.IN_COMMENT),  # docstring of f
        (4, 8, Context.NOT_IN_COMMENT),  # plain string
        (5, 5, Context.IN_COMMENT),  # comment
        (1, 2, Context.NOT_IN_COMMENT),  # def keyword
        (7, 8, Context.IN_COMMENT),  # class docstring
    ],
)
def test_plugin_classifies_real_python_source(line, column, expected) -> None:
    clock = ManualClock()
    host = BufferHost(clock=clock)
    wrap = CommentWrap(host)
    wrap.setup()
    number = host.open_buffer("module.py", SOURCE)
    host.set_cursor(number, line, column)
    settle(host, clock)

    assert wrap.in_comment() is expected
    if expected is Context.IN_COMMENT:
        assert host.get_option(number, "textwidth") == 74
        assert wrap.status.startswith("▸74")
    else:
        assert wrap.status == ""


LEADING_COMMENT_SOURCE = (
    "def g():\n"
    "    # explain the docstring\n"
    '    """Still the docstring."""\n'
    "    return 1\n"
    "\n"
    "def h():\n"
    "    x = 1\n"
    '    """Not a docstring."""\n'
)


@pytest.mark.parametrize(
    "line, column, expected",
    [
        (3, 10, Context.IN_COMMENT),  # docstring after a leading comment
        (2, 10, Context.IN_COMMENT),  # the comment itself
        (8, 10, Context.NOT_IN_COMMENT),  # string after another statement
    ],
)
def test_leading_comment_does_not_hide_docstring(line, column, expected) -> None:
    clock = ManualClock()
    host = BufferHost(clock=clock)
    wrap = CommentWrap(host)
    wrap.setup()
    number = host.open_buffer("module.py", LEADING_COMMENT_SOURCE)
    host.set_cursor(number, line, column)
    settle(host, clock)

    assert wrap.in_comment() is expected
