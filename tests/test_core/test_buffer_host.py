# tests/test_core/test_buffer_host.py
"""Unit tests for the in-memory `BufferHost`.

Covers language detection (Pygments), the lifecycle event sequence,
cursor clamping, flag editing, the timer queue and the syntax delegation.
"""

import pytest

from commentwrap.core.BufferHost import PLAIN_TEXT, BufferHost
from commentwrap.core.Host import TreeUnavailableError


@pytest.fixture
def events(host):
    """Records (event, buffer) for every lifecycle event."""
    seen = []
    for name in ("FileType", "BufEnter", "BufLeave", "BufDelete", "CursorMoved", "CursorMovedI"):
        host.subscribe(name, lambda e: seen.append((e["event"], e["buffer"])), "recorder")
    return seen


@pytest.mark.parametrize(
    "name, expected",
    [("init.lua", "lua"), ("module.py", "python"), ("README.md", "markdown")],
)
def test_detect_language_by_filename(host, name, expected) -> None:
    assert host.detect_language(name, "") == expected


def test_detect_language_by_content(host) -> None:
    assert host.detect_language("", "#!/usr/bin/env python\nprint('hi')\n") == "python"


def test_detect_language_falls_back_to_plain_text(host) -> None:
    assert host.detect_language("", "") == PLAIN_TEXT
    assert host.detect_language("", "   \n") == PLAIN_TEXT


def test_open_buffer_uses_defaults_and_detection(host) -> None:
    number = host.open_buffer("tool.py", "x = 1\n")
    assert host.get_language(number) == "python"
    assert host.get_option(number, "textwidth") == 100
    assert host.current_buffer() == number
    assert host.get_cursor_position(number) == (1, 0)


def test_lifecycle_event_order(host, events) -> None:
    a = host.open_buffer("a.lua", "-- a", language="lua")
    b = host.open_buffer("b.lua", "-- b", language="lua")
    host.close_buffer(b)

    assert events == [
        ("FileType", a),
        ("BufEnter", a),
        ("FileType", b),
        ("BufLeave", a),
        ("BufEnter", b),
        ("BufLeave", b),
        ("BufDelete", b),
        ("BufEnter", a),
    ]


def test_entering_focused_buffer_fires_nothing(host, events) -> None:
    a = host.open_buffer("a.lua", "", language="lua")
    events.clear()
    host.enter_buffer(a)
    assert events == []


def test_closing_background_buffer_keeps_focus(host, events, syntax) -> None:
    a = host.open_buffer("a.lua", "", language="lua")
    b = host.open_buffer("b.lua", "", language="lua", enter=False)
    events.clear()

    host.close_buffer(b)

    assert events == [("BufDelete", b)]
    assert host.current_buffer() == a
    assert syntax.forgotten == [b]


def test_set_language_fires_file_type(host, events) -> None:
    a = host.open_buffer("notes", "", language="text")
    host.set_language(a, "markdown")
    assert events[-1] == ("FileType", a)
    assert host.get_language(a) == "markdown"


def test_set_cursor_clamps_and_tracks_mode(host, buffer, events) -> None:
    host.set_cursor(buffer, 99, 99, insert=True)

    assert host.get_cursor_position(buffer) == (4, 0)
    assert host.mode == "i"
    assert events[-1] == ("CursorMovedI", buffer)

    host.set_cursor(buffer, 2, 99)
    assert host.get_cursor_position(buffer) == (2, len("-- some comment"))
    assert host.mode == "n"
    assert events[-1] == ("CursorMoved", buffer)


def test_flag_editing(host, buffer) -> None:
    host.append_flags(buffer, "formatoptions", "tcqw")
    assert host.get_option(buffer, "formatoptions") == "croqltw"
    host.remove_flags(buffer, "formatoptions", "lw")
    assert host.get_option(buffer, "formatoptions") == "croqt"


def test_unknown_buffer(host) -> None:
    with pytest.raises(KeyError):
        host.get_option(42, "textwidth")
    with pytest.raises(TreeUnavailableError):
        host.get_smallest_named_node_at(42, 0, 0)
    with pytest.raises(TreeUnavailableError):
        host.run_structural_query(42, "(comment) @c", None, (0, 1))


def test_syntax_calls_are_delegated(host, buffer, syntax) -> None:
    host.get_smallest_named_node_at(buffer, 1, 3)
    host.run_structural_query(buffer, "(comment) @c", None, (0, 2))

    assert syntax.lookups == [(buffer, 1, 3)]
    assert syntax.queries == [(buffer, "(comment) @c", (0, 2))]


def test_timers_run_in_due_order(host, clock) -> None:
    ran = []
    host.defer(30, lambda: ran.append("late"))
    host.defer(10, lambda: ran.append("early"))
    cancelled = host.defer(20, lambda: ran.append("cancelled"))
    cancelled.cancel()

    clock.advance_ms(15)
    assert host.process_timers() == 1
    clock.advance_ms(50)
    assert host.process_timers() == 1

    assert ran == ["early", "late"]
    assert host.pending_timers == 0


def test_failing_handler_does_not_stop_dispatch(host, events) -> None:
    def broken(event):
        raise RuntimeError("handler bug")

    host.subscribe("BufEnter", broken, "broken")
    a = host.open_buffer("a.lua", "", language="lua")
    assert ("BufEnter", a) in events


def test_unsubscribe_drops_only_group(host, events) -> None:
    host.subscribe("BufEnter", lambda e: None, "other")
    host.unsubscribe("recorder")
    assert host.subscriptions("recorder") == []
    assert host.subscriptions("other") == ["BufEnter"]


def test_press_key_uses_current_mode(host, buffer) -> None:
    pressed = []
    host.bind_key(("i",), "<C-k>", lambda: pressed.append("i"))

    assert host.press_key("ctrl+k") is False
    host.set_cursor(buffer, 1, 1, insert=True)
    assert host.press_key("ctrl+k") is True
    assert pressed == ["i"]

    host.unbind_key(("i",), "<C-k>")
    assert host.press_key("ctrl+k") is False


def test_default_syntax_provider_is_tree_sitter() -> None:
    from commentwrap.integrations.TreeSitterBridge import TreeSitterBridge

    assert isinstance(BufferHost().syntax, TreeSitterBridge)
