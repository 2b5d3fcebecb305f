"""Pytest configuration with shared fixtures for the commentwrap tests.

The fixtures assemble a `BufferHost` around a stub syntax provider and a
manual clock, so the whole plugin runs without tree-sitter grammars and
without real time passing.
"""

from __future__ import annotations

from typing import Any

import pytest

from commentwrap.core.BufferHost import BufferHost
from commentwrap.core.CommentWrap import CommentWrap
from tests.stubs import FakeNode, ManualClock, StubSyntax


INITIAL_OPTIONS: dict[str, Any] = {
    "textwidth": 100,
    "comments": "://",
    "formatoptions": "croql",
}


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def syntax() -> StubSyntax:
    return StubSyntax()


@pytest.fixture
def host(syntax: StubSyntax, clock: ManualClock) -> BufferHost:
    """BufferHost with the stub syntax provider and fixed initial options."""
    return BufferHost(syntax=syntax, clock=clock, default_options=INITIAL_OPTIONS)


@pytest.fixture
def buffer(host: BufferHost) -> int:
    """A focused Lua buffer (generic matcher), cursor on line 2."""
    number = host.open_buffer("init.lua", "local x = 1\n-- some comment\nreturn x\n", language="lua")
    host.set_cursor(number, 2, 8)
    return number


@pytest.fixture
def wrap(host: BufferHost) -> CommentWrap:
    """Unconfigured, disabled plugin instance."""
    return CommentWrap(host)


@pytest.fixture
def comment_node() -> FakeNode:
    return FakeNode("comment")


@pytest.fixture
def code_node() -> FakeNode:
    return FakeNode("identifier", parent=FakeNode("chunk"))
