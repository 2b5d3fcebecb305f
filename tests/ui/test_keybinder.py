# tests/ui/test_keybinder.py
"""Unit tests for the `KeyBinder` class.
========================================

This module verifies that key specifications in the different accepted
spellings resolve to the same binding, that bindings are per mode, and
that a failing action never propagates out of `handle_input`.
"""

from unittest.mock import MagicMock

import pytest

from commentwrap.ui.KeyBinder import KeyBinder


@pytest.mark.parametrize(
    "spec, expected",
    [
        ("<C-k>", "ctrl+k"),
        ("<C-K>", "ctrl+k"),
        ("ctrl+k", "ctrl+k"),
        ("Ctrl-K", "ctrl+k"),
        ("<M-x>", "alt+x"),
        ("<S-Tab>", "shift+tab"),
        ("shift+alt+ctrl+p", "ctrl+alt+shift+p"),
        ("<F5>", "f5"),
        ("K", "K"),
        ("ctrl+-", "ctrl+-"),
    ],
)
def test_decode_keystring_normalises_spellings(spec: str, expected: str) -> None:
    assert KeyBinder()._decode_keystring(spec) == expected


@pytest.mark.parametrize("spec", ["", "   ", "hyper+k"])
def test_decode_keystring_rejects_invalid_specs(spec: str) -> None:
    with pytest.raises(ValueError):
        KeyBinder()._decode_keystring(spec)


def test_binding_is_found_under_any_spelling() -> None:
    """A key bound as "<C-k>" is found as "ctrl+k" in the bound modes only."""
    kb = KeyBinder()
    action = MagicMock()
    kb.bind(("i", "n"), "<C-k>", action)

    assert kb.lookup("i", "ctrl+k") is action
    assert kb.lookup("n", "Ctrl-K") is action
    assert kb.lookup("v", "<C-k>") is None
    # Invalid specs are a miss, not an error.
    assert kb.lookup("n", "") is None


def test_unbind_removes_binding_in_given_modes() -> None:
    kb = KeyBinder()
    kb.bind(("i", "n"), "<C-k>", MagicMock())
    kb.unbind(("i",), "ctrl+k")

    assert kb.lookup("i", "<C-k>") is None
    assert kb.lookup("n", "<C-k>") is not None

    # Unbinding an unknown key is a no-op.
    kb.unbind(("i",), "<F9>")


def test_handle_input_runs_action_and_reports_handled() -> None:
    kb = KeyBinder()
    action = MagicMock()
    kb.bind(("n",), "<F5>", action)

    assert kb.handle_input("n", "f5") is True
    action.assert_called_once_with()
    assert kb.handle_input("n", "f6") is False


def test_handle_input_swallows_action_errors() -> None:
    kb = KeyBinder()
    kb.bind(("n",), "x", MagicMock(side_effect=RuntimeError("boom")))

    # The key was handled even though the action failed.
    assert kb.handle_input("n", "x") is True
