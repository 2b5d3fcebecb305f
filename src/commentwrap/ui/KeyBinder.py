# commentwrap/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
KeyBinder keeps the key bindings of `BufferHost`: which callback runs for a
key pressed in a given mode. Key specifications are accepted in the usual
spellings and normalised to one logical form, so a binding made as
``"<C-k>"`` is found again when the key arrives as ``"ctrl+k"``.

Accepted spellings:
- Vim style: ``<C-k>``, ``<M-x>``, ``<A-x>``, ``<S-Tab>``, ``<F5>``.
- Editor style: ``ctrl+k``, ``Ctrl-K``, ``alt+x``, ``shift+tab``, ``f5``.
- A single printable character: ``k``.

The normalised form lists modifiers in a fixed order (``ctrl``, ``alt``,
``shift``) followed by the lower-cased key name, joined by ``+``.
"""

import logging
import re
from typing import Any, Callable, Iterable, Optional


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Mode-aware key binding table.

    Attributes:
        bindings (dict): (mode, normalised key) -> callback.
    """

    MODIFIER_ALIASES: dict[str, str] = {
        "c": "ctrl", "ctrl": "ctrl", "control": "ctrl",
        "m": "alt", "a": "alt", "alt": "alt", "meta": "alt",
        "s": "shift", "shift": "shift",
    }
    MODIFIER_ORDER: tuple[str, ...] = ("ctrl", "alt", "shift")

    _VIM_KEY_RE = re.compile(r"^<(.+)>$")

    def __init__(self) -> None:
        self.bindings: dict[tuple[str, str], Callable[[], Any]] = {}

    def _decode_keystring(self, key_spec: str) -> str:
        """Normalises a key specification.

        Raises:
            ValueError: The specification is empty or has no key name.
        """
        spec = (key_spec or "").strip()
        if not spec:
            raise ValueError("Empty key specification")
        if len(spec) == 1:
            return spec

        match = self._VIM_KEY_RE.match(spec)
        if match:
            parts = match.group(1).split("-")
        else:
            parts = re.split(r"[+-]", spec)
        # A trailing "-" or "+" is the key itself, e.g. "ctrl+-".
        if spec[-1] in "+-" and parts[-1] == "":
            parts = [p for p in parts if p] + [spec[-1]]

        modifiers: set[str] = set()
        for part in parts[:-1]:
            mod = self.MODIFIER_ALIASES.get(part.lower())
            if mod is None:
                raise ValueError(f"Unknown modifier '{part}' in key '{key_spec}'")
            modifiers.add(mod)

        key = parts[-1]
        if not key:
            raise ValueError(f"No key name in '{key_spec}'")
        # Case only matters for bare characters: <C-K> is ctrl+k.
        if modifiers or len(key) > 1:
            key = key.lower()

        ordered = [m for m in self.MODIFIER_ORDER if m in modifiers]
        return "+".join(ordered + [key])

    def bind(self, modes: Iterable[str], key_spec: str, callback: Callable[[], Any]) -> None:
        key = self._decode_keystring(key_spec)
        for mode in modes:
            self.bindings[(mode, key)] = callback
            logging.debug("KeyBinder: bound %s in mode '%s'.", key, mode)

    def unbind(self, modes: Iterable[str], key_spec: str) -> None:
        key = self._decode_keystring(key_spec)
        for mode in modes:
            if self.bindings.pop((mode, key), None) is not None:
                logging.debug("KeyBinder: unbound %s in mode '%s'.", key, mode)

    def lookup(self, mode: str, key_spec: str) -> Optional[Callable[[], Any]]:
        """Returns the callback bound to a key in a mode, or None."""
        try:
            key = self._decode_keystring(key_spec)
        except ValueError:
            return None
        return self.bindings.get((mode, key))

    def handle_input(self, mode: str, key_spec: str) -> bool:
        """Runs the callback bound to the key, if any.

        Returns:
            True if a binding handled the key.
        """
        action = self.lookup(mode, key_spec)
        if action is None:
            return False
        try:
            action()
        except Exception:
            logging.error("KeyBinder: action for %r failed.", key_spec, exc_info=True)
        return True
