# commentwrap/core/Debouncer.py
"""Trailing-edge debouncing on top of the host's deferred callbacks.

Bursts of calls within the window collapse into a single call of the
wrapped function, made once the window has passed since the *last* call
and with that call's arguments. Every call cancels the pending task and
schedules a fresh one, so at most one task is ever pending.
"""

import logging
from typing import Any, Callable, Optional

from commentwrap.core.Host import EditorHost, TimerHandle


logger = logging.getLogger("commentwrap.debounce")


class Debouncer:
    """Callable wrapper that defers `fn` until `delay_ms` of quiet.

    Attributes:
        host: Host providing `defer`.
        fn: Function to run.
        delay_ms (int): Quiet period in milliseconds.
    """

    def __init__(self, host: EditorHost, fn: Callable[..., Any], delay_ms: int) -> None:
        self.host = host
        self.fn = fn
        self.delay_ms = delay_ms
        self._handle: Optional[TimerHandle] = None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.cancel()

        def fire() -> None:
            self._handle = None
            try:
                self.fn(*args, **kwargs)
            except Exception:
                logger.error("Debounced callback %r failed.", self.fn, exc_info=True)

        self._handle = self.host.defer(self.delay_ms, fire)

    def cancel(self) -> None:
        """Drops the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled
