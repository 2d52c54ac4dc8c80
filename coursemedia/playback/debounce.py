"""Poll-driven debouncer."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Optional


class Debouncer:
    """Emit the most recent call's arguments after ``wait`` seconds of inactivity.

    There is no timer thread. The owner calls `poll()` from its own loop
    (the playback tracker polls on every tick), and `flush()` emits a
    pending call immediately for writes that must not be delayed or dropped.

    Example:
        >>> d = Debouncer(print, wait=1.0)
        >>> d.call("a"); d.call("b")
        >>> d.flush()
        b
        True
    """

    def __init__(
        self,
        fn: Callable[..., Any],
        wait: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.fn = fn
        self.wait = wait
        self.clock = clock
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}
        self._deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def call(self, *args: Any, **kwargs: Any) -> None:
        """Record a call, replacing any pending one and restarting the wait."""
        self._args = args
        self._kwargs = kwargs
        self._deadline = self.clock() + self.wait

    def poll(self) -> bool:
        """Emit the pending call if its wait has elapsed.

        Returns:
            True if the function was called.
        """
        if self._deadline is None or self.clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Emit the pending call now, if any.

        Returns:
            True if the function was called.
        """
        if self._deadline is None:
            return False
        args, kwargs = self._args, self._kwargs
        self.cancel()
        self.fn(*args, **kwargs)
        return True

    def cancel(self) -> None:
        """Drop the pending call."""
        self._deadline = None
        self._args = ()
        self._kwargs = {}
