"""Shared cancellation signal for cooperating search branches.

A ``CancellationSignal`` is created once per solve and passed by reference to
every branch. Reads are a plain attribute test so the solver can check it at
every row expansion; writes go through a lock so that exactly one caller wins
``try_set()``.

Thread-safety: all methods are safe to call concurrently from any thread.
"""

from __future__ import annotations

import threading


class CancellationSignal:
    """Set-once flag with compare-and-set semantics.

    Once set it cannot be reset; use a new signal for a new solve.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._set = False

    @property
    def is_set(self) -> bool:
        """True once the signal has been set."""
        return self._set

    def __bool__(self) -> bool:
        return self._set

    def try_set(self) -> bool:
        """Set the signal if it is still clear.

        Returns
        -------
        bool
            True for the single caller that performed the transition, False
            for every other caller.
        """
        with self._lock:
            if self._set:
                return False
            self._set = True
        return True

    def set(self) -> None:
        """Set the signal. Safe to call multiple times; only the first has effect."""
        self.try_set()

    def __repr__(self) -> str:
        return f"CancellationSignal(is_set={self._set})"
