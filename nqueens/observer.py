"""Marshal concurrent engine callbacks onto a single consumer thread.

Branch threads call ``on_step``/``on_solution`` concurrently. A renderer that
is not thread-safe can pass a ``QueueObserver``'s methods to the engine
instead, and periodically ``drain()`` the queue from its own thread (for
example from a GUI timer), or iterate ``events()`` until the run ends.

Usage::

    observer = QueueObserver()
    worker = nqueens.solve(8, True, **observer.callbacks())
    for event in observer.events():
        ...  # Step, Solution, Finished or Failed, all on this thread
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from .model import Solution, Step


@dataclass(frozen=True)
class Finished:
    """Terminal marker: the run completed normally."""


@dataclass(frozen=True)
class Failed:
    """Terminal marker: the run failed with ``error``."""

    error: BaseException


Event = Union[Step, Solution, Finished, Failed]


class QueueObserver:
    """Thread-safe event buffer between the engine and a single consumer.

    Parameters
    ----------
    record_steps : bool
        When False, step events are counted but not queued; useful for large
        find-all runs where only solutions matter.
    maxsize : int
        Queue bound (0 = unbounded). A bounded queue applies back-pressure to
        the branch threads, which pace the search to the consumer.
    """

    def __init__(self, record_steps: bool = True, maxsize: int = 0):
        self.record_steps = record_steps
        self._queue: "queue.Queue[Event]" = queue.Queue(maxsize=maxsize)
        self._step_count = 0
        self._solution_count = 0
        self._count_lock = threading.Lock()

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def solution_count(self) -> int:
        return self._solution_count

    # Engine-facing callbacks (called from branch and monitor threads)

    def on_step(self, step: Step) -> None:
        with self._count_lock:
            self._step_count += 1
        if self.record_steps:
            self._queue.put(step)

    def on_solution(self, solution: Solution) -> None:
        with self._count_lock:
            self._solution_count += 1
        self._queue.put(solution)

    def on_finished(self) -> None:
        self._queue.put(Finished())

    def on_error(self, error: BaseException) -> None:
        self._queue.put(Failed(error))

    def callbacks(self) -> Dict[str, Callable[..., Any]]:
        """Return the four callbacks as keyword arguments for ``solve``/``start``."""
        return {
            "on_step": self.on_step,
            "on_solution": self.on_solution,
            "on_finished": self.on_finished,
            "on_error": self.on_error,
        }

    # Consumer-facing API (single thread)

    def drain(self, limit: Optional[int] = None) -> List[Event]:
        """Return up to ``limit`` queued events without blocking."""
        events: List[Event] = []
        while limit is None or len(events) < limit:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return events

    def get(self, timeout: Optional[float] = None) -> Optional[Event]:
        """Return the next event, or None if none arrived within ``timeout`` seconds."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def events(self, timeout: Optional[float] = None) -> Iterator[Event]:
        """Yield events in arrival order until a terminal marker is seen.

        Raises
        ------
        queue.Empty
            If no event arrives within ``timeout`` seconds (e.g. after
            ``cancel()``, which produces no terminal marker).
        """
        while True:
            event = self._queue.get(timeout=timeout)
            yield event
            if isinstance(event, (Finished, Failed)):
                return
