"""Thread-safe, append-only collection of solutions."""

from __future__ import annotations

import threading
from typing import Iterator, List, Tuple

from .model import Solution


class SolutionStore:
    """Order-preserving sink shared by every search branch.

    Appends from concurrent branches are serialized by a lock, so the store
    order is the order in which ``add`` calls acquired it. Readers get
    immutable snapshots that later appends do not affect.

    The store never clears itself; the caller owns it and calls ``clear()``
    between solves.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._solutions: List[Solution] = []

    def add(self, solution: Solution) -> None:
        with self._lock:
            self._solutions.append(solution)

    def clear(self) -> None:
        with self._lock:
            self._solutions.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._solutions)

    def __len__(self) -> int:
        return self.size()

    def get(self, index: int) -> Solution:
        """Return the solution at ``index``.

        Raises
        ------
        IndexError
            If ``index`` is negative or not smaller than ``size()``.
        """
        with self._lock:
            if index < 0 or index >= len(self._solutions):
                raise IndexError(f"Solution index {index} out of range (size {len(self._solutions)})")
            return self._solutions[index]

    def get_all(self) -> Tuple[Solution, ...]:
        """Return a point-in-time snapshot of all stored solutions."""
        with self._lock:
            return tuple(self._solutions)

    def __iter__(self) -> Iterator[Solution]:
        return iter(self.get_all())

    def __repr__(self) -> str:
        return f"SolutionStore(size={self.size()})"
