"""Backtracking solver for the N-Queens problem.

This module implements the recursive, constraint-pruned depth-first search
used by every entry point of the package:

- solve(n, find_all=True, ...): full search from an empty board; the simple,
    single-threaded way to enumerate (or find one) solution.
- solve_from(n, start_row, placement, find_all, ...): search from a partially
    filled board. Branch tasks use it with row 0 pre-fixed.

Both return a ``SearchResult(solutions, nodes, cancelled)``.

Implementation overview
-----------------------
- State representation: ``placement[row] = column``; ``UNPLACED`` (-1) means
    the row is empty.
- Constraint tracking: three boolean arrays give O(1) legality checks:
    ``cols_used[c]``, ``diag_sum_used[r+c]`` and ``diag_diff_used[r-c+offset]``
    with ``offset = n - 1`` mapping negative differences to [0..2n-2].
- Search strategy: rows are filled top to bottom; inside a row, columns are
    tried left to right. Discovery order is therefore lexicographic in the
    row-by-row column choices.
- Events: every placement emits a ``placed`` Step and every backtrack a
    ``removed`` Step, each carrying a snapshot of the board after the change,
    so an observer can replay the whole search.

Contract (public API)
---------------------
- The solver is thread-agnostic: it never creates threads and keeps all
    mutable state local to one call, so concurrent calls are independent.
- ``signal`` (find-one only): once set, the search unwinds at the next row
    expansion without emitting further events.
- ``interrupter``: a forceful stop honoured in both modes.
- After a solution in find-one mode the search unwinds immediately and skips
    the trailing ``removed`` events, leaving the observer's last snapshot on
    the winning board.
- Cancellation is ordinary control flow, never an exception.
- ``nodes`` counts queens placed during the search, a hardware-independent
    proxy of search effort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .cancellation import CancellationSignal
from .model import PLACED, REMOVED, UNPLACED, Solution, Step

logger = logging.getLogger(__name__)

StepSink = Callable[[Step], None]
SolutionSink = Callable[[Solution], None]


@dataclass
class SearchResult:
    """Outcome of one solver call."""

    solutions: List[Solution] = field(default_factory=list)
    nodes: int = 0
    cancelled: bool = False


class _Search:
    """Mutable state of a single search; never shared between calls."""

    def __init__(
        self,
        n: int,
        placement: List[int],
        find_all: bool,
        on_step: Optional[StepSink],
        on_solution: Optional[SolutionSink],
        signal: Optional[CancellationSignal],
        interrupter: Optional[CancellationSignal],
    ):
        self.n = n
        self.offset = n - 1
        self.placement = placement
        self.cols_used = [False] * n
        self.diag_sum_used = [False] * max(0, 2 * n - 1)
        self.diag_diff_used = [False] * max(0, 2 * n - 1)
        self.find_all = find_all
        self.on_step = on_step
        self.on_solution = on_solution
        self.signal = signal
        self.interrupter = interrupter
        self.result = SearchResult()

    def seed(self, start_row: int) -> None:
        """Mark the constraints of the pre-filled rows ``0..start_row-1``."""
        for row in range(start_row):
            column = self.placement[row]
            if column == UNPLACED or not 0 <= column < self.n:
                raise ValueError(f"Row {row} must be placed before start_row={start_row}, got {column}")
            diag_sum = row + column
            diag_diff = row - column + self.offset
            if self.cols_used[column] or self.diag_sum_used[diag_sum] or self.diag_diff_used[diag_diff]:
                raise ValueError(f"Pre-filled rows attack each other at row {row}, column {column}")
            self.cols_used[column] = True
            self.diag_sum_used[diag_sum] = True
            self.diag_diff_used[diag_diff] = True
        for row in range(start_row, self.n):
            if self.placement[row] != UNPLACED:
                raise ValueError(f"Row {row} must be unplaced at start_row={start_row}")

    def _stop_requested(self) -> bool:
        if self.interrupter is not None and self.interrupter.is_set:
            return True
        return not self.find_all and self.signal is not None and self.signal.is_set

    def _done_after_child(self) -> bool:
        if self.result.cancelled:
            return True
        if self.interrupter is not None and self.interrupter.is_set:
            self.result.cancelled = True
            return True
        if self.find_all:
            return False
        if self.result.solutions:
            return True
        if self.signal is not None and self.signal.is_set:
            self.result.cancelled = True
            return True
        return False

    def backtrack(self, row: int) -> None:
        if self._stop_requested():
            self.result.cancelled = True
            return

        # All rows filled: record the complete placement.
        if row == self.n:
            solution = Solution(tuple(self.placement))
            self.result.solutions.append(solution)
            if self.on_solution is not None:
                self.on_solution(solution)
            return

        n = self.n
        placement = self.placement
        cols_used = self.cols_used
        diag_sum_used = self.diag_sum_used
        diag_diff_used = self.diag_diff_used
        offset = self.offset

        for column in range(n):
            diag_sum = row + column
            diag_diff = row - column + offset
            if cols_used[column] or diag_sum_used[diag_sum] or diag_diff_used[diag_diff]:
                continue

            placement[row] = column
            cols_used[column] = diag_sum_used[diag_sum] = diag_diff_used[diag_diff] = True
            self.result.nodes += 1
            if self.on_step is not None:
                self.on_step(Step(PLACED, row, column, tuple(placement)))

            self.backtrack(row + 1)

            if self._done_after_child():
                return

            placement[row] = UNPLACED
            cols_used[column] = diag_sum_used[diag_sum] = diag_diff_used[diag_diff] = False
            if self.on_step is not None:
                self.on_step(Step(REMOVED, row, column, tuple(placement)))
                if self._stop_requested():
                    self.result.cancelled = True
                    return


def solve_from(
    n: int,
    start_row: int,
    placement: Sequence[int],
    find_all: bool,
    on_step: Optional[StepSink] = None,
    on_solution: Optional[SolutionSink] = None,
    signal: Optional[CancellationSignal] = None,
    interrupter: Optional[CancellationSignal] = None,
) -> SearchResult:
    """Search all completions of a partially filled board.

    Parameters
    ----------
    n : int
        Board dimension N (N >= 0).
    start_row : int
        First row to fill; rows ``0..start_row-1`` must already be placed in
        ``placement`` and must not attack each other.
    placement : Sequence[int]
        Initial board of length N. It is copied; the caller's sequence is
        never mutated.
    find_all : bool
        Enumerate every solution when True, stop after the first otherwise.
    on_step, on_solution : callable | None
        Event sinks invoked synchronously from the calling thread.
    signal : CancellationSignal | None
        Shared "solution found" flag, observed in find-one mode only.
    interrupter : CancellationSignal | None
        Forceful stop request, observed in both modes.

    Returns
    -------
    SearchResult
        Solutions in discovery order, placed-queen count, and whether the
        search was cut short by ``signal`` or ``interrupter``.

    Raises
    ------
    ValueError
        If ``placement`` has the wrong length or an inconsistent prefix.
    """
    if n < 0:
        raise ValueError(f"Board size must be non-negative, got {n}")
    if len(placement) != n:
        raise ValueError(f"Placement length {len(placement)} does not match board size {n}")
    if not 0 <= start_row <= n:
        raise ValueError(f"start_row must be in [0, {n}], got {start_row}")

    search = _Search(n, list(placement), find_all, on_step, on_solution, signal, interrupter)
    search.seed(start_row)
    search.backtrack(start_row)

    result = search.result
    logger.debug(
        "Search n=%d start_row=%d finished: %d solution(s), %d node(s), cancelled=%s",
        n,
        start_row,
        len(result.solutions),
        result.nodes,
        result.cancelled,
    )
    return result


def solve(
    n: int,
    find_all: bool = True,
    on_step: Optional[StepSink] = None,
    on_solution: Optional[SolutionSink] = None,
    signal: Optional[CancellationSignal] = None,
    interrupter: Optional[CancellationSignal] = None,
) -> SearchResult:
    """Search from an empty board in the calling thread.

    Determinism
    -----------
    Rows are filled in order 0..N-1 and columns tried in order 0..N-1, so
    solutions are produced in lexicographic order and find-one mode returns
    the lexicographically first solution.
    """
    return solve_from(n, 0, [UNPLACED] * max(0, n), find_all, on_step, on_solution, signal, interrupter)
