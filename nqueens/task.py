"""Branch tasks: one independent subtree of the search per row-0 column.

A branch fixes the queen of row 0 to ``first_column`` and lets the solver
fill rows 1..N-1. In find-one mode the branch also owns the cross-branch
decision: the first solution found anywhere wins the shared signal, is
forwarded, and triggers ``stop_all``; solutions that lose the race are
discarded.

Lifecycle
---------
``PENDING -> RUNNING -> COMPLETED | SKIPPED | FAILED``

- SKIPPED: find-one mode and the signal was already set when the branch was
  picked up, so no search work is done.
- COMPLETED: the subtree was exhausted, or the search unwound after a
  solution or a cancellation request.
- FAILED: an unexpected exception escaped the search; it is recorded on the
  task and re-raised to the executor.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Callable, List, Optional

from .backtracking import SolutionSink, StepSink, solve_from
from .cancellation import CancellationSignal
from .model import UNPLACED, Solution

logger = logging.getLogger(__name__)


class BranchState(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


TERMINAL_STATES = frozenset({BranchState.COMPLETED, BranchState.SKIPPED, BranchState.FAILED})


@dataclass
class BranchResult:
    """Summary of one branch run, used by the worker and the statistics helpers."""

    first_column: int
    state: BranchState
    solutions: List[Solution] = field(default_factory=list)
    nodes: int = 0
    elapsed: float = 0.0
    cancelled: bool = False


class BranchTask:
    """Search the subtree where row 0 holds a queen in ``first_column``.

    Parameters
    ----------
    n : int
        Board size (N >= 1).
    first_column : int
        Column fixed for row 0, in ``[0, n)``.
    find_all : bool
        Enumerate every solution of the subtree, or stop at the first.
    on_step : callable | None
        Step sink forwarded to the solver unchanged.
    on_solution : callable | None
        Receives accepted solutions only.
    signal : CancellationSignal
        Shared "solution found" flag; the same instance for every branch.
    stop_all : callable | None
        Invoked by the find-one winner right after forwarding its solution.
    interrupter : CancellationSignal | None
        Forceful stop request honoured in both modes.
    """

    def __init__(
        self,
        n: int,
        first_column: int,
        find_all: bool,
        on_step: Optional[StepSink],
        on_solution: Optional[SolutionSink],
        signal: CancellationSignal,
        stop_all: Optional[Callable[[], None]] = None,
        interrupter: Optional[CancellationSignal] = None,
    ):
        if not 0 <= first_column < n:
            raise ValueError(f"first_column must be in [0, {n}), got {first_column}")
        self.n = n
        self.first_column = first_column
        self.find_all = find_all
        self.on_step = on_step
        self.on_solution = on_solution
        self.signal = signal
        self.stop_all = stop_all
        self.interrupter = interrupter
        self.state = BranchState.PENDING
        self.error: Optional[BaseException] = None
        self._accepted: List[Solution] = []

    def __call__(self) -> BranchResult:
        return self.run()

    def _forward(self, solution: Solution) -> None:
        if self.find_all:
            self._accepted.append(solution)
            if self.on_solution is not None:
                self.on_solution(solution)
            return

        if not self.signal.try_set():
            logger.debug("Branch %d: discarding solution %s, another branch won", self.first_column, solution)
            return
        self._accepted.append(solution)
        if self.on_solution is not None:
            self.on_solution(solution)
        if self.stop_all is not None:
            self.stop_all()

    def run(self) -> BranchResult:
        """Run the branch once and return its result.

        Raises
        ------
        RuntimeError
            If the task has already been run.
        Exception
            Whatever the search or the sinks raised; the task is left FAILED.
        """
        if self.state is not BranchState.PENDING:
            raise RuntimeError(f"Branch {self.first_column} already ran (state={self.state.value})")

        if not self.find_all and self.signal.is_set:
            self.state = BranchState.SKIPPED
            logger.debug("Branch %d skipped: a solution was already found", self.first_column)
            return BranchResult(self.first_column, self.state)

        self.state = BranchState.RUNNING
        start = perf_counter()
        placement = [UNPLACED] * self.n
        placement[0] = self.first_column
        try:
            search = solve_from(
                self.n,
                1,
                placement,
                self.find_all,
                on_step=self.on_step,
                on_solution=self._forward,
                signal=self.signal,
                interrupter=self.interrupter,
            )
        except Exception as exc:
            self.state = BranchState.FAILED
            self.error = exc
            logger.debug("Branch %d failed: %r", self.first_column, exc)
            raise

        self.state = BranchState.COMPLETED
        return BranchResult(
            first_column=self.first_column,
            state=self.state,
            solutions=list(self._accepted),
            nodes=search.nodes,
            elapsed=perf_counter() - start,
            cancelled=search.cancelled,
        )
