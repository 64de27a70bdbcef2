"""Parallel worker: fan the search out into one branch per row-0 column.

The worker partitions a solve into exactly N ``BranchTask`` objects and runs
them on a ``ThreadPoolExecutor`` sized to the available cores. ``start()``
returns immediately; a daemon monitor thread waits for the branches and
reports the outcome through exactly one terminal callback.

Callback contract
-----------------
- ``on_step`` and ``on_solution`` are called from branch threads and may run
  concurrently. The worker does not serialize them; wrap them with
  ``nqueens.observer.QueueObserver`` to consume events from one thread.
- ``on_finished`` or ``on_error`` is called exactly once per run from the
  monitor thread, unless ``cancel()`` pre-empts completion, in which case
  neither is called.
- Every accepted solution is appended to the store before ``on_solution``
  sees it, so after ``on_finished`` the store size equals the number of
  ``on_solution`` calls.

Cancellation
------------
Python threads cannot be killed. ``cancel()`` therefore sets an interrupter
that every branch checks at each row expansion, cancels the branches that
have not started yet, and gates the event sinks so no step or solution is
delivered once it returns.

Run isolation
-------------
Each ``start()`` creates a fresh ``_Run`` holding the status, signals,
futures, results and completion event of that run. The monitor thread only
touches the run it was started for, so a cancelled run that is still
unwinding cannot finish, fail or release ``wait()`` for a newer run.
"""

from __future__ import annotations

import enum
import functools
import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from . import settings
from .backtracking import SolutionSink, StepSink
from .cancellation import CancellationSignal
from .errors import BranchFailure, validate_board_size
from .model import Solution, Step
from .store import SolutionStore
from .task import BranchResult, BranchTask

logger = logging.getLogger(__name__)

FinishedCallback = Callable[[], None]
ErrorCallback = Callable[[BaseException], None]


class WorkerStatus(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class _Run:
    """State of one ``start()`` call; guarded by the owning worker's lock."""

    status: WorkerStatus = WorkerStatus.RUNNING
    signal: CancellationSignal = field(default_factory=CancellationSignal)
    interrupter: CancellationSignal = field(default_factory=CancellationSignal)
    futures: Dict[Future, int] = field(default_factory=dict)
    results: List[BranchResult] = field(default_factory=list)
    error: Optional[BaseException] = None
    done: threading.Event = field(default_factory=threading.Event)


def _check_pool_size(max_workers: Optional[int]) -> None:
    if max_workers is None:
        return
    if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
        raise ValueError(f"max_workers must be a positive integer, got {max_workers!r}")


class ParallelSolverWorker:
    """Run one parallel solve at a time and expose its lifecycle.

    Parameters
    ----------
    store : SolutionStore | None
        Destination of accepted solutions. A new store is created if omitted.
        The worker never clears it.
    max_workers : int | None
        Pool size; defaults to ``settings.NUM_THREADS``.

    Raises
    ------
    ValueError
        If ``max_workers`` is given and is not a positive integer.
    """

    def __init__(self, store: Optional[SolutionStore] = None, max_workers: Optional[int] = None):
        _check_pool_size(max_workers)
        self.store = store if store is not None else SolutionStore()
        self.max_workers = max_workers
        self._lock = threading.Lock()
        self._run: Optional[_Run] = None

    # ── Public API ─────────────────────────────────────────────

    @property
    def status(self) -> WorkerStatus:
        run = self._run
        return WorkerStatus.IDLE if run is None else run.status

    @property
    def error(self) -> Optional[BaseException]:
        """The failure reported through ``on_error`` in the current run, if any."""
        run = self._run
        return None if run is None else run.error

    @property
    def results(self) -> List[BranchResult]:
        """Results of the branches of the current run that have completed so far."""
        with self._lock:
            run = self._run
            if run is None:
                return []
            return sorted(run.results, key=lambda r: r.first_column)

    @property
    def solution_found(self) -> bool:
        """True once a branch has won the find-one race in the current run."""
        run = self._run
        return run is not None and run.signal.is_set

    def start(
        self,
        n: int,
        find_all: bool,
        on_step: Optional[StepSink] = None,
        on_solution: Optional[SolutionSink] = None,
        on_finished: Optional[FinishedCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> "ParallelSolverWorker":
        """Submit N branch tasks and return without blocking.

        Raises
        ------
        InvalidBoardSizeError
            If ``n`` is outside ``[settings.MIN_BOARD_SIZE, settings.MAX_BOARD_SIZE]``;
            raised before any branch is created.
        ValueError
            If the pool size is not a positive integer.
        RuntimeError
            If a previous run of this worker is still in progress.
        """
        validate_board_size(n, settings.MIN_BOARD_SIZE, settings.MAX_BOARD_SIZE)
        pool_size = self.max_workers or settings.NUM_THREADS
        _check_pool_size(pool_size)

        with self._lock:
            if self._run is not None and self._run.status is WorkerStatus.RUNNING:
                raise RuntimeError("Worker is already running a solve")
            run = _Run()
            self._run = run

        interrupter = run.interrupter

        def step_sink(step: Step) -> None:
            if interrupter.is_set:
                return
            if on_step is not None:
                on_step(step)

        def solution_sink(solution: Solution) -> None:
            if interrupter.is_set:
                return
            self.store.add(solution)
            if on_solution is not None:
                on_solution(solution)

        logger.info("Starting parallel solve: n=%d, find_all=%s, threads=%d", n, find_all, pool_size)

        executor: Optional[ThreadPoolExecutor] = None
        try:
            executor = ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="nqueens-branch")
            for column in range(n):
                task = BranchTask(
                    n,
                    column,
                    find_all,
                    step_sink,
                    solution_sink,
                    run.signal,
                    stop_all=functools.partial(self._cancel_pending, run),
                    interrupter=interrupter,
                )
                future = executor.submit(task.run)
                with self._lock:
                    run.futures[future] = column
        except Exception as exc:
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)
            interrupter.set()
            self._report_error(run, exc, on_error)
            run.done.set()
            return self
        executor.shutdown(wait=False)

        monitor = threading.Thread(
            target=self._monitor,
            args=(run, dict(run.futures), on_finished, on_error),
            name="nqueens-monitor",
            daemon=True,
        )
        monitor.start()
        return self

    def cancel(self) -> None:
        """Stop the current run. Idempotent and safe to race with completion.

        If the run already finished or failed, this is a no-op. Otherwise the
        run ends in the CANCELLED state and no terminal callback is invoked.
        """
        with self._lock:
            run = self._run
        if run is None:
            return
        run.interrupter.set()
        self._cancel_pending(run)
        with self._lock:
            if run.status is WorkerStatus.RUNNING:
                run.status = WorkerStatus.CANCELLED
                logger.info("Parallel solve cancelled")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every branch of the current run has stopped.

        Returns
        -------
        bool
            False if ``timeout`` expired first.
        """
        run = self._run
        if run is None:
            return True
        return run.done.wait(timeout)

    # ── Internals ──────────────────────────────────────────────

    def _cancel_pending(self, run: _Run) -> None:
        with self._lock:
            futures = list(run.futures)
        for future in futures:
            future.cancel()

    def _transition(self, run: _Run, status: WorkerStatus) -> bool:
        with self._lock:
            if run.status is not WorkerStatus.RUNNING:
                return False
            run.status = status
            return True

    def _report_error(self, run: _Run, exc: BaseException, on_error: Optional[ErrorCallback]) -> None:
        if not self._transition(run, WorkerStatus.FAILED):
            logger.debug("Ignoring error after the run ended: %r", exc)
            return
        run.error = exc
        logger.error("Parallel solve failed: %s", exc)
        if on_error is None:
            return
        try:
            on_error(exc)
        except Exception:
            logger.exception("on_error callback raised")

    def _monitor(
        self,
        run: _Run,
        futures: Dict[Future, int],
        on_finished: Optional[FinishedCallback],
        on_error: Optional[ErrorCallback],
    ) -> None:
        try:
            for future in as_completed(futures):
                column = futures[future]
                try:
                    result = future.result()
                except CancelledError:
                    continue
                except Exception as exc:
                    failure = BranchFailure(column, repr(exc))
                    failure.__cause__ = exc
                    # Siblings must not keep streaming events for a failed run.
                    run.interrupter.set()
                    self._cancel_pending(run)
                    self._report_error(run, failure, on_error)
                    continue
                with self._lock:
                    run.results.append(result)

            if self._transition(run, WorkerStatus.FINISHED):
                logger.info("Parallel solve finished: %d solution(s) stored", self.store.size())
                if on_finished is not None:
                    try:
                        on_finished()
                    except Exception:
                        logger.exception("on_finished callback raised")
        finally:
            run.done.set()


def solve(
    n: int,
    find_all: bool,
    on_step: Optional[StepSink] = None,
    on_solution: Optional[SolutionSink] = None,
    on_finished: Optional[FinishedCallback] = None,
    on_error: Optional[ErrorCallback] = None,
    store: Optional[SolutionStore] = None,
    max_workers: Optional[int] = None,
) -> ParallelSolverWorker:
    """Start a parallel solve and return its handle.

    The returned worker exposes ``cancel()``, ``wait()``, ``status`` and
    ``store``. Invalid board sizes raise ``InvalidBoardSizeError`` here,
    synchronously, rather than through ``on_error``.
    """
    worker = ParallelSolverWorker(store=store, max_workers=max_workers)
    return worker.start(n, find_all, on_step, on_solution, on_finished, on_error)
