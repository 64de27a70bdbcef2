"""Experiment runners: a blocking parallel solve and the sequential-vs-parallel benchmark.

These routines drive the engine the way a batch consumer would: start a
parallel run, wait for its terminal callback, and shape the outcome into
dictionaries suitable for CSV export and plotting. Validation hooks
optionally check every solution and the known solution counts.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from time import perf_counter
from typing import Dict, List, Optional

from nqueens import settings
from nqueens.backtracking import SolutionSink, StepSink, solve
from nqueens.model import Solution
from nqueens.store import SolutionStore
from nqueens.utils import is_valid_solution
from nqueens.worker import ParallelSolverWorker, WorkerStatus

from .stats import (
    BenchmarkRecord,
    BenchmarkResults,
    ProgressPrinter,
    RunSummary,
    summarize_benchmark_runs,
    summarize_branches,
)

# Number of distinct solutions for N = 0..20 (OEIS A000170)
KNOWN_SOLUTION_COUNTS: Dict[int, int] = {
    0: 1,
    1: 1,
    2: 0,
    3: 0,
    4: 2,
    5: 10,
    6: 4,
    7: 40,
    8: 92,
    9: 352,
    10: 724,
    11: 2680,
    12: 14200,
    13: 73712,
    14: 365596,
    15: 2279184,
    16: 14772512,
    17: 95815104,
    18: 666090624,
    19: 4968057848,
    20: 39029188884,
}


@dataclass
class RunOutcome:
    """Result of a blocking parallel solve."""

    status: WorkerStatus
    solutions: List[Solution] = field(default_factory=list)
    elapsed: float = 0.0
    steps: int = 0
    error: Optional[BaseException] = None
    summary: Optional[RunSummary] = None


def run_parallel_solve(
    n: int,
    find_all: bool,
    time_limit: Optional[float] = None,
    on_step: Optional[StepSink] = None,
    on_solution: Optional[SolutionSink] = None,
    max_workers: Optional[int] = None,
    store: Optional[SolutionStore] = None,
) -> RunOutcome:
    """Run one parallel solve to completion (or until ``time_limit``).

    The store is cleared before the run. When ``time_limit`` expires the run
    is cancelled and the outcome carries status CANCELLED with whatever
    solutions were stored before cancellation.

    Raises
    ------
    InvalidBoardSizeError
        Propagated synchronously from ``ParallelSolverWorker.start``.
    """
    store = store if store is not None else SolutionStore()
    store.clear()
    worker = ParallelSolverWorker(store=store, max_workers=max_workers)
    terminal = threading.Event()
    steps = [0]
    steps_lock = threading.Lock()

    def count_step(step) -> None:
        with steps_lock:
            steps[0] += 1
        if on_step is not None:
            on_step(step)

    start = perf_counter()
    worker.start(
        n,
        find_all,
        on_step=count_step,
        on_solution=on_solution,
        on_finished=terminal.set,
        on_error=lambda exc: terminal.set(),
    )
    if not terminal.wait(time_limit):
        worker.cancel()
    worker.wait()
    elapsed = perf_counter() - start

    return RunOutcome(
        status=worker.status,
        solutions=list(store.get_all()),
        elapsed=elapsed,
        steps=steps[0],
        error=worker.error,
        summary=summarize_branches(n, find_all, worker.results),
    )


def run_benchmark(
    N_values: List[int],
    runs: int,
    progress_label: Optional[str] = None,
    validate: bool = False,
    max_workers: Optional[int] = None,
) -> BenchmarkResults:
    """Time full enumeration with the sequential solver and the parallel worker.

    For each N in ``N_values`` this performs ``runs`` sequential and ``runs``
    parallel find-all solves, without step events, and records solution
    counts and wall-clock times.

    Raises
    ------
    AssertionError
        With ``validate=True``, when a solution is invalid, the two modes
        disagree on the solution set, or a count differs from
        ``KNOWN_SOLUTION_COUNTS``.
    """
    results: BenchmarkResults = {}
    progress = ProgressPrinter(len(N_values), progress_label) if progress_label else None

    for index, N in enumerate(N_values, start=1):
        if progress:
            progress.update(index, f"N={N}")
        raw: List[BenchmarkRecord] = []
        sequential_set = None
        parallel_set = None

        for _ in range(runs):
            start = perf_counter()
            search = solve(N, find_all=True)
            elapsed = perf_counter() - start
            raw.append({"mode": "sequential", "solutions": len(search.solutions), "time": elapsed})
            sequential_set = {s.columns for s in search.solutions}

            outcome = run_parallel_solve(N, True, max_workers=max_workers)
            if outcome.status is not WorkerStatus.FINISHED:
                raise RuntimeError(f"Parallel run for N={N} ended with status {outcome.status.value}: {outcome.error}")
            raw.append({"mode": "parallel", "solutions": len(outcome.solutions), "time": outcome.elapsed})
            parallel_set = {s.columns for s in outcome.solutions}

            if validate:
                for solution in outcome.solutions:
                    if not is_valid_solution(solution.columns):
                        raise AssertionError(f"Invalid solution produced for N={N}: {solution}")

        expected = KNOWN_SOLUTION_COUNTS.get(N)
        if validate and runs > 0:
            if sequential_set != parallel_set:
                raise AssertionError(f"Sequential and parallel solution sets differ for N={N}")
            if expected is not None and len(parallel_set or ()) != expected:
                raise AssertionError(f"Expected {expected} solutions for N={N}, found {len(parallel_set or ())}")

        entry = summarize_benchmark_runs(N, raw, expected)
        results[N] = entry
        print(
            f"  N={N}: {entry['parallel_solutions']} solution(s), "
            f"sequential {entry['sequential_time']['mean'] or 0:.4f}s, "
            f"parallel {entry['parallel_time']['mean'] or 0:.4f}s "
            f"({settings.NUM_THREADS if max_workers is None else max_workers} threads)"
        )

    return results
