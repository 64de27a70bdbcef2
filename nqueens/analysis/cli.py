"""Command-line interface and high-level pipelines for the N-Queens engine.

This module wires together configuration loading, a single parallel solve
with a terminal renderer, and the sequential-vs-parallel benchmark. It keeps
I/O, argument parsing, and progress reporting out of the engine modules so
that the engine remains easy to test programmatically.
"""
from __future__ import annotations

import argparse
import logging
import os
import tempfile
from pathlib import Path
from time import perf_counter
from typing import List, Optional

from config_manager import ConfigManager
from nqueens import settings
from nqueens.errors import InvalidBoardSizeError
from nqueens.model import Solution, Step
from nqueens.observer import Failed, Finished, QueueObserver
from nqueens.store import SolutionStore
from nqueens.utils import as_solution_set, is_valid_solution
from nqueens.worker import ParallelSolverWorker, WorkerStatus

from .experiments import KNOWN_SOLUTION_COUNTS, run_benchmark, run_parallel_solve
from .plots import plot_benchmark, plot_branch_profile
from .reporting import save_benchmark_to_csv, save_branch_summary_to_csv, save_solutions_to_csv
from .stats import summarize_branches

# Seconds between queue polls while a solve runs; bounds Ctrl+C and timeout latency
POLL_INTERVAL = 0.1


# ------------- Utils --------------------------------------------------------

def parse_n_values(values: Optional[List[str]]) -> Optional[List[int]]:
    """Normalize ``--bench-n`` inputs into a sorted list of unique ints.

    Accepts repeated flags (``--bench-n 4 --bench-n 8``) and comma-separated
    lists (``--bench-n 4,6,8``). Returns None when nothing is given.
    """
    if not values:
        return None
    selected: List[int] = []
    for entry in values:
        for token in entry.split(","):
            token = token.strip()
            if token:
                try:
                    selected.append(int(token))
                except ValueError as exc:
                    raise ValueError(f"Invalid board size '{token}' in --bench-n") from exc
    return sorted(set(selected)) or None


def apply_configuration(config_path: str) -> ConfigManager:
    """Load configuration and push its values into ``nqueens.settings``.

    The ``settings`` module is updated in place; the ``ConfigManager`` used is
    returned so callers can persist changes.
    """
    config_mgr = ConfigManager(config_path)

    engine = config_mgr.get_engine_settings()
    if engine:
        settings.set_board_limits(
            int(engine.get("min_board_size", settings.MIN_BOARD_SIZE)),
            int(engine.get("max_board_size", settings.MAX_BOARD_SIZE)),
        )
        settings.DEFAULT_N = int(engine.get("default_n", settings.DEFAULT_N))
        settings.set_num_threads(engine.get("num_threads"))
        time_limit = engine.get("solve_time_limit", settings.SOLVE_TIME_LIMIT)
        settings.SOLVE_TIME_LIMIT = float(time_limit) if time_limit is not None else None

    benchmark = config_mgr.get_benchmark_settings()
    if benchmark:
        settings.BENCHMARK_N_VALUES = [int(n) for n in benchmark.get("N_values", settings.BENCHMARK_N_VALUES)]
        settings.BENCHMARK_RUNS = int(benchmark.get("runs", settings.BENCHMARK_RUNS))

    output = config_mgr.get_output_settings()
    if output:
        settings.OUT_DIR = output.get("output_dir", settings.OUT_DIR)
        settings.RUN_TAG = output.get("run_tag", settings.RUN_TAG)
        settings.DATE_IN_FILENAMES = bool(output.get("date_in_filenames", settings.DATE_IN_FILENAMES))

    return config_mgr


def configure_logging(level_name: Optional[str]) -> None:
    """Route engine log records to stderr at the requested level (default WARNING)."""
    level = getattr(logging, (level_name or "").upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s")


def format_step(step: Step) -> str:
    board = " ".join("." if c < 0 else str(c) for c in step.placement)
    return f"  {step.kind:<7} row={step.row:<2} col={step.column:<2} [{board}]"


# ------------- Pipeline: single solve -------------------------------------

def main_solve(
    n: int,
    find_all: bool,
    time_limit: Optional[float] = None,
    threads: Optional[int] = None,
    show_boards: int = 0,
    trace: bool = False,
    validate: bool = False,
    export: bool = False,
    plot: bool = False,
) -> int:
    """Run one parallel solve, rendering events from the main thread.

    Branch callbacks are marshalled through a ``QueueObserver`` so that all
    printing happens here. Returns a process exit code.
    """
    mode = "all solutions" if find_all else "first solution"
    print("\n============================================")
    print(f"N-QUEENS N={n}: searching for {mode}")
    print("============================================")

    store = SolutionStore()
    observer = QueueObserver(record_steps=trace)
    worker = ParallelSolverWorker(store=store, max_workers=threads)

    start = perf_counter()
    worker.start(n, find_all, **observer.callbacks())
    deadline = None if time_limit is None else start + time_limit

    shown = 0
    failure: Optional[BaseException] = None
    try:
        while True:
            if deadline is not None and perf_counter() >= deadline:
                worker.cancel()
                print(f"Time limit of {time_limit}s reached; search stopped.")
                break
            event = observer.get(timeout=POLL_INTERVAL)
            if event is None:
                continue
            if isinstance(event, Step):
                print(format_step(event))
            elif isinstance(event, Solution):
                if shown < show_boards:
                    shown += 1
                    print(f"\nSolution {shown}: {event}")
                    print(event.render())
            elif isinstance(event, Finished):
                break
            elif isinstance(event, Failed):
                failure = event.error
                break
    except KeyboardInterrupt:
        print("\nExecution interrupted by user. Stopping branches...")
        worker.cancel()
        worker.wait(5.0)
        raise SystemExit(130) from None

    worker.wait()
    elapsed = perf_counter() - start

    if failure is not None:
        print(f"Solve failed: {failure}")
        return 1

    solutions = store.get_all()
    summary = summarize_branches(n, find_all, worker.results)
    print(f"\nStatus: {worker.status.value}")
    print(f"Solutions stored: {len(solutions)}")
    print(f"Step events: {observer.step_count}")
    print(f"Branches: {summary['completed']} completed, {summary['skipped']} skipped, "
          f"{summary['cancelled']} cut short")
    print(f"Nodes (queens placed): {summary['nodes']}")
    print(f"Total time: {elapsed:.4f}s ({threads or settings.NUM_THREADS} threads)")

    if validate:
        invalid = [s for s in solutions if not is_valid_solution(s.columns)]
        if invalid:
            print(f"Validation failed: {len(invalid)} invalid solution(s), e.g. {invalid[0]}")
            return 1
        if len(as_solution_set(solutions)) != len(solutions):
            print("Validation failed: duplicate solutions stored")
            return 1
        expected = KNOWN_SOLUTION_COUNTS.get(n)
        if find_all and worker.status is WorkerStatus.FINISHED and expected is not None and len(solutions) != expected:
            print(f"Validation failed: expected {expected} solutions, found {len(solutions)}")
            return 1
        print("Validation passed.")

    if export:
        path = save_solutions_to_csv(solutions, n, settings.OUT_DIR)
        print(f"Solutions written to {path}")
        path = save_branch_summary_to_csv(summary, settings.OUT_DIR)
        print(f"Branch summary written to {path}")

    if plot:
        path = plot_branch_profile(summary, settings.OUT_DIR)
        if path:
            print(f"Branch profile chart written to {path}")

    return 0


# ------------- Pipeline: benchmark ----------------------------------------

def main_benchmark(
    n_values: List[int],
    runs: int,
    threads: Optional[int] = None,
    validate: bool = False,
    plot: bool = False,
) -> int:
    """Compare sequential and parallel full enumeration across ``n_values``."""
    print("\n============================================")
    print("BENCHMARK: SEQUENTIAL VS PARALLEL ENUMERATION")
    print("============================================")
    start_total = perf_counter()

    results = run_benchmark(n_values, runs, progress_label="Benchmark", validate=validate, max_workers=threads)

    path = save_benchmark_to_csv(results, settings.OUT_DIR)
    print(f"Benchmark results written to {path}")
    if plot:
        for chart in plot_benchmark(results, settings.OUT_DIR):
            print(f"Chart written to {chart}")

    total_time = perf_counter() - start_total
    print(f"\nBenchmark completed in {total_time:.1f}s")
    return 0


# ------------- Quick regression -------------------------------------------

def run_quick_regression_tests() -> None:
    """Execute a fast, deterministic smoke test of the engine.

    Verifies that:
    - find-all yields the known counts for N=1, 4 and 8 with valid solutions;
    - find-one stores exactly one valid solution for N=8;
    - the solution export produces a non-empty CSV in a temporary folder.
    """
    print("Running quick regression tests...")

    for n, expected in ((1, 1), (4, 2), (8, 92)):
        outcome = run_parallel_solve(n, True, time_limit=30.0)
        if outcome.status is not WorkerStatus.FINISHED:
            raise AssertionError(f"Find-all for N={n} ended with status {outcome.status.value}.")
        if len(outcome.solutions) != expected:
            raise AssertionError(f"Expected {expected} solutions for N={n}, found {len(outcome.solutions)}.")
        if not all(is_valid_solution(s.columns) for s in outcome.solutions):
            raise AssertionError(f"Invalid solution returned for N={n}.")
        print(f"  [find-all] N={n}: {expected} solution(s) in {outcome.elapsed:.4f}s")

    outcome = run_parallel_solve(8, False, time_limit=30.0)
    if len(outcome.solutions) != 1 or not is_valid_solution(outcome.solutions[0].columns):
        raise AssertionError(f"Find-one for N=8 returned {outcome.solutions}.")
    print(f"  [find-one] N=8: {outcome.solutions[0]} in {outcome.elapsed:.4f}s")

    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(save_solutions_to_csv(outcome.solutions, 8, tmpdir))
        if not csv_path.exists() or csv_path.stat().st_size == 0:
            raise AssertionError("Solutions CSV was not generated successfully during quick tests.")

    print("Quick regression tests passed.")


# ------------- CLI wiring --------------------------------------------------

def build_arg_parser():
    """Construct the argument parser for the CLI entry point."""
    parser = argparse.ArgumentParser(description="Solve N-Queens with a parallel backtracking engine.")
    parser.add_argument("--n", "-n", type=int, default=None, help="Board size (default from settings/config).")
    parser.add_argument("--all", "-a", action="store_true", help="Enumerate every solution instead of stopping at the first.")
    parser.add_argument("--threads", "-t", type=int, default=None, help="Branch pool size (default: number of cores).")
    parser.add_argument("--timeout", type=float, default=None, help="Cancel the search after this many seconds.")
    parser.add_argument("--show", type=int, default=1, metavar="K", help="Print the first K solution boards (default: 1).")
    parser.add_argument("--trace", action="store_true", help="Print every placed/removed step event.")
    parser.add_argument("--export", action="store_true", help="Write solutions and the branch summary as CSV to the output directory.")
    parser.add_argument("--plot", action="store_true", help="Write charts (requires matplotlib).")
    parser.add_argument("--benchmark", action="store_true", help="Run the sequential vs parallel benchmark and exit.")
    parser.add_argument("--bench-n", action="append", help="Benchmark board sizes (comma-separated or multiple flags).")
    parser.add_argument("--runs", type=int, default=None, help="Benchmark repetitions per N.")
    parser.add_argument("--config", default=None, help="Path to a JSON configuration file (e.g. config.json).")
    parser.add_argument("--quick-test", action="store_true", help="Run quick regression tests and exit.")
    parser.add_argument("--validate", action="store_true", help="Validate solutions and known solution counts (extra assertions).")
    parser.add_argument("--log-level", default="WARNING", help="Engine log level (DEBUG, INFO, WARNING, ...).")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point: parse arguments and dispatch to the chosen pipeline."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.config:
        try:
            apply_configuration(args.config)
        except FileNotFoundError as exc:
            print(f"Configuration file not found: {exc}")
            raise SystemExit(1) from exc
        except ValueError as exc:
            print(f"Configuration error: {exc}")
            raise SystemExit(1) from exc

    if args.quick_test:
        run_quick_regression_tests()
        return

    threads = args.threads
    if args.export or args.plot or args.benchmark:
        os.makedirs(settings.OUT_DIR, exist_ok=True)

    try:
        if args.benchmark:
            n_values = parse_n_values(args.bench_n) or settings.BENCHMARK_N_VALUES
            runs = args.runs if args.runs is not None else settings.BENCHMARK_RUNS
            code = main_benchmark(n_values, runs, threads=threads, validate=args.validate, plot=args.plot)
        else:
            n = args.n if args.n is not None else settings.DEFAULT_N
            time_limit = args.timeout if args.timeout is not None else settings.SOLVE_TIME_LIMIT
            code = main_solve(
                n,
                args.all,
                time_limit=time_limit,
                threads=threads,
                show_boards=max(0, args.show),
                trace=args.trace,
                validate=args.validate,
                export=args.export,
                plot=args.plot,
            )
    except InvalidBoardSizeError as exc:
        print(f"Invalid board size: {exc}")
        raise SystemExit(2) from exc
    except ValueError as exc:
        print(f"Execution error: {exc}")
        raise SystemExit(1) from exc

    if code:
        raise SystemExit(code)
