"""Typed result shapes and statistics helpers for the analysis pipeline.

Defines ``TypedDict`` structures for per-branch and benchmark outputs and
provides utilities to compute aggregate statistics across them.
"""
from __future__ import annotations

import statistics
from typing import Dict, List, Optional, Sequence, TypedDict

from nqueens.task import BranchResult, BranchState


class StatsSummary(TypedDict, total=False):
    count: int
    mean: Optional[float]
    median: Optional[float]
    std: Optional[float]
    min: Optional[float]
    max: Optional[float]
    q25: Optional[float]
    q75: Optional[float]
    range: Optional[float]


class BranchRecord(TypedDict):
    first_column: int
    state: str
    solutions: int
    nodes: int
    time: float
    cancelled: bool


class RunSummary(TypedDict):
    n: int
    find_all: bool
    branches: int
    completed: int
    skipped: int
    failed: int
    cancelled: int
    solutions: int
    nodes: int
    branch_time: StatsSummary
    branch_nodes: StatsSummary
    records: List[BranchRecord]


class BenchmarkRecord(TypedDict):
    mode: str
    solutions: int
    time: float


class BenchmarkEntry(TypedDict, total=False):
    n: int
    expected_solutions: Optional[int]
    sequential_solutions: int
    parallel_solutions: int
    sequential_time: StatsSummary
    parallel_time: StatsSummary
    speedup: Optional[float]
    raw_runs: List[BenchmarkRecord]


BenchmarkResults = Dict[int, BenchmarkEntry]


class ProgressPrinter:
    """Minimal, stdout-only progress reporter for long-running loops.

    Parameters
    ----------
    total : int
        Total number of steps/items expected. Values <= 0 are coerced to 1 to
        avoid division by zero when reporting percentages.
    label : str
        Short label printed in front of the progress counters.
    """

    def __init__(self, total: int, label: str):
        self.total = max(1, total)
        self.label = label

    def update(self, index: int, detail: str = "") -> None:
        """Print a single-line progress update to stdout.

        ``index`` may exceed ``total``; the percentage is then above 100.
        """
        percent = (index / self.total) * 100
        suffix = f" - {detail}" if detail else ""
        print(f"[{self.label}] {index}/{self.total} ({percent:.0f}%)" + suffix)


def compute_detailed_statistics(values: Sequence[float], label: str = "") -> StatsSummary:
    """Compute summary statistics for a numeric sequence.

    Parameters
    ----------
    values : Sequence[float]
        Finite numeric values to summarize.
    label : str, optional
        Carried for debugging context; not used in calculations.

    Returns
    -------
    StatsSummary
        count, mean, median, population std, min, max, q25, q75 and range.
        When ``values`` is empty, every numeric field is ``None`` and
        ``count`` is 0 so CSV and plot generation stay consistent.
    """
    if not values:
        return {
            "count": 0,
            "mean": None,
            "median": None,
            "std": None,
            "min": None,
            "max": None,
            "q25": None,
            "q75": None,
            "range": None,
        }

    sorted_vals = sorted(values)
    n = len(sorted_vals)

    mean_val = statistics.mean(sorted_vals)
    median_val = statistics.median(sorted_vals)
    min_val = sorted_vals[0]
    max_val = sorted_vals[-1]
    std_val = statistics.pstdev(sorted_vals) if n > 1 else 0

    q25 = sorted_vals[n // 4] if n >= 4 else min_val
    q75 = sorted_vals[3 * n // 4] if n >= 4 else max_val

    return {
        "count": n,
        "mean": mean_val,
        "median": median_val,
        "std": std_val,
        "min": min_val,
        "max": max_val,
        "q25": q25,
        "q75": q75,
        "range": max_val - min_val,
    }


def branch_record(result: BranchResult) -> BranchRecord:
    """Flatten a ``BranchResult`` into a CSV/plot friendly record."""
    return {
        "first_column": result.first_column,
        "state": result.state.value,
        "solutions": len(result.solutions),
        "nodes": result.nodes,
        "time": result.elapsed,
        "cancelled": result.cancelled,
    }


def summarize_branches(n: int, find_all: bool, results: Sequence[BranchResult]) -> RunSummary:
    """Aggregate the branch results of one parallel run.

    Timing and node statistics only consider branches that actually ran
    (skipped branches have no meaningful cost).
    """
    records = [branch_record(r) for r in sorted(results, key=lambda r: r.first_column)]
    ran = [r for r in records if r["state"] != BranchState.SKIPPED.value]
    return {
        "n": n,
        "find_all": find_all,
        "branches": len(records),
        "completed": sum(1 for r in records if r["state"] == BranchState.COMPLETED.value),
        "skipped": sum(1 for r in records if r["state"] == BranchState.SKIPPED.value),
        "failed": sum(1 for r in records if r["state"] == BranchState.FAILED.value),
        "cancelled": sum(1 for r in records if r["cancelled"]),
        "solutions": sum(r["solutions"] for r in records),
        "nodes": sum(r["nodes"] for r in records),
        "branch_time": compute_detailed_statistics([r["time"] for r in ran], "branch_time"),
        "branch_nodes": compute_detailed_statistics([float(r["nodes"]) for r in ran], "branch_nodes"),
        "records": records,
    }


def summarize_benchmark_runs(n: int, runs: List[BenchmarkRecord], expected: Optional[int]) -> BenchmarkEntry:
    """Group raw benchmark runs by mode and compute the parallel speedup.

    ``speedup`` is mean sequential time over mean parallel time, or ``None``
    when either side has no runs or a zero mean.
    """
    sequential = [r for r in runs if r["mode"] == "sequential"]
    parallel = [r for r in runs if r["mode"] == "parallel"]
    seq_time = compute_detailed_statistics([r["time"] for r in sequential], "sequential_time")
    par_time = compute_detailed_statistics([r["time"] for r in parallel], "parallel_time")

    speedup: Optional[float] = None
    if seq_time["mean"] and par_time["mean"]:
        speedup = seq_time["mean"] / par_time["mean"]

    return {
        "n": n,
        "expected_solutions": expected,
        "sequential_solutions": sequential[0]["solutions"] if sequential else 0,
        "parallel_solutions": parallel[0]["solutions"] if parallel else 0,
        "sequential_time": seq_time,
        "parallel_time": par_time,
        "speedup": speedup,
        "raw_runs": list(runs),
    }
