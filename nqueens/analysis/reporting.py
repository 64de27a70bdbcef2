"""CSV export utilities for solve and benchmark outputs.

These helpers materialize the solutions of a run, its per-branch summary, and
benchmark aggregates as CSV files for spreadsheet inspection. Filenames carry
the board size and an optional run tag/date suffix from ``nqueens.settings``.
"""
from __future__ import annotations

import csv
import os
from typing import Iterable, List

from nqueens import settings
from nqueens.model import Solution

from .stats import BenchmarkResults, RunSummary


def _build_suffix() -> str:
    """Return ``_<RUN_TAG>_<RUN_ID>`` according to settings, or an empty string."""
    parts: List[str] = []
    run_tag = getattr(settings, "RUN_TAG", None)
    if run_tag:
        parts.append(str(run_tag))
    if getattr(settings, "DATE_IN_FILENAMES", False):
        run_id = getattr(settings, "RUN_ID", None)
        if run_id:
            parts.append(str(run_id))
    return ("_" + "_".join(parts)) if parts else ""


def save_solutions_to_csv(solutions: Iterable[Solution], n: int, out_dir: str) -> str:
    """Write one row per solution: index, then the column of each row.

    Returns the path of the written file.
    """
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"solutions_N{n}{_build_suffix()}.csv")
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["index"] + [f"row_{row}" for row in range(n)])
        for index, solution in enumerate(solutions):
            writer.writerow([index] + solution.to_list())
    return filename


def save_branch_summary_to_csv(summary: RunSummary, out_dir: str) -> str:
    """Write the per-branch records of one parallel run.

    Returns the path of the written file.
    """
    os.makedirs(out_dir, exist_ok=True)
    mode = "all" if summary["find_all"] else "first"
    filename = os.path.join(out_dir, f"branches_N{summary['n']}_{mode}{_build_suffix()}.csv")
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["first_column", "state", "solutions", "nodes", "time_seconds", "cancelled"])
        for record in summary["records"]:
            writer.writerow([
                record["first_column"],
                record["state"],
                record["solutions"],
                record["nodes"],
                f"{record['time']:.6f}",
                record["cancelled"],
            ])
    return filename


def save_benchmark_to_csv(results: BenchmarkResults, out_dir: str) -> str:
    """Write per-N benchmark aggregates (counts, mean/median times, speedup).

    Returns the path of the written file.
    """
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"benchmark{_build_suffix()}.csv")
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "n",
            "expected_solutions",
            "sequential_solutions",
            "parallel_solutions",
            "sequential_time_mean",
            "sequential_time_median",
            "parallel_time_mean",
            "parallel_time_median",
            "speedup",
        ])
        for N in sorted(results):
            entry = results[N]
            seq = entry.get("sequential_time", {})
            par = entry.get("parallel_time", {})
            writer.writerow([
                N,
                entry.get("expected_solutions"),
                entry.get("sequential_solutions", 0),
                entry.get("parallel_solutions", 0),
                seq.get("mean"),
                seq.get("median"),
                par.get("mean"),
                par.get("median"),
                entry.get("speedup"),
            ])
    return filename
