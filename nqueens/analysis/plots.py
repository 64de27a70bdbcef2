"""Visualization utilities for solve and benchmark outputs.

Overview
--------
Plotting helpers that turn branch summaries and benchmark aggregates into PNG
charts. If the plotting stack (matplotlib/numpy, optionally seaborn) is not
importable, public functions print a short message and return so that the CLI
pipeline can continue.

Chart map
---------
- branches_N{N}_{all|first}.png: Work and yield per branch
    - X: column of the row-0 queen. Left Y: placed queens (nodes).
      Right Y: solutions found by the branch.
    - Shows how unevenly the search space splits across branches; for
      symmetric boards the profile mirrors around the center column.
- benchmark_time_vs_N.png: Sequential vs parallel enumeration time
    - X: N. Y: mean wall-clock time [s] (log scale), error bars = std.
- benchmark_speedup_vs_N.png: Parallel speedup vs N
    - X: N. Y: mean sequential time / mean parallel time.
"""
from __future__ import annotations

import os
from typing import Any, List, Optional, cast

from nqueens import settings

try:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt  # type: ignore
    import numpy as np  # type: ignore
    _PLOTS_AVAILABLE = True
except Exception:
    plt = cast(Any, None)  # type: ignore
    np = cast(Any, None)  # type: ignore
    _PLOTS_AVAILABLE = False

try:
    import seaborn as sns  # type: ignore
except Exception:
    sns = None  # type: ignore

from .stats import BenchmarkResults, RunSummary


def _date_suffix() -> str:
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


def _apply_style() -> None:
    if sns is not None:
        sns.set_theme(style="whitegrid")


def plot_branch_profile(summary: RunSummary, out_dir: str) -> Optional[str]:
    """Bar chart of nodes and solutions per branch for one parallel run.

    Parameters
    ----------
    summary : RunSummary
        Output of ``summarize_branches``.
    out_dir : str
        Destination directory; created if missing.

    Returns
    -------
    str | None
        Path of the PNG, or None when plotting is unavailable or there is
        nothing to plot.
    """
    if not _PLOTS_AVAILABLE:
        print("Plotting skipped: matplotlib not installed.")
        return None
    records = summary["records"]
    if not records:
        return None
    os.makedirs(out_dir, exist_ok=True)
    _apply_style()

    columns = np.array([r["first_column"] for r in records])
    nodes = np.array([r["nodes"] for r in records])
    solutions = np.array([r["solutions"] for r in records])
    width = 0.4

    fig, ax_nodes = plt.subplots(figsize=(12, 6))
    ax_nodes.bar(columns - width / 2, nodes, width=width, color="#1f77b4", label="Nodes (queens placed)")
    ax_nodes.set_xlabel("Column of the row-0 queen")
    ax_nodes.set_ylabel("Nodes")
    ax_nodes.set_xticks(columns)

    ax_solutions = ax_nodes.twinx()
    ax_solutions.bar(columns + width / 2, solutions, width=width, color="#ff7f0e", label="Solutions")
    ax_solutions.set_ylabel("Solutions")
    ax_solutions.grid(False)

    handles = ax_nodes.get_legend_handles_labels()[0] + ax_solutions.get_legend_handles_labels()[0]
    labels = ax_nodes.get_legend_handles_labels()[1] + ax_solutions.get_legend_handles_labels()[1]
    ax_nodes.legend(handles, labels, loc="upper right")

    mode = "all" if summary["find_all"] else "first"
    ax_nodes.set_title(f"Branch profile, N={summary['n']} (find-{mode})")

    fname = os.path.join(out_dir, f"branches_N{summary['n']}_{mode}{_date_suffix()}.png")
    fig.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close(fig)
    return fname


def plot_benchmark(results: BenchmarkResults, out_dir: str) -> List[str]:
    """Time-vs-N and speedup-vs-N charts for a benchmark run.

    Returns the list of written PNG paths (empty when plotting is unavailable).
    """
    if not _PLOTS_AVAILABLE:
        print("Plotting skipped: matplotlib not installed.")
        return []
    if not results:
        return []
    os.makedirs(out_dir, exist_ok=True)
    _apply_style()
    written: List[str] = []

    N_values = sorted(results)
    xs = np.array(N_values)

    def _series(key: str, stat: str) -> Any:
        return np.array([results[N].get(key, {}).get(stat) or 0.0 for N in N_values], dtype=float)

    plt.figure(figsize=(12, 8))
    plt.errorbar(xs, _series("sequential_time", "mean"), yerr=_series("sequential_time", "std"),
                 marker="o", capsize=4, label="Sequential")
    plt.errorbar(xs, _series("parallel_time", "mean"), yerr=_series("parallel_time", "std"),
                 marker="s", capsize=4, label=f"Parallel ({settings.NUM_THREADS} threads)")
    plt.yscale("log")
    plt.xlabel("N (board size)")
    plt.ylabel("Mean time to enumerate all solutions [s]")
    plt.title("Enumeration time vs N")
    plt.legend()
    fname = os.path.join(out_dir, f"benchmark_time_vs_N{_date_suffix()}.png")
    plt.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close()
    written.append(fname)

    speedups = [results[N].get("speedup") for N in N_values]
    if any(s is not None for s in speedups):
        plt.figure(figsize=(12, 8))
        plt.plot(xs, [s if s is not None else np.nan for s in speedups], marker="o")
        plt.axhline(1.0, color="gray", linestyle="--", linewidth=1)
        plt.xlabel("N (board size)")
        plt.ylabel("Speedup (sequential / parallel)")
        plt.title("Parallel speedup vs N")
        fname = os.path.join(out_dir, f"benchmark_speedup_vs_N{_date_suffix()}.png")
        plt.savefig(fname, bbox_inches="tight", dpi=150)
        plt.close()
        written.append(fname)

    return written
