"""
Analysis and orchestration package for the N-Queens engine.

This package contains:
- stats: typed summaries and aggregation helpers
- experiments: blocking parallel solve and the sequential-vs-parallel benchmark
- reporting: CSV exports of solutions, branch summaries and benchmarks
- plots: chart utilities
- cli: top-level pipeline entry points and argument parser
"""

from .stats import (
    StatsSummary,
    BranchRecord,
    RunSummary,
    BenchmarkRecord,
    BenchmarkEntry,
    BenchmarkResults,
    compute_detailed_statistics,
    summarize_branches,
    summarize_benchmark_runs,
    ProgressPrinter,
)

__all__ = [
    # types
    "StatsSummary",
    "BranchRecord",
    "RunSummary",
    "BenchmarkRecord",
    "BenchmarkEntry",
    "BenchmarkResults",
    # utils
    "compute_detailed_statistics",
    "summarize_branches",
    "summarize_benchmark_runs",
    "ProgressPrinter",
]
