"""Global settings for the N-Queens engine and its command-line pipeline.

This module centralizes tunable constants used across the package. Values can
be overridden at runtime via the configuration loader in
`nqueens.analysis.cli.apply_configuration`.
"""
from __future__ import annotations

import os
from datetime import datetime
from typing import List, Optional

# Supported board sizes; start() rejects anything outside this range
MIN_BOARD_SIZE: int = 1
MAX_BOARD_SIZE: int = 32

# Board size used by the CLI when --n is not given
DEFAULT_N: int = 8

# Branch pool size (one thread per available core)
NUM_THREADS: int = max(1, os.cpu_count() or 1)

# Wall-clock limit for a single CLI solve in seconds (None = no limit)
SOLVE_TIME_LIMIT: Optional[float] = None

# Board sizes for the sequential-vs-parallel benchmark (find-all)
BENCHMARK_N_VALUES: List[int] = [4, 5, 6, 7, 8, 9, 10]

# Repetitions per N in the benchmark
BENCHMARK_RUNS: int = 3

# Output directory for CSV exports and charts
OUT_DIR: str = "results_nqueens"

# Output naming policy --------------------------------------------------------

# When True, exports include a datestamp suffix (e.g., _20251113-142530)
# applied consistently across all artifacts produced within the same run.
DATE_IN_FILENAMES: bool = True

# Unique run identifier used for filename stamping; set once at import time.
RUN_ID: str = datetime.now().strftime("%Y%m%d-%H%M%S")

# Optional run label appended to filenames to avoid overwriting outputs
RUN_TAG: Optional[str] = None


def set_board_limits(minimum: int = 1, maximum: int = 32) -> None:
    """Configure the accepted board-size range.

    Raises
    ------
    ValueError
        If ``minimum`` is below 0 or greater than ``maximum``.
    """
    global MIN_BOARD_SIZE, MAX_BOARD_SIZE
    if minimum < 0 or minimum > maximum:
        raise ValueError(f"Invalid board limits: [{minimum}, {maximum}]")
    MIN_BOARD_SIZE = minimum
    MAX_BOARD_SIZE = maximum


def set_num_threads(threads: Optional[int]) -> None:
    """Set the branch pool size; ``None`` or values < 1 fall back to the core count."""
    global NUM_THREADS
    if threads is None or threads < 1:
        NUM_THREADS = max(1, os.cpu_count() or 1)
    else:
        NUM_THREADS = int(threads)
