"""Validation helpers for N-Queens placements.

Boards are encoded as a 1D sequence where ``board[row] = column``; partial
boards use ``UNPLACED`` (-1) for empty rows. The solver never calls these
helpers on its hot path; they exist for tests, the CLI ``--validate`` flag
and the benchmark pipeline.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence, Set, Tuple

from .model import UNPLACED


def conflicts(board: Sequence[int]) -> int:
    """Count conflicting queen pairs among placed rows in O(N).

    Rows holding ``UNPLACED`` are ignored.
    """
    column_count: Counter[int] = Counter()
    diag_sum: Counter[int] = Counter()
    diag_diff: Counter[int] = Counter()

    for row, column in enumerate(board):
        if column == UNPLACED:
            continue
        column_count[column] += 1
        diag_sum[row + column] += 1
        diag_diff[row - column] += 1

    def _pairs(counter: Counter[int]) -> int:
        total = 0
        for count in counter.values():
            if count > 1:
                total += count * (count - 1) // 2
        return total

    return _pairs(column_count) + _pairs(diag_sum) + _pairs(diag_diff)


def conflicts_on2(board: Sequence[int]) -> int:
    """Count conflicting queen pairs in O(N^2).

    Reference implementation used to cross-check ``conflicts`` in tests.
    """
    n = len(board)
    conflicts_count = 0
    for i in range(n):
        if board[i] == UNPLACED:
            continue
        for j in range(i + 1, n):
            if board[j] == UNPLACED:
                continue
            if board[i] == board[j] or abs(board[i] - board[j]) == abs(i - j):
                conflicts_count += 1
    return conflicts_count


def _in_range(board: Sequence[int], allow_unplaced: bool) -> bool:
    n = len(board)
    for column in board:
        if isinstance(column, bool) or not isinstance(column, int):
            return False
        if column == UNPLACED and allow_unplaced:
            continue
        if column < 0 or column >= n:
            return False
    return True


def is_valid_solution(board: Sequence[int]) -> bool:
    """Return True if ``board`` is a complete, non-attacking placement.

    Contract
    - Input: sequence of length N where board[row] = column (0-based)
    - Valid if: every row is placed, all columns in range, zero conflicts
    - The empty board (N=0) is the trivial solution and is valid
    """
    if not _in_range(board, allow_unplaced=False):
        return False
    return conflicts(board) == 0


def is_legal_partial(board: Sequence[int]) -> bool:
    """Return True if the placed rows of a partial ``board`` do not attack each other."""
    if not _in_range(board, allow_unplaced=True):
        return False
    return conflicts(board) == 0


def as_solution_set(solutions: Iterable[Sequence[int]]) -> Set[Tuple[int, ...]]:
    """Normalize solutions (lists, tuples or ``Solution`` objects) into a set of tuples."""
    return {tuple(s) for s in solutions}
