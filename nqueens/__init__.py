"""Parallel backtracking engine for the N-Queens problem."""

from .backtracking import SearchResult, solve_from
from .backtracking import solve as solve_sequential
from .cancellation import CancellationSignal
from .errors import BranchFailure, InvalidBoardSizeError
from .model import PLACED, REMOVED, UNPLACED, Solution, Step
from .observer import QueueObserver
from .store import SolutionStore
from .task import BranchResult, BranchState, BranchTask
from .utils import conflicts, conflicts_on2, is_legal_partial, is_valid_solution
from .worker import ParallelSolverWorker, WorkerStatus, solve

__all__ = [
    # engine
    "solve",
    "solve_sequential",
    "solve_from",
    "ParallelSolverWorker",
    "WorkerStatus",
    "BranchTask",
    "BranchState",
    "BranchResult",
    "SearchResult",
    "SolutionStore",
    "CancellationSignal",
    "QueueObserver",
    # types
    "Solution",
    "Step",
    "UNPLACED",
    "PLACED",
    "REMOVED",
    # errors
    "InvalidBoardSizeError",
    "BranchFailure",
    # utils
    "conflicts",
    "conflicts_on2",
    "is_valid_solution",
    "is_legal_partial",
]
