"""Tests for the parallel worker and its callback contract."""

from pathlib import Path
import sys
import threading
import time
import unittest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from nqueens.errors import BranchFailure, InvalidBoardSizeError
from nqueens.model import PLACED
from nqueens.observer import Finished, QueueObserver
from nqueens.store import SolutionStore
from nqueens.utils import is_legal_partial, is_valid_solution
from nqueens.worker import ParallelSolverWorker, WorkerStatus, solve

TIMEOUT = 60.0


class Recorder:
    """Collects callbacks from concurrent branch threads."""

    def __init__(self):
        self.lock = threading.Lock()
        self.steps = []
        self.solutions = []
        self.finished = 0
        self.errors = []
        self.terminal = threading.Event()

    def on_step(self, step):
        with self.lock:
            self.steps.append(step)

    def on_solution(self, solution):
        with self.lock:
            self.solutions.append(solution)

    def on_finished(self):
        with self.lock:
            self.finished += 1
        self.terminal.set()

    def on_error(self, error):
        with self.lock:
            self.errors.append(error)
        self.terminal.set()

    def callbacks(self):
        return {
            "on_step": self.on_step,
            "on_solution": self.on_solution,
            "on_finished": self.on_finished,
            "on_error": self.on_error,
        }


def run_to_completion(n, find_all, max_workers=4, store=None):
    recorder = Recorder()
    worker = solve(n, find_all, store=store, max_workers=max_workers, **recorder.callbacks())
    if not recorder.terminal.wait(TIMEOUT):
        raise AssertionError("solve did not terminate")
    worker.wait(TIMEOUT)
    return worker, recorder


class FindAllTests(unittest.TestCase):

    def test_known_counts(self):
        for n, expected in ((1, 1), (2, 0), (3, 0), (4, 2), (6, 4), (8, 92)):
            with self.subTest(n=n):
                worker, recorder = run_to_completion(n, True)
                self.assertIs(worker.status, WorkerStatus.FINISHED)
                self.assertEqual(recorder.finished, 1)
                self.assertEqual(recorder.errors, [])
                self.assertEqual(len(recorder.solutions), expected)

    def test_n1_solution(self):
        _, recorder = run_to_completion(1, True)
        self.assertEqual([s.to_list() for s in recorder.solutions], [[0]])

    def test_n4_solutions_are_valid(self):
        _, recorder = run_to_completion(4, True)
        found = {s.columns for s in recorder.solutions}
        self.assertEqual(found, {(1, 3, 0, 2), (2, 0, 3, 1)})
        for solution in recorder.solutions:
            self.assertTrue(is_valid_solution(solution.columns))

    def test_store_matches_callbacks(self):
        store = SolutionStore()
        worker, recorder = run_to_completion(7, True, store=store)
        self.assertIs(worker.store, store)
        self.assertEqual(store.size(), len(recorder.solutions))
        self.assertEqual(set(store.get_all()), set(recorder.solutions))

    def test_repeated_runs_give_equal_sets(self):
        _, first = run_to_completion(8, True)
        _, second = run_to_completion(8, True, max_workers=2)
        self.assertEqual({s.columns for s in first.solutions}, {s.columns for s in second.solutions})

    def test_solutions_within_a_branch_are_lexicographic(self):
        store = SolutionStore()
        run_to_completion(8, True, store=store)
        by_branch = {}
        for solution in store.get_all():
            by_branch.setdefault(solution[0], []).append(solution.columns)
        for column, solutions in by_branch.items():
            self.assertEqual(solutions, sorted(solutions), f"branch {column}")

    def test_every_step_snapshot_is_legal(self):
        _, recorder = run_to_completion(6, True)
        self.assertTrue(recorder.steps)
        for step in recorder.steps:
            self.assertTrue(is_legal_partial(step.placement))
            if step.kind == PLACED:
                self.assertEqual(step.placement[step.row], step.column)

    def test_branch_results_cover_every_column(self):
        worker, _ = run_to_completion(5, True)
        self.assertEqual([r.first_column for r in worker.results], list(range(5)))
        self.assertEqual(sum(len(r.solutions) for r in worker.results), 10)


class FindOneTests(unittest.TestCase):

    def test_exactly_one_solution(self):
        for n in (1, 4, 5, 8, 10):
            with self.subTest(n=n):
                worker, recorder = run_to_completion(n, False)
                self.assertEqual(len(recorder.solutions), 1)
                self.assertTrue(is_valid_solution(recorder.solutions[0].columns))
                self.assertEqual(worker.store.size(), 1)
                self.assertEqual(recorder.finished, 1)
                self.assertTrue(worker.solution_found)

    def test_no_solution_board_finishes_empty(self):
        worker, recorder = run_to_completion(3, False)
        self.assertIs(worker.status, WorkerStatus.FINISHED)
        self.assertEqual(recorder.solutions, [])
        self.assertFalse(worker.solution_found)


class ValidationTests(unittest.TestCase):

    def test_invalid_sizes_raise_synchronously(self):
        recorder = Recorder()
        for n in (0, -1, 33, 2.5, "8", True):
            with self.subTest(n=n):
                with self.assertRaises(InvalidBoardSizeError):
                    solve(n, True, **recorder.callbacks())
        self.assertEqual(recorder.errors, [])
        self.assertEqual(recorder.finished, 0)

    def test_invalid_pool_size_rejected_before_running(self):
        for size in (0, -1, 2.5, True):
            with self.subTest(size=size):
                with self.assertRaises(ValueError):
                    ParallelSolverWorker(max_workers=size)

        worker = ParallelSolverWorker(max_workers=2)
        worker.max_workers = -1
        with self.assertRaises(ValueError):
            worker.start(6, True)
        self.assertIs(worker.status, WorkerStatus.IDLE)
        self.assertTrue(worker.wait(0))

        worker.max_workers = 2
        done = threading.Event()
        worker.start(6, True, on_finished=done.set)
        self.assertTrue(done.wait(TIMEOUT))
        self.assertTrue(worker.wait(TIMEOUT))
        self.assertEqual(worker.store.size(), 4)

    def test_start_while_running_raises(self):
        gate = threading.Event()
        worker = ParallelSolverWorker(max_workers=2)
        worker.start(8, True, on_step=lambda step: gate.wait(TIMEOUT))
        try:
            with self.assertRaises(RuntimeError):
                worker.start(8, True)
        finally:
            worker.cancel()
            gate.set()
            worker.wait(TIMEOUT)
        self.assertIs(worker.status, WorkerStatus.CANCELLED)


class FailureTests(unittest.TestCase):

    def test_failing_callback_reports_one_error(self):
        recorder = Recorder()

        def explode(solution):
            raise RuntimeError("renderer crashed")

        worker = solve(
            6,
            True,
            on_solution=explode,
            on_finished=recorder.on_finished,
            on_error=recorder.on_error,
            max_workers=4,
        )
        self.assertTrue(recorder.terminal.wait(TIMEOUT))
        worker.wait(TIMEOUT)
        time.sleep(0.05)
        self.assertEqual(len(recorder.errors), 1)
        self.assertEqual(recorder.finished, 0)
        error = recorder.errors[0]
        self.assertIsInstance(error, BranchFailure)
        self.assertIsInstance(error.__cause__, RuntimeError)
        self.assertIs(worker.status, WorkerStatus.FAILED)
        self.assertIs(worker.error, error)


class CancellationTests(unittest.TestCase):

    def test_cancel_stops_events_and_is_idempotent(self):
        recorder = Recorder()
        started = threading.Event()

        def on_step(step):
            recorder.on_step(step)
            started.set()

        worker = solve(
            12,
            True,
            on_step=on_step,
            on_solution=recorder.on_solution,
            on_finished=recorder.on_finished,
            on_error=recorder.on_error,
            max_workers=4,
        )
        self.assertTrue(started.wait(TIMEOUT))
        worker.cancel()
        with recorder.lock:
            at_cancel = len(recorder.steps) + len(recorder.solutions)
        self.assertTrue(worker.wait(TIMEOUT))
        with recorder.lock:
            after_quiescence = len(recorder.steps) + len(recorder.solutions)
        # At most one event per pool thread can be in flight when cancel() returns.
        self.assertLessEqual(after_quiescence - at_cancel, 4)

        time.sleep(0.1)
        with recorder.lock:
            self.assertEqual(len(recorder.steps) + len(recorder.solutions), after_quiescence)

        worker.cancel()
        self.assertIs(worker.status, WorkerStatus.CANCELLED)
        self.assertEqual(recorder.finished, 0)
        self.assertEqual(recorder.errors, [])

    def test_cancel_after_finish_is_noop(self):
        worker, recorder = run_to_completion(5, True)
        worker.cancel()
        worker.cancel()
        self.assertIs(worker.status, WorkerStatus.FINISHED)
        self.assertEqual(recorder.finished, 1)

    def test_cancel_before_start_does_not_affect_next_run(self):
        worker = ParallelSolverWorker(max_workers=2)
        worker.cancel()
        done = threading.Event()
        worker.start(6, True, on_finished=done.set)
        self.assertTrue(done.wait(TIMEOUT))
        worker.wait(TIMEOUT)
        self.assertEqual(worker.store.size(), 4)

    def test_restart_after_cancel_keeps_runs_apart(self):
        store = SolutionStore()
        worker = ParallelSolverWorker(store=store, max_workers=2)
        old_gate = threading.Event()
        old_blocked = threading.Event()
        old_finished = []

        def old_step(step):
            old_blocked.set()
            old_gate.wait(TIMEOUT)

        worker.start(10, True, on_step=old_step, on_finished=lambda: old_finished.append(1))
        self.assertTrue(old_blocked.wait(TIMEOUT))
        worker.cancel()

        new_gate = threading.Event()
        new_done = threading.Event()
        new_finished = []

        def new_finish():
            new_finished.append(1)
            new_done.set()

        worker.start(6, True, on_step=lambda step: new_gate.wait(TIMEOUT), on_finished=new_finish)
        try:
            # Let the cancelled run unwind while the new one is held.
            old_gate.set()
            time.sleep(0.2)
            self.assertIs(worker.status, WorkerStatus.RUNNING)
            self.assertFalse(worker.wait(0))
            self.assertEqual(worker.results, [])
            self.assertEqual(old_finished, [])
        finally:
            old_gate.set()
            new_gate.set()

        self.assertTrue(new_done.wait(TIMEOUT))
        self.assertTrue(worker.wait(TIMEOUT))
        self.assertEqual(new_finished, [1])
        self.assertEqual(old_finished, [])
        self.assertIs(worker.status, WorkerStatus.FINISHED)
        self.assertEqual([r.first_column for r in worker.results], list(range(6)))
        self.assertEqual(store.size(), 4)

    def test_worker_can_be_reused_after_a_run(self):
        store = SolutionStore()
        worker = ParallelSolverWorker(store=store, max_workers=2)
        for _ in range(2):
            store.clear()
            done = threading.Event()
            worker.start(6, True, on_finished=done.set)
            self.assertTrue(done.wait(TIMEOUT))
            worker.wait(TIMEOUT)
            self.assertEqual(store.size(), 4)


class QueueObserverTests(unittest.TestCase):

    def test_events_are_drained_on_one_thread(self):
        observer = QueueObserver()
        worker = solve(6, True, max_workers=4, **observer.callbacks())
        events = list(observer.events(timeout=TIMEOUT))
        worker.wait(TIMEOUT)
        self.assertIsInstance(events[-1], Finished)
        self.assertEqual(observer.solution_count, 4)
        self.assertEqual(observer.solution_count, worker.store.size())
        self.assertEqual(len(events), observer.step_count + observer.solution_count + 1)

    def test_steps_can_be_counted_without_queueing(self):
        observer = QueueObserver(record_steps=False)
        worker = solve(5, True, **observer.callbacks())
        events = list(observer.events(timeout=TIMEOUT))
        worker.wait(TIMEOUT)
        self.assertGreater(observer.step_count, 0)
        self.assertEqual(len(events), 10 + 1)
        self.assertEqual(observer.drain(), [])


if __name__ == "__main__":
    unittest.main()
