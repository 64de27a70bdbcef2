"""Tests for single-branch tasks."""

from pathlib import Path
import sys
import unittest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from nqueens.cancellation import CancellationSignal
from nqueens.task import BranchState, BranchTask, TERMINAL_STATES


class BranchTaskTests(unittest.TestCase):

    def test_find_all_branch_forwards_every_solution(self):
        received = []
        task = BranchTask(6, 1, True, None, received.append, CancellationSignal())
        self.assertIs(task.state, BranchState.PENDING)
        result = task.run()
        self.assertIs(result.state, BranchState.COMPLETED)
        self.assertEqual([s.columns for s in received], [(1, 3, 5, 0, 2, 4)])
        self.assertEqual(result.solutions, received)
        self.assertGreater(result.nodes, 0)

    def test_find_all_never_sets_signal(self):
        signal = CancellationSignal()
        BranchTask(4, 1, True, None, None, signal).run()
        self.assertFalse(signal.is_set)

    def test_find_one_winner_sets_signal_and_stops_all(self):
        signal = CancellationSignal()
        received = []
        stops = []
        task = BranchTask(8, 0, False, None, received.append, signal, stop_all=lambda: stops.append(1))
        result = task.run()
        self.assertTrue(signal.is_set)
        self.assertEqual([s.to_list() for s in received], [[0, 4, 7, 5, 2, 6, 1, 3]])
        self.assertEqual(stops, [1])
        self.assertIs(result.state, BranchState.COMPLETED)
        self.assertFalse(result.cancelled)

    def test_find_one_skipped_when_signal_already_set(self):
        signal = CancellationSignal()
        signal.set()
        steps = []
        task = BranchTask(8, 3, False, steps.append, None, signal)
        result = task.run()
        self.assertIs(result.state, BranchState.SKIPPED)
        self.assertEqual(result.solutions, [])
        self.assertEqual(steps, [])

    def test_branch_without_solution_completes(self):
        task = BranchTask(4, 0, False, None, None, CancellationSignal())
        result = task.run()
        self.assertIs(result.state, BranchState.COMPLETED)
        self.assertEqual(result.solutions, [])

    def test_failure_is_recorded_and_reraised(self):
        def explode(solution):
            raise RuntimeError("sink failed")

        task = BranchTask(4, 1, True, None, explode, CancellationSignal())
        with self.assertRaises(RuntimeError):
            task.run()
        self.assertIs(task.state, BranchState.FAILED)
        self.assertIsInstance(task.error, RuntimeError)
        self.assertIn(task.state, TERMINAL_STATES)

    def test_task_runs_only_once(self):
        task = BranchTask(4, 1, True, None, None, CancellationSignal())
        task.run()
        with self.assertRaises(RuntimeError):
            task.run()

    def test_first_column_out_of_range(self):
        with self.assertRaises(ValueError):
            BranchTask(4, 4, True, None, None, CancellationSignal())


if __name__ == "__main__":
    unittest.main()
