"""Tests for placement validation helpers and value types."""

from pathlib import Path
import random
import sys
import unittest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from nqueens.model import UNPLACED, Solution
from nqueens.utils import as_solution_set, conflicts, conflicts_on2, is_legal_partial, is_valid_solution


class ConflictTests(unittest.TestCase):

    def test_fast_and_reference_counts_agree(self):
        rng = random.Random(7)
        for _ in range(200):
            n = rng.randint(1, 10)
            board = [rng.choice([UNPLACED] + list(range(n))) for _ in range(n)]
            self.assertEqual(conflicts(board), conflicts_on2(board), board)

    def test_known_conflicts(self):
        self.assertEqual(conflicts([0, 1, 2, 3]), 6)
        self.assertEqual(conflicts([1, 3, 0, 2]), 0)
        self.assertEqual(conflicts([0, 0, UNPLACED]), 1)


class ValidityTests(unittest.TestCase):

    def test_valid_solutions(self):
        self.assertTrue(is_valid_solution([0]))
        self.assertTrue(is_valid_solution([1, 3, 0, 2]))
        self.assertTrue(is_valid_solution([]))

    def test_invalid_solutions(self):
        self.assertFalse(is_valid_solution([0, 2, 1]))
        self.assertFalse(is_valid_solution([1, 3, 0, UNPLACED]))
        self.assertFalse(is_valid_solution([1, 3, 0, 4]))
        self.assertFalse(is_valid_solution([True, 3, 0, 2]))

    def test_partial_boards(self):
        self.assertTrue(is_legal_partial([UNPLACED] * 5))
        self.assertTrue(is_legal_partial([1, 3, UNPLACED, UNPLACED]))
        self.assertFalse(is_legal_partial([0, 1, UNPLACED, UNPLACED]))

    def test_solution_set_normalization(self):
        found = as_solution_set([Solution((1, 3, 0, 2)), [1, 3, 0, 2], (2, 0, 3, 1)])
        self.assertEqual(found, {(1, 3, 0, 2), (2, 0, 3, 1)})


class SolutionTests(unittest.TestCase):

    def test_solution_is_immutable(self):
        solution = Solution.from_placement([1, 3, 0, 2])
        with self.assertRaises(AttributeError):
            solution.columns = (0,)  # type: ignore[misc]
        self.assertEqual(solution.n, 4)
        self.assertEqual(solution[1], 3)
        self.assertEqual(str(solution), "[1, 3, 0, 2]")

    def test_from_partial_placement_rejected(self):
        with self.assertRaises(ValueError):
            Solution.from_placement([1, UNPLACED])

    def test_render(self):
        self.assertEqual(Solution((1, 3, 0, 2)).render(), ". Q . .\n. . . Q\nQ . . .\n. . Q .")


if __name__ == "__main__":
    unittest.main()
