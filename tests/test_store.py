"""Tests for the thread-safe solution store."""

from pathlib import Path
import sys
import threading
import unittest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from nqueens.model import Solution
from nqueens.store import SolutionStore


class SolutionStoreTests(unittest.TestCase):

    def test_add_preserves_order(self):
        store = SolutionStore()
        first = Solution((1, 3, 0, 2))
        second = Solution((2, 0, 3, 1))
        store.add(first)
        store.add(second)
        self.assertEqual(store.size(), 2)
        self.assertEqual(len(store), 2)
        self.assertIs(store.get(0), first)
        self.assertIs(store.get(1), second)
        self.assertEqual(list(store), [first, second])

    def test_get_is_bounds_checked(self):
        store = SolutionStore()
        store.add(Solution((0,)))
        with self.assertRaises(IndexError):
            store.get(1)
        with self.assertRaises(IndexError):
            store.get(-1)

    def test_snapshot_unaffected_by_later_adds(self):
        store = SolutionStore()
        store.add(Solution((0,)))
        snapshot = store.get_all()
        store.add(Solution((0,)))
        self.assertIsInstance(snapshot, tuple)
        self.assertEqual(len(snapshot), 1)
        self.assertEqual(store.size(), 2)

    def test_clear(self):
        store = SolutionStore()
        store.add(Solution((0,)))
        store.clear()
        self.assertEqual(store.size(), 0)
        self.assertEqual(store.get_all(), ())

    def test_concurrent_adds_keep_per_thread_order(self):
        store = SolutionStore()
        per_thread = 500
        threads = []

        def producer(tag):
            for index in range(per_thread):
                store.add(Solution((tag, index)))

        for tag in range(4):
            threads.append(threading.Thread(target=producer, args=(tag,)))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        solutions = store.get_all()
        self.assertEqual(len(solutions), 4 * per_thread)
        for tag in range(4):
            indices = [s.columns[1] for s in solutions if s.columns[0] == tag]
            self.assertEqual(indices, list(range(per_thread)))


if __name__ == "__main__":
    unittest.main()
