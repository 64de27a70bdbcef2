"""Value types shared by the solver, the branch tasks and the worker.

Representation
--------------
Boards are encoded as a 1D sequence where ``placement[row] = column``; the
sentinel ``UNPLACED`` (-1) marks a row without a queen. Solutions are always
fully filled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

UNPLACED = -1

PLACED = "placed"
REMOVED = "removed"

Placement = Tuple[int, ...]


@dataclass(frozen=True)
class Solution:
    """Immutable, fully-filled placement of N non-attacking queens."""

    columns: Placement

    @classmethod
    def from_placement(cls, placement: Sequence[int]) -> "Solution":
        """Copy ``placement`` into a new Solution.

        Raises
        ------
        ValueError
            If any row is still ``UNPLACED``.
        """
        columns = tuple(int(c) for c in placement)
        if any(c == UNPLACED for c in columns):
            raise ValueError(f"Cannot build a solution from a partial placement: {list(columns)}")
        return cls(columns)

    @property
    def n(self) -> int:
        return len(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[int]:
        return iter(self.columns)

    def __getitem__(self, row: int) -> int:
        return self.columns[row]

    def to_list(self) -> List[int]:
        return list(self.columns)

    def render(self, queen: str = "Q", empty: str = ".") -> str:
        """Return an ASCII board, one line per row."""
        lines = []
        for column in self.columns:
            cells = [empty] * self.n
            cells[column] = queen
            lines.append(" ".join(cells))
        return "\n".join(lines)

    def __str__(self) -> str:
        return str(list(self.columns))


@dataclass(frozen=True)
class Step:
    """A single search event: a queen placed on or removed from ``(row, column)``.

    ``placement`` is a snapshot of the board taken right after the change.
    """

    kind: str
    row: int
    column: int
    placement: Placement
