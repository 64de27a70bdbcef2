"""Exceptions raised by the N-Queens engine."""

from __future__ import annotations

from typing import Optional


class InvalidBoardSizeError(ValueError):
    """Raised synchronously when a board size is outside the supported range."""

    def __init__(self, n: object, minimum: int, maximum: int):
        self.n = n
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"Board size must be an integer in [{minimum}, {maximum}], got {n!r}")


class BranchFailure(RuntimeError):
    """Unexpected fault inside one search branch.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, first_column: int, detail: Optional[str] = None):
        self.first_column = first_column
        message = f"Branch with row 0 at column {first_column} failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)


def validate_board_size(n: object, minimum: int, maximum: int) -> int:
    """Return ``n`` if it is an int inside ``[minimum, maximum]``.

    Raises
    ------
    InvalidBoardSizeError
        For booleans, non-integers, and out-of-range values.
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidBoardSizeError(n, minimum, maximum)
    if n < minimum or n > maximum:
        raise InvalidBoardSizeError(n, minimum, maximum)
    return n
