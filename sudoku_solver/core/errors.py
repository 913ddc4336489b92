"""Exception hierarchy for puzzle construction, propagation and search."""


class SudokuError(Exception):
    """Base class for all solver errors."""


class MalformedPuzzle(SudokuError, ValueError):
    """Input is not a sequence of 81 well-formed cell specifications."""


class ConstraintViolation(SudokuError):
    """
    A cell's candidate set was driven empty.

    Inside a search branch this means the trial value was wrong and the
    next candidate should be tried. Outside any branch it means the
    puzzle itself cannot be satisfied.
    """

    def __init__(self, message: str, row: int = -1, col: int = -1):
        super().__init__(message)
        self.row = row
        self.col = col


class InvalidAssignment(SudokuError):
    """A cell was forced to a value that is not one of its candidates."""


class Unsolvable(SudokuError):
    """No completed grid satisfies the puzzle."""


class BranchLimitExceeded(Unsolvable):
    """The search tried more trial values than the configured budget allows."""

    def __init__(self, limit: int):
        super().__init__(f"Search exceeded the limit of {limit} branches")
        self.limit = limit
