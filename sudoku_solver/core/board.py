"""Sudoku grid representation used for reading puzzles and printing results."""

from __future__ import annotations
import numpy as np
from typing import TYPE_CHECKING, List, Optional, Sequence

from .cell import SIZE, BOX_SIZE
from .errors import MalformedPuzzle

if TYPE_CHECKING:
    from ..solvers.constraint_board import ConstraintBoard


UNKNOWN_MARKERS = frozenset("?.0")


class SudokuBoard:
    """
    A 9x9 grid of known values, 0 marking an empty cell.

    This is the outward-facing form of a puzzle: it parses the textual
    formats users type in, converts to and from the flat list of 81 cell
    specifications the solver consumes, and pretty-prints grids.
    """

    def __init__(self, grid: Optional[np.ndarray] = None):
        """
        Initialize a board.

        Args:
            grid: Optional 9x9 array of values 0-9. If None, creates an empty board.
        """
        if grid is not None:
            if grid.shape != (SIZE, SIZE):
                raise MalformedPuzzle(f"Grid shape must be ({SIZE}, {SIZE}), got {grid.shape}")
            if np.any((grid < 0) | (grid > SIZE)):
                raise MalformedPuzzle(f"Grid values must be 0-{SIZE}")
            self.grid = grid.copy().astype(np.int32)
        else:
            self.grid = np.zeros((SIZE, SIZE), dtype=np.int32)

    def copy(self) -> SudokuBoard:
        """Create a deep copy of the board."""
        new_board = SudokuBoard()
        new_board.grid = self.grid.copy()
        return new_board

    def get(self, row: int, col: int) -> int:
        """Get value at position (row, col). 0 means empty."""
        return int(self.grid[row, col])

    def set(self, row: int, col: int, value: int) -> None:
        """Set value at position (row, col). Use 0 to clear."""
        if value < 0 or value > SIZE:
            raise ValueError(f"Value must be 0-{SIZE}, got {value}")
        self.grid[row, col] = value

    def get_row(self, row: int) -> np.ndarray:
        return self.grid[row, :]

    def get_col(self, col: int) -> np.ndarray:
        return self.grid[:, col]

    def get_box(self, box: int) -> np.ndarray:
        """Get all values in box number 0-8, numbered row-major."""
        box_row = (box // BOX_SIZE) * BOX_SIZE
        box_col = (box % BOX_SIZE) * BOX_SIZE
        return self.grid[box_row:box_row + BOX_SIZE,
                         box_col:box_col + BOX_SIZE].flatten()

    def count_empty(self) -> int:
        return int(np.sum(self.grid == 0))

    def count_filled(self) -> int:
        return int(np.sum(self.grid != 0))

    def is_complete(self) -> bool:
        return self.count_empty() == 0

    def is_valid(self) -> bool:
        """
        Check that no row, column or box repeats a value.
        Does not check if the grid is complete.
        """
        units = [self.get_row(i) for i in range(SIZE)]
        units += [self.get_col(i) for i in range(SIZE)]
        units += [self.get_box(i) for i in range(SIZE)]
        for unit in units:
            non_zero = unit[unit != 0]
            if len(non_zero) != len(set(non_zero.tolist())):
                return False
        return True

    def is_solved(self) -> bool:
        """Check if the puzzle is completely and correctly filled in."""
        return self.is_complete() and self.is_valid()

    def to_cell_specs(self) -> List[Optional[int]]:
        """Flatten to 81 row-major cell specs: the given value, or None if unknown."""
        return [int(v) if v != 0 else None for v in self.grid.flatten()]

    @classmethod
    def from_cell_specs(cls, specs: Sequence[Optional[int]]) -> SudokuBoard:
        if len(specs) != SIZE * SIZE:
            raise MalformedPuzzle(f"Expected {SIZE * SIZE} cells, got {len(specs)}")
        values = [0 if spec is None else spec for spec in specs]
        return cls(np.array(values, dtype=np.int32).reshape(SIZE, SIZE))

    @classmethod
    def from_constraint_board(cls, board: ConstraintBoard) -> SudokuBoard:
        """Take the solved cells of a constraint board; unsolved cells become 0."""
        return cls.from_cell_specs([cell.value for cell in board.cells])

    def to_string(self, separator: str = "") -> str:
        """
        Convert board to a compact row-major string.

        Args:
            separator: Placed between cells, e.g. "," for a comma-joined list.
        """
        return separator.join(str(v) for v in self.grid.flatten())

    @classmethod
    def from_string(cls, s: str) -> SudokuBoard:
        """
        Create a board from a string representation.

        Whitespace is ignored, so both a single 81-character line and a
        spaced-out multi-line grid are accepted.

        Args:
            s: 81 cell characters: 1-9 for givens, '?', '.' or '0' for unknowns.

        Raises:
            MalformedPuzzle: On a wrong cell count or unexpected characters.
        """
        chars = [c for c in s if not c.isspace()]
        if len(chars) != SIZE * SIZE:
            raise MalformedPuzzle(f"Puzzle must have {SIZE * SIZE} cells, got {len(chars)}")

        specs: List[Optional[int]] = []
        for idx, c in enumerate(chars):
            if c in UNKNOWN_MARKERS:
                specs.append(None)
            elif c in "123456789":
                specs.append(int(c))
            else:
                raise MalformedPuzzle(
                    f"Invalid character {c!r} at cell {idx}: "
                    "use 1-9 for givens and '?', '.' or '0' for unknowns"
                )
        return cls.from_cell_specs(specs)

    def __str__(self) -> str:
        """Pretty-print the board."""
        lines = []
        horizontal_sep = '+' + (('-' * (BOX_SIZE * 2 + 1)) + '+') * BOX_SIZE

        for i in range(SIZE):
            if i % BOX_SIZE == 0:
                lines.append(horizontal_sep)

            row_str = '|'
            for j in range(SIZE):
                val = self.grid[i, j]
                row_str += ' .' if val == 0 else f' {val}'
                if (j + 1) % BOX_SIZE == 0:
                    row_str += ' |'

            lines.append(row_str)

        lines.append(horizontal_sep)
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return f"SudokuBoard(filled={self.count_filled()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SudokuBoard):
            return False
        return np.array_equal(self.grid, other.grid)


def format_candidates(board: ConstraintBoard) -> str:
    """
    Render every cell's candidates, for boards that are only partly solved.

    Each cell is printed as its candidate digits padded to a common width,
    with separators between 3x3 blocks.
    """
    width = max(len(cell) for cell in board.cells)
    texts = ["".join(str(v) for v in sorted(cell.candidates)).ljust(width) for cell in board.cells]

    block = "-" * (BOX_SIZE * (width + 1) + 1)
    horizontal_sep = "+" + "+".join([block] * BOX_SIZE) + "+"
    lines = []
    for i in range(SIZE):
        if i % BOX_SIZE == 0:
            lines.append(horizontal_sep)
        parts = []
        for b in range(BOX_SIZE):
            start = i * SIZE + b * BOX_SIZE
            parts.append(" " + " ".join(texts[start:start + BOX_SIZE]) + " ")
        lines.append("|" + "|".join(parts) + "|")
    lines.append(horizontal_sep)
    return "\n".join(lines)
