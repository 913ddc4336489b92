"""Validation utilities for Sudoku puzzles and their solutions."""

from __future__ import annotations
from typing import TYPE_CHECKING, Iterable, List, Sequence

from .cell import ALL_VALUES, SIZE, BOX_SIZE

if TYPE_CHECKING:
    from .board import SudokuBoard


def group_indices() -> List[List[int]]:
    """
    Row-major cell indices of the 27 groups: rows, then columns, then boxes.
    """
    rows = [[r * SIZE + c for c in range(SIZE)] for r in range(SIZE)]
    cols = [[r * SIZE + c for r in range(SIZE)] for c in range(SIZE)]
    boxes = []
    for box in range(SIZE):
        box_row = (box // BOX_SIZE) * BOX_SIZE
        box_col = (box % BOX_SIZE) * BOX_SIZE
        boxes.append([
            (box_row + i) * SIZE + box_col + j
            for i in range(BOX_SIZE) for j in range(BOX_SIZE)
        ])
    return rows + cols + boxes


def is_complete_solution(values: Sequence[int]) -> bool:
    """
    Check the fundamental Sudoku invariant on 81 row-major values.

    Args:
        values: Flat grid; every entry should be an int 1-9.

    Returns:
        True if every row, column and box holds each of 1-9 exactly once.
    """
    if len(values) != SIZE * SIZE:
        return False
    for group in group_indices():
        if {values[i] for i in group} != ALL_VALUES:
            return False
    return True


def respects_givens(puzzle: Iterable, solution: Sequence[int]) -> bool:
    """True if every given of the puzzle (a non-None spec) is kept in the solution."""
    return all(spec is None or spec == value for spec, value in zip(puzzle, solution))


def validate_solution(puzzle: SudokuBoard, solution: SudokuBoard) -> bool:
    """
    Validate that a solution correctly solves the puzzle.

    Args:
        puzzle: The original puzzle.
        solution: The proposed solution.

    Returns:
        True if solution is valid and matches puzzle clues.
    """
    values = [int(v) for v in solution.grid.flatten()]
    return respects_givens(puzzle.to_cell_specs(), values) and is_complete_solution(values)
