"""Core module for cells, boards, errors and validation."""

from .board import SudokuBoard, format_candidates
from .cell import Cell
from .errors import (
    SudokuError,
    MalformedPuzzle,
    ConstraintViolation,
    InvalidAssignment,
    Unsolvable,
    BranchLimitExceeded,
)
from .validator import is_complete_solution, validate_solution

__all__ = [
    "SudokuBoard",
    "format_candidates",
    "Cell",
    "SudokuError",
    "MalformedPuzzle",
    "ConstraintViolation",
    "InvalidAssignment",
    "Unsolvable",
    "BranchLimitExceeded",
    "is_complete_solution",
    "validate_solution",
]
