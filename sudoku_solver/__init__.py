"""Sudoku solver built on constraint propagation and backtracking search."""

from .core import (
    SudokuBoard,
    Cell,
    MalformedPuzzle,
    ConstraintViolation,
    InvalidAssignment,
    Unsolvable,
)
from .solvers import ConstraintBoard, PropagationSolver, build, solve

__all__ = [
    "SudokuBoard",
    "Cell",
    "MalformedPuzzle",
    "ConstraintViolation",
    "InvalidAssignment",
    "Unsolvable",
    "ConstraintBoard",
    "PropagationSolver",
    "build",
    "solve",
]
