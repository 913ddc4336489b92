"""Solvers module for Sudoku puzzles."""

from .base_solver import BaseSolver, SolverStats
from .constraint_board import ConstraintBoard, SearchStats
from .propagation_solver import PropagationSolver, build, solve

__all__ = [
    "BaseSolver",
    "SolverStats",
    "ConstraintBoard",
    "SearchStats",
    "PropagationSolver",
    "build",
    "solve"
]
