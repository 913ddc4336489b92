"""Solver front end for the constraint-propagation engine."""

from __future__ import annotations
from typing import Optional, Sequence

from .base_solver import BaseSolver
from .constraint_board import CellSpec, ConstraintBoard
from ..core.board import SudokuBoard
from ..core.errors import ConstraintViolation, Unsolvable


def build(cell_specs: Sequence[CellSpec], **options) -> ConstraintBoard:
    """Build a constraint board from 81 row-major cell specs (None for unknown)."""
    return ConstraintBoard.build(cell_specs, **options)


def solve(board: ConstraintBoard) -> ConstraintBoard:
    """Solve a board in place and return it. Raises Unsolvable on failure."""
    return board.solve()


class PropagationSolver(BaseSolver):
    """
    Sudoku solver using candidate-set propagation with search as a fallback.

    Propagation combines singleton elimination, unique positions within a
    group and subset exhaustion. If it stalls, the solver guesses on a cell
    with the fewest candidates and propagates again on a copy of the board.
    """

    name = "Constraint Propagation"

    def __init__(
        self,
        use_backtracking: bool = True,
        full_closure: bool = False,
        max_branches: Optional[int] = None
    ):
        """
        Initialize the solver.

        Args:
            use_backtracking: If False, stop when propagation stalls.
            full_closure: Merge any number of candidate buckets during subset
                elimination instead of pairs only.
            max_branches: Budget of trial values for the search. None means no limit.
        """
        super().__init__()
        self.use_backtracking = use_backtracking
        self.full_closure = full_closure
        self.max_branches = max_branches
        self.last_board: Optional[ConstraintBoard] = None

    def _solve(self, board: SudokuBoard) -> Optional[SudokuBoard]:
        constraint_board = build(
            board.to_cell_specs(),
            full_closure=self.full_closure,
            max_branches=self.max_branches
        )
        self.last_board = constraint_board

        try:
            if self.use_backtracking:
                solve(constraint_board)
            else:
                self._propagate_only(constraint_board)
        finally:
            search_stats = constraint_board.stats
            self.stats.sweeps = search_stats.sweeps
            self.stats.branches = search_stats.branches
            self.stats.backtracks = search_stats.backtracks
            self.stats.extra["max_depth"] = search_stats.max_depth
            self.stats.extra["guessed"] = search_stats.branches > 0

        if not constraint_board.is_solved():
            self.stats.extra["unsolved_cells"] = len(constraint_board.unsolved_cells())
            return None
        return SudokuBoard.from_constraint_board(constraint_board)

    @staticmethod
    def _propagate_only(board: ConstraintBoard) -> None:
        try:
            board.propagate()
        except ConstraintViolation as e:
            raise Unsolvable(f"Puzzle has no solution: {e}") from e
