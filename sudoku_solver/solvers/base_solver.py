"""Base solver interface and common utilities."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import logging
import time
import tracemalloc

from ..core.board import SudokuBoard
from ..core.errors import Unsolvable

logger = logging.getLogger(__name__)


@dataclass
class SolverStats:
    """Statistics from a solver run."""
    # Core metrics
    solved: bool = False
    time_seconds: float = 0.0
    memory_bytes: int = 0
    sweeps: int = 0

    # Search metrics
    backtracks: int = 0
    branches: int = 0

    # Additional metadata
    algorithm: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "solved": self.solved,
            "time_seconds": self.time_seconds,
            "memory_bytes": self.memory_bytes,
            "sweeps": self.sweeps,
            "backtracks": self.backtracks,
            "branches": self.branches,
            "algorithm": self.algorithm,
            **self.extra
        }


class BaseSolver(ABC):
    """Abstract base class for Sudoku solvers."""

    name: str = "BaseSolver"

    def __init__(self):
        self.stats = SolverStats(algorithm=self.name)

    def solve(self, board: SudokuBoard) -> tuple[Optional[SudokuBoard], SolverStats]:
        """
        Solve a Sudoku puzzle with timing and memory tracking.

        An unsolvable puzzle is reported through the stats rather than
        raised. Malformed input and internal consistency errors propagate.

        Args:
            board: The puzzle to solve.

        Returns:
            Tuple of (solution or None, stats).
        """
        self.stats = SolverStats(algorithm=self.name)

        tracemalloc.start()
        start_time = time.perf_counter()

        try:
            solution = self._solve(board.copy())
            self.stats.solved = solution is not None and solution.is_solved()
        except Unsolvable as e:
            logger.info("%s gave up: %s", self.name, e)
            self.stats.extra["error"] = str(e)
            solution = None
        finally:
            self.stats.time_seconds = time.perf_counter() - start_time
            _, peak = tracemalloc.get_traced_memory()
            tracemalloc.stop()
            self.stats.memory_bytes = peak

        return solution, self.stats

    @abstractmethod
    def _solve(self, board: SudokuBoard) -> Optional[SudokuBoard]:
        """
        Internal solve method to be implemented by subclasses.

        Args:
            board: A copy of the puzzle to solve (can be modified).

        Returns:
            The solved board, or None if no solution found.
        """
        pass
