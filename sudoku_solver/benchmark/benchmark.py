"""Benchmarking framework for running solvers over puzzle collections."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
import json
import logging
import os

import numpy as np
from tqdm import tqdm

from ..core.board import SudokuBoard
from ..core.validator import validate_solution
from ..solvers import BaseSolver, PropagationSolver

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    """Results from a single benchmark run."""
    puzzle_id: int
    algorithm: str
    solved: bool
    time_seconds: float
    memory_bytes: int
    sweeps: int
    backtracks: int
    branches: int
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "puzzle_id": self.puzzle_id,
            "algorithm": self.algorithm,
            "solved": self.solved,
            "time_seconds": self.time_seconds,
            "memory_bytes": self.memory_bytes,
            "memory_mb": self.memory_bytes / (1024 * 1024),
            "sweeps": self.sweeps,
            "backtracks": self.backtracks,
            "branches": self.branches,
            **self.extra
        }


def load_puzzles(path: str) -> List[str]:
    """
    Read puzzles from a text file, one 81-character puzzle per line.

    Blank lines and lines starting with '#' are skipped.
    """
    puzzles = []
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                puzzles.append(line)
    return puzzles


class Benchmark:
    """
    Runs one or more solver configurations over a list of puzzles.

    Puzzles are parsed up front, so a malformed line fails the benchmark
    before any solving starts.
    """

    def __init__(
        self,
        puzzles: List[str],
        solvers: Optional[Dict[str, BaseSolver]] = None,
        max_branches: Optional[int] = None
    ):
        """
        Initialize the benchmark.

        Args:
            puzzles: Puzzle strings accepted by SudokuBoard.from_string.
            solvers: Dict of solver_name -> solver_instance. Defaults to the
                pairwise and full-closure variants of PropagationSolver.
            max_branches: Branch budget applied to the default solvers.
        """
        self.puzzles = [SudokuBoard.from_string(p) for p in puzzles]

        if solvers is None:
            self.solvers: Dict[str, BaseSolver] = {
                "Pairwise": PropagationSolver(max_branches=max_branches),
                "Closure": PropagationSolver(full_closure=True, max_branches=max_branches),
            }
        else:
            self.solvers = solvers

        self.results: List[BenchmarkResult] = []

    def run(self, show_progress: bool = True) -> List[BenchmarkResult]:
        """
        Run every solver on every puzzle.

        Returns:
            List of BenchmarkResult objects.
        """
        self.results = []
        total_tests = len(self.puzzles) * len(self.solvers)

        pbar = tqdm(total=total_tests, desc="Benchmarking", disable=not show_progress)
        for puzzle_id, puzzle in enumerate(self.puzzles):
            for solver_name, solver in self.solvers.items():
                self.results.append(self._run_single(puzzle, puzzle_id, solver_name, solver))
                pbar.update(1)
        pbar.close()

        return self.results

    def _run_single(
        self,
        puzzle: SudokuBoard,
        puzzle_id: int,
        solver_name: str,
        solver: BaseSolver
    ) -> BenchmarkResult:
        """Run a single solver on a single puzzle."""
        solution, stats = solver.solve(puzzle)

        solved = stats.solved and solution is not None and validate_solution(puzzle, solution)
        if stats.solved and not solved:
            logger.warning("%s returned an invalid solution for puzzle %d", solver_name, puzzle_id)

        return BenchmarkResult(
            puzzle_id=puzzle_id,
            algorithm=solver_name,
            solved=solved,
            time_seconds=stats.time_seconds,
            memory_bytes=stats.memory_bytes,
            sweeps=stats.sweeps,
            backtracks=stats.backtracks,
            branches=stats.branches,
            extra=dict(stats.extra)
        )

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics from benchmark results."""
        summary: Dict[str, Any] = {
            "total_puzzles": len(self.puzzles),
            "solvers_tested": list(self.solvers.keys()),
            "results_by_algorithm": {}
        }

        for solver_name in self.solvers:
            solver_results = [r for r in self.results if r.algorithm == solver_name]
            if not solver_results:
                continue

            times = np.array([r.time_seconds for r in solver_results])
            branches = np.array([r.branches for r in solver_results])
            memory = np.array([r.memory_bytes for r in solver_results])
            solved = [r for r in solver_results if r.solved]

            summary["results_by_algorithm"][solver_name] = {
                "accuracy": len(solved) / len(solver_results) * 100,
                "avg_time_seconds": float(np.mean(times)),
                "median_time_seconds": float(np.median(times)),
                "max_time_seconds": float(np.max(times)),
                "avg_branches": float(np.mean(branches)),
                "max_branches": int(np.max(branches)),
                "solved_without_guessing": sum(1 for r in solved if r.branches == 0),
                "avg_memory_mb": float(np.mean(memory)) / (1024 * 1024),
                "total_solved": len(solved),
                "total_tested": len(solver_results)
            }

        return summary

    def save_results(self, output_dir: str) -> None:
        """Save raw results and the summary as JSON."""
        os.makedirs(output_dir, exist_ok=True)

        results_file = os.path.join(output_dir, "benchmark_results.json")
        with open(results_file, "w") as f:
            json.dump([r.to_dict() for r in self.results], f, indent=2)

        summary_file = os.path.join(output_dir, "benchmark_summary.json")
        with open(summary_file, "w") as f:
            json.dump(self.get_summary(), f, indent=2)

        logger.info("Results saved to %s", output_dir)
