"""Visualization utilities for benchmark results."""

from __future__ import annotations
import os
from typing import List

import matplotlib.pyplot as plt
import seaborn as sns
import numpy as np

from .benchmark import BenchmarkResult


class Visualizer:
    """
    Chart generator for solver benchmark results.

    Compares solver configurations by solve time and by how much search
    each puzzle needed once propagation stalled.
    """

    COLORS = {
        "Pairwise": "#3498db",  # Blue
        "Closure": "#f39c12",   # Orange
    }

    def __init__(self, results: List[BenchmarkResult], output_dir: str = "results"):
        """
        Initialize the visualizer.

        Args:
            results: List of benchmark results.
            output_dir: Directory to save generated charts.
        """
        self.results = results
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

        sns.set_theme(style="whitegrid")

    def _algorithms(self) -> List[str]:
        return sorted(set(r.algorithm for r in self.results))

    def generate_all(self) -> List[str]:
        """
        Generate all charts.

        Returns:
            List of paths to generated chart files.
        """
        return [
            self.plot_time_distribution(),
            self.plot_branches_vs_time(),
        ]

    def plot_time_distribution(self) -> str:
        """Histogram of solve times per solver, log-scaled."""
        fig, ax = plt.subplots(figsize=(10, 6))

        for algo in self._algorithms():
            times = np.array([r.time_seconds for r in self.results if r.algorithm == algo])
            sns.histplot(
                times, ax=ax, label=algo, log_scale=True, element="step",
                color=self.COLORS.get(algo, "#95a5a6")
            )

        ax.set_xlabel('Time (seconds)', fontsize=12)
        ax.set_ylabel('Puzzles', fontsize=12)
        ax.set_title('Solve Time Distribution', fontsize=14, fontweight='bold')
        ax.legend(title='Solver')

        plt.tight_layout()
        path = os.path.join(self.output_dir, "time_distribution.png")
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)

        return path

    def plot_branches_vs_time(self) -> str:
        """Scatter of search branches against solve time for every run."""
        fig, ax = plt.subplots(figsize=(10, 6))

        for algo in self._algorithms():
            runs = [r for r in self.results if r.algorithm == algo]
            ax.scatter(
                [r.branches for r in runs],
                [r.time_seconds for r in runs],
                label=algo, alpha=0.7, edgecolor='black', linewidth=0.5,
                color=self.COLORS.get(algo, "#95a5a6")
            )

        ax.set_xlabel('Branches tried', fontsize=12)
        ax.set_ylabel('Time (seconds)', fontsize=12)
        ax.set_title('Search Effort vs Solve Time', fontsize=14, fontweight='bold')
        ax.legend(title='Solver')

        plt.tight_layout()
        path = os.path.join(self.output_dir, "branches_vs_time.png")
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)

        return path
