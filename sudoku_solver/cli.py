"""Command-line interface for the Sudoku solver."""

import argparse
import logging
import sys

from .core.board import SudokuBoard, format_candidates
from .core.errors import MalformedPuzzle
from .solvers import PropagationSolver


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Sudoku solver using constraint propagation and backtracking search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Solve a puzzle given on one line
  sudoku-solver solve --puzzle "003020600900305001..."

  # Solve a puzzle laid out over several lines, '?' for unknowns
  sudoku-solver solve --file puzzle.txt --verbose

  # Benchmark a file with one puzzle per line
  sudoku-solver benchmark --file puzzles.txt --output results/
        """
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log search progress and show detailed statistics"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Solve a Sudoku puzzle")
    source = solve_parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--puzzle", "-p", type=str,
        help="Puzzle string (81 cells, '?', '.' or 0 for empty cells)"
    )
    source.add_argument(
        "--file", "-f", type=str,
        help="File holding a single puzzle; whitespace is ignored"
    )
    solve_parser.add_argument(
        "--closure", action="store_true",
        help="Merge any number of candidate buckets in subset elimination"
    )
    solve_parser.add_argument(
        "--max-branches", type=int, default=None,
        help="Give up after trying this many guesses"
    )
    solve_parser.add_argument(
        "--no-search", action="store_true",
        help="Only propagate; print remaining candidates if the grid is not finished"
    )
    solve_parser.add_argument(
        "--csv", action="store_true",
        help="Print the solution as 81 comma-separated values"
    )

    # Benchmark command
    bench_parser = subparsers.add_parser("benchmark", help="Benchmark solver variants on a puzzle file")
    bench_parser.add_argument(
        "--file", "-f", type=str, required=True,
        help="File with one puzzle per line ('#' starts a comment)"
    )
    bench_parser.add_argument(
        "--output", "-o", type=str, default="results",
        help="Output directory for results (default: results)"
    )
    bench_parser.add_argument(
        "--max-branches", type=int, default=None,
        help="Branch budget per puzzle"
    )
    bench_parser.add_argument(
        "--no-charts", action="store_true",
        help="Skip chart generation"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "solve":
        cmd_solve(args)
    elif args.command == "benchmark":
        cmd_benchmark(args)


def cmd_solve(args):
    """Handle the solve command."""
    try:
        if args.file:
            with open(args.file, "r") as f:
                text = f.read()
        else:
            text = args.puzzle
        board = SudokuBoard.from_string(text)
    except (OSError, MalformedPuzzle) as e:
        print(f"Error reading puzzle: {e}")
        sys.exit(1)

    print("Input puzzle:")
    print(board)
    print()

    solver = PropagationSolver(
        use_backtracking=not args.no_search,
        full_closure=args.closure,
        max_branches=args.max_branches
    )
    solution, stats = solver.solve(board)

    if stats.solved:
        how = "with search" if stats.extra.get("guessed") else "by propagation alone"
        print(f"✓ Solved {how} in {stats.time_seconds:.4f}s")
        if args.verbose:
            print(f"  Sweeps: {stats.sweeps:,}")
            print(f"  Branches: {stats.branches:,}")
            print(f"  Backtracks: {stats.backtracks:,}")
            print(f"  Max depth: {stats.extra.get('max_depth', 0)}")
            print(f"  Memory: {stats.memory_bytes / 1024:.2f} KB")
        print(solution.to_string(separator=",") if args.csv else solution)
    elif "error" in stats.extra:
        print(f"✗ Unsolvable: {stats.extra['error']}")
        sys.exit(2)
    else:
        print(f"✗ Propagation stalled with {stats.extra.get('unsolved_cells', 0)} unsolved cells")
        print(format_candidates(solver.last_board))
        sys.exit(2)


def cmd_benchmark(args):
    """Handle the benchmark command."""
    from .benchmark import Benchmark, Visualizer, load_puzzles

    try:
        puzzles = load_puzzles(args.file)
        benchmark = Benchmark(puzzles, max_branches=args.max_branches)
    except (OSError, MalformedPuzzle) as e:
        print(f"Error reading puzzles: {e}")
        sys.exit(1)

    print("=" * 60)
    print("SUDOKU SOLVER BENCHMARK")
    print("=" * 60)
    print(f"Puzzles: {len(puzzles)}")
    print(f"Solvers: {', '.join(benchmark.solvers.keys())}")
    print(f"Output directory: {args.output}")
    print("=" * 60)

    results = benchmark.run()
    summary = benchmark.get_summary()

    print("\nBy Solver:")
    print("-" * 50)
    for algo, stats in summary["results_by_algorithm"].items():
        print(f"\n{algo}:")
        print(f"  Accuracy: {stats['accuracy']:.1f}% ({stats['total_solved']}/{stats['total_tested']})")
        print(f"  Without guessing: {stats['solved_without_guessing']}")
        print(f"  Avg Time: {stats['avg_time_seconds']:.4f}s (median {stats['median_time_seconds']:.4f}s)")
        print(f"  Avg Branches: {stats['avg_branches']:.1f} (max {stats['max_branches']})")

    benchmark.save_results(args.output)

    if not args.no_charts:
        print("\nGenerating charts...")
        charts = Visualizer(results, args.output).generate_all()
        for chart in charts:
            print(f"  - {chart}")

    print("\n" + "=" * 60)
    print("Benchmark complete!")


if __name__ == "__main__":
    main()
