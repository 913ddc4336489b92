"""Constraint propagation over candidate sets, with backtracking search as fallback."""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, Union

from ..core.cell import ALL_VALUES, SIZE, Cell, mask_to_values
from ..core.errors import BranchLimitExceeded, ConstraintViolation, MalformedPuzzle, Unsolvable
from ..core.validator import group_indices, is_complete_solution

logger = logging.getLogger(__name__)

NUM_CELLS = SIZE * SIZE
GROUPS: List[List[int]] = group_indices()


def _peer_indices() -> Tuple[Tuple[int, ...], ...]:
    cells = [Cell(*divmod(i, SIZE)) for i in range(NUM_CELLS)]
    return tuple(
        tuple(
            other.index for other in cells
            if other.index != cell.index and cell.is_related_to(other)
        )
        for cell in cells
    )


PEERS = _peer_indices()

CellSpec = Optional[int]
Snapshot = Tuple[FrozenSet[int], ...]


@dataclass
class SearchStats:
    """Counters shared by a board and every branch derived from it."""
    sweeps: int = 0
    branches: int = 0
    backtracks: int = 0
    max_depth: int = 0


class ConstraintBoard:
    """
    The 81 cells of a puzzle and the rules that narrow their candidates.

    Propagation applies two rules until a full sweep over all 27 groups no
    longer shrinks any candidate set:

    - Singleton elimination: a solved cell's value is ruled out of every
      related cell, cascading depth-first into cells that become solved.
    - Group reduction: a value that fits only one cell of a group is placed
      there, and any k cells of a group whose candidates together span only
      k values claim those values for themselves.

    When propagation stalls the board branches: it picks the first cell in
    row-major order among those with the fewest candidates, and tries each
    candidate in ascending order on a freshly built child board. A branch
    never shares Cell objects with its parent.
    """

    def __init__(
        self,
        candidate_sets: Sequence[Iterable[int]],
        full_closure: bool = False,
        max_branches: Optional[int] = None,
        stats: Optional[SearchStats] = None,
        depth: int = 0
    ):
        """
        Initialize a board from per-cell candidate sets.

        Args:
            candidate_sets: 81 row-major collections of candidate values.
            full_closure: If True, subset elimination merges any number of
                signature buckets instead of at most two.
            max_branches: Maximum number of trial values the search may try
                across the whole solve. None means unbounded.
            stats: Counters to share with the parent board when branching.
            depth: Number of guesses that led to this board.
        """
        if len(candidate_sets) != NUM_CELLS:
            raise MalformedPuzzle(f"Expected {NUM_CELLS} cells, got {len(candidate_sets)}")

        self.full_closure = full_closure
        self.max_branches = max_branches
        self.stats = stats if stats is not None else SearchStats()
        self.depth = depth
        self.stats.max_depth = max(self.stats.max_depth, depth)
        self._load(candidate_sets)

    def _load(self, candidate_sets: Sequence[Iterable[int]]) -> None:
        cells = []
        for index, candidates in enumerate(candidate_sets):
            candidates = frozenset(candidates)
            if not candidates or not candidates <= ALL_VALUES:
                raise MalformedPuzzle(f"Cell {index} has invalid candidates {sorted(candidates)}")
            cells.append(Cell(*divmod(index, SIZE), candidates))

        self.cells: List[Cell] = cells
        self.groups: List[List[Cell]] = [[cells[i] for i in group] for group in GROUPS]
        self._peers: List[List[Cell]] = [[cells[i] for i in peers] for peers in PEERS]

    @classmethod
    def build(cls, cell_specs: Sequence[CellSpec], **options) -> ConstraintBoard:
        """
        Build a board from 81 row-major cell specifications.

        Args:
            cell_specs: None (or 0) for an unknown cell, an int 1-9 for a given.
            **options: Passed through to the constructor.

        Raises:
            MalformedPuzzle: If the input is not exactly 81 well-formed entries.
        """
        try:
            specs = list(cell_specs)
        except TypeError as exc:
            raise MalformedPuzzle(f"Cell specs must be a sequence: {exc}") from exc
        if len(specs) != NUM_CELLS:
            raise MalformedPuzzle(f"Expected {NUM_CELLS} cells, got {len(specs)}")

        candidate_sets: List[FrozenSet[int]] = []
        for index, spec in enumerate(specs):
            if spec is None or (isinstance(spec, int) and not isinstance(spec, bool) and spec == 0):
                candidate_sets.append(ALL_VALUES)
            elif isinstance(spec, int) and not isinstance(spec, bool) and 1 <= spec <= SIZE:
                candidate_sets.append(frozenset((spec,)))
            else:
                raise MalformedPuzzle(f"Cell {index}: expected None or 1-{SIZE}, got {spec!r}")
        return cls(candidate_sets, **options)

    @classmethod
    def from_candidates(cls, candidate_sets: Sequence[Iterable[int]], **options) -> ConstraintBoard:
        return cls(candidate_sets, **options)

    @property
    def rows(self) -> List[List[Cell]]:
        return self.groups[:SIZE]

    @property
    def columns(self) -> List[List[Cell]]:
        return self.groups[SIZE:2 * SIZE]

    @property
    def boxes(self) -> List[List[Cell]]:
        return self.groups[2 * SIZE:]

    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row * SIZE + col]

    def peers(self, cell: Cell) -> List[Cell]:
        """The 20 cells that share a row, column or box with the given one."""
        return self._peers[cell.index]

    def unsolved_cells(self) -> List[Cell]:
        return [cell for cell in self.cells if not cell.is_solved]

    def candidate_count(self) -> int:
        """Sum of candidate-set sizes over unsolved cells; reaches 0 when solved."""
        return sum(len(cell) for cell in self.cells if not cell.is_solved)

    def is_solved(self) -> bool:
        return all(cell.is_solved for cell in self.cells)

    def satisfies_sudoku(self) -> bool:
        """True if every cell is solved and each group holds 1-9 exactly once."""
        return self.is_solved() and is_complete_solution([cell.value for cell in self.cells])

    def snapshot(self) -> Snapshot:
        """Copy of every cell's candidates, row-major."""
        return tuple(cell.candidates for cell in self.cells)

    def values(self) -> List[Union[int, FrozenSet[int]]]:
        """Per cell: the value if solved, otherwise the remaining candidates."""
        return [cell.value if cell.is_solved else cell.candidates for cell in self.cells]

    # Propagation

    def propagate(self) -> int:
        """
        Narrow candidates until a full sweep changes nothing.

        Returns:
            Number of sweeps over the 27 groups.

        Raises:
            ConstraintViolation: If some cell runs out of candidates.
        """
        for cell in self.cells:
            if cell.is_solved:
                self._settle(cell)

        sweeps = 0
        remaining = self.candidate_count()
        while True:
            sweeps += 1
            self.stats.sweeps += 1
            for group in self.groups:
                self.reduce_group(group)

            narrowed = self.candidate_count()
            if narrowed >= remaining:
                break
            remaining = narrowed

        return sweeps

    def _settle(self, cell: Cell) -> None:
        """Rule a solved cell's value out of its peers, cascading depth-first."""
        value = cell.value
        for peer in self._peers[cell.index]:
            if value in peer:
                peer.rule_out_values((value,))
                if peer.is_solved:
                    self._settle(peer)

    def reduce_group(self, group: List[Cell]) -> None:
        """Apply the unique-position rule, then subset elimination, to one group."""
        self.place_unique_values(group)
        self.eliminate_subsets(group)

    def place_unique_values(self, group: List[Cell]) -> None:
        for value in range(1, SIZE + 1):
            holders = [cell for cell in group if value in cell]
            if not holders:
                first = group[0]
                raise ConstraintViolation(
                    f"No cell in the group of ({first.row}, {first.col}) can hold {value}",
                    first.row, first.col
                )
            if len(holders) == 1 and not holders[0].is_solved:
                holders[0].set_value(value)
                self._settle(holders[0])

    def eliminate_subsets(self, group: List[Cell]) -> None:
        """
        Rule out values claimed by a subset of the group's cells.

        Cells are bucketed by candidate signature. Each bucket, and each
        union of two buckets (or of any number of buckets with
        full_closure), is a composite S. If exactly |S| cells have
        candidates inside S, those cells must take all of S between them,
        so S is ruled out of the rest of the group.
        """
        buckets: Dict[int, List[Cell]] = {}
        for cell in group:
            buckets.setdefault(cell.signature(), []).append(cell)

        masks = sorted(buckets)
        if self.full_closure:
            composites = _union_closure(masks)
        else:
            composites = set(masks)
            for i, first in enumerate(masks):
                for second in masks[i + 1:]:
                    composites.add(first | second)

        for mask in sorted(composites, key=lambda m: (bin(m).count("1"), m)):
            values = mask_to_values(mask)
            if len(values) == SIZE:
                continue

            # Re-read signatures: earlier composites may have narrowed cells.
            inside = {cell.index for cell in group if cell.signature() & ~mask == 0}
            if len(inside) > len(values):
                first = group[0]
                raise ConstraintViolation(
                    f"{len(inside)} cells in the group of ({first.row}, {first.col}) "
                    f"share only the values {list(values)}",
                    first.row, first.col
                )
            if len(inside) < len(values):
                continue

            for cell in group:
                if cell.index not in inside and cell.rule_out_values(values) and cell.is_solved:
                    self._settle(cell)

    # Search

    def search(self) -> None:
        """
        Resolve the remaining cells by trial and error.

        On success this board takes over the state of the first branch that
        reached a valid completed grid.

        Raises:
            ConstraintViolation: If every candidate of the chosen cell fails,
                meaning an earlier guess was wrong.
            BranchLimitExceeded: If the branch budget runs out.
        """
        if self.is_solved():
            return

        snapshot = self.snapshot()
        for size in range(2, SIZE + 1):
            for index, candidates in enumerate(snapshot):
                if len(candidates) == size:
                    self._branch_on(snapshot, index)
                    return

        raise Unsolvable("No cell left to branch on")

    def _branch_on(self, snapshot: Snapshot, index: int) -> None:
        row, col = divmod(index, SIZE)
        for value in sorted(snapshot[index]):
            self.stats.branches += 1
            if self.max_branches is not None and self.stats.branches > self.max_branches:
                raise BranchLimitExceeded(self.max_branches)

            trial = list(snapshot)
            trial[index] = frozenset((value,))
            child = ConstraintBoard.from_candidates(
                trial,
                full_closure=self.full_closure,
                max_branches=self.max_branches,
                stats=self.stats,
                depth=self.depth + 1
            )
            logger.debug("Depth %d: trying %d at (%d, %d)", child.depth, value, row, col)

            try:
                child.propagate()
                child.search()
                if not child.satisfies_sudoku():
                    raise ConstraintViolation("Completed grid repeats a value in a group", row, col)
            except ConstraintViolation as e:
                self.stats.backtracks += 1
                logger.debug("Depth %d: %d at (%d, %d) rejected: %s", child.depth, value, row, col, e)
                continue

            self._load(child.snapshot())
            return

        raise ConstraintViolation(f"Every candidate for cell ({row}, {col}) failed", row, col)

    def solve(self) -> ConstraintBoard:
        """
        Propagate, and search if propagation alone does not finish the grid.

        Returns:
            This board, fully solved.

        Raises:
            Unsolvable: If the puzzle has no solution, or the branch budget ran out.
        """
        try:
            self.propagate()
            if not self.is_solved():
                logger.debug("Propagation stalled with %d unsolved cells", len(self.unsolved_cells()))
                self.search()
        except ConstraintViolation as e:
            raise Unsolvable(f"Puzzle has no solution: {e}") from e

        if not self.satisfies_sudoku():
            raise Unsolvable("Propagation finished with an invalid grid")

        logger.info(
            "Solved after %d sweeps, %d branches, %d backtracks",
            self.stats.sweeps, self.stats.branches, self.stats.backtracks
        )
        return self

    def __repr__(self) -> str:
        return f"ConstraintBoard(unsolved={len(self.unsolved_cells())}, depth={self.depth})"


def _union_closure(masks: Sequence[int]) -> Set[int]:
    """Every union of one or more of the given masks."""
    closure = set(masks)
    frontier = set(masks)
    while frontier:
        frontier = {a | b for a in frontier for b in masks} - closure
        closure |= frontier
    return closure
