"""Tests for constraint propagation and backtracking search."""

import logging

import pytest
from sudoku_solver.core.errors import (
    BranchLimitExceeded,
    ConstraintViolation,
    MalformedPuzzle,
    Unsolvable,
)
from sudoku_solver.core.validator import is_complete_solution
from sudoku_solver.solvers.constraint_board import ConstraintBoard

from puzzles import (
    CONTRADICTORY_PUZZLE,
    EASY_PUZZLE,
    HARD_PUZZLE,
    HARD_SOLUTION,
    TEST_PUZZLE,
    TEST_SOLUTION,
    to_specs,
)


def narrow(cell, keep):
    """Rule out everything except the given values."""
    cell.rule_out_values(set(range(1, 10)) - set(keep))


def solution_string(board):
    return "".join(str(v) for v in board.values())


class TestBuild:
    """Tests for building boards from cell specs."""

    def test_build_from_specs(self):
        board = ConstraintBoard.build(to_specs(TEST_PUZZLE))
        values = board.values()
        assert values[0] == 5
        assert values[2] == frozenset(range(1, 10))
        assert len(board.unsolved_cells()) == 51

    def test_zero_means_unknown(self):
        board = ConstraintBoard.build([0] * 81)
        assert len(board.unsolved_cells()) == 81

    @pytest.mark.parametrize("length", [0, 80, 82])
    def test_wrong_cell_count(self, length):
        with pytest.raises(MalformedPuzzle):
            ConstraintBoard.build([None] * length)

    @pytest.mark.parametrize("bad", [10, -1, "5", 2.0, True])
    def test_bad_entry(self, bad):
        specs = [None] * 81
        specs[40] = bad
        with pytest.raises(MalformedPuzzle):
            ConstraintBoard.build(specs)

    def test_not_a_sequence(self):
        with pytest.raises(MalformedPuzzle):
            ConstraintBoard.build(42)

    def test_groups(self):
        """Rows, then columns, then boxes, 9 cells each."""
        board = ConstraintBoard.build([None] * 81)
        assert len(board.groups) == 27
        assert all(len(group) == 9 for group in board.groups)
        assert [c.index for c in board.columns[2]] == list(range(2, 81, 9))
        assert [c.index for c in board.boxes[4]] == [30, 31, 32, 39, 40, 41, 48, 49, 50]

    def test_peers(self):
        """Every cell has 20 peers, not counting itself."""
        board = ConstraintBoard.build([None] * 81)
        cell = board.cell(4, 4)
        peers = board.peers(cell)
        assert len(peers) == 20
        assert all(cell.is_related_to(peer) for peer in peers)
        assert cell not in peers
        assert len({peer.index for peer in peers}) == 20

    def test_branch_copies_do_not_alias(self):
        """A board rebuilt from a snapshot owns new cells."""
        board = ConstraintBoard.build(to_specs(TEST_PUZZLE))
        child = ConstraintBoard.from_candidates(board.snapshot())
        narrow(child.cell(0, 2), {1, 2})
        assert board.cell(0, 2).candidates == frozenset(range(1, 10))


class TestGroupRules:
    """Tests for the per-group elimination rules."""

    def test_singleton_cascade(self):
        """A solved cell's value leaves every related cell."""
        specs = [None] * 81
        specs[0] = 7
        board = ConstraintBoard.build(specs)
        board.propagate()
        for peer in board.peers(board.cell(0, 0)):
            assert 7 not in peer
        assert 7 in board.cell(4, 4)

    def test_cascade_solves_chain(self):
        """A grid missing one cell per row is completed by cascading alone."""
        specs = to_specs(TEST_SOLUTION)
        for row in range(9):
            specs[row * 9 + row] = None
        board = ConstraintBoard.build(specs)
        board.propagate()
        assert solution_string(board) == TEST_SOLUTION

    def test_unique_position(self):
        """A value that fits only one cell of a group is placed there."""
        board = ConstraintBoard.build([None] * 81)
        for cell in board.rows[0][1:]:
            cell.rule_out_values({9})
        board.place_unique_values(board.rows[0])
        assert board.cell(0, 0).value == 9
        assert 9 not in board.cell(5, 0)
        assert 9 not in board.cell(1, 1)

    def test_value_with_no_place_raises(self):
        board = ConstraintBoard.build([None] * 81)
        for cell in board.columns[3]:
            cell.rule_out_values({5})
        with pytest.raises(ConstraintViolation):
            board.place_unique_values(board.columns[3])

    def test_subset_elimination(self):
        """Cells {1,2}, {1,3}, {2,3} claim 1-3 for themselves."""
        board = ConstraintBoard.build([None] * 81)
        row = board.rows[0]
        narrow(row[0], {1, 2})
        narrow(row[1], {1, 3})
        narrow(row[2], {2, 3})

        board.eliminate_subsets(row)

        assert row[0].candidates == frozenset({1, 2})
        assert row[1].candidates == frozenset({1, 3})
        assert row[2].candidates == frozenset({2, 3})
        for cell in row[3:]:
            assert cell.candidates == frozenset(range(4, 10))
        assert board.cell(1, 0).candidates == frozenset(range(1, 10))

    def test_naked_pair(self):
        """Two cells sharing the same pair remove it from the rest of a box."""
        board = ConstraintBoard.build([None] * 81)
        box = board.boxes[8]
        narrow(box[0], {4, 6})
        narrow(box[4], {4, 6})

        board.eliminate_subsets(box)

        for i, cell in enumerate(box):
            if i in (0, 4):
                assert cell.candidates == frozenset({4, 6})
            else:
                assert 4 not in cell and 6 not in cell

    def test_elimination_cascades(self):
        """A cell left with one value after elimination is settled too."""
        board = ConstraintBoard.build([None] * 81)
        row = board.rows[2]
        narrow(row[0], {1, 2})
        narrow(row[1], {1, 2})
        narrow(row[2], {1, 2, 8})

        board.eliminate_subsets(row)

        assert row[2].value == 8
        assert 8 not in board.cell(0, 0)
        assert 8 not in board.cell(7, 2)

    def test_too_many_cells_for_values(self):
        """Three cells sharing two values cannot all be filled."""
        board = ConstraintBoard.build([None] * 81)
        row = board.rows[0]
        for cell in row[:3]:
            narrow(cell, {1, 2})
        with pytest.raises(ConstraintViolation):
            board.eliminate_subsets(row)

    def _spread_subset_board(self, full_closure):
        board = ConstraintBoard.build([None] * 81, full_closure=full_closure)
        row = board.rows[0]
        for cell, keep in zip(row, [{1, 2}, {3, 4}, {5, 6}, {1, 3}, {2, 5}, {4, 6}]):
            narrow(cell, keep)
        return board, row

    def test_pairwise_misses_wide_subsets(self):
        """Six cells spanning six values that no two buckets cover stay unused."""
        board, row = self._spread_subset_board(full_closure=False)
        board.eliminate_subsets(row)
        for cell in row[6:]:
            assert cell.candidates == frozenset(range(1, 10))

    def test_full_closure_finds_wide_subsets(self):
        """Merging any number of buckets finds the six-cell subset."""
        board, row = self._spread_subset_board(full_closure=True)
        board.eliminate_subsets(row)
        for cell in row[6:]:
            assert cell.candidates == frozenset({7, 8, 9})


class TestPropagation:
    """Tests for propagation to fixpoint."""

    def test_easy_puzzle_solved_by_propagation(self):
        board = ConstraintBoard.build(to_specs(TEST_PUZZLE))
        board.propagate()
        assert board.is_solved()
        assert solution_string(board) == TEST_SOLUTION

    def test_hard_puzzle_stalls(self):
        board = ConstraintBoard.build(to_specs(HARD_PUZZLE))
        board.propagate()
        assert not board.is_solved()
        assert board.candidate_count() > 0

    def test_idempotent(self):
        """A second propagation on a fixpoint changes nothing."""
        board = ConstraintBoard.build(to_specs(HARD_PUZZLE))
        board.propagate()
        before = board.snapshot()

        sweeps = board.propagate()

        assert sweeps == 1
        assert board.snapshot() == before

    def test_monotonic(self):
        """Candidate sets only shrink, through propagation and search."""
        board = ConstraintBoard.build(to_specs(HARD_PUZZLE))
        initial = board.snapshot()
        board.propagate()
        propagated = board.snapshot()
        board.solve()
        final = board.snapshot()

        for start, middle, end in zip(initial, propagated, final):
            assert end <= middle <= start

    def test_duplicate_givens_raise(self):
        board = ConstraintBoard.build(to_specs(CONTRADICTORY_PUZZLE))
        with pytest.raises(ConstraintViolation):
            board.propagate()

    def test_counts_sweeps(self):
        board = ConstraintBoard.build(to_specs(EASY_PUZZLE))
        sweeps = board.propagate()
        assert sweeps >= 1
        assert board.stats.sweeps == sweeps


class TestSearch:
    """Tests for the backtracking search."""

    def test_no_branches_without_need(self):
        """A puzzle finished by propagation never guesses."""
        board = ConstraintBoard.build(to_specs(EASY_PUZZLE))
        board.solve()
        assert board.satisfies_sudoku()
        assert board.stats.branches == 0
        assert board.stats.max_depth == 0

    def test_hard_puzzle_needs_search(self):
        board = ConstraintBoard.build(to_specs(HARD_PUZZLE))
        board.solve()
        assert board.stats.branches > 0
        assert board.stats.max_depth >= 1
        assert solution_string(board) == HARD_SOLUTION
        assert is_complete_solution(board.values())

    def test_full_closure_same_solution(self):
        board = ConstraintBoard.build(to_specs(HARD_PUZZLE), full_closure=True)
        board.solve()
        assert solution_string(board) == HARD_SOLUTION

    def test_first_guess_on_fewest_candidates(self, caplog):
        """The first guess takes the row-major first cell with fewest candidates, lowest value first."""
        probe = ConstraintBoard.build(to_specs(HARD_PUZZLE))
        probe.propagate()
        snapshot = probe.snapshot()
        fewest = min(len(c) for c in snapshot if len(c) > 1)
        index = next(i for i, c in enumerate(snapshot) if len(c) == fewest)

        caplog.set_level(logging.DEBUG, logger="sudoku_solver.solvers.constraint_board")
        ConstraintBoard.build(to_specs(HARD_PUZZLE)).solve()

        first = next(r for r in caplog.records if r.getMessage().startswith("Depth 1: trying"))
        _, value, row, col = first.args
        assert (row, col) == divmod(index, 9)
        assert value == min(snapshot[index])

    def test_search_on_solved_board_is_noop(self):
        board = ConstraintBoard.build(to_specs(TEST_SOLUTION))
        board.search()
        assert board.stats.branches == 0

    def test_branch_limit(self):
        board = ConstraintBoard.build(to_specs(HARD_PUZZLE), max_branches=0)
        with pytest.raises(BranchLimitExceeded) as info:
            board.solve()
        assert isinstance(info.value, Unsolvable)

    def test_contradictory_givens_unsolvable(self):
        """A contradiction before any guess surfaces as Unsolvable."""
        board = ConstraintBoard.build(to_specs(CONTRADICTORY_PUZZLE))
        with pytest.raises(Unsolvable):
            board.solve()

    def test_forced_conflict_unsolvable(self):
        """Givens with no repeats can still force a repeat."""
        # Row 0 leaves (0, 8) needing 9, while column 8 already holds a 9.
        specs = [None] * 81
        for col, value in enumerate([1, 2, 3, 4, 5, 6, 7, 8]):
            specs[col] = value
        specs[8 * 9 + 8] = 9
        board = ConstraintBoard.build(specs)
        with pytest.raises(Unsolvable):
            board.solve()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
