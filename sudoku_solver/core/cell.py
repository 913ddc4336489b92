"""A single grid position and the values it may still hold."""

from __future__ import annotations
from typing import FrozenSet, Iterable, Optional, Tuple

from .errors import ConstraintViolation, InvalidAssignment

SIZE = 9
BOX_SIZE = 3
ALL_VALUES: FrozenSet[int] = frozenset(range(1, SIZE + 1))


def values_to_mask(values: Iterable[int]) -> int:
    """Encode a collection of values 1-9 as a 9-bit mask (bit v-1 for value v)."""
    mask = 0
    for value in values:
        mask |= 1 << (value - 1)
    return mask


def mask_to_values(mask: int) -> Tuple[int, ...]:
    """Decode a 9-bit mask into its values in ascending order."""
    return tuple(v for v in range(1, SIZE + 1) if mask & (1 << (v - 1)))


class Cell:
    """
    One of the 81 positions of a board together with its candidate set.

    The candidate set only ever shrinks. It is never allowed to become
    empty: an operation that would empty it raises ConstraintViolation
    and leaves the cell unchanged.
    """

    __slots__ = ("row", "col", "box", "index", "_candidates", "_mask")

    def __init__(self, row: int, col: int, candidates: Optional[Iterable[int]] = None):
        """
        Initialize a cell.

        Args:
            row: Row index in [0, 9).
            col: Column index in [0, 9).
            candidates: Initial candidate values. Defaults to all of 1-9.
        """
        self.row = row
        self.col = col
        self.box = (row // BOX_SIZE) * BOX_SIZE + col // BOX_SIZE
        self.index = row * SIZE + col
        self._candidates = set(ALL_VALUES if candidates is None else candidates)
        self._mask = values_to_mask(self._candidates)
        if not self._candidates:
            raise ConstraintViolation(f"Cell ({row}, {col}) has no candidates", row, col)

    @property
    def candidates(self) -> FrozenSet[int]:
        return frozenset(self._candidates)

    @property
    def is_solved(self) -> bool:
        return len(self._candidates) == 1

    @property
    def value(self) -> Optional[int]:
        """The known value of a solved cell, None otherwise."""
        if len(self._candidates) == 1:
            return next(iter(self._candidates))
        return None

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, value: int) -> bool:
        return value in self._candidates

    def rule_out_values(self, values: Iterable[int]) -> bool:
        """
        Remove values from the candidate set.

        Args:
            values: Values that this cell can no longer hold.

        Returns:
            True if the candidate set shrank.

        Raises:
            ConstraintViolation: If no candidate would remain.
        """
        remaining = self._candidates.difference(values)
        if not remaining:
            raise ConstraintViolation(
                f"Ruling out {sorted(self._candidates)} leaves cell "
                f"({self.row}, {self.col}) without candidates",
                self.row, self.col
            )
        if len(remaining) == len(self._candidates):
            return False
        self._candidates = remaining
        self._mask = values_to_mask(remaining)
        return True

    def set_value(self, value: int) -> None:
        """Narrow the candidate set to the single given value."""
        if value not in self._candidates:
            raise InvalidAssignment(
                f"Cannot set cell ({self.row}, {self.col}) to {value}, "
                f"candidates are {sorted(self._candidates)}"
            )
        self._candidates = {value}
        self._mask = 1 << (value - 1)

    def is_related_to(self, other: Cell) -> bool:
        """
        True if the other cell shares a row, column or box with this one.

        A cell is related to itself; peer lists leave it out.
        """
        return other.row == self.row or other.col == self.col or other.box == self.box

    def signature(self) -> int:
        """Canonical grouping key: the candidate set as a 9-bit mask."""
        return self._mask

    def __repr__(self) -> str:
        cands = "".join(str(v) for v in sorted(self._candidates))
        return f"Cell({self.row}, {self.col}, {{{cands}}})"
