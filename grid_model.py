"""
Grid model for the adjacency-constrained number grids.

A grid of side N is stored row-major as a flat list of N*N cells. Each cell is
either empty (``None``) or holds a value in ``1..N*N``; every placed value is
unique, which is tracked by a used-value table indexed by value.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Hashable, List, Optional, Sequence, Tuple

Cell = int
Grid = List[Optional[int]]

ORTHOGONAL = "orthogonal"
DIAGONAL = "diagonal"
ADJACENCY_KINDS: Tuple[str, ...] = (ORTHOGONAL, DIAGONAL)

ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))

MIN_SIZE = 2
MAX_SIZE = 6


class ContractViolation(RuntimeError):
    """Raised when the grid model is driven outside its preconditions."""


def to_index(row: int, col: int, size: int) -> Cell:
    return row * size + col


def to_coords(cell: Cell, size: int) -> Tuple[int, int]:
    return divmod(cell, size)


def grid_to_rows(flat: Sequence[Optional[int]], size: int) -> List[List[Optional[int]]]:
    """Split a row-major grid into ``size`` rows."""
    return [list(flat[r * size:(r + 1) * size]) for r in range(size)]


@dataclass(frozen=True)
class NeighborTable:
    """Orthogonal and diagonal neighbours of every cell of a square grid."""

    size: int
    orthogonal: Tuple[Tuple[Cell, ...], ...]
    diagonal: Tuple[Tuple[Cell, ...], ...]

    def of_kind(self, kind: str) -> Tuple[Tuple[Cell, ...], ...]:
        if kind == ORTHOGONAL:
            return self.orthogonal
        if kind == DIAGONAL:
            return self.diagonal
        raise ValueError(f"Unknown adjacency kind: {kind}")

    def degree(self, cell: Cell, kinds: Sequence[str] = ADJACENCY_KINDS) -> int:
        return sum(len(self.of_kind(kind)[cell]) for kind in kinds)


def _neighbors_along(
    size: int, steps: Sequence[Tuple[int, int]]
) -> Tuple[Tuple[Cell, ...], ...]:
    table = []
    for r in range(size):
        for c in range(size):
            cells = []
            for dr, dc in steps:
                nr, nc = r + dr, c + dc
                if 0 <= nr < size and 0 <= nc < size:
                    cells.append(to_index(nr, nc, size))
            table.append(tuple(cells))
    return tuple(table)


@lru_cache(maxsize=None)
def build_neighbors(size: int) -> NeighborTable:
    if not MIN_SIZE <= size <= MAX_SIZE:
        raise ValueError(
            f"Grid size {size} is outside the supported range {MIN_SIZE}..{MAX_SIZE}."
        )
    return NeighborTable(
        size=size,
        orthogonal=_neighbors_along(size, ORTHOGONAL_STEPS),
        diagonal=_neighbors_along(size, DIAGONAL_STEPS),
    )


class GridState:
    """Mutable grid, used-value table and the running aggregates tied to them.

    Trackers are objects exposing ``on_place(cell, value)``,
    ``on_unplace(cell, value)`` and ``state()``; each one keeps a small
    aggregate in step with the filled cells. ``place`` followed by
    ``unplace`` with the same arguments must restore every tracker exactly.
    """

    def __init__(self, size: int, trackers: Sequence = ()) -> None:
        self.size = size
        self.max_value = size * size
        self.cells: Grid = [None] * self.max_value
        self.used: List[bool] = [False] * (self.max_value + 1)
        self.trackers = list(trackers)

    def place(self, cell: Cell, value: int) -> None:
        if not 0 <= cell < self.max_value:
            raise ContractViolation(f"Cell {cell} is outside a {self.size}x{self.size} grid.")
        if not 1 <= value <= self.max_value:
            raise ContractViolation(f"Value {value} is outside 1..{self.max_value}.")
        if self.cells[cell] is not None:
            raise ContractViolation(
                f"Cell {cell} already holds {self.cells[cell]}; cannot place {value}."
            )
        if self.used[value]:
            raise ContractViolation(f"Value {value} is already placed.")

        self.cells[cell] = value
        self.used[value] = True
        for tracker in self.trackers:
            tracker.on_place(cell, value)

    def unplace(self, cell: Cell, value: int) -> None:
        if not 0 <= cell < self.max_value:
            raise ContractViolation(f"Cell {cell} is outside a {self.size}x{self.size} grid.")
        if self.cells[cell] != value:
            raise ContractViolation(
                f"Cell {cell} holds {self.cells[cell]}, not {value}; cannot unplace."
            )

        for tracker in self.trackers:
            tracker.on_unplace(cell, value)
        self.used[value] = False
        self.cells[cell] = None

    def value_at(self, cell: Cell) -> Optional[int]:
        return self.cells[cell]

    def is_complete(self) -> bool:
        return all(value is not None for value in self.cells)

    def flat(self) -> List[Optional[int]]:
        return list(self.cells)

    def rows(self) -> List[List[Optional[int]]]:
        return grid_to_rows(self.cells, self.size)

    def snapshot(self) -> Tuple[Hashable, ...]:
        """Return a hashable copy of the cells, used table and tracker states."""
        return (
            tuple(self.cells),
            tuple(self.used),
            tuple(tracker.state() for tracker in self.trackers),
        )
