"""Visitation order for the backtracking search."""

from __future__ import annotations

from typing import Collection, List, Sequence, Tuple

from grid_model import ADJACENCY_KINDS, Cell, NeighborTable


def build_order(
    size: int,
    neighbors: NeighborTable,
    seed_cells: Collection[Cell] = (),
    degree_kinds: Sequence[str] = ADJACENCY_KINDS,
) -> Tuple[Cell, ...]:
    """
    Order the non-seed cells by descending neighbour degree.

    Args:
        size: grid side N.
        neighbors: neighbour table for the grid size.
        seed_cells: cells filled before the search; they are left out.
        degree_kinds: adjacency kinds that count towards a cell's degree.

    Returns:
        tuple: flat cell indices, most constrained first. Ties keep ascending
        index order, so the same configuration always yields the same order.
    """
    if neighbors.size != size:
        raise ValueError(
            f"Neighbour table is for a {neighbors.size}x{neighbors.size} grid, not {size}x{size}."
        )
    open_cells = [cell for cell in range(size * size) if cell not in seed_cells]
    return tuple(
        sorted(open_cells, key=lambda cell: (-neighbors.degree(cell, degree_kinds), cell))
    )


def remaining_counts(order: Sequence[Cell], designated: Collection[Cell]) -> List[int]:
    """Return ``counts[i]`` = designated cells among ``order[i:]``.

    The list has ``len(order) + 1`` entries; the last one is always zero.
    """
    members = set(designated)
    counts = [0] * (len(order) + 1)
    for index in range(len(order) - 1, -1, -1):
        counts[index] = counts[index + 1] + (1 if order[index] in members else 0)
    return counts
