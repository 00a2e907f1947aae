"""Candidate value generation for a single cell."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from grid_constraints import ASCENDING, MIDPOINT, PuzzleConfig
from grid_model import Cell, GridState, NeighborTable


def conflicts_with_neighbors(
    state: GridState,
    cell: Cell,
    value: int,
    rules: Sequence[Tuple[str, int]],
    neighbors: NeighborTable,
) -> bool:
    """Return True if ``value`` at ``cell`` breaks a local rule with a filled neighbour.

    This is the single local predicate: the generator filters with it and the
    engine re-checks placements with it.
    """
    cells = state.cells
    for kind, forbidden in rules:
        for other in neighbors.of_kind(kind)[cell]:
            placed = cells[other]
            if placed is not None and abs(placed - value) == forbidden:
                return True
    return False


def order_candidates(values: List[int], policy: str, midpoint: float) -> List[int]:
    if policy == MIDPOINT:
        # sorted() is stable: equal distances keep ascending order.
        return sorted(values, key=lambda v: abs(v - midpoint))
    if policy == ASCENDING:
        return values
    raise ValueError(f"Unknown candidate order: {policy}")


def candidates(
    state: GridState,
    cell: Cell,
    config: PuzzleConfig,
    neighbors: NeighborTable,
) -> List[int]:
    """
    List the values still worth trying at ``cell``.

    Returns:
        list: unused values in ``1..N*N`` that respect every local rule against
        the already filled neighbours, ordered by the configured policy.
    """
    rules = config.forbidden_differences()
    values = [
        value
        for value in range(1, state.max_value + 1)
        if not state.used[value]
        and not conflicts_with_neighbors(state, cell, value, rules, neighbors)
    ]
    return order_candidates(values, config.candidate_order, config.midpoint)
