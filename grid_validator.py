"""
Independent re-check of a completed grid.

Everything here is recomputed from the whole grid by direct scanning. Nothing
is shared with the solver's trackers or candidate filtering, so a bug in the
incremental bookkeeping cannot hide itself from this check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from grid_constraints import (
    MarkedValuesConstraint,
    PivotSplitConstraint,
    PuzzleConfig,
    SubsetParityConstraint,
)

DIRECTIONS = {
    "orthogonal": ((1, 0), (-1, 0), (0, 1), (0, -1)),
    "diagonal": ((1, 1), (1, -1), (-1, 1), (-1, -1)),
}


@dataclass
class GridCheckResult:
    """Outcome of a full grid check."""

    is_valid: bool
    issues: List[str]


def _iter_issues(grid: Sequence[Optional[int]], config: PuzzleConfig) -> Iterator[str]:
    size = config.size
    total = size * size

    if len(grid) != total:
        yield f"Grid has {len(grid)} cells; a {size}x{size} grid needs {total}."
        return

    # Permutation of 1..N*N
    if any(value is None for value in grid):
        yield "Grid contains empty cells."
        return
    expected = set(range(1, total + 1))
    present = set(grid)
    if present != expected:
        missing = sorted(expected - present)
        extra = sorted(present - expected)
        parts = []
        if missing:
            parts.append(f"missing {missing}")
        if extra:
            parts.append(f"out of range {extra}")
        duplicates = sorted({v for v in grid if list(grid).count(v) > 1})
        if duplicates:
            parts.append(f"duplicate {duplicates}")
        yield f"Grid is not a permutation of 1..{total}: {'; '.join(parts)}."
        return

    for cell, value in config.seeds:
        if grid[cell] != value:
            yield f"Cell {cell} must hold seed {value} but holds {grid[cell]}."

    # Local rules, every ordered neighbour pair
    for kind, forbidden in config.local_rules.items():
        for r in range(size):
            for c in range(size):
                value = grid[r * size + c]
                for dr, dc in DIRECTIONS[kind]:
                    nr, nc = r + dr, c + dc
                    if not (0 <= nr < size and 0 <= nc < size):
                        continue
                    other = grid[nr * size + nc]
                    if abs(value - other) == forbidden:
                        yield (
                            f"{kind.capitalize()} neighbours ({r + 1}, {c + 1})={value} and "
                            f"({nr + 1}, {nc + 1})={other} differ by {forbidden}."
                        )

    for constraint in config.global_constraints:
        if isinstance(constraint, SubsetParityConstraint):
            total_sum = sum(grid[cell] for cell in constraint.cells)
            if total_sum % 2 != constraint.parity:
                wanted = "even" if constraint.parity == 0 else "odd"
                yield f"{constraint.name}: sum {total_sum} over {len(constraint.cells)} cells is not {wanted}."
        elif isinstance(constraint, PivotSplitConstraint):
            values = [grid[cell] for cell in constraint.cells]
            below = len([v for v in values if v < constraint.pivot])
            above = len([v for v in values if v > constraint.pivot])
            if below != constraint.below or above != constraint.above:
                yield (
                    f"{constraint.name}: {below} below / {above} above {constraint.pivot}, "
                    f"expected {constraint.below} / {constraint.above}."
                )
        elif isinstance(constraint, MarkedValuesConstraint):
            positions = [
                (index // size, index % size)
                for index, value in enumerate(grid)
                if value in constraint.values
            ]
            for i in range(len(positions)):
                for j in range(i + 1, len(positions)):
                    (r1, c1), (r2, c2) = positions[i], positions[j]
                    if r1 == r2 or c1 == c2:
                        yield (
                            f"{constraint.name}: marked values at ({r1 + 1}, {c1 + 1}) and "
                            f"({r2 + 1}, {c2 + 1}) share a row or column."
                        )
        else:
            raise TypeError(f"No check available for constraint {constraint!r}.")


def validate(grid: Sequence[Optional[int]], config: PuzzleConfig) -> bool:
    """Return True if ``grid`` satisfies every constraint; stop at the first violation."""
    return next(_iter_issues(grid, config), None) is None


def check_grid(grid: Sequence[Optional[int]], config: PuzzleConfig) -> GridCheckResult:
    """Collect every violation as a human-readable issue."""
    issues = list(_iter_issues(grid, config))
    return GridCheckResult(is_valid=not issues, issues=issues)
