"""
Constraint configuration for the grid solver.

A puzzle is described entirely by data: a table of forbidden differences per
adjacency kind, the seed placements, and a tuple of global constraints. Each
global constraint hands out a fresh tracker per search attempt; the tracker
keeps the running aggregate the engine prunes on, so the configuration itself
stays immutable and can be shared between attempts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Iterable, List, Mapping, Sequence, Set, Tuple

from grid_model import (
    ADJACENCY_KINDS,
    MAX_SIZE,
    MIN_SIZE,
    Cell,
    to_coords,
)

MIDPOINT = "midpoint"
ASCENDING = "ascending"
CANDIDATE_ORDERS: Tuple[str, ...] = (MIDPOINT, ASCENDING)

Seed = Tuple[Cell, int]


class ConfigError(ValueError):
    """Raised when a puzzle configuration is malformed."""


# Trackers -------------------------------------------------------------------


class SubsetParityTracker:
    """Parity of the running sum over the designated cells.

    Placing and removing a value both flip the parity by ``value & 1``. XOR is
    its own inverse, so ``on_unplace`` is literally ``on_place`` applied again.
    """

    def __init__(self, constraint: "SubsetParityConstraint") -> None:
        self.constraint = constraint
        self.members: FrozenSet[Cell] = frozenset(constraint.cells)
        self.parity = 0

    def on_place(self, cell: Cell, value: int) -> None:
        if cell in self.members:
            self.parity ^= value & 1

    def on_unplace(self, cell: Cell, value: int) -> None:
        self.on_place(cell, value)

    def admits(self, cell: Cell, value: int) -> bool:
        return True

    def satisfied(self) -> bool:
        return self.parity == self.constraint.parity

    def can_still_hold(self, remaining: int) -> bool:
        return remaining > 0 or self.satisfied()

    def state(self) -> int:
        return self.parity


class PivotSplitTracker:
    """Counts of designated values below and above the pivot."""

    def __init__(self, constraint: "PivotSplitConstraint") -> None:
        self.constraint = constraint
        self.members: FrozenSet[Cell] = frozenset(constraint.cells)
        self.below = 0
        self.above = 0

    def _step(self, cell: Cell, value: int, delta: int) -> None:
        if cell not in self.members:
            return
        if value < self.constraint.pivot:
            self.below += delta
        elif value > self.constraint.pivot:
            self.above += delta

    def on_place(self, cell: Cell, value: int) -> None:
        self._step(cell, value, 1)

    def on_unplace(self, cell: Cell, value: int) -> None:
        self._step(cell, value, -1)

    def admits(self, cell: Cell, value: int) -> bool:
        if cell not in self.members:
            return True
        if value < self.constraint.pivot:
            return self.below < self.constraint.below
        if value > self.constraint.pivot:
            return self.above < self.constraint.above
        return True

    def satisfied(self) -> bool:
        return (
            self.below == self.constraint.below
            and self.above == self.constraint.above
        )

    def can_still_hold(self, remaining: int) -> bool:
        missing_below = self.constraint.below - self.below
        missing_above = self.constraint.above - self.above
        if missing_below < 0 or missing_above < 0:
            return False
        return missing_below + missing_above <= remaining

    def state(self) -> Tuple[int, int]:
        return self.below, self.above


class MarkedValuesTracker:
    """How many marked values sit in each row and column."""

    def __init__(self, constraint: "MarkedValuesConstraint", size: int) -> None:
        self.constraint = constraint
        self.size = size
        self.marked: FrozenSet[int] = frozenset(constraint.values)
        self.rows: List[int] = [0] * size
        self.cols: List[int] = [0] * size

    def _step(self, cell: Cell, value: int, delta: int) -> None:
        if value in self.marked:
            row, col = to_coords(cell, self.size)
            self.rows[row] += delta
            self.cols[col] += delta

    def on_place(self, cell: Cell, value: int) -> None:
        self._step(cell, value, 1)

    def on_unplace(self, cell: Cell, value: int) -> None:
        self._step(cell, value, -1)

    def admits(self, cell: Cell, value: int) -> bool:
        if value not in self.marked:
            return True
        row, col = to_coords(cell, self.size)
        return self.rows[row] == 0 and self.cols[col] == 0

    def satisfied(self) -> bool:
        return max(self.rows) <= 1 and max(self.cols) <= 1

    def can_still_hold(self, remaining: int) -> bool:
        # A shared row or column never clears by filling more cells.
        return self.satisfied()

    def state(self) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
        return tuple(self.rows), tuple(self.cols)


# Global constraints ---------------------------------------------------------


class GlobalConstraint:
    name: str = "global"

    def designated_cells(self, size: int) -> Tuple[Cell, ...]:
        """Cells whose filling can still change the constraint's verdict."""
        raise NotImplementedError

    def tracker(self, size: int):
        raise NotImplementedError

    def check(self, size: int) -> None:
        """Raise ConfigError when the constraint cannot apply to the grid size."""
        raise NotImplementedError


def _check_cells(name: str, cells: Sequence[Cell], size: int) -> None:
    if not cells:
        raise ConfigError(f"{name}: designated cell subset must not be empty.")
    for cell in cells:
        if not 0 <= cell < size * size:
            raise ConfigError(
                f"{name}: cell {cell} is outside a {size}x{size} grid."
            )
    if len(set(cells)) != len(cells):
        raise ConfigError(f"{name}: designated cells contain duplicates.")


@dataclass(frozen=True)
class SubsetParityConstraint(GlobalConstraint):
    cells: Tuple[Cell, ...]
    parity: int = 0
    name: str = "subset-parity"

    def designated_cells(self, size: int) -> Tuple[Cell, ...]:
        return self.cells

    def tracker(self, size: int) -> SubsetParityTracker:
        return SubsetParityTracker(self)

    def check(self, size: int) -> None:
        _check_cells(self.name, self.cells, size)
        if self.parity not in (0, 1):
            raise ConfigError(f"{self.name}: parity must be 0 or 1, got {self.parity}.")


@dataclass(frozen=True)
class PivotSplitConstraint(GlobalConstraint):
    cells: Tuple[Cell, ...]
    pivot: int
    below: int
    above: int
    name: str = "pivot-split"

    def designated_cells(self, size: int) -> Tuple[Cell, ...]:
        return self.cells

    def tracker(self, size: int) -> PivotSplitTracker:
        return PivotSplitTracker(self)

    def check(self, size: int) -> None:
        _check_cells(self.name, self.cells, size)
        if not 1 <= self.pivot <= size * size:
            raise ConfigError(f"{self.name}: pivot {self.pivot} is outside 1..{size * size}.")
        if self.below < 0 or self.above < 0:
            raise ConfigError(f"{self.name}: counts must not be negative.")
        if self.below + self.above > len(self.cells):
            raise ConfigError(
                f"{self.name}: {self.below} below + {self.above} above exceeds "
                f"{len(self.cells)} designated cells."
            )
        if self.below > self.pivot - 1 or self.above > size * size - self.pivot:
            raise ConfigError(f"{self.name}: not enough values on one side of {self.pivot}.")


@dataclass(frozen=True)
class MarkedValuesConstraint(GlobalConstraint):
    values: Tuple[int, ...]
    name: str = "marked-values"

    def designated_cells(self, size: int) -> Tuple[Cell, ...]:
        # Any cell may receive a marked value; the look-ahead never fires early.
        return tuple(range(size * size))

    def tracker(self, size: int) -> MarkedValuesTracker:
        return MarkedValuesTracker(self, size)

    def check(self, size: int) -> None:
        if not self.values:
            raise ConfigError(f"{self.name}: marked value set must not be empty.")
        for value in self.values:
            if not 1 <= value <= size * size:
                raise ConfigError(f"{self.name}: value {value} is outside 1..{size * size}.")
        if len(set(self.values)) != len(self.values):
            raise ConfigError(f"{self.name}: marked values contain duplicates.")
        if len(self.values) > size:
            raise ConfigError(
                f"{self.name}: {len(self.values)} values cannot occupy distinct rows of a {size}x{size} grid."
            )


# Puzzle configuration -------------------------------------------------------


@dataclass(frozen=True)
class PuzzleConfig:
    """Everything the engine needs to know about one puzzle variant.

    Args:
        size: grid side N.
        local_rules: forbidden absolute difference per adjacency kind.
        global_constraints: global predicates over cell or value subsets.
        seeds: ``(cell, value)`` pairs placed before the search starts.
        seed_placements: alternative extra seeds; each one is tried in turn.
        degree_kinds: adjacency kinds counted towards the ordering degree.
        candidate_order: ``"midpoint"`` or ``"ascending"``.
    """

    size: int
    local_rules: Mapping[str, int] = field(hash=False)
    global_constraints: Tuple[GlobalConstraint, ...] = ()
    seeds: Tuple[Seed, ...] = ()
    seed_placements: Tuple[Seed, ...] = ()
    degree_kinds: Tuple[str, ...] = ADJACENCY_KINDS
    candidate_order: str = MIDPOINT
    name: str = "custom"
    description: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        # Read-only copy; a frozen config must not follow the caller's dict.
        object.__setattr__(self, "local_rules", MappingProxyType(dict(self.local_rules)))
        if not MIN_SIZE <= self.size <= MAX_SIZE:
            raise ConfigError(
                f"Grid size {self.size} is outside the supported range {MIN_SIZE}..{MAX_SIZE}."
            )
        for kind, difference in self.local_rules.items():
            if kind not in ADJACENCY_KINDS:
                raise ConfigError(f"Unknown adjacency kind in local rules: {kind}")
            if difference < 1:
                raise ConfigError(f"Forbidden {kind} difference must be >= 1, got {difference}.")
        for kind in self.degree_kinds:
            if kind not in ADJACENCY_KINDS:
                raise ConfigError(f"Unknown adjacency kind in degree kinds: {kind}")
        if self.candidate_order not in CANDIDATE_ORDERS:
            raise ConfigError(
                f"Unknown candidate order {self.candidate_order!r}; "
                f"expected one of {', '.join(CANDIDATE_ORDERS)}."
            )
        self.check_seeds(self.seeds)
        for placement in self.seed_placements:
            self.check_seeds(tuple(self.seeds) + (tuple(placement),))
        for constraint in self.global_constraints:
            constraint.check(self.size)

    @property
    def max_value(self) -> int:
        return self.size * self.size

    @property
    def midpoint(self) -> float:
        return (self.max_value + 1) / 2

    def check_seeds(self, seeds: Iterable[Seed]) -> None:
        cells: Set[Cell] = set()
        values: Set[int] = set()
        for cell, value in seeds:
            if not 0 <= cell < self.max_value:
                raise ConfigError(f"Seed cell {cell} is outside a {self.size}x{self.size} grid.")
            if not 1 <= value <= self.max_value:
                raise ConfigError(f"Seed value {value} is outside 1..{self.max_value}.")
            if cell in cells:
                raise ConfigError(f"Seed cell {cell} is assigned twice.")
            if value in values:
                raise ConfigError(f"Seed value {value} is used twice.")
            cells.add(cell)
            values.add(value)

    def forbidden_differences(self) -> List[Tuple[str, int]]:
        """Local rules in a fixed adjacency order."""
        return [
            (kind, self.local_rules[kind])
            for kind in ADJACENCY_KINDS
            if kind in self.local_rules
        ]

    def new_trackers(self) -> List:
        return [constraint.tracker(self.size) for constraint in self.global_constraints]


def describe(config: PuzzleConfig) -> str:
    rules = ", ".join(f"{kind}!={diff}" for kind, diff in config.forbidden_differences())
    constraints = ", ".join(c.name for c in config.global_constraints) or "none"
    seeds = ", ".join(f"{cell}={value}" for cell, value in config.seeds)
    return (
        f"{config.name}: {config.size}x{config.size}, local [{rules}], "
        f"global [{constraints}], seeds [{seeds or 'none'}]"
    )
