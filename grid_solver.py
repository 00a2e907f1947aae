"""
Backtracking search for adjacency-constrained number grids.

The engine fills the cells of a ``PuzzleConfig`` grid in a fixed visitation
order, trying candidate values one at a time, and stops at the first complete
grid that satisfies every local and global constraint. Global constraints are
pruned incrementally through their trackers, so the look-ahead at each depth
costs one comparison per constraint.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from candidate_values import candidates, conflicts_with_neighbors
from cell_ordering import build_order, remaining_counts
from grid_constraints import PuzzleConfig, Seed, describe
from grid_model import Cell, GridState, build_neighbors, grid_to_rows

SOLVED = "solved"
NO_SOLUTION = "no-solution"
BUDGET_EXCEEDED = "budget-exceeded"


@dataclass
class SearchResult:
    status: str
    solution: Optional[List[int]]
    steps: int
    elapsed_seconds: float
    seeds: Tuple[Seed, ...] = ()
    message: str = ""

    @property
    def solved(self) -> bool:
        return self.status == SOLVED

    def rows(self, size: int) -> Optional[List[List[int]]]:
        if self.solution is None:
            return None
        return grid_to_rows(self.solution, size)


class GridSolver:
    """Depth-first solver for one seed placement of a puzzle configuration."""

    def __init__(
        self,
        config: PuzzleConfig,
        *,
        extra_seeds: Sequence[Seed] = (),
        max_steps: Optional[int] = None,
        time_limit: Optional[float] = None,
    ) -> None:
        if max_steps is not None and max_steps < 1:
            raise ValueError("max_steps must be >= 1.")
        if time_limit is not None and time_limit <= 0:
            raise ValueError("time_limit must be > 0.")

        self.config = config
        self.seeds: Tuple[Seed, ...] = tuple(config.seeds) + tuple(
            tuple(seed) for seed in extra_seeds
        )
        config.check_seeds(self.seeds)

        self.max_steps = max_steps
        self.time_limit = time_limit

        self.neighbors = build_neighbors(config.size)
        self.rules = config.forbidden_differences()
        self.trackers = config.new_trackers()
        self.state = GridState(config.size, self.trackers)

        self.order: Tuple[Cell, ...] = build_order(
            config.size,
            self.neighbors,
            {cell for cell, _ in self.seeds},
            config.degree_kinds,
        )
        self.remaining: List[List[int]] = [
            remaining_counts(self.order, constraint.designated_cells(config.size))
            for constraint in config.global_constraints
        ]

        self.steps = 0
        self.first_solution: Optional[List[int]] = None
        self._aborted = False
        self._deadline: Optional[float] = None

    def solve(self) -> SearchResult:
        """
        Search for the first grid satisfying the configuration.

        Returns:
            SearchResult: ``solved`` with the row-major grid, ``no-solution``
            when the search space is exhausted, or ``budget-exceeded`` when
            ``max_steps`` or ``time_limit`` cut the search short. The grid is
            left empty afterwards in every case.
        """
        start = time.perf_counter()
        self.steps = 0
        self.first_solution = None
        self._aborted = False
        self._deadline = None if self.time_limit is None else start + self.time_limit

        logger.debug("Search start: {} | seeds={}", describe(self.config), self.seeds)

        placed = self._place_seeds()
        if placed is None:
            elapsed = time.perf_counter() - start
            logger.debug("Seeds {} contradict the local rules or global constraints.", self.seeds)
            return SearchResult(
                status=NO_SOLUTION,
                solution=None,
                steps=0,
                elapsed_seconds=elapsed,
                seeds=self.seeds,
                message="Seed placements contradict the constraints.",
            )

        try:
            self._backtrack(0)
        finally:
            for cell, value in reversed(placed):
                self._remove_value(cell, value)

        elapsed = time.perf_counter() - start
        logger.debug(
            "Search end in {:.3f}s; steps={} solved={} aborted={}",
            elapsed,
            self.steps,
            self.first_solution is not None,
            self._aborted,
        )

        if self.first_solution is not None:
            return SearchResult(
                status=SOLVED,
                solution=list(self.first_solution),
                steps=self.steps,
                elapsed_seconds=elapsed,
                seeds=self.seeds,
                message="Solved successfully.",
            )
        if self._aborted:
            return SearchResult(
                status=BUDGET_EXCEEDED,
                solution=None,
                steps=self.steps,
                elapsed_seconds=elapsed,
                seeds=self.seeds,
                message="Search budget exhausted before a solution was found.",
            )
        return SearchResult(
            status=NO_SOLUTION,
            solution=None,
            steps=self.steps,
            elapsed_seconds=elapsed,
            seeds=self.seeds,
            message="No solution found.",
        )

    # Internal helpers -----------------------------------------------------

    def _place_seeds(self) -> Optional[List[Seed]]:
        placed: List[Seed] = []
        for cell, value in self.seeds:
            clashes = conflicts_with_neighbors(
                self.state, cell, value, self.rules, self.neighbors
            )
            if clashes or not all(tracker.admits(cell, value) for tracker in self.trackers):
                for done_cell, done_value in reversed(placed):
                    self._remove_value(done_cell, done_value)
                return None
            self._place_value(cell, value)
            placed.append((cell, value))
        return placed

    def _place_value(self, cell: Cell, value: int) -> None:
        self.state.place(cell, value)

    def _remove_value(self, cell: Cell, value: int) -> None:
        self.state.unplace(cell, value)

    def _budget_exhausted(self) -> bool:
        if self.max_steps is not None and self.steps >= self.max_steps:
            return True
        return self._deadline is not None and time.perf_counter() >= self._deadline

    def _lookahead_fails(self, index: int) -> bool:
        for tracker, counts in zip(self.trackers, self.remaining):
            if not tracker.can_still_hold(counts[index]):
                return True
        return False

    def _backtrack(self, index: int) -> bool:
        """Return True when the search should stop (solution found or aborted)."""
        if index == len(self.order):
            if all(tracker.satisfied() for tracker in self.trackers):
                self.first_solution = self.state.flat()
                return True
            return False

        if self._lookahead_fails(index):
            return False

        cell = self.order[index]
        for value in candidates(self.state, cell, self.config, self.neighbors):
            if self._budget_exhausted():
                self._aborted = True
                return True
            if not all(tracker.admits(cell, value) for tracker in self.trackers):
                continue
            self.steps += 1

            self._place_value(cell, value)
            should_stop = False
            if not conflicts_with_neighbors(self.state, cell, value, self.rules, self.neighbors):
                should_stop = self._backtrack(index + 1)
            self._remove_value(cell, value)
            if should_stop:
                return True

        return False


def solve_puzzle(
    config: PuzzleConfig,
    seed_placements: Optional[Sequence[Seed]] = None,
    *,
    max_steps: Optional[int] = None,
    time_limit: Optional[float] = None,
) -> SearchResult:
    """
    Run the engine once per extra seed placement, stopping at the first success.

    Args:
        config: the puzzle configuration.
        seed_placements: alternative extra seeds; defaults to
            ``config.seed_placements``. With none, the engine runs once on the
            configured seeds alone.
        max_steps: per-attempt limit on candidate placements.
        time_limit: per-attempt wall-clock limit in seconds.

    Returns:
        SearchResult: the first successful attempt, otherwise a combined
        failure whose status is ``budget-exceeded`` if any attempt was cut
        short and ``no-solution`` if every attempt was exhausted.
    """
    if seed_placements is None:
        seed_placements = config.seed_placements
    attempts: List[Tuple[Seed, ...]] = (
        [(tuple(placement),) for placement in seed_placements] if seed_placements else [()]
    )

    total_steps = 0
    total_elapsed = 0.0
    cut_short = False

    for attempt_index, extra in enumerate(attempts, start=1):
        solver = GridSolver(
            config, extra_seeds=extra, max_steps=max_steps, time_limit=time_limit
        )
        result = solver.solve()
        total_steps += result.steps
        total_elapsed += result.elapsed_seconds

        if result.solved:
            logger.info(
                "[{}] Attempt {}/{} solved with extra seeds {} ({} steps).",
                config.name,
                attempt_index,
                len(attempts),
                extra,
                result.steps,
            )
            result.steps = total_steps
            result.elapsed_seconds = total_elapsed
            return result

        cut_short = cut_short or result.status == BUDGET_EXCEEDED
        logger.warning(
            "[{}] Attempt {}/{} with extra seeds {} failed: {}",
            config.name,
            attempt_index,
            len(attempts),
            extra,
            result.message,
        )

    status = BUDGET_EXCEEDED if cut_short else NO_SOLUTION
    return SearchResult(
        status=status,
        solution=None,
        steps=total_steps,
        elapsed_seconds=total_elapsed,
        seeds=tuple(config.seeds),
        message=(
            "Search budget exhausted before a solution was found."
            if cut_short
            else "No solution found for any seed placement."
        ),
    )
