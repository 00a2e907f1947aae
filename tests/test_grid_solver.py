import pytest

from grid_constraints import PivotSplitConstraint, PuzzleConfig, SubsetParityConstraint
from grid_model import DIAGONAL, ORTHOGONAL, build_neighbors
from grid_solver import (
    BUDGET_EXCEEDED,
    NO_SOLUTION,
    SOLVED,
    GridSolver,
    solve_puzzle,
)
from grid_validator import validate
from puzzle_presets import PRIME_CELLS_5X5, get_preset


def _assert_local_rules(solution, config):
    neighbors = build_neighbors(config.size)
    for kind, forbidden in config.forbidden_differences():
        for cell, value in enumerate(solution):
            for other in neighbors.of_kind(kind)[cell]:
                assert abs(value - solution[other]) != forbidden


def test_prime_parity_scenario_is_solved_and_validated():
    config = get_preset("prime-parity-5x5")
    result = solve_puzzle(config, time_limit=60)

    assert result.status == SOLVED
    solution = result.solution
    assert sorted(solution) == list(range(1, 26))
    assert solution[12] == 13
    assert sum(solution[cell] for cell in PRIME_CELLS_5X5) % 2 == 0
    _assert_local_rules(solution, config)
    assert validate(solution, config)


def test_search_is_deterministic():
    config = get_preset("prime-parity-5x5")
    first = GridSolver(config, time_limit=60).solve()
    second = GridSolver(config, time_limit=60).solve()
    assert first.status == second.status == SOLVED
    assert first.solution == second.solution
    assert first.steps == second.steps


def test_solver_leaves_grid_and_trackers_clean():
    config = get_preset("prime-parity-5x5")
    solver = GridSolver(config, time_limit=60)
    before = solver.state.snapshot()
    solver.solve()
    assert solver.state.snapshot() == before
    assert all(value is None for value in solver.state.cells)


def test_marked_values_scenario_is_solved_and_validated():
    config = get_preset("marked-values-6x6")
    result = solve_puzzle(config, max_steps=2_000_000, time_limit=120)

    assert result.status == SOLVED
    solution = result.solution
    assert sorted(solution) == list(range(1, 37))
    assert solution[0] == 1
    marked = [(i // 6, i % 6) for i, v in enumerate(solution) if v in (1, 12, 24, 36)]
    assert len({r for r, _ in marked}) == 4
    assert len({c for _, c in marked}) == 4
    _assert_local_rules(solution, config)
    assert validate(solution, config)


def test_top_row_split_stops_at_first_successful_placement():
    config = get_preset("top-row-split-5x5")
    result = solve_puzzle(config, max_steps=500_000, time_limit=60)

    assert result.status == SOLVED
    assert result.seeds == ((12, 13), (0, 14))
    assert result.solution[0] == 14
    top = result.solution[:5]
    assert sum(1 for v in top if v < 14) == 2
    assert sum(1 for v in top if v > 14) == 2
    _assert_local_rules(result.solution, config)
    assert validate(result.solution, config)


def test_candidates_rejected_by_a_tracker_are_not_counted_as_steps():
    # Cell 0 only admits the pivot itself; 2, 3 and 1 are turned away first.
    config = PuzzleConfig(
        size=2,
        local_rules={ORTHOGONAL: 3},
        global_constraints=(PivotSplitConstraint(cells=(0,), pivot=4, below=0, above=0),),
    )
    result = GridSolver(config).solve()
    assert result.status == SOLVED
    assert result.solution == [4, 2, 3, 1]
    assert result.steps == 4


def test_unsatisfiable_two_by_two_reports_no_solution():
    config = PuzzleConfig(size=2, local_rules={ORTHOGONAL: 1})
    result = solve_puzzle(config)
    assert result.status == NO_SOLUTION
    assert result.solution is None
    assert not result.solved


def test_unsatisfiable_parity_is_pruned_to_no_solution():
    # Every 2x2 grid of 1..4 sums to 10, so an odd total is impossible.
    config = PuzzleConfig(
        size=2,
        local_rules={DIAGONAL: 3},
        global_constraints=(SubsetParityConstraint(cells=(0, 1, 2, 3), parity=1),),
    )
    result = solve_puzzle(config)
    assert result.status == NO_SOLUTION


def test_step_budget_unwinds_cleanly():
    config = get_preset("prime-parity-5x5")
    solver = GridSolver(config, max_steps=5)
    result = solver.solve()
    assert result.status == BUDGET_EXCEEDED
    assert result.steps == 5
    assert result.solution is None
    assert all(value is None for value in solver.state.cells)
    assert not any(solver.state.used)


def test_outer_loop_skips_contradicting_placement_and_stops_at_first_success():
    config = PuzzleConfig(
        size=3,
        local_rules={ORTHOGONAL: 8},
        seeds=((4, 1),),
        seed_placements=((1, 9), (0, 9), (8, 9)),
    )
    result = solve_puzzle(config)
    assert result.status == SOLVED
    assert result.seeds == ((4, 1), (0, 9))
    assert result.solution[0] == 9
    assert result.solution[4] == 1
    assert validate(result.solution, config)


def test_outer_loop_reports_no_solution_when_every_placement_fails():
    config = PuzzleConfig(
        size=3,
        local_rules={ORTHOGONAL: 8},
        seeds=((4, 1),),
        seed_placements=((1, 9), (3, 9)),
    )
    result = solve_puzzle(config)
    assert result.status == NO_SOLUTION
    assert result.steps == 0


def test_contradicting_seeds_short_circuit():
    config = PuzzleConfig(size=5, local_rules={ORTHOGONAL: 1}, seeds=((0, 5), (1, 6)))
    result = GridSolver(config).solve()
    assert result.status == NO_SOLUTION
    assert result.steps == 0


@pytest.mark.parametrize("kwargs", [{"max_steps": 0}, {"time_limit": 0}])
def test_invalid_budget_is_rejected(kwargs):
    with pytest.raises(ValueError):
        GridSolver(get_preset("prime-parity-5x5"), **kwargs)
