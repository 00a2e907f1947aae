from cell_ordering import build_order, remaining_counts
from grid_model import ORTHOGONAL, build_neighbors


def test_order_visits_interior_first_and_corners_last():
    order = build_order(5, build_neighbors(5), seed_cells={12})
    assert len(order) == 24
    assert 12 not in order
    assert list(order[:8]) == [6, 7, 8, 11, 13, 16, 17, 18]
    assert list(order[8:20]) == [1, 2, 3, 5, 9, 10, 14, 15, 19, 21, 22, 23]
    assert list(order[20:]) == [0, 4, 20, 24]


def test_order_with_orthogonal_degree_only():
    order = build_order(6, build_neighbors(6), seed_cells={0}, degree_kinds=(ORTHOGONAL,))
    assert len(order) == 35
    assert list(order[:4]) == [7, 8, 9, 10]
    assert list(order[-3:]) == [5, 30, 35]


def test_order_is_deterministic_for_any_seed_container():
    neighbors = build_neighbors(5)
    first = build_order(5, neighbors, seed_cells={12, 0})
    second = build_order(5, neighbors, seed_cells=[0, 12])
    assert first == second


def test_remaining_counts_are_suffix_counts():
    assert remaining_counts([3, 1, 2], [1, 2]) == [2, 2, 1, 0]
    assert remaining_counts([], [1]) == [0]
