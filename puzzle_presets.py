"""
Named puzzle configurations and JSON configuration loading.

Built-in presets:
- prime-parity-5x5: centre fixed to 13, no orthogonal neighbours differing by
  1, no diagonal neighbours differing by 2, ten designated cells summing to an
  even total.
- top-row-split-5x5: the same local rules and centre, 14 tried in each top-row
  position, two top-row values below 14 and two above, a second ten-cell even
  sum.
- marked-values-6x6: no orthogonal neighbours differing by 1, 1 in the top-left
  corner, and 1, 12, 24, 36 on pairwise distinct rows and columns.

Additional presets can be described in JSON (see ``config_from_dict``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

from grid_constraints import (
    ASCENDING,
    MIDPOINT,
    ConfigError,
    GlobalConstraint,
    MarkedValuesConstraint,
    PivotSplitConstraint,
    PuzzleConfig,
    Seed,
    SubsetParityConstraint,
)
from grid_model import DIAGONAL, ORTHOGONAL, Cell, to_index


def _cells_1based(pairs: Sequence[Tuple[int, int]], size: int) -> Tuple[Cell, ...]:
    return tuple(to_index(r - 1, c - 1, size) for r, c in pairs)


PRIME_CELLS_5X5 = _cells_1based(
    [(1, 2), (1, 4), (2, 1), (2, 3), (3, 2), (3, 4), (4, 1), (4, 3), (5, 2), (5, 4)], 5
)
PRIME_CELLS_5X5_ALT = _cells_1based(
    [(1, 2), (1, 4), (2, 1), (2, 3), (2, 5), (3, 2), (3, 4), (4, 1), (4, 3), (4, 5)], 5
)
TOP_ROW_5X5: Tuple[Cell, ...] = tuple(range(5))
CENTRE_5X5 = to_index(2, 2, 5)


PRESETS: Dict[str, PuzzleConfig] = {
    "prime-parity-5x5": PuzzleConfig(
        name="prime-parity-5x5",
        size=5,
        local_rules={ORTHOGONAL: 1, DIAGONAL: 2},
        global_constraints=(SubsetParityConstraint(cells=PRIME_CELLS_5X5, parity=0),),
        seeds=((CENTRE_5X5, 13),),
        candidate_order=MIDPOINT,
        description="Centre 13, no orthogonal +-1, no diagonal +-2, prime-cell sum even.",
    ),
    "top-row-split-5x5": PuzzleConfig(
        name="top-row-split-5x5",
        size=5,
        local_rules={ORTHOGONAL: 1, DIAGONAL: 2},
        global_constraints=(
            PivotSplitConstraint(cells=TOP_ROW_5X5, pivot=14, below=2, above=2),
            SubsetParityConstraint(cells=PRIME_CELLS_5X5_ALT, parity=0),
        ),
        seeds=((CENTRE_5X5, 13),),
        seed_placements=tuple((cell, 14) for cell in TOP_ROW_5X5),
        candidate_order=ASCENDING,
        description="Centre 13, 14 in the top row with two smaller and two larger neighbours in that row.",
    ),
    "marked-values-6x6": PuzzleConfig(
        name="marked-values-6x6",
        size=6,
        local_rules={ORTHOGONAL: 1},
        global_constraints=(MarkedValuesConstraint(values=(1, 12, 24, 36)),),
        seeds=((0, 1),),
        degree_kinds=(ORTHOGONAL,),
        candidate_order=ASCENDING,
        description="Top-left 1, no orthogonal +-1, 1/12/24/36 on distinct rows and columns.",
    ),
}


def get_preset(name: str) -> PuzzleConfig:
    try:
        return PRESETS[name]
    except KeyError as exc:
        raise ValueError(
            f"Unknown preset: {name} (available: {', '.join(sorted(PRESETS))})"
        ) from exc


# JSON configuration ---------------------------------------------------------


def _parse_cell(raw: Any, size: int, where: str) -> Cell:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ValueError(f"{where}: cell must be a [row, col] pair, got {raw!r}.")
    row, col = (int(x) for x in raw)
    if not (0 <= row < size and 0 <= col < size):
        raise ConfigError(f"{where}: cell {raw!r} is outside a {size}x{size} grid.")
    return to_index(row, col, size)


def _parse_seed(raw: Any, size: int, where: str) -> Seed:
    if not isinstance(raw, (list, tuple)) or len(raw) != 3:
        raise ValueError(f"{where}: seed must be a [row, col, value] triple, got {raw!r}.")
    return _parse_cell(raw[:2], size, where), int(raw[2])


def _parse_constraint(raw: Dict[str, Any], size: int, index: int) -> GlobalConstraint:
    where = f"global_constraints[{index}]"
    if not isinstance(raw, dict):
        raise ValueError(f"{where}: expected an object, got {raw!r}.")
    kind = raw.get("type")
    if kind == "subset-parity":
        cells = tuple(_parse_cell(cell, size, where) for cell in raw.get("cells", []))
        return SubsetParityConstraint(cells=cells, parity=int(raw.get("parity", 0)))
    if kind == "pivot-split":
        cells = tuple(_parse_cell(cell, size, where) for cell in raw.get("cells", []))
        try:
            return PivotSplitConstraint(
                cells=cells,
                pivot=int(raw["pivot"]),
                below=int(raw["below"]),
                above=int(raw["above"]),
            )
        except KeyError as exc:
            raise ValueError(f"{where}: missing field {exc.args[0]!r}.") from exc
    if kind == "marked-values":
        return MarkedValuesConstraint(values=tuple(int(v) for v in raw.get("values", [])))
    raise ValueError(f"{where}: unknown constraint type {kind!r}.")


def config_from_dict(payload: Dict[str, Any]) -> PuzzleConfig:
    """Build a ``PuzzleConfig`` from its JSON form; cells are 0-based ``[row, col]``."""
    if not isinstance(payload, dict):
        raise ValueError("Invalid configuration: expected a JSON object.")
    if "size" not in payload:
        raise ValueError("Invalid configuration: missing 'size'.")
    size = int(payload["size"])

    local_rules = payload.get("local_rules")
    if not isinstance(local_rules, dict) or not local_rules:
        raise ValueError("Invalid configuration: 'local_rules' must be a non-empty object.")

    constraints_raw: List[Dict[str, Any]] = payload.get("global_constraints", [])
    if not isinstance(constraints_raw, list):
        raise ValueError("Invalid configuration: 'global_constraints' must be a list.")

    return PuzzleConfig(
        name=str(payload.get("name", "custom")),
        size=size,
        local_rules={str(kind): int(diff) for kind, diff in local_rules.items()},
        global_constraints=tuple(
            _parse_constraint(raw, size, index) for index, raw in enumerate(constraints_raw)
        ),
        seeds=tuple(_parse_seed(raw, size, "seeds") for raw in payload.get("seeds", [])),
        seed_placements=tuple(
            _parse_seed(raw, size, "seed_placements")
            for raw in payload.get("seed_placements", [])
        ),
        degree_kinds=tuple(payload.get("degree_kinds", (ORTHOGONAL, DIAGONAL))),
        candidate_order=str(payload.get("candidate_order", MIDPOINT)),
        description=str(payload.get("description", "")),
    )


def load_config(path: Union[str, Path]) -> PuzzleConfig:
    with open(path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)
    return config_from_dict(payload)
