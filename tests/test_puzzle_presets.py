import json

import pytest

from grid_constraints import (
    ASCENDING,
    ConfigError,
    MarkedValuesConstraint,
    PivotSplitConstraint,
    SubsetParityConstraint,
)
from grid_model import DIAGONAL, ORTHOGONAL
from puzzle_presets import PRESETS, config_from_dict, get_preset, load_config

PAYLOAD = {
    "name": "json-variant",
    "size": 5,
    "local_rules": {"orthogonal": 1, "diagonal": 2},
    "seeds": [[2, 2, 13]],
    "seed_placements": [[0, 0, 14], [0, 1, 14]],
    "candidate_order": "ascending",
    "global_constraints": [
        {"type": "subset-parity", "cells": [[0, 1], [0, 3]], "parity": 0},
        {"type": "pivot-split", "cells": [[0, 0], [0, 1], [0, 2], [0, 3], [0, 4]],
         "pivot": 14, "below": 2, "above": 2},
        {"type": "marked-values", "values": [1, 25]},
    ],
}


def test_presets_are_registered_by_name():
    assert set(PRESETS) == {"prime-parity-5x5", "top-row-split-5x5", "marked-values-6x6"}
    for name, config in PRESETS.items():
        assert config.name == name
        assert get_preset(name) is config


def test_preset_shapes():
    assert get_preset("prime-parity-5x5").seeds == ((12, 13),)
    assert get_preset("top-row-split-5x5").seed_placements == tuple((c, 14) for c in range(5))
    six = get_preset("marked-values-6x6")
    assert six.size == 6
    assert dict(six.local_rules) == {ORTHOGONAL: 1}
    assert six.degree_kinds == (ORTHOGONAL,)


def test_unknown_preset_raises_value_error():
    with pytest.raises(ValueError, match="Unknown preset"):
        get_preset("sudoku")


def test_config_from_dict_builds_every_constraint_kind():
    config = config_from_dict(PAYLOAD)
    assert config.name == "json-variant"
    assert dict(config.local_rules) == {ORTHOGONAL: 1, DIAGONAL: 2}
    assert config.seeds == ((12, 13),)
    assert config.seed_placements == ((0, 14), (1, 14))
    assert config.candidate_order == ASCENDING
    parity, pivot, marked = config.global_constraints
    assert parity == SubsetParityConstraint(cells=(1, 3), parity=0)
    assert pivot == PivotSplitConstraint(cells=(0, 1, 2, 3, 4), pivot=14, below=2, above=2)
    assert marked == MarkedValuesConstraint(values=(1, 25))


def test_out_of_range_cell_is_a_config_error():
    payload = dict(PAYLOAD, seeds=[[5, 0, 13]])
    with pytest.raises(ConfigError):
        config_from_dict(payload)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"local_rules": {"orthogonal": 1}},
        {"size": 5},
        {"size": 5, "local_rules": {"orthogonal": 1}, "global_constraints": {}},
        {"size": 5, "local_rules": {"orthogonal": 1}, "global_constraints": [{"type": "sum"}]},
        {"size": 5, "local_rules": {"orthogonal": 1}, "seeds": [[0, 0]]},
        {
            "size": 5,
            "local_rules": {"orthogonal": 1},
            "global_constraints": [{"type": "pivot-split", "cells": [[0, 0]], "pivot": 3}],
        },
    ],
)
def test_malformed_payloads_raise_value_error(payload):
    with pytest.raises(ValueError):
        config_from_dict(payload)


def test_load_config_reads_json_file(tmp_path):
    path = tmp_path / "variant.json"
    path.write_text(json.dumps(PAYLOAD), encoding="utf-8")
    assert load_config(path) == config_from_dict(PAYLOAD)
