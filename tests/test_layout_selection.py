"""Weighted style roll and branch bonus rules."""
import random

import pytest

from levelpreview.dungeon.layouts import (
    BASE_WEIGHTS,
    LayoutStyle,
    choose_layout_style,
    style_weights,
)

from dungeon_test_utils import FixedRoll

S = LayoutStyle


def test_base_table_sums_to_one_hundred():
    assert sum(w for _, w in BASE_WEIGHTS) == 100
    assert style_weights("X") == dict(BASE_WEIGHTS)


@pytest.mark.parametrize(
    "roll,expected",
    [
        (0, S.BASIC_ROOMS),
        (29, S.BASIC_ROOMS),
        (30, S.CELLULAR_CAVE),
        (44, S.CELLULAR_CAVE),
        (45, S.MAZE),
        (55, S.NOISE_HEIGHTMAP),
        (65, S.CITY_GRID),
        (73, S.CHAOTIC_CITY),
        (77, S.LABYRINTH),
        (83, S.BIG_OPEN),
        (89, S.DIAMOND),
        (93, S.RUINS),
        (98, S.RIVER_LAKE),
        (99, S.RIVER_LAKE),
    ],
)
def test_cumulative_lookup_in_table_order(roll, expected):
    rng = FixedRoll(roll)
    assert choose_layout_style(rng, "X") == expected
    assert rng.bounds == [100]


def test_lair_bonus():
    w = style_weights("Lair")
    assert w[S.CELLULAR_CAVE] == 25
    assert w[S.RIVER_LAKE] == 6
    assert w[S.RUINS] == 7
    assert w[S.MAZE] == 10


def test_vault_bonus_suppresses_rooms():
    w = style_weights("VAULTS")
    assert w[S.CITY_GRID] == 20
    assert w[S.CHAOTIC_CITY] == 12
    assert w[S.BASIC_ROOMS] == 20


def test_tomb_and_crypt_bonus():
    for branch in ("Tomb", "CRYPT"):
        w = style_weights(branch)
        assert w[S.RUINS] == 13
        assert w[S.LABYRINTH] == 9


def test_ziggurat_matches_once():
    w = style_weights("ZIGGURAT")
    assert w[S.BIG_OPEN] == 12
    assert w[S.CITY_GRID] == 14


def test_single_letter_d_matches_broadly():
    """Known broad match: any branch containing a D gets the depths bonus."""
    for branch in ("D", "Depths", "Dungeon", "Snake_D"):
        w = style_weights(branch)
        assert w[S.MAZE] == 14, branch
        assert w[S.LABYRINTH] == 10, branch
        assert w[S.DIAMOND] == 7, branch
    # default branch rolls over the boosted total
    rng = FixedRoll(0)
    choose_layout_style(rng)
    assert rng.bounds == [111]


def test_bonuses_stack_across_rules():
    # "SHOALS_D" hits both the watery and the depths rules
    w = style_weights("SHOALS_D")
    assert w[S.CELLULAR_CAVE] == 25
    assert w[S.MAZE] == 14


def test_roll_is_seed_deterministic():
    picks_a = [choose_layout_style(random.Random(s)) for s in range(20)]
    picks_b = [choose_layout_style(random.Random(s)) for s in range(20)]
    assert picks_a == picks_b
    assert len(set(picks_a)) > 1
