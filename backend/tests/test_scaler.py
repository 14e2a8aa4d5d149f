# tests/test_scaler.py

import pytest

from cocktailbot.core.errors import InvalidRecipe
from cocktailbot.dispense.scaler import round_half_up, scale
from cocktailbot.dispense.types import MANUAL, POUR_FLOAT, RecipeLine


def test_round_half_up():
    assert round_half_up(112.5) == 113
    assert round_half_up(37.5) == 38
    assert round_half_up(37.49) == 37
    assert round_half_up(0.4) == 0


def test_scale_mai_tai_to_300(mai_tai):
    scaled = scale(mai_tai.lines, 300)
    assert [line.volume_ml for line in scaled] == [150, 113, 38]


@pytest.mark.parametrize("target", [1, 7, 33, 200, 299, 300, 301, 400, 1234])
def test_scaled_total_within_rounding_tolerance(target):
    lines = [RecipeLine("a", 13), RecipeLine("b", 27.5), RecipeLine("c", 4), RecipeLine("d", 61)]
    total = sum(line.volume_ml for line in scale(lines, target))
    assert abs(total - target) <= len(lines) * 0.5


def test_identity_scaling_keeps_volumes():
    lines = [RecipeLine("a", 40), RecipeLine("b", 120), RecipeLine("c", 15)]
    assert [line.volume_ml for line in scale(lines, 175)] == [40, 120, 15]


def test_passes_through_everything_but_volume():
    lines = [
        RecipeLine("grenadine", 10, pour_style=POUR_FLOAT),
        RecipeLine("mint", 5, dispense_class=MANUAL, instructions="Muddle"),
    ]
    scaled = scale(lines, 30)
    assert scaled[0].ingredient_id == "grenadine"
    assert scaled[0].pour_style == POUR_FLOAT
    assert scaled[1].dispense_class == MANUAL
    assert scaled[1].instructions == "Muddle"
    assert [line.volume_ml for line in scaled] == [20, 10]


def test_scale_does_not_mutate_input():
    lines = [RecipeLine("a", 40)]
    scale(lines, 80)
    assert lines[0].volume_ml == 40


def test_empty_recipe_is_invalid():
    with pytest.raises(InvalidRecipe):
        scale([], 300)


def test_zero_target_is_invalid(mai_tai):
    with pytest.raises(InvalidRecipe):
        scale(mai_tai.lines, 0)


def test_non_positive_total_is_invalid():
    with pytest.raises(InvalidRecipe):
        scale([RecipeLine("a", 0), RecipeLine("b", 0)], 100)
