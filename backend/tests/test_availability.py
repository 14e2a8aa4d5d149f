# tests/test_availability.py

from cocktailbot.dispense.availability import check_availability
from cocktailbot.dispense.types import MANUAL, Cocktail, PumpMapping, RecipeLine, TankLevel

PUMPS = [PumpMapping(pump_id=1, ingredient_id="x", flow_rate_ml_s=10, address=17)]


def _single(volume=40, dispense_class="automatic"):
    return Cocktail(id="c", name="C", lines=(RecipeLine("x", volume, dispense_class=dispense_class),))


def _levels(current):
    return [TankLevel(pump_id=1, current_ml=current, capacity_ml=1000)]


def test_exactly_required_is_low_not_missing():
    result = check_availability(_single(), 40, PUMPS, _levels(40))
    assert result.can_make
    assert result.low_ingredients == ["x"]
    assert result.missing_ingredients == []


def test_below_required_is_missing():
    result = check_availability(_single(), 40, PUMPS, _levels(39))
    assert not result.can_make
    assert result.missing_ingredients == ["x"]
    assert result.low_ingredients == []


def test_just_below_double_is_low():
    result = check_availability(_single(), 40, PUMPS, _levels(79.9))
    assert result.low_ingredients == ["x"]


def test_double_required_is_sufficient():
    result = check_availability(_single(), 40, PUMPS, _levels(80))
    assert result.can_make
    assert result.low_ingredients == []
    assert result.missing_ingredients == []


def test_checks_scaled_volume(mai_tai, mai_tai_pumps, full_tanks):
    # 300ml mai tai needs 150ml rum
    tanks = [TankLevel(pump_id=1, current_ml=149, capacity_ml=1000)] + full_tanks[1:]
    result = check_availability(mai_tai, 300, mai_tai_pumps, tanks)
    assert result.missing_ingredients == ["rum"]

    tanks = [TankLevel(pump_id=1, current_ml=200, capacity_ml=1000)] + full_tanks[1:]
    result = check_availability(mai_tai, 300, mai_tai_pumps, tanks)
    assert result.can_make
    assert result.low_ingredients == ["rum"]


def test_unmapped_and_levelless_ingredients_are_missing(mai_tai, mai_tai_pumps, full_tanks):
    pumps = [p for p in mai_tai_pumps if p.ingredient_id != "juice"]
    tanks = [t for t in full_tanks if t.pump_id != 3]
    result = check_availability(mai_tai, 300, pumps, tanks)
    assert not result.can_make
    assert result.missing_ingredients == ["juice", "grenadine"]


def test_manual_lines_never_block():
    cocktail = Cocktail(
        id="c",
        name="C",
        lines=(RecipeLine("x", 40), RecipeLine("mint", 10, dispense_class=MANUAL)),
    )
    result = check_availability(cocktail, 50, PUMPS, _levels(1000))
    assert result.can_make
    assert result.missing_ingredients == []


def test_configurable_multiplier():
    result = check_availability(_single(), 40, PUMPS, _levels(100), low_multiplier=3.0)
    assert result.low_ingredients == ["x"]


def test_is_idempotent(mai_tai, mai_tai_pumps, full_tanks):
    first = check_availability(mai_tai, 300, mai_tai_pumps, full_tanks)
    second = check_availability(mai_tai, 300, mai_tai_pumps, full_tanks)
    assert first == second
