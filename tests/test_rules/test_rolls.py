"""Tests for dice rolls and roll data."""

import random

import pytest

from lhtrpg.rules.derivation import derive_character
from lhtrpg.rules.rolls import (
    build_roll_data,
    dice_count,
    dice_formula,
    resolve_ability_check,
    roll_dice,
    roll_pool,
)


class FixedRandom(random.Random):
    """Random source returning a fixed sequence of die faces."""

    def __init__(self, faces: list[int]) -> None:
        super().__init__()
        self.faces = list(faces)

    def randint(self, a: int, b: int) -> int:
        return self.faces.pop(0)


class TestDiceCount:
    """Tests for the dice pool size."""

    def test_default_pool(self):
        assert dice_count() == 2
        assert dice_formula() == "2d6"

    def test_bonus_dice(self):
        assert dice_count(2) == 4
        assert dice_formula(1) == "3d6"

    @pytest.mark.parametrize("bonus", [-1, -2, -10])
    def test_never_less_than_one(self, bonus):
        assert dice_count(bonus) >= 1

    def test_floor(self):
        assert dice_formula(-5) == "1d6"


class TestRollDice:
    """Tests for rolling against a difficulty."""

    def test_pool_range(self):
        rng = random.Random(42)
        results = roll_pool(50, rng)

        assert len(results) == 50
        assert all(1 <= face <= 6 for face in results)

    def test_success_at_or_under_difficulty(self):
        roll = roll_dice(7, rng=FixedRandom([3, 4]))

        assert roll.value == 7
        assert roll.individual_results == [3, 4]
        assert roll.success is True

    def test_failure_over_difficulty(self):
        roll = roll_dice(6, rng=FixedRandom([3, 4]))
        assert roll.success is False

    def test_bonus_dice_and_attain(self):
        roll = roll_dice(10, dice_bonus=1, attain_bonus=2, rng=FixedRandom([1, 2, 3]))

        assert roll.individual_results == [1, 2, 3]
        assert roll.value == 6
        assert roll.attain == 8


class TestAbilityCheck:
    """Tests for resolving an ability check from a derived total."""

    def test_target_and_attain(self):
        result = resolve_ability_check(
            total=9, difficulty=4, rank=1, attain=2, rng=FixedRandom([2, 3])
        )

        assert result.target == 6
        assert result.roll == 5
        assert result.success is True
        assert result.attain == 5 + 1 + 2

    def test_failure(self):
        result = resolve_ability_check(total=5, difficulty=4, rng=FixedRandom([1, 1]))

        assert result.target == 1
        assert result.success is False

    def test_reduced_pool(self):
        result = resolve_ability_check(total=9, difficulty=2, dice=-3, rng=FixedRandom([4]))
        assert result.individual_results == [4]


class TestBuildRollData:
    """Tests for the data formulas are evaluated against."""

    def test_character_roll_data(self, character, tables, make_item):
        sword = make_item("weapon", attack=3, equipped=True)
        skill = make_item("skill", subtype="Combat")
        system = derive_character(character, [sword, skill], tables).system.to_system()

        data = build_roll_data(system, [sword, skill])

        assert data["base"]["phy"]["value"] == 7
        assert data["derived"]["str"]["value"] == 2
        assert data["attack"]["total"] == 5
        assert data["magic"]["total"] == 0
        assert data["itemData"] == {sword.id: sword.to_system()}
        assert data["skillData"] == {skill.id: skill.to_system()}

    def test_input_not_modified(self, character, tables):
        system = derive_character(character, [], tables).system.to_system()
        data = build_roll_data(system, [])

        data["base"]["phy"]["value"] = 100
        assert system["attributes"]["base"]["phy"]["value"] == 7
        assert "itemData" not in system

    def test_monster_gets_plain_copy(self, make_item):
        system = {"rank": 3, "hate": 2}
        data = build_roll_data(system, [make_item("skill")], is_character=False)

        assert data == system
        assert data is not system
