"""Dice rolls and roll data for LHTRPG checks.

Checks roll a pool of six-sided dice: two by default, plus or minus any dice
bonus, and never fewer than one.
"""

import copy
import random
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .items import Item, ItemType

DIE_SIDES = 6
BASE_DICE = 2


@dataclass(frozen=True)
class DiceRoll:
    """Result of rolling a dice pool against a difficulty."""

    difficulty: int
    value: int
    individual_results: list[int]
    success: bool
    attain: int


@dataclass(frozen=True)
class AbilityCheckResult:
    """Result of an ability check made from a check's total and rank."""

    roll: int
    individual_results: list[int]
    target: int
    success: bool
    attain: int


def dice_count(dice_bonus: int = 0) -> int:
    """Number of dice rolled for a check (never less than 1)."""
    return max(dice_bonus + BASE_DICE, 1)


def dice_formula(dice_bonus: int = 0) -> str:
    """
    Get the dice formula for a check.

    Examples:
        >>> dice_formula(0)
        '2d6'
        >>> dice_formula(-5)
        '1d6'
    """
    return f"{dice_count(dice_bonus)}d{DIE_SIDES}"


def roll_pool(count: int, rng: random.Random | None = None) -> list[int]:
    """Roll ``count`` six-sided dice."""
    rng = rng or random.Random()
    return [rng.randint(1, DIE_SIDES) for _ in range(count)]


def roll_dice(
    difficulty: int,
    dice_bonus: int = 0,
    attain_bonus: int = 0,
    rng: random.Random | None = None,
) -> DiceRoll:
    """
    Roll a check pool and compare it with a difficulty.

    Args:
        difficulty: Value the roll must not exceed to succeed
        dice_bonus: Extra (or fewer) dice on top of the base two
        attain_bonus: Added to the roll for the attainment value
        rng: Random source; a fresh one if omitted

    Returns:
        DiceRoll with the total, individual dice and outcome
    """
    results = roll_pool(dice_count(dice_bonus), rng)
    value = sum(results)

    return DiceRoll(
        difficulty=difficulty,
        value=value,
        individual_results=results,
        success=value <= difficulty,
        attain=value + attain_bonus,
    )


def resolve_ability_check(
    total: int,
    difficulty: int,
    rank: int = 0,
    dice: int = 0,
    attain: int = 0,
    rng: random.Random | None = None,
) -> AbilityCheckResult:
    """
    Roll an ability check for a derived check value.

    The roll succeeds when it is at most ``total - difficulty + rank``; the
    attainment value is the roll plus rank plus any attain bonus.

    Args:
        total: The check's derived total
        difficulty: Difficulty of the task
        rank: The check's skill rank
        dice: Dice bonus added to the base pool
        attain: Flat attainment bonus
        rng: Random source; a fresh one if omitted
    """
    results = roll_pool(dice_count(dice), rng)
    roll = sum(results)
    target = total - difficulty + rank

    return AbilityCheckResult(
        roll=roll,
        individual_results=results,
        target=target,
        success=roll <= target,
        attain=roll + rank + attain,
    )


def build_roll_data(
    system: dict[str, Any], items: Iterable[Item], is_character: bool = True
) -> dict[str, Any]:
    """
    Build the data formulas are evaluated against.

    For characters, each attribute group (``base``, ``derived``) and each power
    entry (``attack``, ``magic``, ``restoration``) is copied to the top level,
    and item bags are exposed as ``itemData`` / ``skillData`` keyed by item id.

    Args:
        system: A derived ``system`` bag
        items: The actor's owned items
        is_character: Monsters get a plain copy of their bag

    Returns:
        A new dictionary; the input bag is not modified
    """
    data = copy.deepcopy(system)
    if not is_character:
        return data

    for key, value in system.get("attributes", {}).items():
        data[key] = copy.deepcopy(value)

    for key, value in system.get("battle-status", {}).get("power", {}).items():
        data[key] = copy.deepcopy(value)

    data["itemData"] = {}
    data["skillData"] = {}
    for item in items:
        bucket = data["skillData"] if item.type == ItemType.SKILL else data["itemData"]
        bucket[item.id] = item.to_system()

    return data
