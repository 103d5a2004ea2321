"""Derived statistics for LHTRPG characters.

The cascade runs four steps in a fixed order over a copy of the character's
persisted data:

- Attributes and resources: race/class seeds plus modifiers, HP/MP/Fate maxima
- Checks: the eight ability checks plus accuracy, magic accuracy, evasion, resistance
- Battle status: attack/magic/restoration power, defenses, speed, initiative
- Inventory: occupied slots and maximum space

Equipment bonuses follow the equip gates: weapons count only while one or two
are equipped, accessories only while at most three are, and only the first
equipped armor counts.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

import structlog

from .attributes import (
    ABILITY_CHECK_PAIRS,
    BaseAttribute,
    CheckName,
    DefenseName,
    DerivedAttribute,
    PowerName,
    ResourceName,
)
from .character import CharacterSystem
from .items import Item, ItemType, equipped_items
from .tables import ZERO_CLASS, ZERO_RACE, ClassSeed, RaceSeed, ReferenceTables

logger = structlog.get_logger(__name__)

WEAPON_EQUIP_LIMIT = 2
ACCESSORY_EQUIP_LIMIT = 3
BASE_SPEED = 2
BASE_INVENTORY_SPACE = 2
MIN_CHECK_DICE = 1


class IssueCode(StrEnum):
    """Reportable, non-fatal derivation problems."""

    UNKNOWN_RACE = "unknown_race"
    UNKNOWN_CLASS = "unknown_class"


@dataclass(frozen=True)
class DerivationIssue:
    """A problem found while deriving; the affected values fell back to 0."""

    code: IssueCode
    key: str
    message: str


@dataclass(frozen=True)
class DerivationResult:
    """Output of one cascade: the complete derived bag and any issues."""

    system: CharacterSystem
    issues: tuple[DerivationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues


@dataclass(frozen=True)
class EquippedGear:
    """Equipped items by type, selected once per cascade."""

    weapons: list[Item]
    armors: list[Item]
    shields: list[Item]
    accessories: list[Item]
    bags: list[Item]

    @classmethod
    def select(cls, items: Sequence[Item]) -> "EquippedGear":
        return cls(
            weapons=equipped_items(items, ItemType.WEAPON),
            armors=equipped_items(items, ItemType.ARMOR),
            shields=equipped_items(items, ItemType.SHIELD),
            accessories=equipped_items(items, ItemType.ACCESSORY),
            bags=equipped_items(items, ItemType.BAG),
        )

    @property
    def armor(self) -> Item | None:
        """Only one armor can be worn; extra equipped armors are ignored."""
        return self.armors[0] if self.armors else None

    @property
    def main_weapon(self) -> Item | None:
        """First weapon flagged main, else the first equipped weapon."""
        for weapon in self.weapons:
            if getattr(weapon.system, "main", False):
                return weapon
        return self.weapons[0] if self.weapons else None


def gated_sum(items: Sequence[Item], field: str, limit: int) -> int:
    """
    Sum a numeric field over equipped items, subject to an equip gate.

    Args:
        items: Equipped items of one type
        field: Item field to sum (e.g., "accuracy")
        limit: Maximum number of equipped items for the bonus to apply

    Returns:
        The sum when 1 to ``limit`` items are equipped, otherwise 0
    """
    if not 0 < len(items) <= limit:
        return 0
    return sum(item.stat(field) for item in items)


def item_stat(item: Item | None, field: str) -> int:
    return item.stat(field) if item is not None else 0


def derive_attributes_and_resources(
    character: CharacterSystem, tables: ReferenceTables
) -> list[DerivationIssue]:
    """
    Set attribute values and resource maxima from the race and class seeds.

    Unknown race or class keys fall back to a zero seed and are reported as
    issues rather than raised.

    Args:
        character: Character data to update in place
        tables: Loaded race and class tables

    Returns:
        Issues found (empty when both keys resolved)
    """
    issues: list[DerivationIssue] = []

    race: RaceSeed | None = tables.race(character.race)
    if race is None:
        issues.append(
            DerivationIssue(
                code=IssueCode.UNKNOWN_RACE,
                key=character.race,
                message=f"Race '{character.race}' is not in the race table",
            )
        )
        race = ZERO_RACE

    main_class: ClassSeed | None = tables.main_class(character.main_class)
    if main_class is None:
        issues.append(
            DerivationIssue(
                code=IssueCode.UNKNOWN_CLASS,
                key=character.main_class,
                message=f"Class '{character.main_class}' is not in the class table",
            )
        )
        main_class = ZERO_CLASS

    for name in BaseAttribute:
        attr = character.attributes.base[name]
        attr.value = race.attribute(name) + attr.mod

    for name in DerivedAttribute:
        attr = character.attributes.derived[name]
        attr.value = main_class.attribute(name) + attr.mod

    growth_ranks = max(character.rank - 1, 0)
    life = character.life_status
    resources = character.resources

    health = resources[ResourceName.HEALTH]
    health.max = max(
        0,
        race.max_hp
        + main_class.max_hp
        + character.base_value(BaseAttribute.PHY)
        + health.mod
        + main_class.hp_growth * growth_ranks
        - life.fatigue,
    )

    mana = resources[ResourceName.MANA]
    mana.max = max(
        0,
        race.max_mp
        + main_class.max_mp
        + character.base_value(BaseAttribute.WIL)
        + mana.mod
        + main_class.mp_growth * growth_ranks
        - life.stress,
    )

    fate = resources[ResourceName.FATE]
    fate.max = max(0, race.init_fate + fate.mod)

    return issues


def derive_checks(character: CharacterSystem, gear: EquippedGear) -> None:
    """Compute every check's base and total, and floor its dice at 1."""
    checks = character.checks

    for check_name, (primary, secondary) in ABILITY_CHECK_PAIRS.items():
        check = checks[check_name]
        check.base = character.base_value(primary) + character.derived_value(secondary)
        check.total = check.base + check.rank + check.mod

    # Weapon accuracy only counts while at most two weapons are equipped
    accuracy = checks[CheckName.ACCURACY]
    accuracy.base = character.base_value(BaseAttribute.AGI) + character.derived_value(
        DerivedAttribute.DEX
    )
    accuracy.total = (
        accuracy.base + accuracy.mod + gated_sum(gear.weapons, "accuracy", WEAPON_EQUIP_LIMIT)
    )

    magic_accuracy = checks[CheckName.MAGIC_ACCURACY]
    magic_accuracy.base = character.base_value(BaseAttribute.WIL) + character.derived_value(
        DerivedAttribute.WIS
    )
    magic_accuracy.total = (
        magic_accuracy.base
        + magic_accuracy.mod
        + gated_sum(gear.weapons, "m_accuracy", WEAPON_EQUIP_LIMIT)
    )

    evasion = checks[CheckName.EVASION]
    evasion.base = character.base_value(BaseAttribute.AGI)
    evasion.total = evasion.base + evasion.mod

    resistance = checks[CheckName.RESISTANCE]
    resistance.base = character.base_value(BaseAttribute.WIL)
    resistance.total = resistance.base + resistance.mod

    for check in checks.values():
        check.dice = max(check.dice, MIN_CHECK_DICE)


def derive_battle_status(character: CharacterSystem, gear: EquippedGear) -> None:
    """Compute power, defenses, speed and initiative."""
    status = character.battle_status
    weapon = gear.main_weapon
    armor = gear.armor

    # Power
    attack = status.power[PowerName.ATTACK]
    attack.base = character.derived_value(DerivedAttribute.STR) + item_stat(weapon, "attack")
    attack.total = attack.base + attack.mod

    restoration = status.power[PowerName.RESTORATION]
    restoration.base = character.derived_value(DerivedAttribute.PRE) + item_stat(
        weapon, "restoration"
    )
    restoration.total = restoration.base + restoration.mod

    magic = status.power[PowerName.MAGIC]
    magic.base = character.derived_value(DerivedAttribute.DIS) + item_stat(weapon, "magic")
    magic.total = (
        magic.base + magic.mod + gated_sum(gear.accessories, "magic", ACCESSORY_EQUIP_LIMIT)
    )

    # Defenses
    phys = status.defense[DefenseName.PHYS]
    phys.base = character.derived_value(DerivedAttribute.END)
    phys.total = (
        phys.base
        + phys.mod
        + item_stat(armor, "pdef")
        + sum(shield.stat("pdef") for shield in gear.shields)
        + gated_sum(gear.accessories, "pdef", ACCESSORY_EQUIP_LIMIT)
    )

    mdef = status.defense[DefenseName.MAGIC]
    mdef.base = character.derived_value(DerivedAttribute.MIN)
    mdef.total = (
        mdef.base
        + mdef.mod
        + item_stat(armor, "mdef")
        + sum(shield.stat("mdef") for shield in gear.shields)
        + gated_sum(gear.accessories, "mdef", ACCESSORY_EQUIP_LIMIT)
    )

    # Speed
    status.speed.base = BASE_SPEED
    status.speed.total = status.speed.base + status.speed.mod

    # Initiative never drops below zero
    initiative = status.initiative
    initiative.base = character.derived_value(DerivedAttribute.QIK)
    initiative.total = max(
        0,
        initiative.base
        + initiative.mod
        + gated_sum(gear.weapons, "initiative", WEAPON_EQUIP_LIMIT)
        + item_stat(armor, "initiative")
        + gated_sum(gear.accessories, "initiative", ACCESSORY_EQUIP_LIMIT),
    )


def derive_inventory(
    character: CharacterSystem, items: Sequence[Item], gear: EquippedGear
) -> None:
    """Compute maximum inventory space and the number of occupied slots."""
    inventory = character.inventory
    inventory.base = BASE_INVENTORY_SPACE
    inventory.max_space = (
        inventory.base + inventory.mod + sum(bag.stat("bag_space") for bag in gear.bags)
    )

    # Only items explicitly flagged unequipped take a slot
    inventory.space = sum(1 for item in items if item.is_carried)


def derive_character(
    character: CharacterSystem, items: Sequence[Item], tables: ReferenceTables
) -> DerivationResult:
    """
    Run the full derive cascade for a character.

    The input is left untouched; all derived values are written to a deep copy
    that is returned whole, so callers never observe a partially derived state.
    Running the cascade twice on the same inputs gives identical results.

    Args:
        character: Persisted character data
        items: The character's owned items, in collection order
        tables: Loaded race and class tables

    Returns:
        DerivationResult with the derived character data and any issues
    """
    derived = character.model_copy(deep=True)
    gear = EquippedGear.select(items)

    issues = derive_attributes_and_resources(derived, tables)
    derive_checks(derived, gear)
    derive_battle_status(derived, gear)
    derive_inventory(derived, items, gear)

    for issue in issues:
        logger.warning("derivation_issue", code=issue.code.value, key=issue.key)

    return DerivationResult(system=derived, issues=tuple(issues))
