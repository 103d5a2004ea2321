"""Item grouping for the character and monster sheets."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from .items import EQUIPPABLE_TYPES, Item, ItemType, SkillSubtype


@dataclass
class SkillGroups:
    basic: list[Item] = field(default_factory=list)
    combat: list[Item] = field(default_factory=list)
    general: list[Item] = field(default_factory=list)


@dataclass
class ItemGroups:
    """Owned items sorted into the buckets a sheet lists them under."""

    skills: SkillGroups = field(default_factory=SkillGroups)
    equipped: dict[ItemType, list[Item]] = field(
        default_factory=lambda: {item_type: [] for item_type in EQUIPPABLE_TYPES}
    )
    carried: dict[ItemType, list[Item]] = field(
        default_factory=lambda: {item_type: [] for item_type in EQUIPPABLE_TYPES}
    )
    creeds: list[Item] = field(default_factory=list)
    connections: list[Item] = field(default_factory=list)
    unions: list[Item] = field(default_factory=list)


def organize_items(items: Iterable[Item]) -> ItemGroups:
    """
    Sort a character's items into sheet groups, keeping collection order.

    Skills whose subtype is not Basic, Combat or General are left out, as the
    sheet has no list for them.
    """
    groups = ItemGroups()
    skill_lists = {
        SkillSubtype.BASIC: groups.skills.basic,
        SkillSubtype.COMBAT: groups.skills.combat,
        SkillSubtype.GENERAL: groups.skills.general,
    }

    for item in items:
        if item.type == ItemType.SKILL:
            bucket = skill_lists.get(getattr(item.system, "subtype", ""))
            if bucket is not None:
                bucket.append(item)
        elif item.is_equippable:
            target = groups.equipped if item.equipped else groups.carried
            target[item.type].append(item)
        elif item.type == ItemType.CREED:
            groups.creeds.append(item)
        elif item.type == ItemType.CONNECTION:
            groups.connections.append(item)
        elif item.type == ItemType.UNION:
            groups.unions.append(item)

    return groups


def monster_skills(items: Iterable[Item]) -> list[Item]:
    """Monsters only list their skills, regardless of subtype."""
    return [item for item in items if item.type == ItemType.SKILL]
