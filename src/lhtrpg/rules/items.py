"""Owned item variants and the equipment selector.

Items arrive from the document store as ``(type, system)`` pairs. Each type maps
to a pydantic model with its own field schema, so arithmetic in the derive
cascade never sees a missing or malformed number: those resolve to 0 when the
item is parsed.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .values import Flag, Number


class ItemType(StrEnum):
    """Types of items an actor can own."""

    WEAPON = "weapon"
    ARMOR = "armor"
    SHIELD = "shield"
    ACCESSORY = "accessory"
    BAG = "bag"
    GEAR = "gear"
    SKILL = "skill"
    CREED = "creed"
    CONNECTION = "connection"
    UNION = "union"


class SkillSubtype(StrEnum):
    """Skill categories as shown on the character sheet."""

    BASIC = "Basic"
    COMBAT = "Combat"
    GENERAL = "General"


class ItemValidationError(Exception):
    """Raised when an item document cannot be turned into an Item."""

    pass


class ItemSystem(BaseModel):
    """Common base for every item ``system`` bag; unknown keys are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class EquippableSystem(ItemSystem):
    """Items that can be worn or carried."""

    equipped: Flag = False


class WeaponSystem(EquippableSystem):
    accuracy: Number = 0
    m_accuracy: Number = Field(default=0, alias="mAccuracy")
    attack: Number = 0
    magic: Number = 0
    restoration: Number = 0
    initiative: Number = 0
    main: Flag = False


class ArmorSystem(EquippableSystem):
    pdef: Number = 0
    mdef: Number = 0
    initiative: Number = 0


class ShieldSystem(EquippableSystem):
    pdef: Number = 0
    mdef: Number = 0


class AccessorySystem(EquippableSystem):
    magic: Number = 0
    pdef: Number = 0
    mdef: Number = 0
    initiative: Number = 0


class BagSystem(EquippableSystem):
    bag_space: Number = Field(default=0, alias="bagSpace")


class GearSystem(EquippableSystem):
    pass


class SkillSystem(ItemSystem):
    subtype: str = ""


class CreedSystem(ItemSystem):
    pass


class ConnectionSystem(ItemSystem):
    pass


class UnionSystem(ItemSystem):
    pass


# Mapping from item type to its system schema
ITEM_SYSTEM_MAP: dict[ItemType, type[ItemSystem]] = {
    ItemType.WEAPON: WeaponSystem,
    ItemType.ARMOR: ArmorSystem,
    ItemType.SHIELD: ShieldSystem,
    ItemType.ACCESSORY: AccessorySystem,
    ItemType.BAG: BagSystem,
    ItemType.GEAR: GearSystem,
    ItemType.SKILL: SkillSystem,
    ItemType.CREED: CreedSystem,
    ItemType.CONNECTION: ConnectionSystem,
    ItemType.UNION: UnionSystem,
}

EQUIPPABLE_TYPES = tuple(
    item_type
    for item_type, schema in ITEM_SYSTEM_MAP.items()
    if issubclass(schema, EquippableSystem)
)


@dataclass(frozen=True)
class Item:
    """An owned item: document identity plus its typed ``system`` bag."""

    id: str
    name: str
    type: ItemType
    system: ItemSystem

    @property
    def is_equippable(self) -> bool:
        """Check if the item has an ``equipped`` flag at all."""
        return isinstance(self.system, EquippableSystem)

    @property
    def equipped(self) -> bool:
        """True only for equippable items currently equipped."""
        return isinstance(self.system, EquippableSystem) and self.system.equipped

    @property
    def is_carried(self) -> bool:
        """
        True for equippable items whose stored ``equipped`` flag is false.

        Items with no stored flag at all are neither equipped nor carried.
        """
        return (
            isinstance(self.system, EquippableSystem)
            and "equipped" in self.system.model_fields_set
            and not self.system.equipped
        )

    def stat(self, field: str) -> int:
        """Get a numeric field, 0 when this variant has no such field."""
        return getattr(self.system, field, 0)

    def to_system(self) -> dict[str, Any]:
        """Serialize the system bag with the host's key names."""
        return self.system.model_dump(mode="json", by_alias=True)


def parse_item(
    item_id: str, name: str, item_type: str, system: dict[str, Any] | None = None
) -> Item:
    """
    Build an Item from stored document fields.

    Args:
        item_id: Item document id
        name: Display name
        item_type: Stored type string (e.g., "weapon")
        system: The item's property bag

    Returns:
        Item with a typed system bag

    Raises:
        ItemValidationError: If the type is unknown or the bag is not a mapping
    """
    try:
        kind = ItemType(item_type)
    except ValueError:
        raise ItemValidationError(
            f"Item '{item_id}' has invalid type '{item_type}' "
            f"(must be one of: {', '.join(t.value for t in ItemType)})"
        ) from None

    try:
        parsed = ITEM_SYSTEM_MAP[kind].model_validate(system or {})
    except ValidationError as e:
        raise ItemValidationError(f"Item '{item_id}' has an invalid system bag: {e}") from e

    return Item(id=item_id, name=name, type=kind, system=parsed)


def equipped_items(items: Iterable[Item], item_type: ItemType) -> list[Item]:
    """
    Get the equipped items of one type, in collection order.

    Args:
        items: The actor's owned items
        item_type: Type to select

    Returns:
        Equipped items of that type (possibly empty)
    """
    return [item for item in items if item.type == item_type and item.equipped]
