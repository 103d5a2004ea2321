"""LHTRPG rules: data model, reference tables and the derive cascade."""

from .character import CharacterSystem
from .derivation import (
    DerivationIssue,
    DerivationResult,
    IssueCode,
    derive_character,
)
from .grouping import ItemGroups, monster_skills, organize_items
from .items import Item, ItemType, ItemValidationError, equipped_items, parse_item
from .rolls import build_roll_data, dice_formula, resolve_ability_check, roll_dice
from .tables import (
    ReferenceTableLoadError,
    ReferenceTables,
    ReferenceTableValidationError,
    load_reference_tables,
)

__all__ = [
    "CharacterSystem",
    "DerivationIssue",
    "DerivationResult",
    "IssueCode",
    "Item",
    "ItemGroups",
    "ItemType",
    "ItemValidationError",
    "ReferenceTableLoadError",
    "ReferenceTableValidationError",
    "ReferenceTables",
    "build_roll_data",
    "derive_character",
    "dice_formula",
    "equipped_items",
    "load_reference_tables",
    "monster_skills",
    "organize_items",
    "parse_item",
    "resolve_ability_check",
    "roll_dice",
]
