"""Attribute, check and battle-status names for LHTRPG characters.

The names double as the keys of the persisted ``system`` bag, so every enum is a
``StrEnum`` whose value is the exact key the host document uses.
"""

from enum import StrEnum


class BaseAttribute(StrEnum):
    """Primary attributes, seeded by race."""

    PHY = "phy"
    AGI = "agi"
    WIL = "wil"
    INT = "int"


class DerivedAttribute(StrEnum):
    """Secondary attributes, seeded by main class."""

    STR = "str"
    END = "end"
    QIK = "qik"
    DEX = "dex"
    MIN = "min"
    PRE = "pre"
    DIS = "dis"
    WIS = "wis"


class CheckName(StrEnum):
    """Ability checks plus the combat checks."""

    ATHLETICS = "athletics"
    ENDURANCE = "endurance"
    OVERCOME = "overcome"
    OPERATION = "operation"
    PERCEPTION = "perception"
    NEGOTIATION = "negotiation"
    KNOWLEDGE = "knowledge"
    ANALYSIS = "analysis"
    ACCURACY = "accuracy"
    MAGIC_ACCURACY = "magicAccuracy"
    EVASION = "evasion"
    RESISTANCE = "resistance"


class PowerName(StrEnum):
    """Battle power entries."""

    ATTACK = "attack"
    MAGIC = "magic"
    RESTORATION = "restoration"


class DefenseName(StrEnum):
    """Defense entries."""

    PHYS = "phys"
    MAGIC = "magic"


class ResourceName(StrEnum):
    """Resources with a derived maximum."""

    HEALTH = "health"
    MANA = "mana"
    FATE = "fate"


# Ability check -> (base attribute, derived attribute)
ABILITY_CHECK_PAIRS: dict[CheckName, tuple[BaseAttribute, DerivedAttribute]] = {
    CheckName.ATHLETICS: (BaseAttribute.PHY, DerivedAttribute.STR),
    CheckName.ENDURANCE: (BaseAttribute.PHY, DerivedAttribute.END),
    CheckName.OVERCOME: (BaseAttribute.AGI, DerivedAttribute.QIK),
    CheckName.OPERATION: (BaseAttribute.AGI, DerivedAttribute.DEX),
    CheckName.PERCEPTION: (BaseAttribute.WIL, DerivedAttribute.MIN),
    CheckName.NEGOTIATION: (BaseAttribute.WIL, DerivedAttribute.PRE),
    CheckName.KNOWLEDGE: (BaseAttribute.INT, DerivedAttribute.DIS),
    CheckName.ANALYSIS: (BaseAttribute.INT, DerivedAttribute.WIS),
}
