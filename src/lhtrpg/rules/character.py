"""Persisted data model of an LHTRPG character.

``CharacterSystem`` mirrors the ``system`` property bag the host stores on a
character actor. Fields the derive cascade overwrites (``value``, ``base``,
``total``, ``max``, ``space``...) are part of the model so a derived bag can be
written back in one piece, but they are never read as inputs.
"""

from functools import partial
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from .attributes import (
    BaseAttribute,
    CheckName,
    DefenseName,
    DerivedAttribute,
    PowerName,
    ResourceName,
)
from .values import Key, Number, Rank, to_int

DEFAULT_CHECK_DICE = 2

CheckDice = Annotated[int, BeforeValidator(partial(to_int, default=DEFAULT_CHECK_DICE))]


class AttributeValue(BaseModel):
    """An attribute score: derived ``value`` plus persisted ``mod``."""

    model_config = ConfigDict(extra="allow")

    value: Number = 0
    mod: Number = 0


class Attributes(BaseModel):
    """Base and derived attribute groups."""

    model_config = ConfigDict(extra="allow")

    base: dict[BaseAttribute, AttributeValue] = Field(default_factory=dict)
    derived: dict[DerivedAttribute, AttributeValue] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _fill_missing(self) -> "Attributes":
        for name in BaseAttribute:
            self.base.setdefault(name, AttributeValue())
        for name in DerivedAttribute:
            self.derived.setdefault(name, AttributeValue())
        return self


class LifeStatus(BaseModel):
    """Persisted counters that reduce maximum health and mana."""

    model_config = ConfigDict(extra="allow")

    fatigue: Number = 0
    stress: Number = 0


class Resource(BaseModel):
    """A resource pool with a derived maximum."""

    model_config = ConfigDict(extra="allow")

    mod: Number = 0
    max: Number = 0


class Check(BaseModel):
    """An ability or combat check."""

    model_config = ConfigDict(extra="allow")

    base: Number = 0
    mod: Number = 0
    rank: Number = 0
    total: Number = 0
    dice: CheckDice = DEFAULT_CHECK_DICE


class StatusValue(BaseModel):
    """A battle-status entry."""

    model_config = ConfigDict(extra="allow")

    base: Number = 0
    mod: Number = 0
    total: Number = 0


class BattleStatus(BaseModel):
    """Power, defense, speed and initiative."""

    model_config = ConfigDict(extra="allow")

    power: dict[PowerName, StatusValue] = Field(default_factory=dict)
    defense: dict[DefenseName, StatusValue] = Field(default_factory=dict)
    speed: StatusValue = Field(default_factory=StatusValue)
    initiative: StatusValue = Field(default_factory=StatusValue)

    @model_validator(mode="after")
    def _fill_missing(self) -> "BattleStatus":
        for name in PowerName:
            self.power.setdefault(name, StatusValue())
        for name in DefenseName:
            self.defense.setdefault(name, StatusValue())
        return self


class Inventory(BaseModel):
    """Inventory capacity: ``space`` is occupied slots, ``max_space`` the limit."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    base: Number = 0
    mod: Number = 0
    space: Number = 0
    max_space: Number = Field(default=0, alias="maxSpace")


class CharacterSystem(BaseModel):
    """The ``system`` bag of a character actor."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    rank: Rank = 1
    race: Key = ""
    main_class: Key = Field(default="", alias="mainClass")
    attributes: Attributes = Field(default_factory=Attributes)
    life_status: LifeStatus = Field(default_factory=LifeStatus, alias="lifeStatus")
    resources: dict[ResourceName, Resource] = Field(default_factory=dict)
    checks: dict[CheckName, Check] = Field(default_factory=dict)
    battle_status: BattleStatus = Field(default_factory=BattleStatus, alias="battle-status")
    inventory: Inventory = Field(default_factory=Inventory)

    @model_validator(mode="after")
    def _fill_missing(self) -> "CharacterSystem":
        for name in ResourceName:
            self.resources.setdefault(name, Resource())
        for name in CheckName:
            self.checks.setdefault(name, Check())
        return self

    @classmethod
    def from_system(cls, system: dict[str, Any] | None) -> "CharacterSystem":
        """Build the model from a persisted ``system`` bag (``None`` gives defaults)."""
        return cls.model_validate(system or {})

    def to_system(self) -> dict[str, Any]:
        """Serialize back to the host's ``system`` bag layout."""
        return self.model_dump(mode="json", by_alias=True)

    # Shortcuts used throughout the cascade

    def base_value(self, name: BaseAttribute) -> int:
        return self.attributes.base[name].value

    def derived_value(self, name: DerivedAttribute) -> int:
        return self.attributes.derived[name].value
