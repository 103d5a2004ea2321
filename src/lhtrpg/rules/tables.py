"""
Reference table loader for the LHTRPG rules engine.

Handles loading the race and class seed tables from YAML files. The tables are
loaded once at startup and passed explicitly into the derive cascade.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, TypeVar

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lhtrpg.config import PACKAGE_REFERENCE_DIR

from .attributes import BaseAttribute, DerivedAttribute

logger = structlog.get_logger(__name__)

RACES_FILE = "races.yaml"
CLASSES_FILE = "classes.yaml"


class ReferenceTableLoadError(Exception):
    """Raised when there's an error loading reference table data."""

    pass


class ReferenceTableValidationError(Exception):
    """Raised when reference table validation fails."""

    pass


class RaceSeed(BaseModel):
    """
    Race row: base attribute seeds and starting resources.

    Attributes:
        id: Key stored on the character's ``race`` field (e.g., "human")
        name: Display name
        attributes: Seed value for each base attribute (phy, agi, wil, int)
        max_hp: Health seed added to the class seed
        max_mp: Mana seed added to the class seed
        init_fate: Starting fate points
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Race key")
    name: str = Field(..., description="Display name of the race")
    attributes: dict[BaseAttribute, int] = Field(..., description="Base attribute seeds")
    max_hp: int = Field(default=0, description="Health seed")
    max_mp: int = Field(default=0, description="Mana seed")
    init_fate: int = Field(default=0, ge=0, description="Starting fate points")

    def attribute(self, name: BaseAttribute) -> int:
        return self.attributes.get(name, 0)


class ClassSeed(BaseModel):
    """
    Main class row: derived attribute seeds and per-rank growth.

    Attributes:
        id: Key stored on the character's ``mainClass`` field (e.g., "guardian")
        name: Display name
        archetype: Class archetype (warrior, weapon attacker, healer, magic attacker)
        attributes: Seed value for each derived attribute
        max_hp: Health seed added to the race seed
        max_mp: Mana seed added to the race seed
        hp_growth: Health gained per rank above 1
        mp_growth: Mana gained per rank above 1
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Main class key")
    name: str = Field(..., description="Display name of the class")
    archetype: str = Field(default="", description="Class archetype")
    attributes: dict[DerivedAttribute, int] = Field(..., description="Derived attribute seeds")
    max_hp: int = Field(default=0, description="Health seed")
    max_mp: int = Field(default=0, description="Mana seed")
    hp_growth: int = Field(default=0, ge=0, description="Health per rank")
    mp_growth: int = Field(default=0, ge=0, description="Mana per rank")

    def attribute(self, name: DerivedAttribute) -> int:
        return self.attributes.get(name, 0)


T = TypeVar("T", RaceSeed, ClassSeed)

# Substituted when a character's key is missing from its table
ZERO_RACE = RaceSeed(id="", name="", attributes={})
ZERO_CLASS = ClassSeed(id="", name="", attributes={})


@dataclass(frozen=True)
class ReferenceTables:
    """Immutable race and class lookup tables."""

    races: Mapping[str, RaceSeed] = field(default_factory=dict)
    classes: Mapping[str, ClassSeed] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "races", MappingProxyType(dict(self.races)))
        object.__setattr__(self, "classes", MappingProxyType(dict(self.classes)))

    def race(self, key: str) -> RaceSeed | None:
        """Look up a race by key; ``None`` if unknown."""
        return self.races.get(key)

    def main_class(self, key: str) -> ClassSeed | None:
        """Look up a main class by key; ``None`` if unknown."""
        return self.classes.get(key)


def load_yaml_file(file_path: Path, key: str) -> list[dict[str, Any]]:
    """
    Load a YAML file holding a list of table rows under ``key``.

    Args:
        file_path: Path to the YAML file
        key: Top-level key holding the rows ("races" or "classes")

    Returns:
        List of row dictionaries

    Raises:
        ReferenceTableLoadError: If the file cannot be loaded or parsed
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ReferenceTableLoadError(f"YAML parsing error in {file_path}: {e}") from e
    except FileNotFoundError as e:
        raise ReferenceTableLoadError(f"File not found: {file_path}") from e
    except OSError as e:
        raise ReferenceTableLoadError(f"Error loading {file_path}: {e}") from e

    if not data:
        raise ReferenceTableLoadError(f"Empty YAML file: {file_path}")

    if not isinstance(data, dict) or key not in data:
        raise ReferenceTableLoadError(f"Missing '{key}' key in {file_path}")

    rows = data[key]
    if not isinstance(rows, list):
        raise ReferenceTableLoadError(f"'{key}' must be a list in {file_path}")

    return rows


def _build_rows(
    rows: list[dict[str, Any]], model: type[T], file_path: Path
) -> dict[str, T]:
    seeds: dict[str, T] = {}

    for row in rows:
        if not isinstance(row, dict):
            raise ReferenceTableValidationError(f"Row in {file_path} must be a mapping")

        row_id = row.get("id", "unknown")
        try:
            seed = model.model_validate(row)
        except ValidationError as e:
            raise ReferenceTableValidationError(
                f"Row '{row_id}' in {file_path} is invalid: {e}"
            ) from e

        if seed.id in seeds:
            raise ReferenceTableValidationError(f"Duplicate id '{seed.id}' found in {file_path}")

        seeds[seed.id] = seed

    return seeds


def load_races(file_path: Path) -> dict[str, RaceSeed]:
    """Load and validate the race table."""
    races = _build_rows(load_yaml_file(file_path, "races"), RaceSeed, file_path)

    for race in races.values():
        missing = [name.value for name in BaseAttribute if name not in race.attributes]
        if missing:
            raise ReferenceTableValidationError(
                f"Race '{race.id}' in {file_path} missing attributes: {', '.join(missing)}"
            )

    return races


def load_classes(file_path: Path) -> dict[str, ClassSeed]:
    """Load and validate the main class table."""
    classes = _build_rows(load_yaml_file(file_path, "classes"), ClassSeed, file_path)

    for main_class in classes.values():
        missing = [name.value for name in DerivedAttribute if name not in main_class.attributes]
        if missing:
            raise ReferenceTableValidationError(
                f"Class '{main_class.id}' in {file_path} missing attributes: {', '.join(missing)}"
            )

    return classes


def load_reference_tables(data_dir: Path | None = None) -> ReferenceTables:
    """
    Load the race and class tables from a directory.

    This is the main entry point for loading reference data; call it once
    during startup.

    Args:
        data_dir: Directory containing races.yaml and classes.yaml. If None,
            the tables shipped with the package are used.

    Returns:
        The loaded ReferenceTables

    Raises:
        ReferenceTableLoadError: If a file is missing or malformed
        ReferenceTableValidationError: If a row fails validation
    """
    if data_dir is None:
        data_dir = PACKAGE_REFERENCE_DIR

    if not data_dir.is_dir():
        raise ReferenceTableLoadError(f"Not a directory: {data_dir}")

    tables = ReferenceTables(
        races=load_races(data_dir / RACES_FILE),
        classes=load_classes(data_dir / CLASSES_FILE),
    )

    logger.info(
        "reference_tables_loaded",
        directory=str(data_dir),
        races=len(tables.races),
        classes=len(tables.classes),
    )

    return tables
