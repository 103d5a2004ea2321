"""Command line entry point: derive a character sheet from a YAML or JSON file."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from lhtrpg.config import Settings, get_settings
from lhtrpg.database.engine import close_db, get_session, init_db
from lhtrpg.log import configure_logging
from lhtrpg.rules.attributes import CheckName, DefenseName, PowerName, ResourceName
from lhtrpg.rules.character import CharacterSystem
from lhtrpg.rules.derivation import DerivationResult, derive_character
from lhtrpg.rules.items import Item, ItemValidationError, parse_item
from lhtrpg.rules.tables import (
    ReferenceTableLoadError,
    ReferenceTables,
    ReferenceTableValidationError,
    load_reference_tables,
)
from lhtrpg.services.actors import ActorService, ActorValidationError, PreparedActor

logger = structlog.get_logger(__name__)


class SheetLoadError(Exception):
    """Raised when a sheet file cannot be read."""

    pass


def read_sheet(path: Path) -> dict[str, Any]:
    """
    Read the raw contents of a sheet file.

    Raises:
        SheetLoadError: If the file is missing, unparseable or not a mapping
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SheetLoadError(f"YAML parsing error in {path}: {e}") from e
    except OSError as e:
        raise SheetLoadError(f"Error loading {path}: {e}") from e

    if not isinstance(data, dict):
        raise SheetLoadError(f"Sheet file must contain a mapping: {path}")

    return data


def sheet_items(data: dict[str, Any]) -> list[dict[str, Any]]:
    return [raw for raw in data.get("items") or [] if isinstance(raw, dict)]


def load_sheet(path: Path) -> tuple[CharacterSystem, list[Item]]:
    """
    Read a sheet file with ``system`` and ``items`` keys.

    Items that cannot be parsed are skipped with a warning.

    Raises:
        SheetLoadError: If the file cannot be read or the character data is invalid
    """
    data = read_sheet(path)

    try:
        character = CharacterSystem.from_system(data.get("system"))
    except ValidationError as e:
        raise SheetLoadError(f"Invalid character data in {path}: {e}") from e

    items: list[Item] = []
    for index, raw in enumerate(sheet_items(data)):
        try:
            items.append(
                parse_item(
                    str(raw.get("id", index)),
                    raw.get("name") or "",
                    raw.get("type", ""),
                    raw.get("system"),
                )
            )
        except ItemValidationError as e:
            logger.warning("sheet_item_skipped", index=index, error=str(e))

    return character, items


async def store_sheet(
    data: dict[str, Any],
    name: str,
    tables: ReferenceTables,
    settings: Settings | None = None,
) -> PreparedActor:
    """
    Save a sheet as a character actor in the document store.

    The actor is created first and each item is then added in file order, so
    the stored bag goes through the same cascades as one edited in the store.
    Items with an unknown type are skipped with a warning.
    """
    service = ActorService(tables)
    await init_db(settings)

    try:
        async with get_session() as session:
            prepared = await service.create_actor(session, name, system=data.get("system"))
            actor_id = prepared.document.id

            for index, raw in enumerate(sheet_items(data)):
                try:
                    prepared = await service.add_item(
                        session,
                        actor_id,
                        raw.get("type", ""),
                        raw.get("name") or "",
                        raw.get("system"),
                    )
                except ItemValidationError as e:
                    logger.warning("sheet_item_skipped", index=index, error=str(e))
    finally:
        await close_db()

    return prepared


def format_summary(result: DerivationResult) -> str:
    """Render the derived values as plain text."""
    system = result.system
    status = system.battle_status
    lines: list[str] = [
        f"Race: {system.race or '-'}  Class: {system.main_class or '-'}  Rank: {system.rank}",
        "",
        "Attributes:",
    ]

    for group in (system.attributes.base, system.attributes.derived):
        scores = (f"{name.upper()} {attr.value}" for name, attr in group.items())
        lines.append("  " + "  ".join(scores))

    lines.append("")
    lines.append("Resources:")
    for name in ResourceName:
        lines.append(f"  {name.value:<12} max {system.resources[name].max}")

    lines.append("")
    lines.append("Checks:")
    for name in CheckName:
        check = system.checks[name]
        lines.append(f"  {name.value:<14} {check.total:>3}  ({check.dice} dice)")

    lines.append("")
    lines.append("Battle status:")
    for name in PowerName:
        lines.append(f"  {name.value + ' power':<20} {status.power[name].total:>3}")
    for name in DefenseName:
        lines.append(f"  {name.value + ' defense':<20} {status.defense[name].total:>3}")
    lines.append(f"  {'speed':<20} {status.speed.total:>3}")
    lines.append(f"  {'initiative':<20} {status.initiative.total:>3}")

    lines.append("")
    lines.append(f"Inventory: {system.inventory.space}/{system.inventory.max_space}")

    if result.issues:
        lines.append("")
        lines.append("Issues:")
        for issue in result.issues:
            lines.append(f"  [{issue.code.value}] {issue.message}")

    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lhtrpg-sheet",
        description="Derive LHTRPG battle statistics for a character sheet file.",
    )
    parser.add_argument("sheet", type=Path, help="YAML or JSON file with 'system' and 'items'")
    parser.add_argument(
        "--tables",
        type=Path,
        default=None,
        help="Directory holding races.yaml and classes.yaml",
    )
    parser.add_argument(
        "--store",
        action="store_true",
        help="Also save the sheet as a character in the document store (LHTRPG_DATABASE_URL)",
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Actor name when storing (default: the sheet's 'name' or the file name)",
    )
    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse arguments, derive the sheet and print the summary."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    try:
        tables = load_reference_tables(args.tables or settings.reference_tables_dir)
        character, items = load_sheet(args.sheet)
    except (ReferenceTableLoadError, ReferenceTableValidationError, SheetLoadError) as e:
        logger.error("sheet_load_failed", error=str(e))
        return 1

    result = derive_character(character, items, tables)
    print(format_summary(result))

    if args.store:
        data = read_sheet(args.sheet)
        name = str(args.name or data.get("name") or args.sheet.stem)
        try:
            prepared = asyncio.run(store_sheet(data, name, tables, settings))
        except ActorValidationError as e:
            logger.error("sheet_store_failed", error=str(e))
            return 1
        print(f"\nStored as actor {prepared.document.id}")

    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
