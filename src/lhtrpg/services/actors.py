"""Actor lifecycle for the document store.

Every lifecycle event (create, field edit, item add/delete/edit, equip toggle,
load) re-runs the full derive cascade and writes the derived ``system`` bag
back in one assignment.
"""

import asyncio
import copy
import uuid
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from lhtrpg.config import Settings, get_settings
from lhtrpg.database.models import ActorDocument, ActorType, ItemDocument
from lhtrpg.database.models.actor import default_actor_image
from lhtrpg.rules.character import CharacterSystem
from lhtrpg.rules.derivation import DerivationIssue, derive_character
from lhtrpg.rules.grouping import ItemGroups, organize_items
from lhtrpg.rules.items import Item, ItemValidationError, parse_item
from lhtrpg.rules.rolls import build_roll_data
from lhtrpg.rules.tables import ReferenceTables, load_reference_tables

logger = structlog.get_logger(__name__)

SYSTEM_PREFIX = "system."


class ActorNotFoundError(Exception):
    """Raised when an actor id is not in the store."""

    pass


class ItemNotFoundError(Exception):
    """Raised when an item id is not in the store."""

    pass


class ActorValidationError(Exception):
    """Raised when a character's system bag does not fit the character schema."""

    pass


@dataclass
class PreparedActor:
    """An actor document together with its freshly derived data."""

    document: ActorDocument
    items: list[Item]
    system: CharacterSystem | None = None
    issues: tuple[DerivationIssue, ...] = ()

    @property
    def is_character(self) -> bool:
        return self.document.is_character

    def roll_data(self) -> dict[str, Any]:
        """Data that roll formulas for this actor are evaluated against."""
        return build_roll_data(self.document.system, self.items, self.is_character)

    def item_groups(self) -> ItemGroups:
        return organize_items(self.items)


def set_path(bag: dict[str, Any], path: str, value: Any) -> None:
    """
    Set a value in a nested bag by dotted path, creating levels as needed.

    Example:
        >>> bag = {}
        >>> set_path(bag, "attributes.base.phy.mod", 2)
        >>> bag
        {'attributes': {'base': {'phy': {'mod': 2}}}}
    """
    if path.startswith(SYSTEM_PREFIX):
        path = path[len(SYSTEM_PREFIX) :]

    *parents, leaf = path.split(".")
    node = bag
    for key in parents:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[leaf] = value


def apply_changes(system: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``system`` with dotted-path changes applied."""
    updated = copy.deepcopy(system)
    for path, value in changes.items():
        set_path(updated, path, value)
    return updated


class ActorService:
    """
    Keeps actor documents and their derived statistics in step.

    Reference tables are loaded before the service exists (see ``start``), so
    each cascade is synchronous and never waits on I/O.
    """

    def __init__(self, tables: ReferenceTables) -> None:
        self.tables = tables

    @classmethod
    async def start(cls, settings: Settings | None = None) -> "ActorService":
        """Load the reference tables, then build the service."""
        settings = settings or get_settings()
        tables = await asyncio.to_thread(load_reference_tables, settings.reference_tables_dir)
        return cls(tables)

    # Preparation

    def parse_items(self, actor: ActorDocument) -> list[Item]:
        """Parse the actor's item documents; unparseable ones are skipped."""
        items: list[Item] = []
        for doc in actor.items:
            try:
                items.append(parse_item(str(doc.id), doc.name, doc.item_type, doc.system))
            except ItemValidationError as e:
                logger.warning(
                    "item_skipped",
                    actor_id=str(actor.id),
                    item_id=str(doc.id),
                    error=str(e),
                )
        return items

    def prepare(self, actor: ActorDocument) -> PreparedActor:
        """
        Run the derive cascade for an actor and store the derived bag.

        Monsters are returned as stored; only characters have derived data.

        Raises:
            ActorValidationError: If a character's system bag fails validation
        """
        items = self.parse_items(actor)
        if not actor.is_character:
            return PreparedActor(document=actor, items=items)

        try:
            character = CharacterSystem.from_system(actor.system)
        except ValidationError as e:
            raise ActorValidationError(f"Actor '{actor.name}' has invalid system data: {e}") from e

        result = derive_character(character, items, self.tables)
        actor.system = result.system.to_system()

        logger.debug(
            "actor_prepared",
            actor_id=str(actor.id),
            items=len(items),
            issues=len(result.issues),
        )

        return PreparedActor(
            document=actor, items=items, system=result.system, issues=result.issues
        )

    async def _refresh(self, session: AsyncSession, actor: ActorDocument) -> PreparedActor:
        await session.flush()
        prepared = self.prepare(actor)
        await session.commit()
        return prepared

    # Lookups

    async def get_actor_document(
        self, session: AsyncSession, actor_id: uuid.UUID
    ) -> ActorDocument:
        actor = await session.get(ActorDocument, actor_id)
        if actor is None:
            raise ActorNotFoundError(f"Actor not found: {actor_id}")
        return actor

    async def _get_owned_item(
        self, session: AsyncSession, item_id: uuid.UUID
    ) -> tuple[ActorDocument, ItemDocument]:
        item = await session.get(ItemDocument, item_id)
        if item is None:
            raise ItemNotFoundError(f"Item not found: {item_id}")
        actor = await self.get_actor_document(session, item.actor_id)
        return actor, item

    # Lifecycle events

    async def create_actor(
        self,
        session: AsyncSession,
        name: str,
        actor_type: ActorType = ActorType.CHARACTER,
        system: dict[str, Any] | None = None,
        img: str | None = None,
    ) -> PreparedActor:
        """Create an actor, using the type's default image if none is given."""
        actor = ActorDocument(
            name=name,
            actor_type=actor_type,
            img=img or default_actor_image(actor_type),
            system=copy.deepcopy(system) if system else {},
            items=[],
        )
        session.add(actor)

        prepared = await self._refresh(session, actor)
        logger.info("actor_created", actor_id=str(actor.id), name=name, type=actor_type.value)
        return prepared

    async def load_actor(self, session: AsyncSession, actor_id: uuid.UUID) -> PreparedActor:
        actor = await self.get_actor_document(session, actor_id)
        return await self._refresh(session, actor)

    async def update_actor(
        self, session: AsyncSession, actor_id: uuid.UUID, changes: dict[str, Any]
    ) -> PreparedActor:
        """
        Edit fields of an actor's system bag.

        Args:
            session: Database session
            actor_id: Actor to edit
            changes: Dotted paths to new values, e.g. {"attributes.base.phy.mod": 2}
        """
        actor = await self.get_actor_document(session, actor_id)
        actor.system = apply_changes(actor.system, changes)

        logger.info("actor_updated", actor_id=str(actor_id), fields=sorted(changes))
        return await self._refresh(session, actor)

    async def add_item(
        self,
        session: AsyncSession,
        actor_id: uuid.UUID,
        item_type: str,
        name: str,
        system: dict[str, Any] | None = None,
    ) -> PreparedActor:
        """
        Give an actor a new item, appended to the end of its collection.

        Raises:
            ActorNotFoundError: If the actor does not exist
            ItemValidationError: If the item type is unknown
        """
        parse_item("new", name, item_type, system)

        actor = await self.get_actor_document(session, actor_id)
        sort = max((doc.sort for doc in actor.items), default=-1) + 1
        actor.items.append(
            ItemDocument(
                name=name,
                item_type=item_type,
                sort=sort,
                system=copy.deepcopy(system) if system else {},
            )
        )

        logger.info("item_added", actor_id=str(actor_id), name=name, type=item_type)
        return await self._refresh(session, actor)

    async def update_item(
        self, session: AsyncSession, item_id: uuid.UUID, changes: dict[str, Any]
    ) -> PreparedActor:
        """Edit fields of an item's system bag by dotted path."""
        actor, item = await self._get_owned_item(session, item_id)
        item.system = apply_changes(item.system, changes)

        logger.info("item_updated", item_id=str(item_id), fields=sorted(changes))
        return await self._refresh(session, actor)

    async def set_equipped(
        self, session: AsyncSession, item_id: uuid.UUID, equipped: bool
    ) -> PreparedActor:
        """
        Equip or unequip an item.

        Raises:
            ItemNotFoundError: If the item does not exist
            ItemValidationError: If the item type cannot be equipped
        """
        actor, item = await self._get_owned_item(session, item_id)
        parsed = parse_item(str(item.id), item.name, item.item_type, item.system)
        if not parsed.is_equippable:
            raise ItemValidationError(f"Item '{item.name}' ({item.item_type}) cannot be equipped")

        item.system = {**item.system, "equipped": equipped}

        logger.info("item_equip_changed", item_id=str(item_id), equipped=equipped)
        return await self._refresh(session, actor)

    async def delete_item(self, session: AsyncSession, item_id: uuid.UUID) -> PreparedActor:
        actor, item = await self._get_owned_item(session, item_id)
        actor.items.remove(item)

        logger.info("item_deleted", actor_id=str(actor.id), item_id=str(item_id))
        return await self._refresh(session, actor)
