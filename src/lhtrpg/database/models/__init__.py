"""SQLAlchemy models for the LHTRPG document store."""

from lhtrpg.database.models.actor import ActorDocument, ActorType
from lhtrpg.database.models.base import Base, TimestampMixin
from lhtrpg.database.models.item import ItemDocument

__all__ = [
    "ActorDocument",
    "ActorType",
    "Base",
    "ItemDocument",
    "TimestampMixin",
]
