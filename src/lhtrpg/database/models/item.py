"""Owned item document model."""

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .actor import ActorDocument


class ItemDocument(Base, TimestampMixin):
    """
    An item owned by an actor.

    The ``item_type`` string selects the item's schema when it is parsed for
    the derive cascade; ``sort`` fixes collection order, which decides the
    first equipped armor and the fallback main weapon.
    """

    __tablename__ = "items"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique item identifier",
    )

    actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("actors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to owning actor",
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Display name of the item",
    )

    item_type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        comment="Item type (weapon, armor, shield, accessory, bag, gear, skill, ...)",
    )

    sort: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="Position within the owner's collection",
    )

    system: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Item system data (equipped, accuracy, pdef, bagSpace, ...)",
    )

    actor: Mapped["ActorDocument"] = relationship(
        "ActorDocument",
        back_populates="items",
    )

    def __repr__(self) -> str:
        """String representation of ItemDocument."""
        return (
            f"<ItemDocument(id={self.id}, name='{self.name}', "
            f"type='{self.item_type}', actor={self.actor_id})>"
        )
