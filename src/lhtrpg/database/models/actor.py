"""Actor document model: characters and monsters."""

import enum
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .item import ItemDocument


class ActorType(enum.Enum):
    """Kinds of actor the system defines."""

    CHARACTER = "character"
    MONSTER = "monster"


def default_actor_image(actor_type: ActorType) -> str:
    """Icon used when an actor is created without an image."""
    return f"assets/actors/{actor_type.value}.svg"


class ActorDocument(Base, TimestampMixin):
    """An actor with its persisted ``system`` bag and owned items."""

    __tablename__ = "actors"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique actor identifier",
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Display name of the actor",
    )

    actor_type: Mapped[ActorType] = mapped_column(
        Enum(ActorType),
        nullable=False,
        comment="Actor kind (character or monster)",
    )

    img: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Path of the actor's portrait",
    )

    # Persisted inputs and the last derived values, in the host's bag layout
    system: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Actor system data (attributes, checks, battle status, inventory)",
    )

    items: Mapped[list["ItemDocument"]] = relationship(
        "ItemDocument",
        back_populates="actor",
        cascade="all, delete-orphan",
        order_by="ItemDocument.sort",
        lazy="selectin",
    )

    @property
    def is_character(self) -> bool:
        return self.actor_type == ActorType.CHARACTER

    def __repr__(self) -> str:
        """String representation of ActorDocument."""
        return f"<ActorDocument(id={self.id}, name='{self.name}', type={self.actor_type.value})>"
