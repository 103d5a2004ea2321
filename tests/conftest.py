"""Shared fixtures for all tests."""

from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lhtrpg.database.models import Base
from lhtrpg.rules.character import CharacterSystem
from lhtrpg.rules.items import Item, parse_item
from lhtrpg.rules.tables import ClassSeed, RaceSeed, ReferenceTables


@pytest.fixture
async def db_session():
    """Create a test database session with in-memory SQLite."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def human() -> RaceSeed:
    """Race seed with every base attribute at 7."""
    return RaceSeed(
        id="human",
        name="Human",
        attributes={"phy": 7, "agi": 7, "wil": 7, "int": 7},
        max_hp=8,
        max_mp=8,
        init_fate=1,
    )


@pytest.fixture
def guardian() -> ClassSeed:
    """Warrior class seed: str 2, end 4, qik 1, dex 1, min 2, pre 1, dis 0, wis 1."""
    return ClassSeed(
        id="guardian",
        name="Guardian",
        archetype="warrior",
        attributes={
            "str": 2,
            "end": 4,
            "qik": 1,
            "dex": 1,
            "min": 2,
            "pre": 1,
            "dis": 0,
            "wis": 1,
        },
        max_hp=50,
        max_mp=30,
        hp_growth=7,
        mp_growth=1,
    )


@pytest.fixture
def tables(human: RaceSeed, guardian: ClassSeed) -> ReferenceTables:
    return ReferenceTables(races={human.id: human}, classes={guardian.id: guardian})


@pytest.fixture
def character() -> CharacterSystem:
    """A rank 1 human guardian with no modifiers."""
    return CharacterSystem.from_system({"race": "human", "mainClass": "guardian", "rank": 1})


@pytest.fixture
def make_item() -> Callable[..., Item]:
    """Factory building parsed items: make_item("weapon", accuracy=2, equipped=True)."""
    counter = {"n": 0}

    def _make(item_type: str, name: str | None = None, **system: Any) -> Item:
        counter["n"] += 1
        item_id = f"item{counter['n']}"
        return parse_item(item_id, name or f"{item_type} {counter['n']}", item_type, system)

    return _make
