"""Tests for the store engine and session lifecycle."""

import pytest
from sqlalchemy import select

from lhtrpg.config import Settings
from lhtrpg.database.engine import close_db, get_engine, get_session, init_db
from lhtrpg.database.models import ActorDocument, ActorType
from lhtrpg.services.actors import ActorService


@pytest.fixture
async def store(tmp_path):
    """A file-backed store in a directory that does not exist yet."""
    settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'data' / 'store.db'}")
    await init_db(settings)
    yield settings
    await close_db()


def make_actor(name: str) -> ActorDocument:
    return ActorDocument(name=name, actor_type=ActorType.MONSTER, img="x.svg", items=[])


class TestEngine:
    """Tests for engine creation and disposal."""

    async def test_init_creates_database_file(self, store, tmp_path):
        assert (tmp_path / "data" / "store.db").exists()

    async def test_engine_is_reused(self, store):
        assert get_engine() is get_engine(store)

    async def test_close_starts_fresh(self, store):
        first = get_engine()
        await close_db()

        assert get_engine(store) is not first


class TestGetSession:
    """Tests for the session context manager."""

    async def test_commits_on_success(self, store):
        async with get_session() as session:
            session.add(make_actor("Goblin"))

        async with get_session() as session:
            result = await session.execute(select(ActorDocument.name))
            assert result.scalars().all() == ["Goblin"]

    async def test_rolls_back_on_error(self, store):
        with pytest.raises(RuntimeError):
            async with get_session() as session:
                session.add(make_actor("Ghost"))
                await session.flush()
                raise RuntimeError("boom")

        async with get_session() as session:
            result = await session.execute(select(ActorDocument))
            assert result.scalars().all() == []

    async def test_service_round_trip(self, store, tables):
        service = ActorService(tables)

        async with get_session() as session:
            created = await service.create_actor(
                session, "Naotsugu", system={"race": "human", "mainClass": "guardian"}
            )
            actor_id = created.document.id

        async with get_session() as session:
            prepared = await service.load_actor(session, actor_id)

        assert prepared.document.system["resources"]["health"]["max"] == 65
