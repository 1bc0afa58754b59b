import asyncio
import os

# до импорта brokerage.*: настройки читаются при импорте
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_brokerage.db"
os.environ["LOG_FILE"] = ""
os.environ.pop("INVITE_WEBHOOK_URL", None)

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from brokerage.models.base import Base
from brokerage.models import lots, buyers, rounds, invites, offers, awards  # noqa: F401
from brokerage.crud.buyers import create_buyer
from brokerage.crud.lots import create_lot, create_line_item


@pytest.fixture
def session_factory(tmp_path):
    """Файловая sqlite на тест; NullPool, чтобы соединения не переживали event loop."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'brokerage.db'}", poolclass=NullPool)

    async def create_schema():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_schema())
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture
def run(session_factory):
    """run(fn) выполняет async fn(db) в новой сессии и возвращает результат."""
    def runner(fn):
        async def wrapped():
            async with session_factory() as db:
                return await fn(db)
        return asyncio.run(wrapped())
    return runner


async def seed_lot(db, title="Dell R740 servers", qtys=(1, 1), **item_fields):
    lot = await create_lot(db, title)
    items = []
    for i, qty in enumerate(qtys, start=1):
        items.append(await create_line_item(db, lot.id, model=f"PowerEdge R740 #{i}", qty=qty, **item_fields))
    return lot, items


async def seed_buyer(db, name="Acme", **fields):
    fields.setdefault("tags", ["dell", "server"])
    return await create_buyer(db, name, **fields)
