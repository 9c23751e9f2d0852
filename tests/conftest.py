import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from splitledger.core.notifier import Notifier
from splitledger.db.base import Base
from splitledger.services.group_services import add_member, create_group
from splitledger.services.settlement_service import get_balances


class RecordingNotifier(Notifier):
    def __init__(self):
        self.events = []

    async def notify(self, group_id, event_type, payload):
        self.events.append((group_id, event_type, payload))


class FailingNotifier(Notifier):
    async def notify(self, group_id, event_type, payload):
        raise RuntimeError("broadcaster is down")


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


@pytest.fixture
async def group_id(db):
    """Group with members 1 (admin), 2 and 3."""
    group = await create_group(db, "Trip", creator_id=1)
    gid = group.id
    await add_member(db, gid, 2)
    await add_member(db, gid, 3)
    return gid


@pytest.fixture
def balances(db):
    async def fetch(group_id):
        return {b["user_id"]: b["balance"] for b in await get_balances(db, group_id)}

    return fetch
