"""Pytest configuration and fixtures.

Services are exercised against small in-memory stand-ins for the Motor
collections and the Redis client, so tests run without MongoDB or Redis.
"""
import copy
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Optional

import pytest
import pytest_asyncio
from bson import ObjectId


class FakeClock:
    """Settable time source."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def _matches(doc: dict, query: dict) -> bool:
    for field, condition in query.items():
        value = doc.get(field)
        if isinstance(condition, dict):
            for op, operand in condition.items():
                if op == "$lte" and not (value is not None and value <= operand):
                    return False
                if op == "$gte" and not (value is not None and value >= operand):
                    return False
                if op == "$lt" and not (value is not None and value < operand):
                    return False
                if op == "$gt" and not (value is not None and value > operand):
                    return False
                if op == "$in" and value not in operand:
                    return False
                if op == "$ne" and value == operand:
                    return False
        elif value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    async def to_list(self, length: Optional[int] = None) -> list[dict]:
        return self._docs if length is None else self._docs[:length]


class FakeCollection:
    """Subset of the Motor collection API used by the services."""

    def __init__(self):
        self.docs: list[dict] = []

    def find(self, query: Optional[dict] = None, projection: Optional[dict] = None) -> FakeCursor:
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, query or {})])

    async def find_one(self, query: dict, projection: Optional[dict] = None) -> Optional[dict]:
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, doc: dict):
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def insert_many(self, docs: list[dict]):
        ids = [(await self.insert_one(doc)).inserted_id for doc in docs]
        return SimpleNamespace(inserted_ids=ids)

    async def update_one(self, query: dict, update: dict, upsert: bool = False):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)

        if not upsert:
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

        doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
        doc.update(copy.deepcopy(update.get("$set", {})))
        result = await self.insert_one(doc)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=result.inserted_id)

    async def delete_one(self, query: dict):
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def count_documents(self, query: dict) -> int:
        return sum(1 for d in self.docs if _matches(d, query))


class FakeDatabase:
    def __init__(self):
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


class FakeRedis:
    """Subset of the redis.asyncio client used by Cache, with expiry."""

    def __init__(self, clock: FakeClock):
        self._clock = clock
        self._data: dict[str, tuple[str, Optional[datetime]]] = {}
        self.closed = False

    def _live(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def get(self, key: str):
        return self._live(key)

    async def set(self, key: str, value: str, ex: Optional[timedelta] = None):
        expires_at = self._clock() + ex if ex is not None else None
        self._data[key] = (value, expires_at)
        return True

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self._data.pop(key, None) is not None)

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if self._live(key) is not None)

    async def aclose(self) -> None:
        self.closed = True


class FakeTransport:
    """Records outbound messages."""

    def __init__(self):
        self.sent: list[SimpleNamespace] = []

    async def send(self, peer_id, text, choices=None):
        self.sent.append(SimpleNamespace(peer_id=peer_id, text=text, choices=choices or []))

    def texts(self) -> list[str]:
        return [m.text for m in self.sent]

    def last(self) -> SimpleNamespace:
        return self.sent[-1]


class FakeResolver:
    def __init__(self, timezone_name: str = "Asia/Yekaterinburg"):
        self.timezone_name = timezone_name
        self.calls: list[str] = []

    async def resolve(self, place: str) -> str:
        self.calls.append(place)
        return self.timezone_name


class FakeEvent:
    """InboundEvent built directly from values."""

    def __init__(self, peer_id: int, text: str = "", command=None, sender=None):
        from daygoals.conversation.transport import Sender

        self._peer_id = peer_id
        self._text = text
        self._command = command
        self._sender = sender or Sender()

    def peer(self) -> int:
        return self._peer_id

    def text(self) -> str:
        return self._text

    def command(self):
        return self._command

    def sender(self):
        return self._sender


GOAL_TYPES = [
    {"_id": 1, "name": "Wake up", "points": 1, "evaluated": False, "from_list": True},
    {"_id": 2, "name": "Sport", "points": 2, "evaluated": True, "from_list": False},
    {"_id": 3, "name": "Reading", "points": 1, "evaluated": True, "from_list": False},
]

WAKE_GOALS = [
    {"_id": "wake_6", "type": 1, "description": "Wake up at 6:00"},
    {"_id": "wake_8", "type": 1, "description": "Wake up at 8:00"},
    {"_id": "wake_10", "type": 1, "description": "Wake up at 10:00"},
]


@pytest.fixture
def clock():
    """Clock at 2024-03-01 12:00 in Yekaterinburg (07:00 UTC)."""
    return FakeClock(datetime(2024, 3, 1, 7, 0, tzinfo=timezone.utc))


@pytest.fixture
def db():
    database = FakeDatabase()
    database["goal_types"].docs.extend(copy.deepcopy(GOAL_TYPES))
    database["goals"].docs.extend(copy.deepcopy(WAKE_GOALS))
    return database


@pytest.fixture
def redis_client(clock):
    return FakeRedis(clock)


@pytest.fixture
def cache(redis_client):
    from daygoals.cache import Cache

    return Cache(redis_client)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def catalog(db, cache):
    from daygoals.services.catalog_service import CatalogService

    return CatalogService(db, cache)


@pytest.fixture
def users(db, cache):
    from daygoals.services.user_service import UserService

    return UserService(db, cache)


@pytest.fixture
def assignments(db, catalog):
    from daygoals.services.assignment_service import AssignmentService

    return AssignmentService(db, catalog)


@pytest_asyncio.fixture
async def user(users):
    from daygoals.models.user import UserCreate

    return await users.register_user(
        UserCreate(id=101, first_name="Anna", city="Yekaterinburg", timezone="Asia/Yekaterinburg")
    )


@pytest_asyncio.fixture
async def rater(users):
    from daygoals.models.user import UserCreate

    return await users.register_user(
        UserCreate(id=202, first_name="Oleg", city="Moscow", timezone="Europe/Moscow")
    )


@pytest.fixture
def settings():
    from daygoals.config import Settings

    return Settings(run_background_tasks=False, outbound_webhook_url="http://test/messages")


@pytest.fixture
def context(settings, db, cache, transport, clock):
    from daygoals.context import AppContext

    return AppContext(
        settings,
        db,
        cache=cache,
        transport=transport,
        resolver=FakeResolver(),
        clock=clock,
    )


@pytest_asyncio.fixture
async def app_client(context):
    """
    Async HTTP client against the app with the test context injected.

    The lifespan is not run, so nothing connects to MongoDB or Redis.
    """
    from httpx import ASGITransport, AsyncClient

    from daygoals.context import get_context
    from daygoals.main import app

    app.dependency_overrides[get_context] = lambda: context
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_event():
    """Factory of inbound events."""
    return FakeEvent


@pytest.fixture
def empty_db():
    return FakeDatabase()
