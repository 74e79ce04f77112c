"""
Pytest configuration and shared fixtures.

- fake_db: in-memory stand-in for the motor database, installed as the active handle
- client: FastAPI TestClient over the app (startup hooks are not run, so no real MongoDB is needed)
- user_id: fresh user identifier per test
- base_url: target of the live smoke tests (TEST_BASE_URL)
"""
import copy
import os
import uuid
from types import SimpleNamespace

import pytest
from bson import ObjectId

from fastapi.testclient import TestClient

from memory_backend import database
from memory_backend.config import ServerConfig, WebhookConfig
from memory_backend.main import app

BASE_URL = os.getenv("TEST_BASE_URL")


def _matches(doc: dict, query: dict) -> bool:
    return all(doc.get(key) == value for key, value in (query or {}).items())


def _sort_key(value):
    # None sorts before any value
    return (value is not None, value)


class FakeCursor:
    """Subset of motor's AsyncIOMotorCursor: sort, limit, async iteration, to_list."""

    def __init__(self, docs):
        self._docs = list(docs)
        self._limit = 0

    def sort(self, key_or_list, direction=None):
        if isinstance(key_or_list, list):
            keys = key_or_list
        else:
            keys = [(key_or_list, direction or 1)]
        # Stable sorts applied from the last key to the first
        for key, key_direction in reversed(keys):
            self._docs.sort(key=lambda d: _sort_key(d.get(key)), reverse=key_direction < 0)
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def _selected(self):
        return self._docs[:self._limit] if self._limit else self._docs

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._selected():
            yield doc

    async def to_list(self, length=None):
        docs = self._selected()
        return docs[:length] if length else docs


class FakeCollection:
    """Subset of motor's AsyncIOMotorCollection used by the memory stores."""

    def __init__(self, name: str):
        self.name = name
        self.docs = []

    async def insert_one(self, doc: dict):
        if "_id" not in doc:
            doc["_id"] = ObjectId()
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    def find(self, query=None):
        return FakeCursor(copy.deepcopy(d) for d in self.docs if _matches(d, query))

    async def find_one(self, query=None):
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def update_one(self, query: dict, update: dict, upsert: bool = False):
        fields = update.get("$set", {})
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(copy.deepcopy(fields))
                return SimpleNamespace(matched_count=1, upserted_id=None)
        if upsert:
            new_doc = {**query, **copy.deepcopy(fields)}
            new_doc.setdefault("_id", ObjectId())
            self.docs.append(new_doc)
            return SimpleNamespace(matched_count=0, upserted_id=new_doc["_id"])
        return SimpleNamespace(matched_count=0, upserted_id=None)

    async def delete_one(self, query: dict):
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, query: dict):
        kept = [d for d in self.docs if not _matches(d, query)]
        deleted = len(self.docs) - len(kept)
        self.docs = kept
        return SimpleNamespace(deleted_count=deleted)

    async def create_index(self, keys, **kwargs):
        return "_".join(f"{key}_{direction}" for key, direction in keys)


class FakeDatabase:
    """Dict-of-collections stand-in for AsyncIOMotorDatabase."""

    def __init__(self):
        self.collections = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    async def command(self, name: str):
        return {"ok": 1.0}

    def count(self, name: str) -> int:
        return len(self[name].docs)


@pytest.fixture
def fake_db():
    """Install an empty in-memory database as the active handle."""
    db = FakeDatabase()
    database.set_database(db)
    yield db
    database.set_database(None)


@pytest.fixture
def no_db():
    """Simulate a service started without a reachable database."""
    database.set_database(None)
    yield
    database.set_database(None)


@pytest.fixture
def user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture(autouse=True)
def default_settings():
    """Every test starts in development mode without a webhook secret."""
    previous = (ServerConfig.ENVIRONMENT, WebhookConfig.SECRET)
    ServerConfig.ENVIRONMENT = "development"
    WebhookConfig.SECRET = None
    yield
    ServerConfig.ENVIRONMENT, WebhookConfig.SECRET = previous


@pytest.fixture
def production_mode():
    """Run the test with production settings, restoring them afterwards."""
    previous = ServerConfig.ENVIRONMENT
    ServerConfig.ENVIRONMENT = "production"
    yield
    ServerConfig.ENVIRONMENT = previous


@pytest.fixture
def webhook_secret():
    previous = WebhookConfig.SECRET
    WebhookConfig.SECRET = "s3cret-token"
    yield WebhookConfig.SECRET
    WebhookConfig.SECRET = previous


@pytest.fixture
def client(fake_db):
    """TestClient bound to the in-memory database."""
    return TestClient(app)


@pytest.fixture
def base_url() -> str:
    """
    Live backend for smoke tests; skips when TEST_BASE_URL is not set.
    """
    if not BASE_URL:
        pytest.skip("TEST_BASE_URL not set, live smoke tests skipped")
    return BASE_URL.rstrip("/")
