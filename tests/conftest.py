import os

for name in ("DATABASE_URL", "CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
    os.environ.pop(name, None)

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

import database
import main
from auth import get_current_admin
from cache import TTLCache
from summary import SUMMARY_TTL_SECONDS

ADMIN = {"id": str(ObjectId()), "email": "admin@pesantren.sch.id", "role": "admin"}


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def db():
    mock_db = mongomock.MongoClient()["pesantren_test"]
    database.ensure_indexes(mock_db)
    return mock_db


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(db, clock):
    main.app.dependency_overrides[database.get_db] = lambda: db
    main.app.dependency_overrides[database.get_db_provider] = lambda: (lambda: db)
    main.app.state.summary_cache = TTLCache(ttl=SUMMARY_TTL_SECONDS, clock=clock)
    yield main.app
    main.app.dependency_overrides.clear()
    main.app.state.summary_cache = TTLCache(ttl=SUMMARY_TTL_SECONDS)


@pytest.fixture
def anon_client(app):
    """Client without an admin session."""
    return TestClient(app)


@pytest.fixture
def client(app):
    """Client whose requests are authenticated as ADMIN."""
    app.dependency_overrides[get_current_admin] = lambda: ADMIN
    return TestClient(app)
