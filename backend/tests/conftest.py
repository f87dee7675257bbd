"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from carbook.database import get_db, make_engine
from carbook.main import app
from carbook.middleware import rate_limit
from carbook.models import Base
from carbook.redis_client import get_redis
from carbook.services.seed import DEMO_OWNER_ID, DEMO_STORE_ID, seed_demo_store

# 2026-03-02 is a Monday
NOW = datetime(2026, 3, 2, 8, 0)
MONDAY = NOW.date()


def next_monday() -> date:
    """First Monday strictly after today (for endpoints that use the real clock)."""
    today = date.today()
    return today + timedelta(days=(7 - today.weekday()) or 7)


@pytest.fixture
def engine(tmp_path):
    # File database: connections of different threads must see the same data
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(session_factory):
    """Seeded demo store. The seeding session is closed so it holds no lock."""
    with session_factory() as session:
        seed_demo_store(session)

    return SimpleNamespace(
        id=DEMO_STORE_ID,
        owner_id=DEMO_OWNER_ID,
        oil_change=f"{DEMO_STORE_ID}-oil-change",
        tyre_swap=f"{DEMO_STORE_ID}-tyre-swap",
        full_service=f"{DEMO_STORE_ID}-full-service",
    )


@pytest.fixture
def redis_mock():
    """MagicMock Redis backed by a dict, enough for counters, TTLs and lists."""
    data = {}
    ttls = {}

    def incr(key):
        data[key] = int(data.get(key, 0)) + 1
        return data[key]

    def decr(key):
        data[key] = int(data.get(key, 0)) - 1
        return data[key]

    def get(key):
        value = data.get(key)
        return None if value is None else str(value)

    def set_(key, value):
        data[key] = value
        return True

    def expire(key, window):
        ttls[key] = window
        return True

    def rpush(key, value):
        data.setdefault(key, []).append(value)
        return len(data[key])

    def pipeline():
        pipe = MagicMock()
        queued = []
        pipe.incr.side_effect = lambda key: queued.append(lambda: incr(key))
        pipe.ttl.side_effect = lambda key: queued.append(lambda: ttls.get(key, -1))
        pipe.execute.side_effect = lambda: [op() for op in queued]
        return pipe

    redis = MagicMock()
    redis.incr.side_effect = incr
    redis.decr.side_effect = decr
    redis.get.side_effect = get
    redis.set.side_effect = set_
    redis.expire.side_effect = expire
    redis.rpush.side_effect = rpush
    redis.pipeline.side_effect = pipeline
    redis.data = data
    return redis


@pytest.fixture
def client(session_factory, redis_mock, monkeypatch):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: redis_mock
    monkeypatch.setattr(rate_limit, "redis_client", redis_mock)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
