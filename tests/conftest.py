"""
Test configuration and fixtures for the LinkHub service.
This centralizes all test setup, making individual tests clean.
"""

import os

# Must be set before anything imports linkhub_app.config
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["STORAGE_BACKEND"] = "sqlalchemy"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from main import app
from linkhub_app.database.connection import Base, SessionLocal, engine, get_db
from linkhub_app.ratelimit.factory import RateLimiterFactory
from linkhub_app.services.keyspace import Keyspace
from linkhub_app.services.short_name_strategies import RandomShortNameStrategy
from linkhub_app.storage.strategies import SQLAlchemyStorage


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Every test starts with empty rate-limit counters"""
    RateLimiterFactory.clear_instance()
    yield
    RateLimiterFactory.clear_instance()


@pytest.fixture(scope="function")
def storage(db_session):
    return SQLAlchemyStorage(db_session)


@pytest.fixture(scope="function")
def keyspace(storage):
    return Keyspace(storage, RandomShortNameStrategy(length=8), max_attempts=10)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database dependency overridden.
    This is the main fixture that tests will use.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def assert_error_shape(resp, expected_code: str):
    assert resp.headers.get("content-type", "").startswith("application/json")

    body = resp.json()
    assert body["success"] is False
    assert isinstance(body["error"], dict)
    assert body["error"]["code"] == expected_code

    msg = body["error"].get("message")
    assert isinstance(msg, str)
    assert msg.strip() != ""
    return body["error"]
