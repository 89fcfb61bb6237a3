"""Shared pytest fixtures for task API test suites."""

from collections.abc import Generator
import os
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("TASKBOARD_DATABASE_URL", "sqlite://")

API_PREFIX = "/api/v1/internal"


@pytest.fixture
def engine():
    """Fresh in-memory database per test, shared across threads."""
    from app.db.models import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, class_=Session)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def api_app(session_factory):
    """Application wired to the in-memory database."""
    from app.db.base import get_db_session
    from app.main import app

    def override_get_db_session() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = override_get_db_session
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_app) -> Generator[TestClient, None, None]:
    """Provide an API test client for contract and integration suites."""
    with TestClient(api_app) as test_client:
        yield test_client


@pytest.fixture
def make_category(db_session):
    """Insert a category directly and return its id."""
    from app.db.models import Category

    def _make(*, id_account: int = 1, name: str = "Home", deleted: bool = False) -> int:
        category = Category(id_account=id_account, name=name, deleted=deleted)
        db_session.add(category)
        db_session.commit()
        return category.id

    return _make
