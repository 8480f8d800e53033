"""
Test configuration and fixtures for the tool directory API.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from directory_app.auth.identity import IdentityProvider
from directory_app.cache.strategies import InMemoryCache
from directory_app.database.connection import Base, get_db
from directory_app.dependencies import get_cache, get_session_factory
from directory_app.models import Category, Profile, Tool

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_ID = "00000000-0000-0000-0000-00000000a001"
USER_ID = "00000000-0000-0000-0000-00000000u001"


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()

    # Seed one administrator and one ordinary user
    db.add_all([
        Profile(id=ADMIN_ID, role="admin"),
        Profile(id=USER_ID, role="user"),
    ])
    db.commit()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def identity(db_session):
    return IdentityProvider(db_session)


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture(scope="function")
def client(db_session, cache):
    """
    Create a test client with database, session factory and cache overridden.
    This is the main fixture that tests will use.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_cache] = lambda: cache

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-User-Id": ADMIN_ID}


@pytest.fixture
def user_headers():
    return {"X-User-Id": USER_ID}


@pytest.fixture
def make_category(db_session):
    def _make(name, description=None):
        category = Category(name=name, description=description)
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        return category
    return _make


@pytest.fixture
def make_tool(db_session):
    def _make(name, category=None, description="", url=None, clicks_count=0):
        tool = Tool(
            name=name,
            description=description,
            url=url or f"https://{name.lower().replace(' ', '')}.example.com/",
            category_id=category.id if category is not None else None,
            clicks_count=clicks_count,
        )
        db_session.add(tool)
        db_session.commit()
        db_session.refresh(tool)
        return tool
    return _make
