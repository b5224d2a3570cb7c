import os

# Point the app at an in-memory database before anything reads the settings
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CACHE_BACKEND"] = "memory"

import pytest
from fastapi.testclient import TestClient

from catalog.main import app
from catalog.database import Base, SessionLocal, engine
from catalog.services.product_service import ProductService
from catalog.utils.cache import InMemoryCache, get_cache


@pytest.fixture(scope="function")
def cache():
    """Fresh in-process cache for each test."""
    return InMemoryCache()


@pytest.fixture(scope="function")
def client(cache):
    """Create test client with fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_cache] = lambda: cache

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def service(db_session, cache):
    return ProductService(db_session, cache)
