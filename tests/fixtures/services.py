"""Service fixtures for testing."""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from user_service.api.http.app import create_app
from user_service.api.http.app_data import ApplicationDependencies
from user_service.core.services import DbSessionService, UserService
from user_service.core.storage import InMemoryRecordCache
from user_service.entities.user import UserRepository
from user_service.runtime.config.config_data import CacheConfig

from .dummies import RecordingRecordCache

CACHE_TTL_SECONDS = 60


@pytest.fixture
def record_cache() -> RecordingRecordCache:
    """In-memory cache that also records every call made to it."""
    return RecordingRecordCache()


@pytest.fixture
def user_repository(session: Session) -> UserRepository:
    return UserRepository(session)


@pytest.fixture
def user_service(
    user_repository: UserRepository, record_cache: InMemoryRecordCache
) -> UserService:
    return UserService(user_repository, record_cache, ttl_seconds=CACHE_TTL_SECONDS)


@pytest.fixture
def tracking_user_service(
    user_repository: UserRepository, record_cache: InMemoryRecordCache
) -> UserService:
    return UserService(
        user_repository,
        record_cache,
        ttl_seconds=CACHE_TTL_SECONDS,
        track_page_keys=True,
    )


@pytest.fixture
def app_dependencies(
    db_service: DbSessionService, record_cache: InMemoryRecordCache
) -> ApplicationDependencies:
    return ApplicationDependencies(
        database_service=db_service,
        record_cache=record_cache,
        cache_config=CacheConfig(ttl_seconds=CACHE_TTL_SECONDS),
    )


@pytest.fixture
def client(app_dependencies: ApplicationDependencies) -> TestClient:
    """Test client over an app wired to the in-memory database and cache."""
    app = create_app()
    app.state.app_dependencies = app_dependencies
    return TestClient(app)
