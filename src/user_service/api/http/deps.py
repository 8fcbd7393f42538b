"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from user_service.api.http.app_data import ApplicationDependencies
from user_service.core.services import UserService
from user_service.core.storage import RecordCache
from user_service.entities.user import UserRepository


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(request: Request) -> Iterator[Session]:
    """Open a session for the request and close it afterwards."""
    app_deps = get_app_dependencies(request)
    with app_deps.database_service.session_scope() as session:
        yield session


def get_record_cache(request: Request) -> RecordCache:
    """Get the shared record cache instance."""
    return get_app_dependencies(request).record_cache


def get_user_repository(db: Session = Depends(get_db_session)) -> UserRepository:
    return UserRepository(db)


def get_user_service(
    request: Request,
    repository: UserRepository = Depends(get_user_repository),
    cache: RecordCache = Depends(get_record_cache),
) -> UserService:
    """Build the per-request user service around the shared cache."""
    cache_config = get_app_dependencies(request).cache_config
    return UserService(
        repository,
        cache,
        ttl_seconds=cache_config.ttl_seconds,
        track_page_keys=cache_config.track_page_keys,
    )
