"""Core services exports."""

from .database.db_session import DbSessionService
from .redis_service import RedisService
from .user import (
    PAGE_INDEX_KEY,
    PageKeyIndex,
    UserService,
    page_cache_key,
    user_cache_key,
)

__all__ = [
    "PAGE_INDEX_KEY",
    "DbSessionService",
    "PageKeyIndex",
    "RedisService",
    "UserService",
    "page_cache_key",
    "user_cache_key",
]
