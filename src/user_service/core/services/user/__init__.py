from .user_service import (
    PAGE_INDEX_KEY,
    PageKeyIndex,
    UserService,
    page_cache_key,
    user_cache_key,
)

__all__ = [
    "PAGE_INDEX_KEY",
    "PageKeyIndex",
    "UserService",
    "page_cache_key",
    "user_cache_key",
]
