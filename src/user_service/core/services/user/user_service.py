"""User service: CRUD over the record store behind a read-through cache.

Cache rules:

* Point lookups (``user:<id>``) and whole pages
  (``users:page:<offset>:<limit>:<order>``) are populated on a miss with the
  configured TTL and served verbatim on a hit.
* The cache is only touched after the store write has been committed. Update
  and remove always evict the point key of the record they changed.
* Pages cannot be found by prefix, so writes leave them to expire by TTL. With
  ``track_page_keys`` the service instead records every page key it populates
  under ``users:page:index`` and deletes them all on each write.
* A failing cache behaves like an empty one: reads fall through to the store,
  populate and evict failures are logged and the operation carries on.
"""

from typing import Literal

from fastapi.concurrency import run_in_threadpool
from loguru import logger
from pydantic import BaseModel, Field

from user_service.core.exceptions import (
    CacheUnavailableError,
    DuplicateKeyError,
    InvalidInputError,
    RecordNotFoundError,
)
from user_service.core.security import hash_password
from user_service.core.storage.record_cache import RecordCache, T
from user_service.entities.user import (
    User,
    UserCreate,
    UserPage,
    UserRepository,
    UserUpdate,
)

SORT_ORDERS = ("asc", "desc")
PAGE_INDEX_KEY = "users:page:index"


def user_cache_key(user_id: int) -> str:
    return f"user:{user_id}"


def page_cache_key(offset: int, limit: int, order: str) -> str:
    return f"users:page:{offset}:{limit}:{order}"


class PageKeyIndex(BaseModel):
    """Page keys populated since the last write (page-key tracking only)."""

    keys: list[str] = Field(default_factory=list)


class UserService:
    """Mediates every read and write between callers, the cache and the store.

    Holds no state between calls. One instance is built per request around a
    session-bound repository; the cache is shared by the whole process.
    Repository calls and password hashing block, so they run in the
    threadpool and leave the event loop free for other requests.
    """

    def __init__(
        self,
        repository: UserRepository,
        cache: RecordCache,
        ttl_seconds: int,
        track_page_keys: bool = False,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._track_page_keys = track_page_keys

    async def find_all(
        self,
        offset: int = 0,
        limit: int = 20,
        order: Literal["asc", "desc"] = "asc",
    ) -> list[User]:
        """Return one page of users ordered by id."""
        if offset < 0:
            raise InvalidInputError("offset must be greater than or equal to 0")
        if limit < 1:
            raise InvalidInputError("limit must be greater than or equal to 1")
        if order not in SORT_ORDERS:
            raise InvalidInputError("order must be one of: asc, desc")

        key = page_cache_key(offset, limit, order)
        cached = await self._cache_get(key, UserPage)
        if cached is not None:
            logger.debug("Cache hit for {}", key)
            return cached.items

        logger.debug("Cache miss for {}", key)
        users = await run_in_threadpool(self._repository.find_page, offset, limit, order)
        await self._cache_set(key, UserPage(items=users))
        if self._track_page_keys:
            await self._remember_page_key(key)
        return users

    async def find_one(self, user_id: int) -> User:
        """Return the live user with `user_id`."""
        key = user_cache_key(user_id)
        cached = await self._cache_get(key, User)
        if cached is not None:
            logger.debug("Cache hit for {}", key)
            return cached

        logger.debug("Cache miss for {}", key)
        user = await run_in_threadpool(self._repository.find_by_id, user_id)
        if user is None:
            raise RecordNotFoundError(user_id)

        await self._cache_set(key, user)
        return user

    async def create(self, data: UserCreate) -> User:
        """Create a user after checking that the email is free."""
        existing = await run_in_threadpool(self._repository.find_by_email, data.email)
        if existing is not None:
            raise DuplicateKeyError(data.email)

        # The unique index still rejects a concurrent create that passed the
        # check above; the repository reports it as DuplicateKeyError too.
        password_hash = await run_in_threadpool(hash_password, data.password)
        user = await run_in_threadpool(self._repository.insert, data, password_hash)
        logger.info("Created user {}", user.id)

        await self._invalidate_pages()
        return user

    async def update(self, user_id: int, data: UserUpdate) -> User:
        """Apply a partial update to a live user."""
        current = await run_in_threadpool(self._repository.find_by_id, user_id)
        if current is None:
            raise RecordNotFoundError(user_id)

        changes = data.changes()
        new_email = changes.get("email")
        if new_email is not None and new_email != current.email:
            holder = await run_in_threadpool(self._repository.find_by_email, new_email)
            if holder is not None and holder.id != user_id:
                raise DuplicateKeyError(new_email)

        if "password" in changes:
            changes["password_hash"] = await run_in_threadpool(
                hash_password, changes.pop("password")
            )

        updated = await run_in_threadpool(self._repository.apply_update, user_id, changes)
        if updated is None:
            # Removed between the lookup and the write.
            raise RecordNotFoundError(user_id)
        logger.info("Updated user {} fields {}", user_id, sorted(changes))

        await self._evict(user_cache_key(user_id))
        await self._invalidate_pages()
        return updated

    async def remove(self, user_id: int) -> None:
        """Soft-delete a live user."""
        if await run_in_threadpool(self._repository.find_by_id, user_id) is None:
            raise RecordNotFoundError(user_id)

        affected = await run_in_threadpool(self._repository.soft_delete, user_id)
        if affected == 0:
            logger.info("User {} was already removed by a concurrent request", user_id)
        else:
            logger.info("Removed user {}", user_id)

        await self._evict(user_cache_key(user_id))
        await self._invalidate_pages()

    async def _cache_get(self, key: str, model_class: type[T]) -> T | None:
        try:
            return await self._cache.get(key, model_class)
        except CacheUnavailableError as e:
            logger.warning("Cache read failed for {}, reading from the store: {}", key, e)
            return None

    async def _cache_set(self, key: str, value: BaseModel) -> None:
        try:
            await self._cache.set(key, value, self._ttl_seconds)
        except CacheUnavailableError as e:
            logger.warning("Cache populate failed for {}: {}", key, e)

    async def _evict(self, key: str) -> None:
        try:
            await self._cache.delete(key)
        except CacheUnavailableError as e:
            logger.error(
                "Cache eviction failed for {}; entry may be served until its TTL expires: {}",
                key,
                e,
            )

    async def _remember_page_key(self, key: str) -> None:
        index = await self._cache_get(PAGE_INDEX_KEY, PageKeyIndex) or PageKeyIndex()
        if key not in index.keys:
            index.keys.append(key)
            await self._cache_set(PAGE_INDEX_KEY, index)

    async def _invalidate_pages(self) -> None:
        """Drop cached pages after a write.

        Without page-key tracking this is a no-op and pages expire by TTL.
        """
        if not self._track_page_keys:
            return

        index = await self._cache_get(PAGE_INDEX_KEY, PageKeyIndex)
        if index is None:
            return

        for key in index.keys:
            await self._evict(key)
        await self._evict(PAGE_INDEX_KEY)
        logger.debug("Cleared {} cached pages", len(index.keys))
