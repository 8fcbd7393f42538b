from dataclasses import dataclass

from user_service.core.services import DbSessionService, RedisService
from user_service.core.storage import RecordCache
from user_service.runtime.config.config_data import CacheConfig


@dataclass
class ApplicationDependencies:
    """Process-wide resources shared by every request."""

    database_service: DbSessionService
    record_cache: RecordCache
    cache_config: CacheConfig
    redis_service: RedisService | None = None
