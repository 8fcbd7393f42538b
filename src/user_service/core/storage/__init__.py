"""Cache backends for user lookups and listings."""

from .record_cache import (
    InMemoryRecordCache,
    RecordCache,
    RedisRecordCache,
    build_record_cache,
)

__all__ = [
    "InMemoryRecordCache",
    "RecordCache",
    "RedisRecordCache",
    "build_record_cache",
]
