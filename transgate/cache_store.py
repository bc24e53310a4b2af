"""
Expiring key-value cache for translation responses.

CacheStore is fail-open: any backend or serialization error is logged and
reported as a miss (get) or a failed write (set), never raised.
"""

import json
import time
from typing import Any, Dict, Optional

import redis.asyncio as redis
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from transgate.database import Database
from transgate.db_models import CacheEntry
from transgate.errors import CacheError
from transgate.logger import setup_logger

DEFAULT_TTL = 604800  # one week

# INSERT ... ON CONFLICT DO UPDATE per dialect; others fall back to Session.merge
_UPSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}

log = setup_logger("transgate.cache")


class CacheBackend:
    """Interface of a raw string cache."""

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str, ttl: int):
        raise NotImplementedError

    async def close(self):
        pass


class RedisCacheBackend(CacheBackend):
    """Redis backend. Expiry is handled by Redis itself (SET ... EX)."""

    def __init__(self, url: str):
        self.url = url
        # The pool connects lazily on first command
        self.client = redis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl: int):
        await self.client.set(key, value, ex=ttl)

    async def close(self):
        await self.client.aclose()


class SqlCacheBackend(CacheBackend):
    """
    SQL database backend using SQLAlchemy.

    Stores each entry with an absolute expiry timestamp. The ORM calls are
    blocking, so they run in the threadpool.
    """

    def __init__(self, url: str):
        """
        Args:
            url: SQLAlchemy database URL
        """
        self.database = Database(url)
        self.database.init_schema()

    def _get(self, key: str) -> Optional[str]:
        with self.database.session() as db:
            cache_entry = db.query(CacheEntry).filter(CacheEntry.key == key).first()

            if cache_entry is None:
                return None

            # Delete expired entry
            if int(time.time()) >= cache_entry.expires_at:
                db.delete(cache_entry)
                return None

            return cache_entry.value

    def _set(self, key: str, value: str, ttl: int):
        values = {"key": key, "value": value, "expires_at": int(time.time()) + ttl}
        upsert = _UPSERTS.get(self.database.engine.dialect.name)

        with self.database.session() as db:
            if upsert is None:
                db.merge(CacheEntry(**values))
                return

            # Single statement, so concurrent writers to one key never collide
            statement = upsert(CacheEntry).values(**values)
            statement = statement.on_conflict_do_update(
                index_elements=[CacheEntry.key],
                set_={
                    "value": statement.excluded.value,
                    "expires_at": statement.excluded.expires_at,
                },
            )
            db.execute(statement)

    def _clear_expired(self):
        with self.database.session() as db:
            db.query(CacheEntry).filter(
                CacheEntry.expires_at <= int(time.time())
            ).delete(synchronize_session=False)

    async def get(self, key: str) -> Optional[str]:
        return await run_in_threadpool(self._get, key)

    async def set(self, key: str, value: str, ttl: int):
        await run_in_threadpool(self._set, key, value, ttl)

    async def clear_expired(self):
        """Remove every expired row."""
        await run_in_threadpool(self._clear_expired)

    async def close(self):
        self.database.dispose()


def create_cache_backend(url: str) -> CacheBackend:
    """
    Pick a backend from the URL scheme.

    redis://, rediss:// and unix:// URLs go to Redis, anything else is
    treated as a SQLAlchemy database URL.
    """
    if url.startswith(("redis://", "rediss://", "unix://")):
        return RedisCacheBackend(url)
    return SqlCacheBackend(url)


class CacheStore:
    """
    Fail-open JSON cache on top of a CacheBackend.

    A single instance owns the backend connection for the process lifetime.
    Concurrent writes to one key are last-write-wins.
    """

    def __init__(self, backend: CacheBackend, default_ttl: int = DEFAULT_TTL):
        """
        Args:
            backend: Raw string cache
            default_ttl: TTL in seconds used when set() gets none
        """
        self.backend = backend
        self.default_ttl = default_ttl

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get a cached value.

        Returns:
            Deserialized value, or None on miss or any error
        """
        try:
            raw = await self.backend.get(key)
            if raw is None:
                return None
            try:
                return json.loads(raw)
            except ValueError as e:
                raise CacheError(f"Corrupt cache entry for {key}: {e}") from e
        except Exception as e:
            log.warning("Cache get failed", extra={"key": key, "error": str(e)})
            return None

    async def set(self, key: str, value: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        """
        Store a value.

        Args:
            key: Cache key
            value: JSON serializable value
            ttl: Time-to-live in seconds, defaults to default_ttl

        Returns:
            True if the value was stored
        """
        try:
            await self.backend.set(key, json.dumps(value), ttl or self.default_ttl)
            return True
        except Exception as e:
            log.warning("Cache set failed", extra={"key": key, "error": str(e)})
            return False

    async def close(self):
        """Release the backend connection."""
        try:
            await self.backend.close()
        except Exception as e:
            log.warning("Cache close failed", extra={"error": str(e)})
