"""
Recipe cache keyed by (normalized query, source), 24-hour TTL.

Redis when REDIS_URL is configured and reachable, otherwise an in-process
dict. Expiry is always decided by comparing the stored expiresAt with now;
the redis key TTL only reclaims space.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from app.models import CacheEntry, NormalizedRecipe, RecipeSource
from app.services.metrics import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

CACHE_TTL = timedelta(hours=24)

CACHE_KEY_PREFIX = "recipe_cache:"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_query(dish_name: str) -> str:
    return dish_name.strip().lower()


def cache_key(query: str, source: RecipeSource) -> str:
    return f"{CACHE_KEY_PREFIX}{source.value}:{normalize_query(query)}"


def _get_redis_client(url: str):  # type: ignore
    """Create Redis client from url, or None if unreachable."""
    try:
        import redis

        client = redis.from_url(url, decode_responses=True)
        client.ping()
        return client
    except Exception as e:
        logger.warning("Redis unavailable, using in-memory cache: %s", e)
        return None


class InMemoryCacheBackend:
    """Process-local cache. Entries are upserted per key; expired ones are dropped on read."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._entries: Dict[Tuple[str, RecipeSource], CacheEntry] = {}

    def get(self, query: str, source: RecipeSource) -> Optional[NormalizedRecipe]:
        key = (normalize_query(query), source)
        entry = self._entries.get(key)
        if entry is not None and entry.expires_at <= self._clock():
            del self._entries[key]
            entry = None
        if entry is None:
            record_cache_miss(source.value)
            return None
        record_cache_hit(source.value)
        return entry.recipe

    def put(
        self,
        query: str,
        source: RecipeSource,
        recipe: NormalizedRecipe,
        ttl: timedelta = CACHE_TTL,
    ) -> None:
        self._entries[(normalize_query(query), source)] = CacheEntry(
            recipe=recipe, expires_at=self._clock() + ttl
        )


class RedisCacheBackend:
    """Redis-backed cache. Errors degrade to a miss / no-op."""

    def __init__(self, client: Any, clock: Clock = utcnow) -> None:
        self._client = client
        self._clock = clock

    def get(self, query: str, source: RecipeSource) -> Optional[NormalizedRecipe]:
        key = cache_key(query, source)
        try:
            raw = self._client.get(key)
        except Exception as e:
            logger.debug("Cache get failed for %s: %s", key, e)
            record_cache_miss(source.value)
            return None
        if raw is None:
            record_cache_miss(source.value)
            return None
        try:
            entry = CacheEntry.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.debug("Discarding unreadable cache entry %s: %s", key, e)
            record_cache_miss(source.value)
            return None
        if entry.expires_at <= self._clock():
            record_cache_miss(source.value)
            return None
        record_cache_hit(source.value)
        return entry.recipe

    def put(
        self,
        query: str,
        source: RecipeSource,
        recipe: NormalizedRecipe,
        ttl: timedelta = CACHE_TTL,
    ) -> None:
        key = cache_key(query, source)
        entry = CacheEntry(recipe=recipe, expires_at=self._clock() + ttl)
        try:
            self._client.set(
                key,
                entry.model_dump_json(by_alias=True),
                ex=int(ttl.total_seconds()),
            )
        except Exception as e:
            logger.debug("Cache set failed for %s: %s", key, e)


def create_cache_backend(redis_url: Optional[str]):
    """Redis backend when the URL is set and reachable, otherwise in-memory."""
    if redis_url:
        client = _get_redis_client(redis_url)
        if client is not None:
            logger.info("Using Redis recipe cache")
            return RedisCacheBackend(client)
    return InMemoryCacheBackend()
