"""
Fetch orchestrator: cache lookup, upstream adapter on miss, write-through
cache, fire-and-forget persistence, uniform envelope.
"""

import logging
from datetime import timedelta
from typing import Any, Callable, Mapping, Optional, Union

from app.core.abstractions import CacheBackend, RecipeRepository, RecipeSourceAdapter
from app.core.errors import RecipeError, ValidationError
from app.models import FetchResponse, NormalizedRecipe, RecipeSource
from app.services.cache import CACHE_TTL, normalize_query
from app.services.metrics import record_fetch, record_persistence_failure

logger = logging.getLogger(__name__)

# Receives (func, *args); FastAPI's BackgroundTasks.add_task fits
Scheduler = Callable[..., Any]


def resolve_source(value: Union[str, RecipeSource, None]) -> RecipeSource:
    """Map an apiSource tag to RecipeSource. Raises ValidationError if unknown."""
    if isinstance(value, RecipeSource):
        return value
    try:
        return RecipeSource(value)
    except ValueError:
        raise ValidationError(f"Invalid API source: {value}") from None


class RecipeFetchService:
    """Entry point for one dish lookup against one upstream source."""

    def __init__(
        self,
        adapters: Mapping[RecipeSource, RecipeSourceAdapter],
        cache: CacheBackend,
        repository: RecipeRepository,
        ttl: timedelta = CACHE_TTL,
    ) -> None:
        self._adapters = dict(adapters)
        self._cache = cache
        self._repository = repository
        self._ttl = ttl

    def handle(
        self,
        dish_name: Optional[str],
        source: Union[str, RecipeSource, None] = RecipeSource.PREMIUM,
        schedule: Optional[Scheduler] = None,
    ) -> FetchResponse:
        """Look up one recipe. Never raises RecipeError; failures become envelopes."""
        try:
            recipe, origin = self._fetch(dish_name, source, schedule)
        except RecipeError as e:
            logger.warning("Fetch failed for %r from %s: %s", dish_name, source, e)
            # Unknown tags share one label to bound metric cardinality
            label = source.value if isinstance(source, RecipeSource) else str(source)
            if label not in {s.value for s in RecipeSource}:
                label = "unknown"
            record_fetch(label, "none", False)
            return FetchResponse(success=False, error=str(e))

        record_fetch(recipe.source_name.value, origin, True)
        return FetchResponse(success=True, data=recipe, source=origin)

    def _fetch(
        self,
        dish_name: Optional[str],
        source: Union[str, RecipeSource, None],
        schedule: Optional[Scheduler],
    ) -> tuple[NormalizedRecipe, str]:
        if not dish_name or not dish_name.strip():
            raise ValidationError("Dish name is required")
        query = normalize_query(dish_name)
        resolved = resolve_source(source)
        adapter = self._adapters.get(resolved)
        if adapter is None:
            raise ValidationError(f"Invalid API source: {resolved.value}")

        logger.info("Fetching recipe for: %s from %s", dish_name, resolved.value)
        cached = self._cache.get(query, resolved)
        if cached is not None:
            logger.info("Returning cached data for %r from %s", query, resolved.value)
            return cached, "cache"

        recipe = adapter.fetch_recipe(dish_name.strip())

        self._cache.put(query, resolved, recipe, self._ttl)
        if schedule is not None:
            schedule(self._persist, recipe)
        else:
            self._persist(recipe)
        return recipe, "api"

    def _persist(self, recipe: NormalizedRecipe) -> None:
        """Repository write; a failure here must not reach the caller."""
        try:
            self._repository.upsert(recipe)
        except Exception:
            record_persistence_failure()
            logger.exception(
                "Error storing recipe %s/%s",
                recipe.source_name.value,
                recipe.external_id,
            )
