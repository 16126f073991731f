"""
Abstractions for upstream recipe APIs, caching, and persistence.
Enables component swapping and testability via dependency injection.
"""

from datetime import timedelta
from typing import List, Optional, Protocol

from app.models import NormalizedRecipe, RecipeSource, StoredRecipe


class RecipeSourceAdapter(Protocol):
    """One upstream recipe API (Spoonacular, Edamam, TheMealDB)."""

    def fetch_recipe(self, dish_name: str) -> NormalizedRecipe:
        """
        Return the first matching recipe, normalized.
        Raises NotFoundError, ConfigurationError or UpstreamError.
        """
        ...


class CacheBackend(Protocol):
    """Time-bound cache keyed by (normalized query, source)."""

    def get(self, query: str, source: RecipeSource) -> Optional[NormalizedRecipe]:
        """Return the live entry, or None on miss or expiry."""
        ...

    def put(
        self,
        query: str,
        source: RecipeSource,
        recipe: NormalizedRecipe,
        ttl: timedelta,
    ) -> None:
        """Upsert the entry, resetting its expiry to now + ttl."""
        ...


class RecipeRepository(Protocol):
    """Durable recipe store, unique on (external_id, source)."""

    def upsert(self, recipe: NormalizedRecipe) -> None:
        """Insert or overwrite. Never raises."""
        ...

    def get_recipe(
        self, external_id: str, source: RecipeSource
    ) -> Optional[StoredRecipe]:
        """Get a stored recipe by its unique key."""
        ...

    def list_recipes(
        self,
        source: Optional[RecipeSource] = None,
        search: Optional[str] = None,
    ) -> List[StoredRecipe]:
        """List stored recipes, newest update first."""
        ...
