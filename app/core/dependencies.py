"""
FastAPI dependency injection providers.
Use Depends(get_fetch_service), etc. in route handlers.
"""

from typing import Dict, Optional

from fastapi import Depends

from app import config
from app.adapters.edamam import EdamamAdapter
from app.adapters.spoonacular import SpoonacularAdapter
from app.adapters.themealdb import TheMealDBAdapter
from app.core.abstractions import CacheBackend, RecipeRepository, RecipeSourceAdapter
from app.models import RecipeSource
from app.services.cache import create_cache_backend
from app.services.fetcher import RecipeFetchService
from app.services.storage import SQLiteRecipeRepository

# --- Singletons (lazy-initialized) ---

_recipe_repository: Optional[SQLiteRecipeRepository] = None
_cache_backend: Optional[CacheBackend] = None
_adapters: Optional[Dict[RecipeSource, RecipeSourceAdapter]] = None


def get_recipe_repository() -> RecipeRepository:
    """Provide RecipeRepository. Used as Depends(get_recipe_repository)."""
    global _recipe_repository
    if _recipe_repository is None:
        _recipe_repository = SQLiteRecipeRepository(config.recipes_db_path())
    return _recipe_repository


def get_cache_backend() -> CacheBackend:
    """Provide CacheBackend: Redis when reachable, otherwise in-memory."""
    global _cache_backend
    if _cache_backend is None:
        _cache_backend = create_cache_backend(config.redis_url())
    return _cache_backend


def get_adapters() -> Dict[RecipeSource, RecipeSourceAdapter]:
    """Provide the upstream adapter for each source tag."""
    global _adapters
    if _adapters is None:
        _adapters = {
            RecipeSource.PREMIUM: SpoonacularAdapter(),
            RecipeSource.NUTRITION: EdamamAdapter(),
            RecipeSource.FREE: TheMealDBAdapter(),
        }
    return _adapters


def get_fetch_service(
    adapters: Dict[RecipeSource, RecipeSourceAdapter] = Depends(get_adapters),
    cache: CacheBackend = Depends(get_cache_backend),
    repository: RecipeRepository = Depends(get_recipe_repository),
) -> RecipeFetchService:
    """Provide RecipeFetchService. Override the providers above to swap components."""
    return RecipeFetchService(adapters=adapters, cache=cache, repository=repository)
