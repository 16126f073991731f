"""
Test fixtures for recipe fetch tests.
Uses FastAPI dependency overrides for testable, isolated components.
"""

import os
from unittest.mock import MagicMock

import pytest

# Disable Redis cache during tests (no Redis required)
os.environ["REDIS_URL"] = ""

from fastapi.testclient import TestClient

from app.core.dependencies import (
    get_adapters,
    get_cache_backend,
    get_recipe_repository,
)
from app.main import app
from app.models import Ingredient, InstructionStep, NormalizedRecipe, RecipeSource
from app.services.cache import InMemoryCacheBackend
from app.services.storage import SQLiteRecipeRepository
from helpers import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Fresh in-memory cache on a fake clock."""
    return InMemoryCacheBackend(clock=clock)


@pytest.fixture
def repository():
    """Fresh in-memory SQLite repository for each test."""
    return SQLiteRecipeRepository()


@pytest.fixture
def sample_recipe():
    return NormalizedRecipe(
        external_id="52795",
        source_name=RecipeSource.FREE,
        title="Chicken Handi",
        image_url="https://www.themealdb.com/images/media/meals/wyxwsp1486979827.jpg",
        ingredients=[
            Ingredient(
                name="Chicken",
                amount="1.2 kg",
                unit="",
                original_string="1.2 kg Chicken",
            ),
            Ingredient(name="Onion", amount="5 thinly sliced", unit=""),
        ],
        instructions=[InstructionStep(number=1, text="Take a large pot.")],
    )


@pytest.fixture
def mock_adapters(sample_recipe):
    """One mock adapter per source. Free returns sample_recipe by default."""
    adapters = {source: MagicMock() for source in RecipeSource}
    adapters[RecipeSource.FREE].fetch_recipe.return_value = sample_recipe
    return adapters


@pytest.fixture
def client(cache, repository, mock_adapters):
    """Test client with dependency overrides for adapters, cache and repository."""
    app.dependency_overrides[get_adapters] = lambda: mock_adapters
    app.dependency_overrides[get_cache_backend] = lambda: cache
    app.dependency_overrides[get_recipe_repository] = lambda: repository

    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
