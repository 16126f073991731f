"""
TheMealDB API adapter (the free source).
Transforms a TheMealDB meal into the internal NormalizedRecipe schema.
"""

import logging
from typing import Any, Optional

import httpx

from app import config
from app.adapters.base import build_recipe, first_candidate, get_json
from app.core.errors import NotFoundError, UpstreamError
from app.models import (
    MAX_INGREDIENT_SLOTS,
    Ingredient,
    InstructionStep,
    NormalizedRecipe,
    RecipeSource,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://www.themealdb.com/api/json/v1/1"
LABEL = "TheMealDB"


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _build_ingredients(meal: dict[str, Any]) -> list[Ingredient]:
    """Build ingredients from strIngredient1-20 and strMeasure1-20, skipping blank slots."""
    ingredients: list[Ingredient] = []
    # Slots can have gaps, so every index is scanned
    for i in range(1, MAX_INGREDIENT_SLOTS + 1):
        name = _clean(meal.get(f"strIngredient{i}"))
        if not name:
            continue
        measure = _clean(meal.get(f"strMeasure{i}"))
        ingredients.append(
            Ingredient(
                name=name,
                amount=measure,
                unit="",
                original_string=f"{measure} {name}".strip(),
            )
        )
    return ingredients


def _build_instructions(meal: dict[str, Any]) -> list[InstructionStep]:
    """Wrap strInstructions as a single step numbered 1."""
    raw = meal.get("strInstructions")
    if not raw or not str(raw).strip():
        return []
    return [InstructionStep(number=1, text=str(raw))]


def transform_meal_to_recipe(meal: dict[str, Any]) -> NormalizedRecipe:
    """Transform a TheMealDB meal object to a NormalizedRecipe."""
    return build_recipe(
        {
            "external_id": _clean(meal.get("idMeal")),
            "source_name": RecipeSource.FREE,
            "title": _clean(meal.get("strMeal")),
            "image_url": meal.get("strMealThumb") or None,
            "ready_in_minutes": None,
            "servings": None,
            "ingredients": _build_ingredients(meal),
            "instructions": _build_instructions(meal),
            "nutrition": None,
        },
        LABEL,
    )


class TheMealDBAdapter:
    """Adapter for TheMealDB search API. Needs no credentials."""

    def __init__(self, base_url: str = BASE_URL, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_recipe(self, dish_name: str) -> NormalizedRecipe:
        timeout = self.timeout if self.timeout is not None else config.upstream_timeout()
        with httpx.Client(timeout=timeout) as client:
            data = get_json(
                client,
                f"{self.base_url}/search.php",
                {"s": dish_name},
                source=RecipeSource.FREE.value,
                operation="search",
                label=LABEL,
            )

        meal = first_candidate(data, "meals")
        if meal is None:
            raise NotFoundError("No recipes found")
        if not isinstance(meal, dict):
            raise UpstreamError(f"{LABEL} returned an unexpected meal record")
        logger.debug("TheMealDB matched meal %s for %r", meal.get("idMeal"), dish_name)
        return transform_meal_to_recipe(meal)
