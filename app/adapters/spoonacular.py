"""
Spoonacular API adapter (the premium source).

Two sequential calls: complexSearch picks the first candidate, then the
information endpoint supplies ingredients, instructions and nutrition.
"""

import logging
from typing import Any, Optional

import httpx

from app import config
from app.adapters.base import build_recipe, first_candidate, get_json, optional_int
from app.core.errors import ConfigurationError, NotFoundError, UpstreamError
from app.models import Ingredient, InstructionStep, NormalizedRecipe, RecipeSource

logger = logging.getLogger(__name__)

BASE_URL = "https://api.spoonacular.com"
LABEL = "Spoonacular"


def _build_ingredients(detail: dict[str, Any]) -> list[Ingredient]:
    ingredients: list[Ingredient] = []
    for ing in detail.get("extendedIngredients") or []:
        if not isinstance(ing, dict) or not ing.get("name"):
            continue
        amount = ing.get("amount")
        ingredients.append(
            Ingredient(
                name=str(ing["name"]),
                amount=amount if amount is not None else "",
                unit=ing.get("unit") or "",
                original_string=ing.get("original"),
            )
        )
    return ingredients


def _build_instructions(detail: dict[str, Any]) -> list[InstructionStep]:
    """Steps from the first analyzedInstructions block."""
    blocks = detail.get("analyzedInstructions") or []
    if not blocks or not isinstance(blocks[0], dict):
        return []
    steps: list[InstructionStep] = []
    for step in blocks[0].get("steps") or []:
        text = str(step.get("step") or "").strip() if isinstance(step, dict) else ""
        if not text:
            continue
        steps.append(InstructionStep(number=len(steps) + 1, text=text))
    return steps


def transform_detail_to_recipe(detail: dict[str, Any]) -> NormalizedRecipe:
    """Transform a Spoonacular recipe information object to a NormalizedRecipe."""
    recipe_id = detail.get("id")
    return build_recipe(
        {
            "external_id": str(recipe_id) if recipe_id is not None else "",
            "source_name": RecipeSource.PREMIUM,
            "title": str(detail.get("title") or "").strip(),
            "image_url": detail.get("image") or None,
            "ready_in_minutes": optional_int(detail.get("readyInMinutes"), 0),
            "servings": optional_int(detail.get("servings"), 1),
            "ingredients": _build_ingredients(detail),
            "instructions": _build_instructions(detail),
            "nutrition": detail.get("nutrition") or None,
        },
        LABEL,
    )


class SpoonacularAdapter:
    """Adapter for the Spoonacular search and information endpoints."""

    def __init__(self, base_url: str = BASE_URL, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_recipe(self, dish_name: str) -> NormalizedRecipe:
        api_key = config.spoonacular_api_key()
        if not api_key:
            raise ConfigurationError("Spoonacular API key not configured")

        timeout = self.timeout if self.timeout is not None else config.upstream_timeout()
        with httpx.Client(timeout=timeout) as client:
            search = get_json(
                client,
                f"{self.base_url}/recipes/complexSearch",
                {"apiKey": api_key, "query": dish_name, "number": 1},
                source=RecipeSource.PREMIUM.value,
                operation="search",
                label=LABEL,
            )
            candidate = first_candidate(search, "results")
            if candidate is None:
                raise NotFoundError("No recipes found")
            if not isinstance(candidate, dict) or candidate.get("id") is None:
                raise UpstreamError(f"{LABEL} search result has no recipe id")

            logger.debug("Spoonacular matched recipe %s for %r", candidate["id"], dish_name)
            detail = get_json(
                client,
                f"{self.base_url}/recipes/{candidate['id']}/information",
                {"apiKey": api_key, "includeNutrition": "true"},
                source=RecipeSource.PREMIUM.value,
                operation="detail",
                label=LABEL,
            )

        return transform_detail_to_recipe(detail)
