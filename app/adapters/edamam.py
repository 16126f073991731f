"""
Edamam recipe search adapter (the nutrition source).
Edamam's search tier carries no instructions or cooking time.
"""

import logging
from typing import Any, Optional

import httpx

from app import config
from app.adapters.base import build_recipe, first_candidate, get_json, optional_int
from app.core.errors import ConfigurationError, NotFoundError, UpstreamError
from app.models import Ingredient, NormalizedRecipe, RecipeSource

logger = logging.getLogger(__name__)

BASE_URL = "https://api.edamam.com"
LABEL = "Edamam"


def _external_id(uri: str) -> str:
    """Edamam URIs look like http://www.edamam.com/ontologies/edamam.owl#recipe_<id>."""
    _, sep, tail = uri.partition("_")
    return tail if sep and tail else uri


def _build_ingredients(recipe: dict[str, Any]) -> list[Ingredient]:
    ingredients: list[Ingredient] = []
    for ing in recipe.get("ingredients") or []:
        if not isinstance(ing, dict):
            continue
        name = ing.get("food") or ing.get("text")
        if not name:
            continue
        ingredients.append(
            Ingredient(
                name=str(name),
                amount=ing.get("quantity") or 1,
                unit=ing.get("measure") or "",
                original_string=ing.get("text"),
            )
        )
    return ingredients


def transform_hit_to_recipe(recipe: dict[str, Any]) -> NormalizedRecipe:
    """Transform an Edamam hit's recipe object to a NormalizedRecipe."""
    return build_recipe(
        {
            "external_id": _external_id(str(recipe.get("uri") or "")),
            "source_name": RecipeSource.NUTRITION,
            "title": str(recipe.get("label") or "").strip(),
            "image_url": recipe.get("image") or None,
            "ready_in_minutes": None,
            "servings": optional_int(recipe.get("yield"), 1),
            "ingredients": _build_ingredients(recipe),
            "instructions": [],
            "nutrition": recipe.get("totalNutrients") or None,
        },
        LABEL,
    )


class EdamamAdapter:
    """Adapter for the Edamam recipe search endpoint."""

    def __init__(self, base_url: str = BASE_URL, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_recipe(self, dish_name: str) -> NormalizedRecipe:
        app_id, app_key = config.edamam_credentials()
        if not app_id or not app_key:
            raise ConfigurationError("Edamam API credentials not configured")

        timeout = self.timeout if self.timeout is not None else config.upstream_timeout()
        with httpx.Client(timeout=timeout) as client:
            data = get_json(
                client,
                f"{self.base_url}/search",
                {"q": dish_name, "app_id": app_id, "app_key": app_key, "from": 0, "to": 1},
                source=RecipeSource.NUTRITION.value,
                operation="search",
                label=LABEL,
            )

        hit = first_candidate(data, "hits")
        if hit is None:
            raise NotFoundError("No recipes found")
        recipe = hit.get("recipe") if isinstance(hit, dict) else None
        if not isinstance(recipe, dict):
            raise UpstreamError(f"{LABEL} hit has no recipe")
        logger.debug("Edamam matched %s for %r", recipe.get("uri"), dish_name)
        return transform_hit_to_recipe(recipe)
