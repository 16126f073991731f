"""
Tests for TheMealDB adapter: transformation, error handling, and integration.
"""
from unittest.mock import patch, MagicMock

import httpx
import pytest

from app.adapters.themealdb import TheMealDBAdapter, transform_meal_to_recipe
from app.core.errors import NotFoundError, UpstreamError
from app.models import RecipeSource
from helpers import make_http_response


# Sample TheMealDB response (from real API)
SAMPLE_MEAL = {
    "idMeal": "52772",
    "strMeal": "Teriyaki Chicken Casserole",
    "strCategory": "Chicken",
    "strArea": "Japanese",
    "strInstructions": "Preheat oven to 350° F.\r\nSpray a 9x13-inch pan.\r\nCombine ingredients.",
    "strMealThumb": "https://www.themealdb.com/images/media/meals/wvpsxx1468256321.jpg",
    "strIngredient1": "soy sauce",
    "strIngredient2": "chicken breasts",
    "strMeasure1": "3/4 cup",
    "strMeasure2": "2",
}


def test_transform_meal_to_recipe():
    """Transformation correctly maps TheMealDB format to internal schema"""
    recipe = transform_meal_to_recipe(SAMPLE_MEAL)

    assert recipe.external_id == "52772"
    assert recipe.source_name == RecipeSource.FREE
    assert recipe.title == "Teriyaki Chicken Casserole"
    assert recipe.image_url == SAMPLE_MEAL["strMealThumb"]
    assert recipe.ready_in_minutes is None
    assert recipe.servings is None
    assert recipe.nutrition is None

    assert [i.name for i in recipe.ingredients] == ["soy sauce", "chicken breasts"]
    assert recipe.ingredients[0].amount == "3/4 cup"
    assert recipe.ingredients[0].original_string == "3/4 cup soy sauce"
    assert recipe.ingredients[1].amount == "2"

    # Whole instruction block becomes one step
    assert len(recipe.instructions) == 1
    assert recipe.instructions[0].number == 1
    assert recipe.instructions[0].text == SAMPLE_MEAL["strInstructions"]


def test_single_ingredient_scenario():
    """Only slot 1 filled yields exactly one ingredient with empty unit"""
    meal = {
        "idMeal": "1",
        "strMeal": "Chicken Curry",
        "strIngredient1": "Chicken",
        "strMeasure1": "500g",
    }
    for i in range(2, 21):
        meal[f"strIngredient{i}"] = ""
        meal[f"strMeasure{i}"] = " "

    recipe = transform_meal_to_recipe(meal)

    assert [i.model_dump(by_alias=True) for i in recipe.ingredients] == [
        {"name": "Chicken", "amount": "500g", "unit": "", "originalString": "500g Chicken"}
    ]


def test_ingredient_gaps_are_skipped_not_terminating():
    """Slots 1 and 5 filled, 2-4 blank or missing: exactly two ingredients"""
    meal = {
        "idMeal": "2",
        "strMeal": "Gappy",
        "strIngredient1": "Rice",
        "strIngredient2": "   ",
        "strIngredient3": None,
        "strIngredient5": "Salt",
        "strMeasure5": "pinch",
    }

    recipe = transform_meal_to_recipe(meal)

    assert [i.name for i in recipe.ingredients] == ["Rice", "Salt"]
    assert recipe.ingredients[0].amount == ""
    assert recipe.ingredients[0].original_string == "Rice"
    assert recipe.ingredients[1].original_string == "pinch Salt"


def test_ingredient_at_slot_20_is_included():
    meal = {"idMeal": "3", "strMeal": "Late", "strIngredient20": "Parsley"}
    recipe = transform_meal_to_recipe(meal)
    assert [i.name for i in recipe.ingredients] == ["Parsley"]


def test_transform_meal_minimal():
    """Transformation handles minimal meal data"""
    recipe = transform_meal_to_recipe({"idMeal": "123", "strMeal": "Simple Meal"})

    assert recipe.external_id == "123"
    assert recipe.ingredients == []
    assert recipe.instructions == []


def test_blank_instructions_yield_no_steps():
    recipe = transform_meal_to_recipe(
        {"idMeal": "9", "strMeal": "Quiet", "strInstructions": "  \r\n "}
    )
    assert recipe.instructions == []


def test_transform_meal_without_title_is_upstream_error():
    with pytest.raises(UpstreamError):
        transform_meal_to_recipe({"idMeal": "5", "strMeal": ""})


def test_adapter_fetch_uses_first_meal():
    """Adapter picks the first meal and sends the dish name as the s parameter"""
    adapter = TheMealDBAdapter()
    second = {**SAMPLE_MEAL, "idMeal": "99999", "strMeal": "Other"}

    with patch("httpx.Client") as mock_client_cls:
        mock_client = MagicMock()
        mock_client_cls.return_value.__enter__.return_value = mock_client
        mock_client.get.return_value = make_http_response({"meals": [SAMPLE_MEAL, second]})

        recipe = adapter.fetch_recipe("Teriyaki Chicken")

    assert recipe.external_id == "52772"
    url = mock_client.get.call_args.args[0]
    assert url.endswith("/search.php")
    assert mock_client.get.call_args.kwargs["params"] == {"s": "Teriyaki Chicken"}


def test_adapter_null_meals_is_not_found():
    """Adapter raises NotFoundError on meals: null"""
    adapter = TheMealDBAdapter()

    with patch("httpx.Client") as mock_client_cls:
        mock_client = MagicMock()
        mock_client_cls.return_value.__enter__.return_value = mock_client
        mock_client.get.return_value = make_http_response({"meals": None})

        with pytest.raises(NotFoundError, match="No recipes found"):
            adapter.fetch_recipe("xyz123nonexistent")


def test_adapter_timeout_is_upstream_error():
    adapter = TheMealDBAdapter()

    with patch("httpx.Client") as mock_client_cls:
        mock_client = MagicMock()
        mock_client_cls.return_value.__enter__.return_value = mock_client
        mock_client.get.side_effect = httpx.TimeoutException("Timed out")

        with pytest.raises(UpstreamError):
            adapter.fetch_recipe("chicken")


def test_adapter_connect_error_is_upstream_error():
    adapter = TheMealDBAdapter()

    with patch("httpx.Client") as mock_client_cls:
        mock_client = MagicMock()
        mock_client_cls.return_value.__enter__.return_value = mock_client
        mock_client.get.side_effect = httpx.ConnectError("Cannot connect")

        with pytest.raises(UpstreamError, match="connect"):
            adapter.fetch_recipe("chicken")


def test_adapter_invalid_json_is_upstream_error():
    adapter = TheMealDBAdapter()

    with patch("httpx.Client") as mock_client_cls:
        mock_client = MagicMock()
        mock_client_cls.return_value.__enter__.return_value = mock_client
        response = make_http_response(None)
        response.json.side_effect = ValueError("Expecting value")
        mock_client.get.return_value = response

        with pytest.raises(UpstreamError, match="invalid response"):
            adapter.fetch_recipe("chicken")


@pytest.mark.integration
def test_adapter_fetch_real_api():
    """Integration test: real TheMealDB search returns a normalized recipe"""
    adapter = TheMealDBAdapter(timeout=15.0)
    recipe = adapter.fetch_recipe("Arrabiata")

    assert recipe.source_name == RecipeSource.FREE
    assert recipe.title
    assert len(recipe.ingredients) > 0
