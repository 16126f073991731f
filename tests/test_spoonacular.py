"""
Tests for the Spoonacular adapter: credentials, two-step lookup, mapping.
"""
from unittest.mock import patch, MagicMock

import httpx
import pytest

from app.adapters.spoonacular import SpoonacularAdapter, transform_detail_to_recipe
from app.core.errors import ConfigurationError, NotFoundError, UpstreamError
from app.models import RecipeSource
from helpers import make_http_response


SAMPLE_DETAIL = {
    "id": 716429,
    "title": "Pasta with Garlic, Scallions, Cauliflower & Breadcrumbs",
    "image": "https://img.spoonacular.com/recipes/716429-556x370.jpg",
    "readyInMinutes": 45,
    "servings": 2,
    "extendedIngredients": [
        {"name": "butter", "amount": 1.0, "unit": "tbsp", "original": "1 tbsp butter"},
        {"name": "cauliflower florets", "amount": 2, "unit": "cups", "original": "about 2 cups frozen cauliflower"},
    ],
    "analyzedInstructions": [
        {
            "name": "",
            "steps": [
                {"number": 1, "step": "Boil the pasta."},
                {"number": 2, "step": "Toast the breadcrumbs."},
            ],
        }
    ],
    "nutrition": {"nutrients": [{"name": "Calories", "amount": 543.36, "unit": "kcal"}]},
}


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("SPOONACULAR_API_KEY", "test-key")


def test_transform_detail_to_recipe():
    recipe = transform_detail_to_recipe(SAMPLE_DETAIL)

    assert recipe.external_id == "716429"
    assert recipe.source_name == RecipeSource.PREMIUM
    assert recipe.ready_in_minutes == 45
    assert recipe.servings == 2
    assert recipe.ingredients[0].name == "butter"
    assert recipe.ingredients[0].amount == 1.0
    assert recipe.ingredients[0].unit == "tbsp"
    assert recipe.ingredients[1].original_string == "about 2 cups frozen cauliflower"
    assert [(s.number, s.text) for s in recipe.instructions] == [
        (1, "Boil the pasta."),
        (2, "Toast the breadcrumbs."),
    ]
    # Nutrition passes through unmodified
    assert recipe.nutrition == SAMPLE_DETAIL["nutrition"]


def test_transform_detail_without_instructions():
    detail = {**SAMPLE_DETAIL, "analyzedInstructions": []}
    assert transform_detail_to_recipe(detail).instructions == []


def test_missing_api_key_is_configuration_error(monkeypatch):
    monkeypatch.delenv("SPOONACULAR_API_KEY", raising=False)
    adapter = SpoonacularAdapter()

    with patch("httpx.Client") as mock_client_cls:
        with pytest.raises(ConfigurationError):
            adapter.fetch_recipe("pasta")
        mock_client_cls.assert_not_called()


def test_fetch_searches_then_loads_first_result(api_key):
    adapter = SpoonacularAdapter()

    with patch("httpx.Client") as mock_client_cls:
        mock_client = MagicMock()
        mock_client_cls.return_value.__enter__.return_value = mock_client
        mock_client.get.side_effect = [
            make_http_response({"results": [{"id": 716429}, {"id": 1}]}),
            make_http_response(SAMPLE_DETAIL),
        ]

        recipe = adapter.fetch_recipe("pasta")

    assert recipe.external_id == "716429"
    search_call, detail_call = mock_client.get.call_args_list
    assert search_call.args[0].endswith("/recipes/complexSearch")
    assert search_call.kwargs["params"]["query"] == "pasta"
    assert search_call.kwargs["params"]["apiKey"] == "test-key"
    assert detail_call.args[0].endswith("/recipes/716429/information")
    assert detail_call.kwargs["params"]["includeNutrition"] == "true"


def test_empty_results_is_not_found(api_key):
    adapter = SpoonacularAdapter()

    with patch("httpx.Client") as mock_client_cls:
        mock_client = MagicMock()
        mock_client_cls.return_value.__enter__.return_value = mock_client
        mock_client.get.return_value = make_http_response({"results": []})

        with pytest.raises(NotFoundError):
            adapter.fetch_recipe("nothing")
        assert mock_client.get.call_count == 1


def test_http_status_error_is_upstream_error(api_key):
    adapter = SpoonacularAdapter()

    with patch("httpx.Client") as mock_client_cls:
        mock_client = MagicMock()
        mock_client_cls.return_value.__enter__.return_value = mock_client
        response = make_http_response({})
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Payment Required",
            request=MagicMock(),
            response=MagicMock(status_code=402),
        )
        mock_client.get.return_value = response

        with pytest.raises(UpstreamError, match="402"):
            adapter.fetch_recipe("pasta")
