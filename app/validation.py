"""
Request and recipe validation utilities.

Used by the fetch endpoint and the validate_recipes CLI script.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError
from app.models import FetchRequest, NormalizedRecipe


def _format_errors(e: PydanticValidationError) -> list[dict]:
    return [
        {
            "loc": ("body",) + tuple(err["loc"]),
            "msg": err["msg"],
            "type": err.get("type", "value_error"),
        }
        for err in e.errors()
    ]


def parse_fetch_request(payload: Any) -> FetchRequest:
    """
    Parse a decoded JSON body into a FetchRequest.

    Raises:
        ValidationError: body is not an object or a field has the wrong type.
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            f"Request body must be an object, got {type(payload).__name__}"
        )
    try:
        return FetchRequest.model_validate(payload)
    except PydanticValidationError as e:
        first = _format_errors(e)[0]
        field = ".".join(str(part) for part in first["loc"][1:])
        raise ValidationError(f"Invalid request field {field}: {first['msg']}") from e


def validate_recipe(recipe_dict: Any) -> tuple[NormalizedRecipe | None, list[dict]]:
    """
    Validate a single normalized recipe dict.

    Returns:
        Tuple of (NormalizedRecipe instance or None, list of error dicts).
    """
    if not isinstance(recipe_dict, dict):
        return None, [
            {
                "loc": ("body",),
                "msg": f"Each item must be an object, got {type(recipe_dict).__name__}",
                "type": "type_error",
            }
        ]

    try:
        return NormalizedRecipe.model_validate(recipe_dict), []
    except PydanticValidationError as e:
        return None, _format_errors(e)


def check_instruction_numbering(recipe: NormalizedRecipe) -> list[str]:
    """Instruction steps must be numbered 1..n in order, with no gaps or repeats."""
    numbers = [step.number for step in recipe.instructions]
    if numbers != list(range(1, len(numbers) + 1)):
        return [f"instruction numbers {numbers} are not contiguous from 1"]
    return []
