from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from typing import Any, List, Literal, Optional, Union
from enum import Enum
import uuid

# Constants
MAX_INGREDIENT_SLOTS = 20


class RecipeSource(str, Enum):
    PREMIUM = "premium"
    NUTRITION = "nutrition"
    FREE = "free"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ingredient(CamelModel):
    name: str
    # Sources disagree: Spoonacular/Edamam send numbers, TheMealDB free text
    amount: Union[float, str] = ""
    unit: str = ""
    original_string: Optional[str] = None


class InstructionStep(CamelModel):
    number: int = Field(ge=1)
    text: str = Field(min_length=1)


class NormalizedRecipe(CamelModel):
    external_id: str
    source_name: RecipeSource
    title: str = Field(min_length=1)
    image_url: Optional[str] = None
    ready_in_minutes: Optional[int] = Field(default=None, ge=0)
    servings: Optional[int] = Field(default=None, ge=1)
    ingredients: List[Ingredient] = Field(default_factory=list)
    instructions: List[InstructionStep] = Field(default_factory=list)
    nutrition: Optional[Any] = None


class StoredRecipe(NormalizedRecipe):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CacheEntry(CamelModel):
    recipe: NormalizedRecipe
    expires_at: datetime


class FetchRequest(CamelModel):
    dish_name: Optional[str] = None
    api_source: str = RecipeSource.PREMIUM.value


class FetchResponse(CamelModel):
    success: bool
    data: Optional[NormalizedRecipe] = None
    error: Optional[str] = None
    source: Optional[Literal["cache", "api"]] = None

    def to_payload(self) -> dict:
        """Wire shape: {success, data, source} or {success, error}."""
        if not self.success:
            return {"success": False, "error": self.error or "Unknown error"}
        return {
            "success": True,
            "data": self.data.model_dump(mode="json", by_alias=True) if self.data else None,
            "source": self.source,
        }
