import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool

from app.core.abstractions import RecipeRepository
from app.core.dependencies import get_fetch_service, get_recipe_repository
from app.core.errors import ValidationError
from app.models import FetchResponse, RecipeSource, StoredRecipe
from app.services.fetcher import RecipeFetchService, resolve_source
from app.validation import parse_fetch_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _envelope_response(envelope: FetchResponse) -> JSONResponse:
    """Failures all map to one generic 500; the envelope carries the detail."""
    status_code = 200 if envelope.success else 500
    return JSONResponse(content=envelope.to_payload(), status_code=status_code)


def _stored_to_response(recipe: StoredRecipe) -> dict[str, Any]:
    return recipe.model_dump(mode="json", by_alias=True)


def _source_param(source: Optional[str]) -> Optional[RecipeSource]:
    if source is None:
        return None
    try:
        return resolve_source(source)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/fetch-recipe")
async def fetch_recipe(
    request: Request,
    background_tasks: BackgroundTasks,
    service: RecipeFetchService = Depends(get_fetch_service),
):
    """Look up one recipe by dish name from the requested upstream source."""
    try:
        payload = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return _envelope_response(
            FetchResponse(success=False, error=f"Invalid JSON body: {e}")
        )

    try:
        fetch_request = parse_fetch_request(payload)
    except ValidationError as e:
        return _envelope_response(FetchResponse(success=False, error=str(e)))

    try:
        envelope = await run_in_threadpool(
            service.handle,
            fetch_request.dish_name,
            fetch_request.api_source,
            schedule=background_tasks.add_task,
        )
    except Exception as e:
        logger.exception("Unexpected error fetching recipe")
        envelope = FetchResponse(success=False, error=str(e) or "Internal error")
    return _envelope_response(envelope)


@router.get("/recipes")
def list_recipes(
    source: Optional[str] = None,
    search: Optional[str] = None,
    repository: RecipeRepository = Depends(get_recipe_repository),
):
    """List stored recipes, optionally filtered by source and title."""
    recipes = repository.list_recipes(source=_source_param(source), search=search)
    return {"recipes": [_stored_to_response(r) for r in recipes]}


@router.get("/recipes/export")
def export_recipes(
    repository: RecipeRepository = Depends(get_recipe_repository),
):
    """Export stored recipes as a JSON array of normalized recipes"""
    recipes = repository.list_recipes()
    content = [
        r.model_dump(
            mode="json", by_alias=True, exclude={"id", "created_at", "updated_at"}
        )
        for r in recipes
    ]
    return JSONResponse(content=content)


@router.get("/recipes/{source}/{external_id}")
def get_recipe(
    source: str,
    external_id: str,
    repository: RecipeRepository = Depends(get_recipe_repository),
):
    """Get a stored recipe by source tag and upstream id."""
    recipe = repository.get_recipe(external_id, _source_param(source))
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return _stored_to_response(recipe)
