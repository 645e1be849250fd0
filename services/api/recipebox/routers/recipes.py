"""Recipes API router.

Endpoints:
- POST /api/recipes/parse - Extract a recipe from a URL and store it
- GET /api/recipes - List stored recipes, optionally by tag
- GET /api/recipes/{id} - Get one recipe
- GET /api/recipes/{id}/scaled - Get a recipe with ingredients scaled to N servings
- PATCH /api/recipes/{id}/tags - Replace a recipe's tags
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from ..deps import get_extractor, get_repository
from ..parsing.scaler import parse_servings_number, scale_ingredients
from ..schemas import (
    ExtractionErrorOut,
    ParseRequest,
    RecipeOut,
    ScaledRecipeOut,
    StoredRecipeOut,
    TagsPatch,
)
from ..services.extraction import RecipeExtractor
from ..services.repository import RecipeRepository

router = APIRouter()
logger = logging.getLogger("recipebox.recipes")

DEFAULT_BASE_SERVINGS = 1.0


def _stored_out(recipe_id: str, recipe) -> StoredRecipeOut:
    return StoredRecipeOut(id=recipe_id, recipe=RecipeOut.from_data(recipe))


@router.post(
    "/recipes/parse",
    response_model=StoredRecipeOut,
    status_code=201,
    responses={422: {"model": ExtractionErrorOut}},
)
async def parse_recipe(
    payload: ParseRequest,
    extractor: RecipeExtractor = Depends(get_extractor),
    repo: RecipeRepository = Depends(get_repository),
):
    result = await extractor.extract_recipe_result(payload.url)
    if not result.success:
        return JSONResponse(
            status_code=422,
            content={"detail": result.error, "code": result.error_code},
        )

    recipe = result.recipe
    raw_caption = result.trace.raw_caption or recipe.description
    recipe_id = repo.save(recipe, raw_caption=raw_caption)
    stored = repo.get(recipe_id)
    if stored is None:
        raise HTTPException(status_code=500, detail="Recipe could not be stored")
    return _stored_out(*stored)


@router.get("/recipes", response_model=list[StoredRecipeOut])
def list_recipes(
    tag: Optional[str] = Query(None),
    repo: RecipeRepository = Depends(get_repository),
):
    return [_stored_out(recipe_id, recipe) for recipe_id, recipe in repo.list(tag=tag)]


@router.get("/recipes/{recipe_id}", response_model=StoredRecipeOut)
def get_recipe(recipe_id: str, repo: RecipeRepository = Depends(get_repository)):
    stored = repo.get(recipe_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return _stored_out(*stored)


@router.get("/recipes/{recipe_id}/scaled", response_model=ScaledRecipeOut)
def get_scaled_recipe(
    recipe_id: str,
    servings: float = Query(..., gt=0, allow_inf_nan=False),
    repo: RecipeRepository = Depends(get_repository),
):
    stored = repo.get(recipe_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    recipe_id, recipe = stored

    base = parse_servings_number(recipe.servings or "") or DEFAULT_BASE_SERVINGS
    scaled = recipe.model_copy(
        update={"ingredients": scale_ingredients(recipe.ingredients, base, servings)}
    )
    return ScaledRecipeOut(
        id=recipe_id,
        recipe=RecipeOut.from_data(scaled),
        base_servings=base,
        servings=servings,
    )


@router.patch("/recipes/{recipe_id}/tags", response_model=StoredRecipeOut)
def update_recipe_tags(
    recipe_id: str,
    payload: TagsPatch,
    repo: RecipeRepository = Depends(get_repository),
):
    if not repo.update_tags(recipe_id, payload.tags):
        raise HTTPException(status_code=404, detail="Recipe not found")
    logger.info("Updated tags for recipe %s", recipe_id)
    return _stored_out(*repo.get(recipe_id))
