"""Pydantic schemas for the RecipeBox API."""

from typing import Optional

from pydantic import BaseModel, Field

from .parsing.parser import RecipeData


class RecipeOut(BaseModel):
    title: str
    description: Optional[str] = None
    ingredients: list[str] = []
    instructions: list[str] = []
    images: list[str] = []
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    servings: Optional[str] = None
    source_url: str
    tags: list[str] = []

    @classmethod
    def from_data(cls, recipe: RecipeData) -> "RecipeOut":
        return cls(
            title=recipe.title,
            description=recipe.description,
            ingredients=recipe.ingredients,
            instructions=recipe.instructions,
            # Undelivered image bytes have no URL to show
            images=[i for i in recipe.images if isinstance(i, str)],
            prep_time=recipe.prep_time,
            cook_time=recipe.cook_time,
            servings=recipe.servings,
            source_url=recipe.source_url,
            tags=recipe.tags or [],
        )


class StoredRecipeOut(BaseModel):
    id: str
    recipe: RecipeOut


class ScaledRecipeOut(StoredRecipeOut):
    base_servings: float
    servings: float


class ParseRequest(BaseModel):
    url: str = Field(..., max_length=2048)


class TagsPatch(BaseModel):
    tags: list[str]


class ExtractionErrorOut(BaseModel):
    detail: str
    code: str
