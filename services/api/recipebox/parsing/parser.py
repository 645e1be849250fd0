from abc import ABC, abstractmethod
from typing import Optional, List, Union
from pydantic import BaseModel, field_validator

INSTAGRAM_PLACEHOLDER_TITLE = "Instagram Recipe"


class RecipeData(BaseModel):
    """Canonical extraction output shared by every tier of the pipeline."""

    title: str
    description: Optional[str] = None
    ingredients: List[str] = []
    instructions: List[str] = []
    images: List[Union[str, bytes]] = []
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    servings: Optional[str] = None
    source_url: str
    tags: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("ingredients", "instructions")
    @classmethod
    def _drop_blank_items(cls, v: List[str]) -> List[str]:
        return [item for item in v if item.strip()]

    @field_validator("description")
    @classmethod
    def _blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v if v and v.strip() else None


class ScoredLine(BaseModel):
    text: str
    ingredient_score: float
    instruction_score: float


class RecipeParser(ABC):
    @abstractmethod
    def parse(self, text: str, source_url: str) -> RecipeData:
        """Parse raw text into a RecipeData record."""
        pass
