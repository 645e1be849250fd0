"""Optional LLM pass that repairs segmentation mistakes in an extracted recipe."""

import json
import logging
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from ..core.ai_client import AIClient
from ..parsing.parser import RecipeData

logger = logging.getLogger("recipebox.ai")

SYSTEM_INSTRUCTION = (
    "You clean up recipes that were extracted automatically from web pages and "
    "social media captions. Fix lines that were put in the wrong section, split "
    "merged steps, drop promotional or unrelated text. Never invent ingredients, "
    "quantities or steps that are not present in the input. Keep the original language."
)


class RecipeCleanupDraft(BaseModel):
    title: str
    description: Optional[str] = None
    ingredients: List[str] = []
    instructions: List[str] = []
    servings: Optional[str] = None


def build_prompt(recipe: RecipeData) -> str:
    payload = recipe.model_dump(include={"title", "description", "ingredients", "instructions", "servings"})
    return "Reformat this recipe:\n" + json.dumps(payload, ensure_ascii=False, indent=2)


class RecipeCleanup:
    def __init__(self, ai: AIClient):
        self.ai = ai

    async def reformat(self, recipe: RecipeData) -> RecipeData:
        if not self.ai.is_available():
            return recipe

        try:
            draft = await self.ai.generate_structured(
                build_prompt(recipe),
                RecipeCleanupDraft,
                system_instruction=SYSTEM_INSTRUCTION,
            )
        except Exception as e:
            logger.warning("Recipe cleanup failed: %s", e)
            return recipe

        if draft is None or not draft.title.strip():
            logger.warning("Recipe cleanup returned nothing usable, keeping original")
            return recipe

        try:
            cleaned = RecipeData(
                title=draft.title,
                description=draft.description,
                ingredients=draft.ingredients,
                instructions=draft.instructions,
                servings=draft.servings or recipe.servings,
                images=recipe.images,
                prep_time=recipe.prep_time,
                cook_time=recipe.cook_time,
                source_url=recipe.source_url,
                tags=recipe.tags,
            )
        except ValidationError as e:
            logger.warning("Recipe cleanup produced an invalid recipe: %s", e)
            return recipe

        logger.info(
            "Recipe cleanup applied (%d ingredients, %d instructions)",
            len(cleaned.ingredients),
            len(cleaned.instructions),
        )
        return cleaned
