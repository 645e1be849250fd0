from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..models import Recipe, RecipeIngredient, RecipeInstruction
from ..parsing.parser import RecipeData

logger = logging.getLogger("recipebox.recipes")


def clean_tags(tags: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.add(tag)
            out.append(tag)
    return out


def recipe_to_data(row: Recipe) -> RecipeData:
    return RecipeData(
        title=row.title,
        description=row.description,
        ingredients=[i.name for i in row.ingredients],
        instructions=[s.content for s in row.instructions],
        images=[row.image_url] if row.image_url else [],
        prep_time=row.prep_time,
        cook_time=row.cook_time,
        servings=row.servings,
        source_url=row.source_url,
        tags=list(row.tags or []),
    )


def _first_image_url(recipe: RecipeData) -> Optional[str]:
    # Raw image bytes are uploaded before persistence; anything left is dropped
    for image in recipe.images:
        if isinstance(image, str):
            return image
    return None


class RecipeRepository:
    """Recipe storage keyed on source URL."""

    def __init__(self, session: Session):
        self.session = session

    def _query(self):
        return select(Recipe).options(
            selectinload(Recipe.ingredients), selectinload(Recipe.instructions)
        )

    def _row_by_source_url(self, url: str) -> Optional[Recipe]:
        return self.session.execute(
            self._query().where(Recipe.source_url == url)
        ).scalar_one_or_none()

    def _row(self, recipe_id: str) -> Optional[Recipe]:
        return self.session.execute(
            self._query().where(Recipe.id == recipe_id)
        ).scalar_one_or_none()

    def find_by_source_url(self, url: str) -> Optional[RecipeData]:
        row = self._row_by_source_url(url)
        return recipe_to_data(row) if row else None

    def save(self, recipe: RecipeData, raw_caption: Optional[str] = None) -> str:
        """Insert ``recipe`` unless its source URL is already stored; return the row id."""
        existing = self._row_by_source_url(recipe.source_url)
        if existing is not None:
            logger.info("Recipe for %s already stored as %s", recipe.source_url, existing.id)
            return existing.id

        row = Recipe(
            title=recipe.title,
            description=recipe.description,
            source_url=recipe.source_url,
            image_url=_first_image_url(recipe),
            servings=recipe.servings,
            prep_time=recipe.prep_time,
            cook_time=recipe.cook_time,
            raw_caption=raw_caption,
            tags=clean_tags(recipe.tags or []),
        )
        row.ingredients = [
            RecipeIngredient(name=name, order_index=i) for i, name in enumerate(recipe.ingredients)
        ]
        row.instructions = [
            RecipeInstruction(step_number=i + 1, content=content)
            for i, content in enumerate(recipe.instructions)
        ]
        self.session.add(row)
        try:
            self.session.commit()
        except IntegrityError:
            # A concurrent request stored the same URL first
            self.session.rollback()
            existing = self._row_by_source_url(recipe.source_url)
            if existing is None:
                raise
            return existing.id

        logger.info("Stored recipe %s for %s", row.id, recipe.source_url)
        return row.id

    def get(self, recipe_id: str) -> Optional[tuple[str, RecipeData]]:
        row = self._row(recipe_id)
        if row is None:
            return None
        return row.id, recipe_to_data(row)

    def list(self, tag: Optional[str] = None) -> list[tuple[str, RecipeData]]:
        rows = self.session.execute(
            self._query().order_by(desc(Recipe.created_at))
        ).scalars().all()
        if tag:
            tag = tag.strip()
            rows = [r for r in rows if tag in (r.tags or [])]
        return [(r.id, recipe_to_data(r)) for r in rows]

    def update_tags(self, recipe_id: str, tags: list[str]) -> bool:
        row = self.session.get(Recipe, recipe_id)
        if row is None:
            return False
        row.tags = clean_tags(tags)
        self.session.commit()
        return True
