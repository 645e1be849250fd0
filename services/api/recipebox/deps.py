"""Process-wide collaborators and the FastAPI dependencies that expose them."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .core.ai_client import AIClient
from .db import Database, get_db
from .services.cleanup import RecipeCleanup
from .services.extraction import RecipeExtractor
from .services.fetcher import Fetcher
from .services.instagram import CaptionAcquirer, EmbedPageAcquirer
from .services.repository import RecipeRepository
from .settings import Settings
from .storage.s3_compat import S3CompatStore, store_from_settings


@dataclass
class Container:
    settings: Settings
    database: Database
    fetcher: Fetcher
    acquirer: CaptionAcquirer
    store: Optional[S3CompatStore]
    ai: AIClient
    extractor: RecipeExtractor


def build_container(
    settings: Settings,
    *,
    database: Optional[Database] = None,
    fetcher: Optional[Fetcher] = None,
    acquirer: Optional[CaptionAcquirer] = None,
    store: Optional[S3CompatStore] = None,
    ai: Optional[AIClient] = None,
) -> Container:
    """Wire every collaborator from ``settings``; tests pass their own pieces."""
    database = database or Database(settings.database_url)
    fetcher = fetcher or Fetcher.from_settings(settings)
    if acquirer is None:
        acquirer = EmbedPageAcquirer(
            Fetcher.from_settings(settings, timeout_seconds=settings.instagram_timeout_seconds)
        )
    store = store or store_from_settings(settings)
    ai = ai or AIClient.from_settings(settings)
    cleanup = RecipeCleanup(ai) if settings.ai_cleanup_enabled else None

    extractor = RecipeExtractor(fetcher, acquirer, store=store, cleanup=cleanup)
    return Container(
        settings=settings,
        database=database,
        fetcher=fetcher,
        acquirer=acquirer,
        store=store,
        ai=ai,
        extractor=extractor,
    )


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_extractor(container: Container = Depends(get_container)) -> RecipeExtractor:
    return container.extractor


def get_repository(db: Session = Depends(get_db)) -> RecipeRepository:
    return RecipeRepository(db)
