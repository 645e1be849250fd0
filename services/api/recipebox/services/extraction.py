"""Extraction orchestrator.

Turns a URL into a ``RecipeData``. Web pages go through the JSON-LD
extractor first and the DOM heuristics second; Instagram links go
through caption acquisition and the caption parser. The steps taken are
recorded on an ``ExtractionTrace`` so the tier that produced a recipe
can be checked after the fact.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..errors import ExtractionError, InvalidUrl
from ..parsing.caption_parser import CaptionParser
from ..parsing.heuristic import extract_recipe_heuristic, strip_noise
from ..parsing.jsonld import extract_recipe_from_jsonld
from ..parsing.parser import RecipeData
from ..storage.s3_compat import S3CompatStore
from .cleanup import RecipeCleanup
from .fetcher import Fetcher
from .instagram import CaptionAcquirer, InstagramPost, is_instagram_url, to_embed_url

logger = logging.getLogger("recipebox.extract")

ALLOWED_SCHEMES = ("http", "https")


class ExtractionState(str, Enum):
    START = "start"
    VALIDATE_URL = "validate_url"
    INSTAGRAM_BRANCH = "instagram_branch"
    FETCH_BRANCH = "fetch_branch"
    JSONLD_HIT = "jsonld_hit"
    HEURISTIC_FALLBACK = "heuristic_fallback"
    DONE = "done"
    FAILED = "failed"


S = ExtractionState

TRANSITIONS: dict[ExtractionState, frozenset[ExtractionState]] = {
    S.START: frozenset({S.VALIDATE_URL, S.FAILED}),
    S.VALIDATE_URL: frozenset({S.INSTAGRAM_BRANCH, S.FETCH_BRANCH, S.FAILED}),
    S.INSTAGRAM_BRANCH: frozenset({S.DONE, S.FAILED}),
    S.FETCH_BRANCH: frozenset({S.JSONLD_HIT, S.HEURISTIC_FALLBACK, S.FAILED}),
    S.JSONLD_HIT: frozenset({S.DONE, S.FAILED}),
    S.HEURISTIC_FALLBACK: frozenset({S.DONE, S.FAILED}),
    S.DONE: frozenset(),
    S.FAILED: frozenset(),
}


@dataclass
class ExtractionTrace:
    states: list[ExtractionState] = field(default_factory=lambda: [ExtractionState.START])
    raw_caption: Optional[str] = None

    @property
    def current(self) -> ExtractionState:
        return self.states[-1]

    def advance(self, state: ExtractionState) -> None:
        if state not in TRANSITIONS[self.current]:
            raise RuntimeError(f"Illegal extraction transition {self.current.value} -> {state.value}")
        self.states.append(state)

    def fail(self) -> None:
        if self.current is not ExtractionState.FAILED:
            self.advance(ExtractionState.FAILED)


@dataclass
class ParseResult:
    success: bool
    recipe: Optional[RecipeData] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    trace: ExtractionTrace = field(default_factory=ExtractionTrace)


def validate_url(url: str) -> str:
    url = (url or "").strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        raise InvalidUrl()
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.netloc:
        raise InvalidUrl()
    return url


class RecipeExtractor:
    def __init__(
        self,
        fetcher: Fetcher,
        acquirer: CaptionAcquirer,
        *,
        store: Optional[S3CompatStore] = None,
        cleanup: Optional[RecipeCleanup] = None,
        caption_parser: Optional[CaptionParser] = None,
    ):
        self.fetcher = fetcher
        self.acquirer = acquirer
        self.store = store
        self.cleanup = cleanup
        self.caption_parser = caption_parser or CaptionParser()

    async def extract(self, url: str, trace: Optional[ExtractionTrace] = None) -> RecipeData:
        """Run the pipeline, raising ``ExtractionError`` on failure."""
        trace = trace or ExtractionTrace()

        trace.advance(S.VALIDATE_URL)
        url = validate_url(url)

        if is_instagram_url(url):
            trace.advance(S.INSTAGRAM_BRANCH)
            recipe = await self._from_instagram(url, trace)
        else:
            trace.advance(S.FETCH_BRANCH)
            recipe = await self._from_page(url, trace)

        trace.advance(S.DONE)
        logger.info(
            "Extracted %s via %s: %d ingredients, %d instructions",
            url,
            trace.states[-2].value,
            len(recipe.ingredients),
            len(recipe.instructions),
        )

        if self.cleanup is not None:
            recipe = await self.cleanup.reformat(recipe)
        return recipe

    async def extract_recipe_result(self, url: str) -> ParseResult:
        trace = ExtractionTrace()
        try:
            recipe = await self.extract(url, trace)
        except ExtractionError as e:
            trace.fail()
            logger.info("Extraction failed for %s (%s): %s", url, e.code, e.message)
            return ParseResult(success=False, error=e.message, error_code=e.code, trace=trace)
        except Exception:
            trace.fail()
            logger.exception("Unexpected extraction failure for %s", url)
            err = ExtractionError()
            return ParseResult(success=False, error=err.message, error_code=err.code, trace=trace)
        return ParseResult(success=True, recipe=recipe, trace=trace)

    # --- Branches ---

    async def _from_page(self, url: str, trace: ExtractionTrace) -> RecipeData:
        page = await self.fetcher.fetch_text(url)
        soup = BeautifulSoup(page.text, "html.parser")

        recipe = extract_recipe_from_jsonld(soup)
        if recipe is not None:
            trace.advance(S.JSONLD_HIT)
            return recipe.model_copy(update={"source_url": url})

        trace.advance(S.HEURISTIC_FALLBACK)
        return extract_recipe_heuristic(strip_noise(soup), url)

    async def _from_instagram(self, url: str, trace: ExtractionTrace) -> RecipeData:
        embed_url = to_embed_url(url)
        if embed_url is None:
            raise InvalidUrl("Invalid Instagram URL. Expected a post or reel link.")

        post = await self.acquirer.acquire(embed_url)
        trace.raw_caption = post.caption

        recipe = self.caption_parser.parse(post.caption, url)
        images = await self._post_images(post)
        if images:
            recipe = recipe.model_copy(update={"images": images})
        return recipe

    async def _post_images(self, post: InstagramPost) -> list[str]:
        images: list[str] = []
        if post.image_url:
            images.append(post.image_url)
        if post.image_data:
            if self.store is None:
                logger.info("No object store configured, dropping captured image bytes")
            else:
                key = f"instagram/{uuid.uuid4()}.jpg"
                try:
                    result = await asyncio.to_thread(
                        self.store.put_bytes, key=key, content_type="image/jpeg", data=post.image_data
                    )
                    images.append(result.public_url)
                except Exception as e:
                    logger.warning("Image upload failed for %s: %s", key, e)
        return images
