"""Tier 2: structural guesswork for pages without structured data."""

import logging
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..core.text import collapse_whitespace
from .jsonld import meta_content
from .parser import RecipeData

logger = logging.getLogger("recipebox.extract")

NOISE_SELECTOR = "script, style, nav, footer, noscript, iframe"

INGREDIENT_CONTAINERS = (
    '[class*="ingredient" i], [id*="ingredient" i], [aria-label*="ingredient" i]'
)
INSTRUCTION_CONTAINERS = (
    '[class*="instruction" i], [id*="instruction" i], '
    '[class*="direction" i], [id*="direction" i], '
    '[class*="step" i], [id*="step" i]'
)


def strip_noise(soup: BeautifulSoup) -> BeautifulSoup:
    for el in soup.select(NOISE_SELECTOR):
        el.decompose()
    return soup


def _collect(soup: BeautifulSoup, containers: str, items: str) -> list[str]:
    # Nested matches are collected twice; that's tolerated.
    found = []
    for container in soup.select(containers):
        for el in container.select(items):
            text = collapse_whitespace(el.get_text())
            if text:
                found.append(text)
    return found


def extract_recipe_heuristic(soup: BeautifulSoup, url: str) -> RecipeData:
    """
    Guess a recipe from markup conventions. Expects noise nodes to be
    stripped already. Empty ingredient/instruction lists are a valid result.
    """
    h1 = soup.select_one("h1")
    h1_text = h1.get_text().strip() if h1 else ""
    title = (
        meta_content(soup, 'meta[property="og:title"]')
        or h1_text
        or urlparse(url).hostname
        or url
    )

    description = (
        meta_content(soup, 'meta[property="og:description"]')
        or meta_content(soup, 'meta[name="description"]')
    )

    og_image = meta_content(soup, 'meta[property="og:image"]')

    ingredients = _collect(soup, INGREDIENT_CONTAINERS, "li")
    instructions = _collect(soup, INSTRUCTION_CONTAINERS, "li, p")

    logger.debug(
        "Heuristic found %d ingredients, %d instructions", len(ingredients), len(instructions)
    )

    return RecipeData(
        title=title,
        description=description,
        ingredients=ingredients,
        instructions=instructions,
        images=[og_image] if og_image else [],
        source_url=url,
    )
