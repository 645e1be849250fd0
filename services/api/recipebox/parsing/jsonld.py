"""Tier 1: recipe extraction from schema.org JSON-LD blocks.

Also hosts the generic JSON walk used to mine captions and descriptions
out of arbitrary structured data (page meta and inline scripts).
"""

import json
import logging
from typing import Any, Iterable, Optional

from bs4 import BeautifulSoup

from ..errors import MalformedStructuredData
from .durations import optional_duration
from .parser import RecipeData

logger = logging.getLogger("recipebox.extract")

JSONLD_SELECTOR = 'script[type="application/ld+json"]'
META_STRING_KEYS = ("description", "caption", "articleBody", "name")


def load_json_block(content: str) -> Any:
    try:
        return json.loads(content)
    except ValueError as e:
        raise MalformedStructuredData(f"Malformed JSON-LD block: {e}") from e


def iter_jsonld_blocks(soup: BeautifulSoup) -> Iterable[Any]:
    """Yield each parsed JSON-LD block in document order, skipping malformed ones."""
    for script in soup.select(JSONLD_SELECTOR):
        content = script.string or script.get_text()
        if not content or not content.strip():
            continue
        try:
            yield load_json_block(content)
        except MalformedStructuredData as e:
            logger.debug("Skipping JSON-LD block: %s", e.message)


def _candidates(parsed: Any) -> list:
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict) and parsed.get("@graph"):
        graph = parsed["@graph"]
        return graph if isinstance(graph, list) else [graph]
    return [parsed]


def _is_recipe(obj: dict) -> bool:
    type_ = obj.get("@type")
    return type_ == "Recipe" or (isinstance(type_, list) and "Recipe" in type_)


def normalize_instructions(raw: Any) -> list[str]:
    """
    Flatten recipeInstructions into plain step strings.

    HowToStep objects contribute their ``text`` (or ``name``); a
    HowToSection's ``itemListElement`` is normalized recursively and joined
    into a single step.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        return [raw]
    if not isinstance(raw, list):
        return []

    steps = []
    for item in raw:
        step = ""
        if isinstance(item, str):
            step = item.strip()
        elif isinstance(item, dict):
            if isinstance(item.get("text"), str):
                step = item["text"].strip()
            elif isinstance(item.get("name"), str):
                step = item["name"].strip()
            elif isinstance(item.get("itemListElement"), list):
                step = " ".join(normalize_instructions(item["itemListElement"]))
        if step:
            steps.append(step)
    return steps


def normalize_images(raw: Any) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list):
        images = []
        for item in raw:
            if isinstance(item, str):
                images.append(item)
            elif isinstance(item, dict) and isinstance(item.get("url"), str):
                images.append(item["url"])
        return images
    if isinstance(raw, dict) and isinstance(raw.get("url"), str):
        return [raw["url"]]
    return []


def _servings(raw: Any) -> Optional[str]:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list) and raw:
        return str(raw[0])
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    return None


def recipe_from_jsonld(obj: dict) -> Optional[RecipeData]:
    """Map a Recipe-typed JSON-LD object to RecipeData, or None without a usable name."""
    name = obj.get("name")
    title = name.strip() if isinstance(name, str) else ""
    if not title:
        return None

    description = obj.get("description")
    ingredients = obj.get("recipeIngredient")

    return RecipeData(
        title=title,
        description=description.strip() if isinstance(description, str) else None,
        ingredients=[
            x.strip() for x in ingredients if isinstance(x, str) and x.strip()
        ] if isinstance(ingredients, list) else [],
        instructions=normalize_instructions(obj.get("recipeInstructions")),
        images=normalize_images(obj.get("image")),
        prep_time=optional_duration(obj.get("prepTime")),
        cook_time=optional_duration(obj.get("cookTime")),
        servings=_servings(obj.get("recipeYield")),
        # Backfilled by the orchestrator with the URL the user supplied.
        source_url="",
    )


def extract_recipe_from_jsonld(soup: BeautifulSoup) -> Optional[RecipeData]:
    """Return the first Recipe candidate with a non-empty name, scanning blocks in order."""
    for parsed in iter_jsonld_blocks(soup):
        for candidate in _candidates(parsed):
            if not isinstance(candidate, dict) or not _is_recipe(candidate):
                continue
            recipe = recipe_from_jsonld(candidate)
            if recipe is not None:
                logger.debug("JSON-LD recipe found: %s", recipe.title)
                return recipe
    return None


def collect_strings(value: Any, keys: Iterable[str]) -> list[str]:
    """
    Depth-first walk over a JSON-shaped value collecting trimmed string
    values stored under any of ``keys``. Order of first appearance is kept
    and duplicates are dropped.
    """
    wanted = tuple(keys)
    found: dict[str, None] = {}

    def visit(node: Any) -> None:
        if isinstance(node, list):
            for item in node:
                visit(item)
        elif isinstance(node, dict):
            for key in wanted:
                val = node.get(key)
                if isinstance(val, str) and val.strip():
                    found.setdefault(val.strip(), None)
            for child in node.values():
                if isinstance(child, (list, dict)):
                    visit(child)

    visit(value)
    return list(found)


def meta_content(soup: BeautifulSoup, selector: str) -> Optional[str]:
    tag = soup.select_one(selector)
    content = tag.get("content") if tag else None
    return content.strip() if isinstance(content, str) and content.strip() else None


def extract_meta_content(soup: BeautifulSoup) -> str:
    """
    Gather every human-readable summary a page exposes: Open Graph and
    Twitter cards, <title>, meta description, and caption-like strings
    from any JSON-LD block. Deduplicated, joined by blank lines.
    """
    parts: dict[str, None] = {}

    def add(text: Optional[str]) -> None:
        if text:
            parts.setdefault(text, None)

    add(meta_content(soup, 'meta[property="og:description"]'))
    add(meta_content(soup, 'meta[property="og:title"]'))
    title = soup.title.get_text().strip() if soup.title else ""
    add(title or None)
    add(meta_content(soup, 'meta[name="description"]'))
    add(meta_content(soup, 'meta[name="twitter:description"]'))
    add(meta_content(soup, 'meta[name="twitter:title"]'))

    for parsed in iter_jsonld_blocks(soup):
        for text in collect_strings(parsed, META_STRING_KEYS):
            add(text)

    return "\n\n".join(parts).strip()
