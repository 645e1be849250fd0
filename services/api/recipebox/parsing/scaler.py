"""Portion scaling for ingredient display strings.

Only the leading quantity is touched; units and names pass through as
written ("1 1/2 cups flour" x2 -> "3 cups flour").
"""

import math
import re
from typing import Optional

MIXED_NUMBER_RE = re.compile(r"^(\d+)\s+(\d+)/(\d+)")
FRACTION_RE = re.compile(r"^(\d+)/(\d+)")
DECIMAL_RE = re.compile(r"^(\d+(?:\.\d+)?)")
SERVINGS_RANGE_RE = re.compile(r"(\d+)\s*[-–]\s*\d+")
SERVINGS_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")

CULINARY_FRACTIONS: tuple[tuple[float, str], ...] = (
    (1 / 8, "⅛"),
    (1 / 4, "¼"),
    (1 / 3, "⅓"),
    (3 / 8, "⅜"),
    (1 / 2, "½"),
    (5 / 8, "⅝"),
    (2 / 3, "⅔"),
    (3 / 4, "¾"),
    (7 / 8, "⅞"),
)
FRACTION_TOLERANCE = 0.06
WHOLE_TOLERANCE = 0.05


def parse_leading_number(text: str) -> Optional[tuple[float, int]]:
    """Return (value, end offset) of the quantity that opens ``text``, if any."""
    m = MIXED_NUMBER_RE.match(text)
    if m and int(m.group(3)) != 0:
        return int(m.group(1)) + int(m.group(2)) / int(m.group(3)), m.end()

    m = FRACTION_RE.match(text)
    if m:
        if int(m.group(2)) == 0:
            return None
        return int(m.group(1)) / int(m.group(2)), m.end()

    m = DECIMAL_RE.match(text)
    if m:
        return float(m.group(1)), m.end()
    return None


def format_quantity(value: float) -> str:
    whole = math.floor(value)
    remainder = value - whole
    if remainder < WHOLE_TOLERANCE:
        return str(whole)
    fraction, glyph = min(CULINARY_FRACTIONS, key=lambda f: abs(remainder - f[0]))
    if abs(remainder - fraction) < FRACTION_TOLERANCE:
        return f"{whole}{glyph}" if whole > 0 else glyph
    formatted = f"{value:.1f}"
    return formatted[:-2] if formatted.endswith(".0") else formatted


def scale_ingredient(ingredient: str, factor: float) -> str:
    if factor == 1:
        return ingredient
    parsed = parse_leading_number(ingredient)
    if parsed is None:
        return ingredient
    value, end = parsed
    scaled = value * factor
    if not math.isfinite(scaled):
        return ingredient
    return format_quantity(scaled) + ingredient[end:]


def parse_servings_number(servings: str) -> Optional[float]:
    """Base portion count from free-form servings text ("4-6 servings" -> 4)."""
    m = SERVINGS_RANGE_RE.search(servings)
    if m:
        return float(m.group(1))
    m = SERVINGS_NUMBER_RE.search(servings)
    if m:
        return float(m.group(0))
    return None


def scale_ingredients(ingredients: list[str], base_servings: float, servings: float) -> list[str]:
    if base_servings <= 0:
        return list(ingredients)
    factor = servings / base_servings
    return [scale_ingredient(i, factor) for i in ingredients]
