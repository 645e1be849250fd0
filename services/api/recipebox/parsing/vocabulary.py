"""Multilingual keyword table for the caption parser.

Each entry is a regex fragment tagged with the language it belongs to and
the role it plays. The parser never names a language; it asks for the
compiled pattern of a role, so supporting another language means adding
rows here.
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache


class Role(str, Enum):
    UNIT = "unit"
    COOKING_VERB = "cooking_verb"
    PREP_STATE = "prep_state"
    INDEFINITE_QUANTITY = "indefinite_quantity"
    INGREDIENT_HEADER = "ingredient_header"
    INSTRUCTION_HEADER = "instruction_header"
    SERVINGS_WORD = "servings_word"
    TIME_UNIT = "time_unit"
    JUNK = "junk"


@dataclass(frozen=True)
class Term:
    language: str
    role: Role
    pattern: str


VOCABULARY: tuple[Term, ...] = (
    # Measurement units
    Term("sv", Role.UNIT, r"msk|tsk|dl|cl|ml|l|krm|st|kopp|paket|tetra|nypa|burk|klyftor?|knippe"),
    Term("en", Role.UNIT, r"cups?|tbsp|tsp|tablespoons?|teaspoons?|oz|ounces?|lbs?|pounds?|g|kg"),
    Term("en", Role.UNIT, r"bunch|cloves?|cans?|pinch|dash|pint|quart|gallon|sticks?|heads?"),

    # Cooking actions
    Term("en", Role.COOKING_VERB,
         r"cook|bake|fry|saut[ée]|boil|simmer|stir|mix|chop|dice|slice|preheat|heat|add|pour"
         r"|combine|whisk|fold|season|serve|drain|rinse|set aside|remove|place|spread|transfer"
         r"|reduce|bring|roast|grill|broil|steam|blanch|marinate|toss|garnish"),
    Term("sv", Role.COOKING_VERB,
         r"stek|koka|fräs|blanda|skär|hacka|rör|sjud|häll|servera|smaksätt|låt|vänd|avsluta"
         r"|smält|sila|ringla|tillsätt|krydda|ha\s+i|lägg"),

    # Preparation state trailing an ingredient ("onion, chopped")
    Term("en", Role.PREP_STATE, r"diced|chopped|sliced|minced|grated|julienned|crushed"),
    Term("sv", Role.PREP_STATE,
         r"finhackad[ea]?|hackad[ea]?|skivad[ea]?|tärnad[ea]?|delad[ea]?"
         r"|i\s+(?:bitar|skivor|mindre\s+bitar)|sköljda|avrunna"),

    # Quantities without a number
    Term("en", Role.INDEFINITE_QUANTITY, r"a\s+few|some|a\s+handful|a\s+pinch|a\s+dash"),
    Term("sv", Role.INDEFINITE_QUANTITY, r"lite|en\s|ett\s|några|ev\b|eventuellt"),

    # Section headers
    Term("en", Role.INGREDIENT_HEADER,
         r"ingredients?|you(?:'|’)?ll\s+need|you\s+will\s+need|what\s+you\s+need"),
    Term("sv", Role.INGREDIENT_HEADER, r"ingredienser|du\s+behöver"),
    Term("en", Role.INSTRUCTION_HEADER,
         r"instructions?|directions?|method|steps|how\s+to\s+make|preparation"),
    Term("sv", Role.INSTRUCTION_HEADER,
         r"gör\s+så\s+här|så\s+gör\s+du|instruktioner|tillagning|tillvägagångssätt"),

    # Servings
    Term("en", Role.SERVINGS_WORD, r"servings?|portions?"),
    Term("sv", Role.SERVINGS_WORD, r"portioner|personer|pers"),

    # Durations
    Term("en", Role.TIME_UNIT, r"min(?:utes?|s)?|hours?|hrs?|seconds?"),
    Term("sv", Role.TIME_UNIT, r"minut(?:er)?|tim(?:m?ar|me)?|sekunder"),

    # Social media boilerplate
    Term("en", Role.JUNK,
         r"view\s+all\s+\d|like$|\d+\s+likes?$|liked\s+by|add\s+a\s+comment|log\s+in|sign\s+up"
         r"|comment\s+.{0,30}(?:send|dm|get)|follow\s+(?:me|us|for)|save\s+this|share\s+this"
         r"|link\s+in\s+(?:my\s+)?bio|tag\s+a\s+friend|double.?tap|dm\s+me|click\s+(?:the\s+)?link"
         r"|macros?\b|calories\s*[:\-]|\d+\s*kcal\b|\d+\s*calories\b|kcal\s*[:\-]"),
    Term("sv", Role.JUNK,
         r"följ\s+(?:mig|oss)|länk\s+i\s+bio|spara\s+(?:detta|receptet)|tagga\s+en\s+vän"
         r"|kommentera\s+.{0,30}(?:så|för)"),
)


def terms_for(role: Role, languages: tuple[str, ...] | None = None) -> list[str]:
    return [
        t.pattern
        for t in VOCABULARY
        if t.role is role and (languages is None or t.language in languages)
    ]


def alternation(role: Role) -> str:
    return "|".join(f"(?:{p})" for p in terms_for(role))


@lru_cache(maxsize=None)
def word_pattern(role: Role) -> re.Pattern:
    """Any term of ``role`` as a whole word, anywhere in the line."""
    return re.compile(rf"\b(?:{alternation(role)})\b", re.IGNORECASE)


@lru_cache(maxsize=None)
def prefix_pattern(role: Role) -> re.Pattern:
    """Any term of ``role`` at the start of the line."""
    return re.compile(rf"^(?:{alternation(role)})", re.IGNORECASE)
