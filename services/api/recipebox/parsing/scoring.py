"""Per-line ingredient/instruction scores for unstructured captions.

Both scores are independent and clamped to [0, 1]. Weights are module
constants so they can be tuned and asserted on individually.
"""

import re

from ..core.text import BULLET_PREFIX_RE, NUMBERED_PREFIX_RE
from .parser import ScoredLine
from .vocabulary import Role, alternation, prefix_pattern, word_pattern

# Ingredient signals
QUANTITY_START_WEIGHT = 0.35
INDEFINITE_QUANTITY_WEIGHT = 0.25
UNIT_WEIGHT = 0.25
SHORT_LINE_WEIGHT = 0.15
PREP_STATE_WEIGHT = 0.1
BULLET_WEIGHT = 0.1
LOWERCASE_SHORT_WEIGHT = 0.1
COOKING_VERB_PENALTY = 0.3
LONG_LINE_PENALTY = 0.4

SHORT_LINE_MAX = 60
LOWERCASE_SHORT_MAX = 50
LONG_LINE_MIN = 120

# Instruction signals
COOKING_VERB_WEIGHT = 0.3
LONG_INSTRUCTION_WEIGHT = 0.2
NUMBERED_STEP_WEIGHT = 0.2
DURATION_WEIGHT = 0.1
TEMPERATURE_WEIGHT = 0.1
IMPERATIVE_WEIGHT = 0.1

LONG_INSTRUCTION_MIN = 60
IMPERATIVE_MIN = 30

QUANTITY_START_RE = re.compile(r"^(?:\d|½|¼|¾|⅓|⅔|⅛|⅜|⅝|⅞|\d+/\d+|\d+[.,]\d+)")
LOWERCASE_START_RE = re.compile(r"^[a-zåäöüé]")
IMPERATIVE_START_RE = re.compile(r"^[A-ZÅÄÖ][a-zåäöé]+\s")
TEMPERATURE_RE = re.compile(r"\d+\s*°")
PREP_STATE_RE = re.compile(rf",\s*(?:{alternation(Role.PREP_STATE)})\b", re.IGNORECASE)
DURATION_RE = re.compile(rf"\b\d+\s*(?:{alternation(Role.TIME_UNIT)})\b", re.IGNORECASE)


def _clamp(score: float) -> float:
    # Rounded so sums like 0.2 + 0.1 compare equal to their threshold
    return max(0.0, min(1.0, round(score, 4)))


def score_ingredient(line: str) -> float:
    score = 0.0
    if QUANTITY_START_RE.search(line):
        score += QUANTITY_START_WEIGHT
    if prefix_pattern(Role.INDEFINITE_QUANTITY).search(line):
        score += INDEFINITE_QUANTITY_WEIGHT
    if word_pattern(Role.UNIT).search(line):
        score += UNIT_WEIGHT
    if len(line) < SHORT_LINE_MAX:
        score += SHORT_LINE_WEIGHT
    if PREP_STATE_RE.search(line):
        score += PREP_STATE_WEIGHT
    if BULLET_PREFIX_RE.search(line):
        score += BULLET_WEIGHT
    # "salt och peppar", "olive oil, for frying"
    if LOWERCASE_START_RE.search(line) and len(line) < LOWERCASE_SHORT_MAX:
        score += LOWERCASE_SHORT_WEIGHT
    if word_pattern(Role.COOKING_VERB).search(line):
        score -= COOKING_VERB_PENALTY
    if len(line) > LONG_LINE_MIN:
        score -= LONG_LINE_PENALTY
    return _clamp(score)


def score_instruction(line: str) -> float:
    score = 0.0
    if word_pattern(Role.COOKING_VERB).search(line):
        score += COOKING_VERB_WEIGHT
    if len(line) > LONG_INSTRUCTION_MIN:
        score += LONG_INSTRUCTION_WEIGHT
    if NUMBERED_PREFIX_RE.search(line):
        score += NUMBERED_STEP_WEIGHT
    if DURATION_RE.search(line):
        score += DURATION_WEIGHT
    if TEMPERATURE_RE.search(line):
        score += TEMPERATURE_WEIGHT
    if IMPERATIVE_START_RE.search(line) and len(line) > IMPERATIVE_MIN:
        score += IMPERATIVE_WEIGHT
    return _clamp(score)


def score_line(line: str) -> ScoredLine:
    return ScoredLine(
        text=line,
        ingredient_score=score_ingredient(line),
        instruction_score=score_instruction(line),
    )
