"""Instagram caption parser.

Captions have no schema, so the parser works in tiers:

1. Preprocess: drop boilerplate, hashtag walls, the author handle, and
   pull out a standalone servings line.
2. Header segmentation: when an ingredient or instruction header is
   present (on its own line, or glued to the first item), slice the
   caption around it.
3. Score classification: otherwise score every line, find the longest
   run of ingredient-looking lines and treat what follows as steps. With
   no such run, sweep the lines once using bullets and numbering.

The tiers are explicit states so the route taken for a caption can be
inspected (``CaptionParse.states``).
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..core.text import (
    BULLET_PREFIX_RE,
    NUMBERED_PREFIX_RE,
    is_emoji_only,
    normalize_keycaps,
    split_into_sentences,
    strip_bullet,
    strip_leading_emoji,
    strip_step_number,
    strip_title_decoration,
)
from .parser import INSTAGRAM_PLACEHOLDER_TITLE, RecipeData, RecipeParser, ScoredLine
from .scoring import score_line
from .vocabulary import Role, alternation, prefix_pattern

logger = logging.getLogger("recipebox.caption")

HASHTAG_RE = re.compile(r"#\S+")
HASHTAG_RATIO_MAX = 0.5
USERNAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9._]{1,30}$")
USERNAME_MAX = 30
MENTION_RE = re.compile(r"@\w")
DECORATED_TITLE_RE = re.compile("[✨⭐\U0001F31F]")

SERVINGS_LINE_RE = re.compile(
    rf"^(?:\d+\s*[-–]\s*\d+|\d+)\s*(?:{alternation(Role.SERVINGS_WORD)})\.?$",
    re.IGNORECASE,
)
PAREN_SERVINGS_RE = re.compile(
    rf"\(\s*((?:\d+\s*[-–]\s*)?\d+\s*(?:{alternation(Role.SERVINGS_WORD)}))\s*\)",
    re.IGNORECASE,
)

HEADER_MAX_LENGTH = 40
INLINE_ITEM_START_RE = re.compile(r"^\s*(?:[-•·◦▪⁃*]|\d)")
HEADER_TAIL_NOISE_RE = re.compile(r"^\s*(?:\([^)]*\))?[\s:：\W]*$")

# Cluster detection
CLUSTER_MIN_INGREDIENT_SCORE = 0.3
CLUSTER_MIN_LINES = 2
EXTEND_MAX_LENGTH = 60
EXTEND_MAX_INSTRUCTION_SCORE = 0.2
EXTEND_STOP_INSTRUCTION_SCORE = 0.4
TITLE_SCAN_LINES = 5
SPLIT_SENTENCES_OVER = 100
SWEEP_INSTRUCTION_SCORE = 0.3
SWEEP_MIN_LENGTH = 60


class CaptionState(str, Enum):
    PREPROCESS = "preprocess"
    HEADER_SEGMENTATION = "header_segmentation"
    SCORE_CLASSIFICATION = "score_classification"
    CLUSTER_SPLIT = "cluster_split"
    LINE_SWEEP = "line_sweep"
    DONE = "done"


TRANSITIONS: dict[CaptionState, frozenset[CaptionState]] = {
    CaptionState.PREPROCESS: frozenset(
        {CaptionState.HEADER_SEGMENTATION, CaptionState.SCORE_CLASSIFICATION}
    ),
    CaptionState.HEADER_SEGMENTATION: frozenset({CaptionState.DONE}),
    CaptionState.SCORE_CLASSIFICATION: frozenset(
        {CaptionState.CLUSTER_SPLIT, CaptionState.LINE_SWEEP}
    ),
    CaptionState.CLUSTER_SPLIT: frozenset({CaptionState.DONE}),
    CaptionState.LINE_SWEEP: frozenset({CaptionState.DONE}),
    CaptionState.DONE: frozenset(),
}


class HeaderKind(str, Enum):
    BLOCK = "block"
    INLINE = "inline"


@dataclass
class Header:
    index: int
    kind: HeaderKind
    rest: str = ""


@dataclass
class CaptionParse:
    recipe: RecipeData
    states: list[CaptionState] = field(default_factory=list)


@dataclass
class _Preprocessed:
    lines: list[str]
    servings: Optional[str]


class _StateLog:
    def __init__(self):
        self.states = [CaptionState.PREPROCESS]

    def advance(self, state: CaptionState) -> None:
        current = self.states[-1]
        if state not in TRANSITIONS[current]:
            raise RuntimeError(f"Illegal caption parser transition {current.value} -> {state.value}")
        self.states.append(state)


# --- Preprocessing ---

def is_junk(line: str) -> bool:
    return bool(prefix_pattern(Role.JUNK).search(line))


def is_hashtag_only(line: str) -> bool:
    return is_emoji_only(HASHTAG_RE.sub("", line))


def is_hashtag_heavy(line: str) -> bool:
    tags = HASHTAG_RE.findall(line)
    if not tags:
        return False
    return sum(len(t) for t in tags) / len(line) > HASHTAG_RATIO_MAX


def clean_caption_lines(raw: str) -> list[str]:
    lines = [line.strip() for line in normalize_keycaps(raw).split("\n")]
    return [
        line
        for line in lines
        if line
        and not is_junk(line)
        and not is_hashtag_only(line)
        and not is_hashtag_heavy(line)
    ]


def strip_username(lines: list[str]) -> list[str]:
    """Embeds glue the author's handle to the caption as its first line."""
    if len(lines) < 2:
        return lines
    first = lines[0]
    if USERNAME_RE.match(first) and len(first) <= USERNAME_MAX:
        return lines[1:]
    return lines


def extract_servings_line(lines: list[str]) -> tuple[Optional[str], list[str]]:
    servings = None
    kept = []
    for line in lines:
        if servings is None and SERVINGS_LINE_RE.match(line):
            servings = line.rstrip(".")
        else:
            kept.append(line)
    return servings, kept


def take_paren_servings(text: str) -> tuple[Optional[str], str]:
    """Pull "(6 portioner)" out of a line; returns (servings, remaining text)."""
    m = PAREN_SERVINGS_RE.search(text)
    if not m:
        return None, text
    remaining = " ".join((text[: m.start()] + text[m.end():]).split())
    return m.group(1), remaining


# --- Header detection ---

def _header_prefix(role: Role) -> re.Pattern:
    # Keyword must not run on into a longer word ("Methodology"); digits and
    # bullets may follow directly ("Instructions1.")
    return re.compile(rf"^\W*(?:{alternation(role)})(?![^\W\d_])", re.IGNORECASE)


INGREDIENT_HEADER_RE = _header_prefix(Role.INGREDIENT_HEADER)
INSTRUCTION_HEADER_RE = _header_prefix(Role.INSTRUCTION_HEADER)


def match_header(line: str, pattern: re.Pattern) -> Optional[tuple[HeaderKind, str]]:
    """
    Classify ``line`` as a standalone header ("Ingredients:"), an inline
    header whose first item follows on the same line ("Ingredients• 1 can
    tomatoes", "Instructions1. Preheat"), or neither.
    """
    m = pattern.match(line)
    if not m:
        return None
    tail = line[m.end():]

    if HEADER_TAIL_NOISE_RE.match(tail):
        return HeaderKind.BLOCK, ""

    stripped = tail.lstrip()
    if stripped.startswith((":", "：")):
        rest = stripped[1:].strip()
        return (HeaderKind.INLINE, rest) if rest else (HeaderKind.BLOCK, "")
    if INLINE_ITEM_START_RE.match(tail):
        return HeaderKind.INLINE, tail.strip()

    # "Ingredients for 4 people:"
    if line.rstrip().endswith((":", "：")) and len(line) <= HEADER_MAX_LENGTH:
        return HeaderKind.BLOCK, ""
    return None


def find_header(lines: list[str], pattern: re.Pattern, skip: Optional[int] = None) -> Optional[Header]:
    for i, line in enumerate(lines):
        if i == skip:
            continue
        found = match_header(line, pattern)
        if found:
            kind, rest = found
            return Header(index=i, kind=kind, rest=rest)
    return None


# --- Parser ---

class CaptionParser(RecipeParser):
    def parse(self, text: str, source_url: str) -> RecipeData:
        return self.parse_with_trace(text, source_url).recipe

    def parse_with_trace(self, text: str, source_url: str) -> CaptionParse:
        log = _StateLog()
        pre = self._preprocess(text)

        ingredient_header = find_header(pre.lines, INGREDIENT_HEADER_RE)
        instruction_header = find_header(
            pre.lines,
            INSTRUCTION_HEADER_RE,
            skip=ingredient_header.index if ingredient_header else None,
        )

        if ingredient_header or instruction_header:
            log.advance(CaptionState.HEADER_SEGMENTATION)
            recipe = self._segment_by_headers(
                pre, ingredient_header, instruction_header, source_url
            )
        else:
            log.advance(CaptionState.SCORE_CLASSIFICATION)
            recipe = self._classify_by_score(pre, source_url, log)

        log.advance(CaptionState.DONE)
        logger.info(
            "Caption parsed via %s: %d ingredients, %d instructions",
            log.states[-2].value,
            len(recipe.ingredients),
            len(recipe.instructions),
        )
        return CaptionParse(recipe=recipe, states=log.states)

    def _preprocess(self, text: str) -> _Preprocessed:
        lines = strip_username(clean_caption_lines(text))
        servings, lines = extract_servings_line(lines)
        return _Preprocessed(lines=lines, servings=servings)

    # --- Strategy A ---

    def _pick_title_index(self, block: list[str]) -> Optional[int]:
        """Shortest plain line before the first header; promo hooks tend to be long and loud."""
        if not block:
            return None
        candidates = [
            i
            for i, line in enumerate(block)
            if "@" not in line
            and not line.startswith("#")
            and not is_junk(line)
            and "!" not in line
            and "?" not in line
            and strip_title_decoration(line)
        ]
        if not candidates:
            return 0
        # Measured without "(6 portioner)", which is lifted out of the title later
        return min(candidates, key=lambda i: len(take_paren_servings(block[i])[1]))

    def _segment_by_headers(
        self,
        pre: _Preprocessed,
        ingredient_header: Optional[Header],
        instruction_header: Optional[Header],
        source_url: str,
    ) -> RecipeData:
        lines = pre.lines
        servings = pre.servings
        header_start = min(h.index for h in (ingredient_header, instruction_header) if h)
        block = lines[:header_start]

        title_idx = self._pick_title_index(block)
        title = block[title_idx] if title_idx is not None else ""
        found, title = take_paren_servings(title)
        servings = servings or found

        description_lines = []
        for i, line in enumerate(block):
            if i == title_idx or line.startswith("#") or MENTION_RE.search(line):
                continue
            found, line = take_paren_servings(line)
            servings = servings or found
            line = strip_leading_emoji(line)
            if line:
                description_lines.append(line)

        ingredients = []
        if ingredient_header:
            end = (
                instruction_header.index
                if instruction_header and instruction_header.index > ingredient_header.index
                else len(lines)
            )
            section = lines[ingredient_header.index + 1:end]
            if ingredient_header.kind is HeaderKind.INLINE:
                section = [ingredient_header.rest] + section
            for raw in section:
                line = strip_bullet(raw)
                if line and not line.startswith("#"):
                    ingredients.append(line)

        instructions = []
        if instruction_header:
            end = (
                ingredient_header.index
                if ingredient_header and ingredient_header.index > instruction_header.index
                else len(lines)
            )
            section = lines[instruction_header.index + 1:end]
            inline = instruction_header.kind is HeaderKind.INLINE
            if inline:
                section = [instruction_header.rest] + section
            for raw in section:
                line = strip_bullet(strip_step_number(raw))
                if not line or line.startswith("#") or is_junk(line):
                    # Inline-delimited steps end at the first non-step line;
                    # whatever trails them is promotional.
                    if inline:
                        break
                    continue
                instructions.append(line)

        return RecipeData(
            title=strip_title_decoration(title) or INSTAGRAM_PLACEHOLDER_TITLE,
            description="\n".join(description_lines) or None,
            ingredients=ingredients,
            instructions=instructions,
            images=[],
            servings=servings,
            source_url=source_url,
        )

    # --- Strategy B ---

    def _find_cluster(self, scored: list[ScoredLine]) -> Optional[tuple[int, int]]:
        """Longest run of ingredient-looking lines as a half-open range; first wins ties."""
        best: Optional[tuple[int, int]] = None
        start = None
        for i, s in enumerate(scored + [None]):
            is_ingredient = (
                s is not None
                and s.ingredient_score >= CLUSTER_MIN_INGREDIENT_SCORE
                and s.ingredient_score > s.instruction_score
            )
            if is_ingredient:
                if start is None:
                    start = i
                continue
            if start is not None:
                if best is None or i - start > best[1] - best[0]:
                    best = (start, i)
                start = None

        if best is None or best[1] - best[0] < CLUSTER_MIN_LINES:
            return None
        return best

    def _extend_cluster(self, scored: list[ScoredLine], end: int) -> int:
        """Absorb trailing short lines ("salt", "olja") that scored just under threshold."""
        extended = end
        for i in range(end, len(scored)):
            s = scored[i]
            if s.instruction_score >= EXTEND_STOP_INSTRUCTION_SCORE:
                break
            if len(s.text) < EXTEND_MAX_LENGTH and s.instruction_score < EXTEND_MAX_INSTRUCTION_SCORE:
                extended = i + 1
            else:
                break
        return extended

    def _pick_decorated_title(self, scored: list[ScoredLine]) -> int:
        for i, s in enumerate(scored[:TITLE_SCAN_LINES]):
            line = s.text
            if DECORATED_TITLE_RE.search(line) or (len(line) > 3 and line.isupper()):
                return i
        return 0

    def _classify_by_score(self, pre: _Preprocessed, source_url: str, log: _StateLog) -> RecipeData:
        scored = [score_line(line) for line in pre.lines]
        cluster = self._find_cluster(scored)
        if cluster:
            cluster = (cluster[0], self._extend_cluster(scored, cluster[1]))

        title_idx = self._pick_decorated_title(scored)
        title = scored[title_idx].text if scored else ""
        found, title = take_paren_servings(title)
        title = strip_title_decoration(title)

        description_lines: list[str] = []
        ingredients: list[str] = []
        instructions: list[str] = []

        if cluster:
            log.advance(CaptionState.CLUSTER_SPLIT)
            start, end = cluster
            for s in scored[title_idx + 1:start]:
                if not s.text.startswith("#") and len(s.text) > 2:
                    description_lines.append(s.text)

            for s in scored[start:end]:
                line = strip_bullet(s.text)
                if line:
                    ingredients.append(line)

            for s in scored[end:]:
                line = s.text
                if line.startswith("#"):
                    continue
                if len(line) > SPLIT_SENTENCES_OVER:
                    instructions.extend(split_into_sentences(line))
                else:
                    cleaned = strip_step_number(line)
                    if cleaned:
                        instructions.append(cleaned)
        else:
            log.advance(CaptionState.LINE_SWEEP)
            for s in scored[title_idx + 1:]:
                line = s.text
                if line.startswith("#"):
                    continue
                if BULLET_PREFIX_RE.match(line):
                    ingredients.append(strip_bullet(line))
                elif NUMBERED_PREFIX_RE.match(line):
                    instructions.append(NUMBERED_PREFIX_RE.sub("", line).strip())
                elif s.instruction_score > SWEEP_INSTRUCTION_SCORE and len(line) > SWEEP_MIN_LENGTH:
                    instructions.extend(split_into_sentences(line))
                else:
                    description_lines.append(line)

        return RecipeData(
            title=title or INSTAGRAM_PLACEHOLDER_TITLE,
            description="\n".join(description_lines) or None,
            ingredients=ingredients,
            instructions=instructions,
            images=[],
            servings=pre.servings or found,
            source_url=source_url,
        )


def parse_instagram_caption(caption: str, source_url: str) -> RecipeData:
    return CaptionParser().parse(caption, source_url)
