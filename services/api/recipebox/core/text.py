import re

# Pictographs, dingbats, flags and the joiners/selectors that glue them together.
EMOJI_CHARS = (
    "\U0001F000-\U0001FAFF"
    "\U00002600-\U000027BF"
    "\U00002300-\U000023FF"
    "\U00002B00-\U00002BFF"
    "\U0001F1E6-\U0001F1FF"
    "\u2190-\u21FF"
    "\u3030\u303D\u3297\u3299"
    "\u00A9\u00AE\u2122\u2139\u24C2"
    "\uFE0F\u200D\u20E3"
)
EMOJI_RE = re.compile(f"[{EMOJI_CHARS}]")

BULLET_CHARS = "-•·◦▪⁃*"
BULLET_RE = re.compile(rf"^[{re.escape(BULLET_CHARS)}]\s*")
BULLET_PREFIX_RE = re.compile(rf"^[{re.escape(BULLET_CHARS)}]\s")
STEP_NUMBER_RE = re.compile(r"^(?:step\s*)?\d+[.):\s-]+", re.IGNORECASE)
NUMBERED_PREFIX_RE = re.compile(r"^\d+[.)]\s")

_LEADING_EMOJI_RE = re.compile(f"^[{EMOJI_CHARS}\\s]+")
_TITLE_EDGE_RE = re.compile(f"^[{EMOJI_CHARS}*\\s]+|[{EMOJI_CHARS}*\\s]+$")
_KEYCAP_RE = re.compile("([0-9])\uFE0F?\u20E3")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=\.)\s+(?=[A-ZÅÄÖÜÉ])|(?<=[!?])\s+")


def normalize_keycaps(text: str) -> str:
    """Turn keycap digits ("1️⃣") into plain step numbers ("1.")."""
    return _KEYCAP_RE.sub(r"\1.", text)


def strip_emoji(text: str) -> str:
    return EMOJI_RE.sub("", text)


def is_emoji_only(text: str) -> bool:
    return not strip_emoji(text).strip()


def strip_leading_emoji(text: str) -> str:
    return _LEADING_EMOJI_RE.sub("", text).strip()


def strip_title_decoration(text: str) -> str:
    """Drop sparkles, stars and asterisks framing a title line."""
    return _TITLE_EDGE_RE.sub("", text).strip()


def strip_bullet(text: str) -> str:
    return BULLET_RE.sub("", text).strip()


def strip_step_number(text: str) -> str:
    return STEP_NUMBER_RE.sub("", text).strip()


def split_into_sentences(text: str) -> list[str]:
    """
    Split a paragraph on sentence boundaries: a period followed by
    whitespace and a capital letter, or "!"/"?" followed by whitespace.
    Fragments of five characters or fewer are dropped.
    """
    parts = [p.strip() for p in _SENTENCE_SPLIT_RE.split(text)]
    return [p for p in parts if len(p) > 5]


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())
