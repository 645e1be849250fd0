import re
from typing import Optional

ISO_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def format_iso_duration(duration: str) -> str:
    """
    Convert an ISO-8601 duration ("PT1H30M") to a display string ("1 hr 30 min").
    Zero components are omitted; when nothing is left (or the value doesn't
    parse) the original string is returned untouched.
    """
    match = ISO_DURATION_RE.search(duration)
    if not match:
        return duration

    hours = int(match.group(1)) if match.group(1) else 0
    minutes = int(match.group(2)) if match.group(2) else 0

    parts = []
    if hours > 0:
        parts.append(f"{hours} hr")
    if minutes > 0:
        parts.append(f"{minutes} min")
    return " ".join(parts) if parts else duration


def optional_duration(value) -> Optional[str]:
    if isinstance(value, str):
        return format_iso_duration(value)
    return None
