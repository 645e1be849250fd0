"""Instagram post acquisition.

Captions are read from Instagram's embed page. Rendering that page in a
headless browser is outside this service; ``EmbedPageAcquirer`` reads
the server-rendered markup instead and falls back to the JSON payloads
and meta tags embedded in it. Any other ``CaptionAcquirer`` (a browser
worker, a third-party scraper) can be injected in its place.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..errors import InstagramAcquisitionFailed
from ..parsing.jsonld import collect_strings, extract_meta_content
from .fetcher import Fetcher

logger = logging.getLogger("recipebox.instagram")

EMBED_PATH_RE = re.compile(r"/(p|reel|reels)/([^/]+)")
CDN_IMAGE_RE = re.compile(
    r'"(https?:[^"]*(?:scontent|cdninstagram)[^"]*\.(?:jpg|jpeg|png|webp)[^"]*)"',
    re.IGNORECASE,
)
CAPTION_SELECTORS = (".CaptionContent", ".Caption", "blockquote.instagram-media")
MEDIA_IMAGE_SELECTOR = ".EmbeddedMediaImage, .EmbeddedMedia img"
SCRIPT_CAPTION_KEYS = ("caption", "text", "accessibility_caption")
MIN_BODY_CAPTION = 20


@dataclass
class InstagramPost:
    caption: str
    image_url: Optional[str] = None
    image_data: Optional[bytes] = None


class CaptionAcquirer(Protocol):
    async def acquire(self, embed_url: str) -> InstagramPost:
        ...


def is_instagram_url(url: str) -> bool:
    hostname = urlparse(url).hostname or ""
    return hostname == "instagram.com" or hostname.endswith(".instagram.com")


def to_embed_url(url: str) -> Optional[str]:
    m = EMBED_PATH_RE.search(urlparse(url).path)
    if not m:
        return None
    return f"https://www.instagram.com/{m.group(1)}/{m.group(2)}/embed/captioned/"


def _element_text(el) -> str:
    # <br> tags carry the caption's line structure
    for br in el.find_all("br"):
        br.replace_with("\n")
    return el.get_text().strip()


def _unescape_url(url: str) -> str:
    return url.replace("\\u0026", "&").replace("\\/", "/")


def _script_payloads(soup: BeautifulSoup):
    for script in soup.find_all("script"):
        content = script.string or ""
        if not content.strip():
            continue
        try:
            yield json.loads(content)
        except ValueError:
            continue


def caption_from_scripts(soup: BeautifulSoup) -> str:
    """Longest caption-like string found in any inline JSON payload."""
    best = ""
    for payload in _script_payloads(soup):
        for text in collect_strings(payload, SCRIPT_CAPTION_KEYS):
            if len(text) > len(best):
                best = text
    return best


def image_from_page(soup: BeautifulSoup) -> Optional[str]:
    for script in soup.find_all("script"):
        m = CDN_IMAGE_RE.search(script.string or "")
        if m:
            return _unescape_url(m.group(1))
    img = soup.select_one(MEDIA_IMAGE_SELECTOR)
    if img and img.get("src"):
        return img["src"]
    return None


def caption_from_page(soup: BeautifulSoup) -> str:
    for selector in CAPTION_SELECTORS:
        el = soup.select_one(selector)
        if el:
            text = _element_text(el)
            if text:
                return text

    text = caption_from_scripts(soup)
    if text:
        return text

    text = extract_meta_content(soup)
    if len(text) > MIN_BODY_CAPTION:
        return text
    return ""


class EmbedPageAcquirer:
    def __init__(self, fetcher: Fetcher):
        self.fetcher = fetcher

    async def acquire(self, embed_url: str) -> InstagramPost:
        page = await self.fetcher.fetch_text(embed_url)

        soup = BeautifulSoup(page.text, "html.parser")
        # Image first: caption extraction rewrites <br> nodes in place
        image_url = image_from_page(soup)
        caption = caption_from_page(soup)
        if not caption:
            raise InstagramAcquisitionFailed()

        logger.info("Instagram caption acquired (%d chars, image=%s)", len(caption), bool(image_url))
        return InstagramPost(caption=caption, image_url=image_url)
