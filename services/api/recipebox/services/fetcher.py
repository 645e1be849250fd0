import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..errors import (
    FetchFailed,
    FetchTimeout,
    ResponseTooLarge,
    UnsupportedContentType,
)
from ..settings import Settings

logger = logging.getLogger("recipebox.fetch")

ACCEPTED_CONTENT_TYPES = ("text/html", "text/plain")


@dataclass
class FetchedPage:
    url: str
    status_code: int
    content_type: str
    text: str


class Fetcher:
    """
    Single GET with a hard deadline and a body size cap.

    The deadline covers connecting, headers and the whole body stream.
    Crossing the size cap aborts the stream and closes the connection
    without draining it; nothing partial is returned.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float,
        max_body_bytes: int,
        user_agent: str,
        accept: str,
        accept_language: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self.max_body_bytes = max_body_bytes
        self.headers = {
            "User-Agent": user_agent,
            "Accept": accept,
            "Accept-Language": accept_language,
        }
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Fetcher":
        return cls(
            timeout_seconds=timeout_seconds or settings.fetch_timeout_seconds,
            max_body_bytes=settings.max_body_bytes,
            user_agent=settings.user_agent,
            accept=settings.accept_header,
            accept_language=settings.accept_language,
            transport=transport,
        )

    async def fetch_text(self, url: str) -> FetchedPage:
        try:
            return await asyncio.wait_for(self._fetch(url), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("Fetch timed out after %.1fs: %s", self.timeout_seconds, url)
            raise FetchTimeout()

    async def _fetch(self, url: str) -> FetchedPage:
        async with httpx.AsyncClient(
            headers=self.headers,
            follow_redirects=True,
            timeout=self.timeout_seconds,
            transport=self.transport,
        ) as client:
            try:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        raise FetchFailed(
                            f"Could not fetch URL: {response.status_code} {response.reason_phrase}".strip()
                        )

                    content_type = response.headers.get("content-type", "")
                    if not any(t in content_type for t in ACCEPTED_CONTENT_TYPES):
                        raise UnsupportedContentType()

                    chunks = []
                    total = 0
                    async for chunk in response.aiter_bytes():
                        total += len(chunk)
                        if total > self.max_body_bytes:
                            logger.warning("Body over %d bytes, aborting: %s", self.max_body_bytes, url)
                            raise ResponseTooLarge()
                        chunks.append(chunk)
            except httpx.TimeoutException:
                raise FetchTimeout()
            except httpx.HTTPError as e:
                logger.warning("Fetch failed for %s: %s", url, e)
                raise FetchFailed(str(e) or None)

        logger.info("Fetched %s (%d bytes)", url, total)
        return FetchedPage(
            url=url,
            status_code=response.status_code,
            content_type=content_type,
            text=b"".join(chunks).decode("utf-8", errors="replace"),
        )
