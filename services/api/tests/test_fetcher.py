import asyncio

import httpx
import pytest

from recipebox.errors import FetchFailed, FetchTimeout, ResponseTooLarge, UnsupportedContentType
from recipebox.services.fetcher import Fetcher

URL = "https://food.example.com/recipe"


def _fetcher(handler, *, timeout=2.0, max_body_bytes=1024):
    return Fetcher(
        timeout_seconds=timeout,
        max_body_bytes=max_body_bytes,
        user_agent="TestAgent/1.0",
        accept="text/html",
        accept_language="sv-SE",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_sends_headers_and_decodes_body():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        return httpx.Response(200, headers={"content-type": "text/html; charset=utf-8"}, text="<p>hej</p>")

    page = await _fetcher(handler).fetch_text(URL)

    assert page.text == "<p>hej</p>"
    assert page.status_code == 200
    assert seen["user-agent"] == "TestAgent/1.0"
    assert seen["accept-language"] == "sv-SE"


@pytest.mark.asyncio
async def test_invalid_utf8_is_replaced():
    def handler(request):
        return httpx.Response(200, headers={"content-type": "text/plain"}, content=b"ok \xff")

    page = await _fetcher(handler).fetch_text(URL)
    assert page.text == "ok �"


@pytest.mark.asyncio
async def test_non_2xx_is_fetch_failed():
    def handler(request):
        return httpx.Response(404, headers={"content-type": "text/html"}, text="nope")

    with pytest.raises(FetchFailed) as exc:
        await _fetcher(handler).fetch_text(URL)
    assert exc.value.message == "Could not fetch URL: 404 Not Found"


@pytest.mark.asyncio
async def test_network_error_is_fetch_failed():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchFailed):
        await _fetcher(handler).fetch_text(URL)


@pytest.mark.asyncio
async def test_unsupported_content_type():
    def handler(request):
        return httpx.Response(200, headers={"content-type": "application/pdf"}, content=b"%PDF")

    with pytest.raises(UnsupportedContentType):
        await _fetcher(handler).fetch_text(URL)


@pytest.mark.asyncio
async def test_body_over_cap_is_rejected():
    yielded = []

    async def body():
        for _ in range(10):
            yielded.append(1)
            yield b"x" * 300

    def handler(request):
        return httpx.Response(200, headers={"content-type": "text/html"}, content=body())

    with pytest.raises(ResponseTooLarge) as exc:
        await _fetcher(handler, max_body_bytes=1000).fetch_text(URL)

    assert exc.value.message == "Page content is too large."
    # Stream is abandoned as soon as the cap is crossed
    assert len(yielded) == 4


@pytest.mark.asyncio
async def test_slow_response_times_out():
    async def handler(request):
        await asyncio.sleep(5)
        return httpx.Response(200, headers={"content-type": "text/html"}, text="late")

    with pytest.raises(FetchTimeout) as exc:
        await _fetcher(handler, timeout=0.05).fetch_text(URL)
    assert exc.value.message == "Request timed out."


@pytest.mark.asyncio
async def test_slow_body_times_out():
    async def body():
        yield b"<html>"
        await asyncio.sleep(5)
        yield b"</html>"

    def handler(request):
        return httpx.Response(200, headers={"content-type": "text/html"}, content=body())

    with pytest.raises(FetchTimeout):
        await _fetcher(handler, timeout=0.05).fetch_text(URL)


def test_from_settings_overrides_timeout(settings):
    fetcher = Fetcher.from_settings(settings, timeout_seconds=15.0)
    assert fetcher.timeout_seconds == 15.0
    assert fetcher.max_body_bytes == settings.max_body_bytes
    assert fetcher.headers["User-Agent"] == settings.user_agent
