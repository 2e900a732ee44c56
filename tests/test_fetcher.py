from __future__ import annotations

import httpx
import pytest

from feed2json.config import DEFAULT_ACCEPT, DEFAULT_USER_AGENT, Settings
from feed2json.exceptions import TransportError, UpstreamStatusError
from feed2json.fetcher import build_request, open_feed

URL = "https://example.com/feed.xml"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_build_request_defaults():
    request = build_request(URL)
    assert request.url == URL
    assert request.timeout_seconds == 10.0
    assert request.headers == {"User-Agent": DEFAULT_USER_AGENT, "Accept": DEFAULT_ACCEPT}
    assert request.headers["Accept"] == "text/html,application/xhtml+xml"


def test_build_request_uses_settings():
    request = build_request(URL, Settings(timeout_seconds=2.5, user_agent="ua/1"))
    assert request.timeout_seconds == 2.5
    assert request.headers["User-Agent"] == "ua/1"


@pytest.mark.asyncio
async def test_success_exposes_headers_and_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["ua"] = request.headers["user-agent"]
        seen["accept"] = request.headers["accept"]
        return httpx.Response(
            200,
            headers={"content-type": "text/xml; charset=ISO-8859-1"},
            content=b"<rss/>",
        )

    async with _client(handler) as client:
        async with open_feed(URL, client=client) as response:
            body = b"".join([chunk async for chunk in response.body])

    assert seen == {"method": "GET", "ua": DEFAULT_USER_AGENT, "accept": DEFAULT_ACCEPT}
    assert response.status_code == 200
    assert response.header_params == {"charset": "ISO-8859-1"}
    assert body == b"<rss/>"


@pytest.mark.asyncio
async def test_non_200_is_a_failure_even_with_a_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, content=b"<rss/>")

    async with _client(handler) as client:
        with pytest.raises(UpstreamStatusError) as exc_info:
            async with open_feed(URL, client=client):
                pass

    assert exc_info.value.status == 500
    assert exc_info.value.status_code == 404
    assert "bad status code" in exc_info.value.reason


@pytest.mark.asyncio
async def test_connect_error_is_a_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(TransportError) as exc_info:
            async with open_feed(URL, client=client):
                pass

    assert exc_info.value.status == 500
    assert exc_info.value.reason == "error when requesting the feed : connection refused"


@pytest.mark.asyncio
async def test_timeout_is_a_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with _client(handler) as client:
        with pytest.raises(TransportError):
            async with open_feed(URL, client=client):
                pass


class _BrokenStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b"<rss version='2.0'><channel><title>t</title>"
        raise httpx.ReadError("connection reset")


@pytest.mark.asyncio
async def test_body_stream_failure_is_a_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=_BrokenStream())

    async with _client(handler) as client:
        with pytest.raises(TransportError) as exc_info:
            async with open_feed(URL, client=client) as response:
                async for _ in response.body:
                    pass

    assert "connection reset" in exc_info.value.reason


@pytest.mark.asyncio
async def test_injected_client_is_left_open():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"")

    client = _client(handler)
    async with open_feed(URL, client=client):
        pass
    assert not client.is_closed
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["http://xn--zz.com/", "http://․.com/"])
async def test_unencodable_host_is_a_transport_error(url):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request should be sent")

    async with _client(handler) as client:
        with pytest.raises(TransportError) as exc_info:
            async with open_feed(url, client=client):
                pass

    assert exc_info.value.status == 500
    assert exc_info.value.reason.startswith("error when requesting the feed : ")
