from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from .config import Settings
from .exceptions import TransportError, UpstreamStatusError
from .headers import get_header_params
from .models import FeedResponse, FetchRequest

logger = logging.getLogger(__name__)


def build_request(url: str, settings: Optional[Settings] = None) -> FetchRequest:
    """The single GET issued per conversion. `url` must already be a validated absolute web URI."""
    settings = settings or Settings()
    return FetchRequest(
        url=url,
        timeout_seconds=settings.timeout_seconds,
        headers={
            "User-Agent": settings.user_agent,
            "Accept": settings.accept,
        },
    )


def _transport_error(exc: Exception) -> TransportError:
    detail = str(exc) or exc.__class__.__name__
    return TransportError(f"error when requesting the feed : {detail}")


async def _iter_body(response: httpx.Response) -> AsyncIterator[bytes]:
    # Timeouts and dropped connections can also happen while streaming the body.
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    except httpx.HTTPError as e:
        raise _transport_error(e) from e


@asynccontextmanager
async def open_feed(
    url: str,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> AsyncIterator[FeedResponse]:
    """
    Fetch a feed URL and yield the response with its body still unread.

    Raises TransportError on network issues and UpstreamStatusError on any status
    other than 200. A fresh client is used per call unless one is injected; an
    injected client is left open.
    """
    request = build_request(url, settings)
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(request.timeout_seconds),
            follow_redirects=True,
            limits=httpx.Limits(max_keepalive_connections=0),
        )
    try:
        async with client.stream(
            "GET",
            request.url,
            headers=request.headers,
            timeout=request.timeout_seconds,
        ) as response:
            logger.debug("response %s for %s", response.status_code, url)
            if response.status_code != 200:
                raise UpstreamStatusError(response.status_code)

            header_params = get_header_params(response.headers.get("content-type"))
            logger.info("headerParams: %s", header_params)

            yield FeedResponse(
                status_code=response.status_code,
                headers=response.headers,
                header_params=header_params,
                body=_iter_body(response),
            )
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
        # InvalidURL and IDNA errors are raised while building the request
        raise _transport_error(e) from e
    finally:
        if owns_client:
            await client.aclose()
