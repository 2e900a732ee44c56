from __future__ import annotations

import logging
import threading
from typing import Optional

import httpx

from .config import Settings
from .emitter import error_body, render
from .exceptions import ConvertError, FeedParseError
from .fetcher import open_feed
from .models import JSON_CONTENT_TYPE, ConvertResult, End, Entry, Meta, ParseError
from .normalizer import JsonFeedBuilder
from .parser import iter_events

logger = logging.getLogger(__name__)


class ResponseState:
    """
    Single-assignment terminal outcome of one conversion.

    settle() succeeds for the first caller only; every later attempt is refused and
    counted in `rejected` so callers can check that exactly one outcome was produced.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._result: Optional[ConvertResult] = None
        self.rejected = 0

    @property
    def responded(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> Optional[ConvertResult]:
        return self._result

    def settle(self, result: ConvertResult) -> bool:
        with self._lock:
            if self._result is not None:
                self.rejected += 1
                return False
            self._result = result
            return True


class FeedConverter:
    """
    High-level API: fetch an RSS/Atom feed and return it as a JSON Feed document.

    Pipeline: fetch → parse (streaming events) → normalize → emit
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.client = client

    async def convert(self, url: str, compact: bool = False, *, state: Optional[ResponseState] = None) -> ConvertResult:
        """
        Convert the feed at `url`. Exactly one result is settled per call: 200 with the
        document, or 500 with {"err": reason}. `url` must already be validated.
        """
        state = state or ResponseState()
        if state.responded:
            return state.result
        logger.info("queryUrl=%s minify=%s", url, compact)
        try:
            await self._run(url, compact, state)
        except ConvertError as e:
            if state.settle(ConvertResult(status=e.status, body=error_body(e.reason))):
                logger.warning("%s: %s", e.__class__.__name__, e.reason)
        result = state.result
        if result is None:
            raise RuntimeError(f"conversion of {url} finished without an outcome")
        return result

    async def _run(self, url: str, compact: bool, state: ResponseState) -> None:
        builder = JsonFeedBuilder()
        async with open_feed(url, settings=self.settings, client=self.client) as response:
            async for event in iter_events(response.body):
                if state.responded:
                    # late events after the outcome are dropped without side effects
                    return
                if isinstance(event, Meta):
                    builder.on_meta(event)
                elif isinstance(event, Entry):
                    builder.on_entry(event)
                elif isinstance(event, ParseError):
                    raise FeedParseError(f"error parsing feed : {event.reason}")
                elif isinstance(event, End):
                    body = render(builder.document, compact=compact)
                    if state.settle(ConvertResult(status=200, body=body, content_type=JSON_CONTENT_TYPE)):
                        logger.info("feedparser.end: sent %d items", len(builder.items or []))
                    return


async def convert(
    url: str,
    compact: bool = False,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> ConvertResult:
    """Convert one feed URL with a throwaway FeedConverter."""
    return await FeedConverter(settings=settings, client=client).convert(url, compact)
