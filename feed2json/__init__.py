"""
feed2json

Fetches an RSS/Atom feed and returns it as a JSON Feed (https://jsonfeed.org/version/1) document.

Core ideas:
- Input: one absolute http(s) feed URL, plus a compact/pretty flag
- Process: fetch → parse (streaming events) → normalize → emit
- Output: ConvertResult (200 + JSON document, or 500 + {"err": reason})

Example
-------
import asyncio
from feed2json import convert

result = asyncio.run(convert("https://feeds.bbci.co.uk/news/rss.xml", compact=True))
print(result.status, result.body.decode("utf-8"))
"""
from .config import Settings
from .core import FeedConverter, ResponseState, convert
from .exceptions import ConvertError, FeedParseError, TransportError, UpstreamStatusError
from .models import ConvertResult, End, Entry, Meta, ParseError

__all__ = [
    "ConvertError",
    "ConvertResult",
    "End",
    "Entry",
    "FeedConverter",
    "FeedParseError",
    "Meta",
    "ParseError",
    "ResponseState",
    "Settings",
    "TransportError",
    "UpstreamStatusError",
    "convert",
]
