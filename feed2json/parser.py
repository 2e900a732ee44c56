from __future__ import annotations

import logging
import time
from typing import Any, AsyncIterable, AsyncIterator, Dict, FrozenSet, Iterable, List, Optional, Union

from feedparser.datetimes import _parse_date
from lxml import etree

from .models import End, Entry, Meta, ParseError, ParserEvent

logger = logging.getLogger(__name__)

ATOM_NAMESPACES = ("http://www.w3.org/2005/Atom", "http://purl.org/atom/ns#")
RSS_NAMESPACES = ("", "http://purl.org/rss/1.0/", "http://my.netscape.com/rdf/simple/0.9/")
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
DC_NS = "http://purl.org/dc/elements/1.1/"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
MEDIA_NS = "http://search.yahoo.com/mrss/"
ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"

_RDF_ABOUT = f"{{{RDF_NS}}}about"


def _tag(ns: str, local: str) -> str:
    return f"{{{ns}}}{local}" if ns else local


def _rss(*locals_: str) -> FrozenSet[str]:
    return frozenset(_tag(ns, name) for ns in RSS_NAMESPACES for name in locals_)


def _ns(ns: str, *locals_: str) -> FrozenSet[str]:
    return frozenset(_tag(ns, name) for name in locals_)


def _children(el: Any, tags: FrozenSet[str]) -> Iterable[Any]:
    for child in el:
        if isinstance(child.tag, str) and child.tag in tags:
            yield child


def _first(el: Any, *tag_sets: FrozenSet[str]) -> Optional[Any]:
    for tags in tag_sets:
        for child in _children(el, tags):
            return child
    return None


def _text(el: Optional[Any]) -> Optional[str]:
    """
    Trimmed text of an element, or None when empty.
    Elements holding markup children (xhtml content, unescaped HTML) are serialized
    back to their inner markup.
    """
    if el is None:
        return None
    if len(el):
        parts = [el.text or ""]
        for child in el:
            parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
        value = "".join(parts)
    else:
        value = el.text or ""
    value = value.strip()
    return value or None


def _first_text(el: Any, *tag_sets: FrozenSet[str]) -> Optional[str]:
    """First non-empty text among children, trying tag sets in priority order."""
    for tags in tag_sets:
        for child in _children(el, tags):
            value = _text(child)
            if value:
                return value
    return None


def _format_date(value: Optional[str]) -> Optional[str]:
    """
    Parse an RSS/Atom date with feedparser's date handlers into an RFC 3339 UTC string.
    Unparseable dates are dropped.
    """
    if not value:
        return None
    try:
        parsed = _parse_date(value)
    except (ValueError, OverflowError, TypeError):
        parsed = None
    if parsed is None:
        logger.debug("unparseable date: %r", value)
        return None
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", parsed)


class FeedEventParser:
    """
    Push parser turning RSS/Atom bytes into Meta, Entry*, then End or ParseError.

    feed() and close() return the events completed so far. After a terminal event
    every further call returns an empty list. Entries are cleared from the tree once
    emitted so memory stays bounded by the largest single entry.
    """

    def __init__(self) -> None:
        self._parser = etree.XMLPullParser(
            events=("start", "end"),
            recover=True,
            resolve_entities=False,
            remove_comments=True,
            remove_pis=True,
            huge_tree=True,
        )
        self._kind: Optional[str] = None  # "rss" | "atom"
        self._atom_ns = ""
        self._container: Any = None
        self._meta_sent = False
        self._item_depth = 0
        self._entries = 0
        self._root: Any = None
        self._root_closed = False
        self._closing = False
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def feed(self, data: bytes) -> List[ParserEvent]:
        if self._done or not data:
            return []
        try:
            self._parser.feed(data)
        except etree.XMLSyntaxError as e:
            events = self._drain()
            return events if self._done else events + self._fail(str(e) or "unparseable feed")
        return self._drain()

    def close(self) -> List[ParserEvent]:
        if self._done:
            return []
        error: Optional[str] = None
        # a root closed only by close() means the body was cut off
        self._closing = True
        try:
            self._parser.close()
        except etree.XMLSyntaxError as e:
            error = str(e) or "unparseable feed"
        events = self._drain()
        if self._done:
            return events
        if self._kind is None:
            return events + self._fail(error or "Not a feed")
        if error:
            return events + self._fail(error)
        if not self._root_closed or self._truncated():
            return events + self._fail("unexpected end of feed")
        events.extend(self._emit_meta())
        events.append(End())
        self._done = True
        logger.debug("parsed %d entries", self._entries)
        return events

    # -- event handling ----------------------------------------------------

    def _truncated(self) -> bool:
        return any(e.type == etree.ErrorTypes.ERR_TAG_NOT_FINISHED for e in self._parser.error_log)

    def _fail(self, reason: str) -> List[ParserEvent]:
        self._done = True
        return [ParseError(reason)]

    def _drain(self) -> List[ParserEvent]:
        events: List[ParserEvent] = []
        for action, el in self._parser.read_events():
            if self._done:
                break
            if action == "start":
                events.extend(self._on_start(el))
            else:
                events.extend(self._on_end(el))
        return events

    def _is_item(self, el: Any) -> bool:
        if self._kind == "atom":
            return el.tag == _tag(self._atom_ns, "entry")
        return el.tag in _ITEM_TAGS

    def _on_start(self, el: Any) -> List[ParserEvent]:
        if self._kind is None:
            return self._detect(el)
        if self._is_item(el):
            events = [] if self._item_depth else self._emit_meta()
            self._item_depth += 1
            return events
        if self._kind == "rss" and self._container is None and el.tag in _CHANNEL_TAGS:
            self._container = el
        return []

    def _on_end(self, el: Any) -> List[ParserEvent]:
        if self._kind is None:
            return []
        if el is self._root and not self._closing:
            self._root_closed = True
        if self._is_item(el) and self._item_depth:
            self._item_depth -= 1
            if self._item_depth:
                return []
            entry = self._atom_entry(el) if self._kind == "atom" else self._rss_entry(el)
            self._entries += 1
            logger.debug(" - post = %s", entry.guid)
            _release(el)
            return [entry]
        if el is self._container:
            return self._emit_meta()
        return []

    def _detect(self, root: Any) -> List[ParserEvent]:
        self._root = root
        qname = etree.QName(root)
        if qname.localname == "rss" and not qname.namespace:
            self._kind = "rss"
        elif qname.localname == "RDF" and qname.namespace == RDF_NS:
            self._kind = "rss"
        elif qname.localname == "feed" and qname.namespace in ATOM_NAMESPACES:
            self._kind = "atom"
            self._atom_ns = qname.namespace
            self._container = root
        else:
            return self._fail("Not a feed")
        return []

    def _emit_meta(self) -> List[ParserEvent]:
        if self._meta_sent:
            return []
        self._meta_sent = True
        if self._container is None:
            meta = Meta()
        elif self._kind == "atom":
            meta = self._atom_meta(self._container)
        else:
            meta = self._rss_meta(self._container)
        logger.debug("meta.link: %s", meta.link)
        return [meta]

    # -- RSS 0.9x / 1.0 / 2.0 ------------------------------------------------

    def _rss_meta(self, channel: Any) -> Meta:
        return Meta(
            title=_first_text(channel, _rss("title")),
            link=_first_text(channel, _rss("link")),
            description=_first_text(channel, _rss("description"), _ns(ITUNES_NS, "summary")),
            author_name=_first_text(
                channel,
                _rss("managingEditor"),
                _rss("webMaster"),
                _ns(DC_NS, "creator"),
                _ns(ITUNES_NS, "author"),
            ),
        )

    def _rss_entry(self, item: Any) -> Entry:
        guid_el = _first(item, _rss("guid"))
        guid = _text(guid_el) or item.get(_RDF_ABOUT) or None
        link = _first_text(item, _rss("link"))
        if not link and guid_el is not None and guid:
            if guid_el.get("isPermaLink", "true").lower() != "false" and guid.startswith(("http://", "https://")):
                link = guid
        return Entry(
            guid=guid,
            link=link,
            title=_first_text(item, _rss("title")),
            description=_first_text(item, _ns(CONTENT_NS, "encoded"), _rss("description")),
            summary=_first_text(item, _rss("description"), _ns(ITUNES_NS, "subtitle")),
            image=_rss_image(item),
            pub_date=_format_date(_first_text(item, _rss("pubDate"), _ns(DC_NS, "date"))),
            author_name=_first_text(item, _ns(DC_NS, "creator"), _rss("author"), _ns(ITUNES_NS, "author")),
        )

    # -- Atom 0.3 / 1.0 ------------------------------------------------------

    def _atom(self, *locals_: str) -> FrozenSet[str]:
        return _ns(self._atom_ns, *locals_)

    def _atom_link(self, el: Any) -> Optional[str]:
        fallback = None
        for link in _children(el, self._atom("link")):
            href = (link.get("href") or "").strip()
            if not href:
                continue
            if link.get("rel", "alternate") == "alternate":
                return href
            fallback = fallback or href
        return fallback

    def _atom_author(self, el: Any) -> Optional[str]:
        author = _first(el, self._atom("author"))
        if author is None:
            return None
        return _first_text(author, self._atom("name"), self._atom("email"))

    def _atom_meta(self, feed: Any) -> Meta:
        return Meta(
            title=_first_text(feed, self._atom("title")),
            link=self._atom_link(feed),
            description=_first_text(feed, self._atom("subtitle"), self._atom("tagline")),
            favicon=_first_text(feed, self._atom("icon")),
            author_name=self._atom_author(feed),
        )

    def _atom_entry(self, entry: Any) -> Entry:
        thumbnail = _first(entry, _ns(MEDIA_NS, "thumbnail"))
        image: Optional[Dict[str, Any]] = None
        if thumbnail is not None and thumbnail.get("url"):
            image = {"url": thumbnail.get("url")}
        return Entry(
            guid=_first_text(entry, self._atom("id")),
            link=self._atom_link(entry),
            title=_first_text(entry, self._atom("title")),
            description=_first_text(entry, self._atom("content"), self._atom("summary")),
            summary=_first_text(entry, self._atom("summary")),
            image=image,
            pub_date=_format_date(
                _first_text(
                    entry,
                    self._atom("published"),
                    self._atom("updated"),
                    self._atom("issued"),
                    self._atom("modified"),
                )
            ),
            author_name=self._atom_author(entry),
        )


_ITEM_TAGS = _rss("item")
_CHANNEL_TAGS = _rss("channel")


def _rss_image(item: Any) -> Union[str, Dict[str, Any], None]:
    """
    A bare <image>URL</image> yields a string; every other image source
    (media, itunes, enclosure, structured <image>) yields a mapping.
    """
    image_el = _first(item, _rss("image"))
    if image_el is not None:
        if len(image_el):
            url = _first_text(image_el, _rss("url"))
            if url:
                return {"url": url, "title": _first_text(image_el, _rss("title"))}
        else:
            text = _text(image_el)
            if text:
                return text
    for el in _children(item, _ns(MEDIA_NS, "thumbnail")):
        if el.get("url"):
            return {"url": el.get("url")}
    for el in _children(item, _ns(MEDIA_NS, "content")):
        if el.get("url") and (el.get("medium") == "image" or (el.get("type") or "").startswith("image/")):
            return {"url": el.get("url")}
    for el in _children(item, _ns(ITUNES_NS, "image")):
        if el.get("href"):
            return {"url": el.get("href")}
    for el in _children(item, _rss("enclosure")):
        if el.get("url") and (el.get("type") or "").startswith("image/"):
            return {"url": el.get("url")}
    return None


def _release(el: Any) -> None:
    el.clear(keep_tail=False)
    parent = el.getparent()
    if parent is None:
        return
    while el.getprevious() is not None:
        del parent[0]


async def iter_events(chunks: AsyncIterable[bytes]) -> AsyncIterator[ParserEvent]:
    """
    Consume body chunks and yield parser events in document order.
    Stops after the first terminal event (End or ParseError).
    """
    parser = FeedEventParser()
    async for chunk in chunks:
        for event in parser.feed(chunk):
            yield event
        if parser.done:
            return
    for event in parser.close():
        yield event
