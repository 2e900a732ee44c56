from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Union

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True)
class FetchRequest:
    url: str
    timeout_seconds: float
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class FeedResponse:
    """A 200 response whose body has not been consumed yet."""
    status_code: int
    headers: Mapping[str, str]
    header_params: Dict[str, str]
    body: AsyncIterator[bytes]


@dataclass(frozen=True)
class Meta:
    """
    Feed-level fields, emitted once before any Entry.

    WARNING: field names are shared by every feed format; keep them format-agnostic.
    """
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    favicon: Optional[str] = None
    author_name: Optional[str] = None


@dataclass(frozen=True)
class Entry:
    guid: Optional[str] = None
    link: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    # plain URL string, or a mapping such as {"url": ..., "title": ...}
    image: Union[str, Dict[str, Any], None] = None
    pub_date: Optional[str] = None
    author_name: Optional[str] = None


@dataclass(frozen=True)
class ParseError:
    reason: str


@dataclass(frozen=True)
class End:
    pass


ParserEvent = Union[Meta, Entry, ParseError, End]


@dataclass(frozen=True)
class ConvertResult:
    status: int
    body: bytes
    content_type: str = JSON_CONTENT_TYPE

    @property
    def ok(self) -> bool:
        return self.status == 200
