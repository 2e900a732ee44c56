from __future__ import annotations

from typing import Any, Dict, List, Optional

from .models import Entry, Meta

JSON_FEED_VERSION = "https://jsonfeed.org/version/1"


def _set(target: Dict[str, Any], key: str, value: Any) -> None:
    # Absent or empty source fields leave the key out entirely.
    if value:
        target[key] = value


class JsonFeedBuilder:
    """
    Accumulates parser events into a JSON Feed document.

    Keys are inserted in the order of https://jsonfeed.org/version/1 so that the
    serialized output follows it too.
    """

    def __init__(self) -> None:
        self.document: Dict[str, Any] = {}

    @property
    def items(self) -> Optional[List[Dict[str, Any]]]:
        return self.document.get("items")

    def on_meta(self, meta: Meta) -> None:
        data: Dict[str, Any] = {"version": JSON_FEED_VERSION}
        _set(data, "title", meta.title)
        _set(data, "home_page_url", meta.link)
        _set(data, "description", meta.description)
        # icon, user_comment, next_url, expired, hubs: nothing in RSS/Atom maps to them
        _set(data, "favicon", meta.favicon)
        if meta.author_name:
            data["author"] = {"name": meta.author_name}
        data["items"] = []
        self.document = data

    def on_entry(self, entry: Entry) -> Dict[str, Any]:
        if self.items is None:
            self.on_meta(Meta())

        item: Dict[str, Any] = {}
        # Entries without guid/link are kept even though JSON Feed expects an id.
        _set(item, "guid", entry.guid)
        _set(item, "url", entry.link)
        _set(item, "title", entry.title)
        _set(item, "content_html", entry.description)
        _set(item, "summary", entry.summary)
        # structured images (media/enclosure/itunes) have no string form here
        if isinstance(entry.image, str):
            _set(item, "image", entry.image)
        _set(item, "date_published", entry.pub_date)
        if entry.author_name:
            item["author"] = {"name": entry.author_name}

        self.document["items"].append(item)
        return item
