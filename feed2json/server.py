from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from .config import Settings
from .core import FeedConverter

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "y", "on"}


def parse_bool(value: Optional[str]) -> bool:
    """Loose query-string boolean: true/yes/on/1/y (any case) are True, anything else False."""
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


def is_web_uri(value: str) -> bool:
    """Absolute http(s) URI with a host."""
    try:
        parts = urlsplit(value.strip())
        port = parts.port
    except ValueError:
        return False
    if parts.scheme.lower() not in ("http", "https"):
        return False
    if not parts.hostname:
        return False
    return port is None or 0 < port < 65536


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"err": message})


def create_app(settings: Optional[Settings] = None, converter: Optional[FeedConverter] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    converter = converter or FeedConverter(settings=settings)
    app = FastAPI(title="feed2json", docs_url=None, redoc_url=None)

    @app.get("/convert")
    async def convert_feed(
        url: Optional[str] = Query(default=None),
        minify: Optional[str] = Query(default=None),
    ) -> Response:
        if not url:
            return _error(400, "provide a 'url' parameter in your query")
        if not is_web_uri(url):
            return _error(400, f"invalid 'url' : {url}")

        result = await converter.convert(url.strip(), compact=parse_bool(minify))
        return Response(content=result.body, status_code=result.status, media_type=result.content_type)

    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
    else:
        logger.info("static directory %s not found, serving /convert only", static_dir)

    return app
