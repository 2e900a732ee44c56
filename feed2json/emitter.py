from __future__ import annotations

import json
from typing import Any, Dict


def render(document: Dict[str, Any], compact: bool = False) -> bytes:
    """Serialize a finished document as UTF-8 JSON, minified or with 2-space indentation."""
    if compact:
        text = json.dumps(document, ensure_ascii=False, separators=(",", ":"))
    else:
        text = json.dumps(document, ensure_ascii=False, indent=2)
    return text.encode("utf-8")


def error_body(reason: str) -> bytes:
    return render({"err": reason}, compact=True)
