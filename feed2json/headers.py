from __future__ import annotations

from typing import Dict, Optional


def get_header_params(header: Optional[str]) -> Dict[str, str]:
    """
    Parse the parameters of a Content-Type style header.

    "text/xml; charset=ISO-8859-1" -> {"charset": "ISO-8859-1"}

    The primary value before the first ';' is not part of the result. Never raises;
    malformed input yields an empty or partial mapping.
    """
    params: Dict[str, str] = {}
    if not header:
        return params
    for segment in header.split(";")[1:]:
        key, _, value = segment.partition("=")
        key = key.strip()
        if not key:
            continue
        params[key] = value.strip()
    return params
