from __future__ import annotations

import json
from typing import Any
from urllib.error import URLError
from urllib.request import Request, urlopen


class HttpClientError(Exception):
    pass


def http_json(url: str, *, method: str = "GET", timeout: float = 2.0) -> Any:
    """Fetch a CDP HTTP endpoint (``/json/...``) and decode the body.

    ``/json/activate`` and ``/json/close`` answer with plain text; that text is
    returned as-is.
    """
    req = Request(url, method=method, headers={"User-Agent": "aria-browser-mcp/1.0"})
    try:
        with urlopen(req, timeout=timeout) as resp:
            body = resp.read().decode(errors="replace")
    except (TimeoutError, URLError, OSError) as exc:
        raise HttpClientError(f"{method} {url} failed: {exc}") from exc
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        return body
