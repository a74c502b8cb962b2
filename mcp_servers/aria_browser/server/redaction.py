"""Redaction utilities for logging.

Removes obvious secrets (URL credentials, token-like query params, prompt
text) and large payloads (screenshots) before anything reaches the log.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_SENSITIVE_KEYS = {
    "secret",
    "password",
    "pass",
    "pwd",
    "token",
    "access_token",
    "refresh_token",
    "auth",
    "authorization",
    "cookie",
    "api_key",
    "api-key",
    "apikey",
    "key",
    "session",
    "sig",
    "signature",
}

# Argument keys whose values never hit the log
_SENSITIVE_ARGUMENTS = {"promptText", "paths"}


def _is_sensitive_key(key: str) -> bool:
    return (key or "").strip().lower() in _SENSITIVE_KEYS


def _redact_query(query: str) -> str | None:
    """Redacted query string, or ``None`` when nothing needed redaction."""
    pairs = parse_qsl(query, keep_blank_values=True)
    out_pairs = [(k, "<redacted>") if _is_sensitive_key(k) and v else (k, v) for k, v in pairs]
    if out_pairs == pairs:
        return None
    return urlencode(out_pairs, doseq=True)


def redact_url(url: str) -> str:
    """Drop userinfo and redact token-like params in the query or an OAuth-style fragment.

    Returns the original URL unchanged when no redaction is needed.
    """
    if not isinstance(url, str) or not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    changed = False
    netloc = parts.netloc
    query = parts.query
    fragment = parts.fragment
    if "@" in netloc:
        netloc = netloc.split("@", 1)[1]
        changed = True

    if query and (redacted := _redact_query(query)) is not None:
        query = redacted
        changed = True
    if "=" in fragment and (redacted := _redact_query(fragment)) is not None:
        fragment = redacted
        changed = True

    if not changed:
        return url
    return urlunsplit((parts.scheme, netloc, parts.path, query, fragment))


def _redacted_summary(value: Any) -> str:
    if isinstance(value, str):
        return f"<redacted str len={len(value)}>"
    if isinstance(value, (list, tuple)):
        return f"<redacted list len={len(value)}>"
    return "<redacted>"


def redact_tool_arguments(tool: str, args: dict[str, Any]) -> dict[str, Any]:
    """Redact tool arguments for safe logging."""
    out: dict[str, Any] = {}
    for key, value in (args or {}).items():
        if key in _SENSITIVE_ARGUMENTS or _is_sensitive_key(key):
            out[key] = _redacted_summary(value)
        elif key == "url" and isinstance(value, str):
            out[key] = redact_url(value)
        else:
            out[key] = value
    return out


def redact_jsonrpc_for_log(payload: dict[str, Any]) -> dict[str, Any]:
    """Redact a JSON-RPC message for trace logging (tool args, image data)."""
    msg = dict(payload)
    params = msg.get("params")
    if msg.get("method") in {"tools/call", "call_tool"} and isinstance(params, dict):
        name = params.get("name")
        args = params.get("arguments") or params.get("args")
        if isinstance(name, str) and isinstance(args, dict):
            msg["params"] = {**params, "arguments": redact_tool_arguments(name, args)}
            msg["params"].pop("args", None)

    result = msg.get("result")
    if isinstance(result, dict) and isinstance(result.get("content"), list):
        content = []
        for item in result["content"]:
            if isinstance(item, dict) and item.get("type") == "image" and isinstance(item.get("data"), str):
                item = {**item, "data": f"<omitted image base64 len={len(item['data'])}>"}
            content.append(item)
        msg["result"] = {**result, "content": content}
    return msg


__all__ = ["redact_jsonrpc_for_log", "redact_tool_arguments", "redact_url"]
