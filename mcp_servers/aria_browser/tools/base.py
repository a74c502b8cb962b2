"""
Base utilities for browser tools.

Provides:
- SmartToolError: Structured errors for AI agents
- URL validation for navigation
- Small parameter readers shared by the handlers
"""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..config import BrowserConfig


# Error Handling
@dataclass
class SmartToolError(Exception):
    """Structured error with context for AI agents."""

    tool: str
    action: str
    reason: str
    suggestion: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.tool}] {self.action} failed: {self.reason}. Suggestion: {self.suggestion}"


# URL Validation
def ensure_allowed_navigation(url: str, config: BrowserConfig) -> None:
    """Allow about:/data:/blob:/file: and http(s) hosts on the allowlist."""
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme in ("about", "data", "blob"):
        return
    if parsed.scheme == "file":
        if config.allow_hosts:
            raise SmartToolError(
                tool="browser_navigate_url",
                action="validate",
                reason="file:// navigation is disabled while MCP_ALLOW_HOSTS is set",
                suggestion="Unset MCP_ALLOW_HOSTS (or set it to *) to allow local files",
            )
        return
    if parsed.scheme not in ("http", "https"):
        raise SmartToolError(
            tool="browser_navigate_url",
            action="validate",
            reason=f"Unsupported scheme: {parsed.scheme or '<none>'} (allowed: http, https, about, data, blob, file)",
            suggestion="Pass a full URL such as https://example.com",
        )
    if not config.is_host_allowed(parsed.hostname or ""):
        raise SmartToolError(
            tool="browser_navigate_url",
            action="validate",
            reason=f"Host {parsed.hostname} is not in allowlist",
            suggestion="Add the host to MCP_ALLOW_HOSTS",
        )


def require_str(params: dict[str, Any], key: str, *, tool: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value.strip():
        raise SmartToolError(
            tool=tool,
            action="validate",
            reason=f"Missing required string parameter '{key}'",
            suggestion=f"Pass {key}=...",
        )
    return value


def optional_int(params: dict[str, Any], key: str, *, tool: str) -> int | None:
    value = params.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SmartToolError(
            tool=tool,
            action="validate",
            reason=f"Parameter '{key}' must be a number",
            suggestion=f"Pass {key} as an integer",
        )
    return int(value)


def choice(params: dict[str, Any], key: str, allowed: tuple[str, ...], *, tool: str, default: str | None = None) -> str:
    value = params.get(key, default)
    if value not in allowed:
        raise SmartToolError(
            tool=tool,
            action="validate",
            reason=f"Parameter '{key}' must be one of {', '.join(allowed)}",
            suggestion=f"Got {value!r}",
        )
    return str(value)
