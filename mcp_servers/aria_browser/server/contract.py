"""Protocol and tool contract definitions.

Single source of truth for supported MCP protocol versions, server identity,
capabilities advertised by initialize and the tool list.
"""

from __future__ import annotations

from typing import Any

SERVER_INFO: dict[str, str] = {"name": "aria-browser", "version": "0.1.0"}

SUPPORTED_PROTOCOL_VERSIONS = ["2025-06-18", "2024-11-05"]
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]
DEFAULT_PROTOCOL_VERSION = LATEST_PROTOCOL_VERSION

CAPABILITIES: dict[str, Any] = {
    "logging": {},
    "tools": {"listChanged": False},
}


def select_protocol(requested: Any) -> str:
    if isinstance(requested, str) and requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return DEFAULT_PROTOCOL_VERSION


def initialize_result(protocol: str) -> dict[str, Any]:
    return {
        "protocolVersion": protocol,
        "serverInfo": SERVER_INFO,
        "capabilities": CAPABILITIES,
        "instructions": "Use browser_snapshot to read the page; element refs in it target browser_click.",
    }


def tools_list() -> list[dict[str, Any]]:
    from ..tools import ALL_TOOLS

    return [spec.schema for spec in ALL_TOOLS]
