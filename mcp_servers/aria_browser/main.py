"""
MCP server exposing a Chrome tab set through accessibility snapshots.

This module provides the entry point and JSON-RPC protocol handling over stdio.
Tool dispatch is handled by the registry in server/registry.py.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from typing import Any

from .config import RESPONSE_FORMAT_MARKDOWN, BrowserConfig
from .context import BrowserContext
from .http_client import HttpClientError
from .server.contract import (
    DEFAULT_PROTOCOL_VERSION,
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    initialize_result,
    select_protocol,
    tools_list,
)
from .server.redaction import redact_jsonrpc_for_log, redact_tool_arguments
from .server.registry import create_default_registry
from .server.types import ToolResult

logger = logging.getLogger("mcp.aria_browser")

__all__ = [
    "SUPPORTED_PROTOCOL_VERSIONS",
    "LATEST_PROTOCOL_VERSION",
    "DEFAULT_PROTOCOL_VERSION",
    "McpServer",
    "main",
]


def _write_message(payload: dict[str, Any]) -> None:
    """Write JSON-RPC message to stdout."""
    if os.environ.get("MCP_TRACE"):
        logger.info("send %s", redact_jsonrpc_for_log(payload))
    data = json.dumps(payload, ensure_ascii=False)
    sys.stdout.buffer.write((data + "\n").encode())
    sys.stdout.buffer.flush()


def _read_message() -> dict[str, Any] | None:
    """Read one JSON-RPC message from stdin; ``None`` at EOF, ``{}`` for a blank line."""
    line = sys.stdin.buffer.readline()
    if not line:
        return None
    line = line.strip()
    if not line:
        return {}
    msg = json.loads(line.decode())
    if os.environ.get("MCP_TRACE"):
        logger.info("recv %s", redact_jsonrpc_for_log(msg))
    return msg


class McpServer:
    """MCP server with registry-based tool dispatch."""

    def __init__(self, config: BrowserConfig | None = None) -> None:
        self.config = config or BrowserConfig.from_env()
        self.context = BrowserContext(self.config)
        self.registry = create_default_registry()

    def handle_initialize(self, request_id: Any, params: dict[str, Any] | None = None) -> None:
        requested = (params or {}).get("protocolVersion") if isinstance(params, dict) else None
        protocol = select_protocol(requested)
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": initialize_result(protocol)})

    def handle_list_tools(self, request_id: Any) -> None:
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": {"tools": tools_list()}})

    def _log_call(self, name: str, arguments: dict[str, Any]) -> None:
        """Log tool call with sanitized arguments."""
        logger.info("tool=%s args=%s", name, redact_tool_arguments(name, arguments))

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Run a tool; errors outside the tool's own response become error results."""
        self._log_call(name, arguments)
        try:
            if not name:
                return ToolResult.error("Missing tool name")
            if not self.registry.has(name):
                return ToolResult.error(f"Unknown tool: {name}", tool=name)
            payload = await self.registry.dispatch(name, self.context, arguments)
        except HttpClientError as e:
            logger.info("http_error %s", str(e))
            return ToolResult.error(str(e), tool=name)
        except Exception as exc:
            logger.exception("tool_call_failed")
            return ToolResult.error(str(exc), tool=name)
        return ToolResult.from_payload(payload, markdown=self.config.response_format == RESPONSE_FORMAT_MARKDOWN)

    async def handle_call_tool(self, request_id: Any, name: str, arguments: dict[str, Any]) -> None:
        result = await self.call_tool(name, arguments)
        _write_message(
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {"content": result.to_content_list(), "isError": result.is_error},
            }
        )

    async def dispatch(self, message: dict[str, Any]) -> None:
        """Dispatch incoming JSON-RPC message to appropriate handler."""
        if not message:
            return

        method = message.get("method")
        request_id = message.get("id")
        params = message.get("params") or {}

        if method == "initialize":
            self.handle_initialize(request_id, params)
        elif method == "notifications/initialized":
            return
        elif method in ("tools/list", "list_tools"):
            self.handle_list_tools(request_id)
        elif method in ("tools/call", "call_tool"):
            name = params.get("name")
            arguments = params.get("arguments") or params.get("args") or {}
            await self.handle_call_tool(request_id, name or "", arguments)
        elif method == "ping":
            _write_message({"jsonrpc": "2.0", "id": request_id, "result": {}})
        else:
            _write_message(
                {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {"code": -32601, "message": f"Method {method} not found"},
                }
            )

    async def serve(self) -> None:
        """Process stdin messages one at a time until EOF."""
        try:
            while True:
                try:
                    message = await asyncio.to_thread(_read_message)
                except json.JSONDecodeError as exc:
                    logger.warning("invalid_json %s", exc)
                    _write_message({"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}})
                    continue
                if message is None:
                    break
                await self.dispatch(message)
        finally:
            await self.context.close_browser_context()


def main() -> None:
    """Main entry point for MCP server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    asyncio.run(McpServer().serve())


if __name__ == "__main__":
    main()
