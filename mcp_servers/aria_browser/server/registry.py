"""
Tool registry with dispatch table for the MCP server.

Every call goes through the same pipeline: build a ``Response``, run the
handler against it, finish it (snapshot capture + title refresh) and
serialize the result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..http_client import HttpClientError
from ..response import Response
from ..tools.base import SmartToolError
from .payload import ResponsePayload, serialize_response
from .types import ToolSpec

if TYPE_CHECKING:
    from ..context import BrowserContext

logger = logging.getLogger("mcp.aria_browser.registry")


class ToolRegistry:
    """Registry for tool specs with automatic tab lifecycle management."""

    def __init__(self) -> None:
        self._specs: dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        """Register a tool spec."""
        self._specs[spec.name] = spec

    def register_many(self, specs: list[ToolSpec]) -> None:
        for spec in specs:
            self.register(spec)

    def get(self, name: str) -> ToolSpec | None:
        return self._specs.get(name)

    def has(self, name: str) -> bool:
        return name in self._specs

    def schemas(self) -> list[dict[str, Any]]:
        return [spec.schema for spec in self._specs.values()]

    async def dispatch(self, name: str, context: BrowserContext, arguments: dict[str, Any]) -> ResponsePayload:
        """
        Run a tool and serialize its response.

        Handler failures are recorded on the response as errors, so the caller
        still gets tabs and page state. Failures while finishing the response
        propagate.

        Raises:
            KeyError: If tool not found
        """
        spec = self._specs.get(name)
        if spec is None:
            raise KeyError(f"Unknown tool: {name}")

        response = Response(context, name, arguments)
        try:
            if spec.requires_tab:
                await context.ensure_tab()
            await spec.handler(context, arguments, response)
        except SmartToolError as e:
            logger.info("tool_error tool=%s action=%s reason=%s", e.tool, e.action, e.reason)
            response.add_error(str(e))
        except HttpClientError as e:
            logger.info("http_error tool=%s %s", name, e)
            response.add_error(str(e))
        except Exception as e:
            logger.exception("tool_handler_failed tool=%s", name)
            response.add_error(str(e))

        await response.finish()
        return serialize_response(
            response,
            context.tabs(),
            image_responses=context.config.image_responses,
            console_max_chars=context.config.console_max_chars,
        )

    @property
    def tool_names(self) -> list[str]:
        return list(self._specs.keys())

    def __len__(self) -> int:
        return len(self._specs)


def create_default_registry() -> ToolRegistry:
    """Create registry with every browser tool."""
    from ..tools import ALL_TOOLS

    registry = ToolRegistry()
    registry.register_many(ALL_TOOLS)
    return registry
