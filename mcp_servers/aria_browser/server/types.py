"""
Type definitions for MCP server responses, handlers and the tab interfaces the
response engine reads from.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..config import BrowserConfig
    from ..response import Response
    from ..snapshot import TabSnapshot
    from .payload import ResponsePayload


class TabHandle(Protocol):
    """Read side of a browser tab, as seen by the response engine."""

    def last_title(self) -> str: ...

    def url(self) -> str: ...

    def is_current_tab(self) -> bool: ...

    async def capture_snapshot(self) -> TabSnapshot: ...

    async def update_title(self) -> None: ...


class TabProvider(Protocol):
    """Process-wide tab registry owned by the driver layer."""

    config: BrowserConfig

    def tabs(self) -> list[TabHandle]: ...

    def current_tab(self) -> TabHandle | None: ...

    def current_tab_or_die(self) -> TabHandle: ...


@dataclass(slots=True)
class ToolContent:
    """Single content item in tool response."""

    type: str  # "text" or "image"
    text: str | None = None
    data: str | None = None  # base64 for images
    mime_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP content format."""
        if self.type == "image":
            return {"type": "image", "data": self.data, "mimeType": self.mime_type}
        return {"type": "text", "text": self.text}


@dataclass(slots=True)
class ToolResult:
    """Result of a tool execution."""

    content: list[ToolContent] = field(default_factory=list)
    is_error: bool = False
    # Structured payload; not part of the MCP content list.
    data: Any | None = None

    @classmethod
    def from_payload(cls, payload: ResponsePayload, *, markdown: bool = False) -> ToolResult:
        """Wrap a serialized response: one text item, then one item per image."""
        wire = payload.to_dict()
        if markdown:
            from .markdown import render_payload_markdown

            text = render_payload_markdown(payload)
        else:
            text = json.dumps({k: v for k, v in wire.items() if k != "images"}, ensure_ascii=False, indent=2)
        content = [ToolContent(type="text", text=text)]
        for image in wire["images"]:
            content.append(ToolContent(type="image", data=image["data"], mime_type=image["mimeType"]))
        return cls(content=content, is_error=bool(payload.is_error), data=wire)

    @classmethod
    def error(
        cls,
        message: str,
        *,
        tool: str | None = None,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> ToolResult:
        """Create an error result for failures outside any tool response."""
        payload: dict[str, Any] = {"ok": False, "error": message}
        if tool:
            payload["tool"] = tool
        if suggestion:
            payload["suggestion"] = suggestion
        if details:
            payload["details"] = details
        text = json.dumps(payload, ensure_ascii=False, indent=2)
        return cls(content=[ToolContent(type="text", text=text)], is_error=True, data=payload)

    def to_content_list(self) -> list[dict[str, Any]]:
        """Convert to MCP content list format."""
        return [c.to_dict() for c in self.content]


class ToolHandler(Protocol):
    """Protocol for tool handler coroutines."""

    def __call__(self, context: Any, params: dict[str, Any], response: Response) -> Awaitable[None]: ...


@dataclass(slots=True, frozen=True)
class ToolSpec:
    """Specification for a registered tool."""

    name: str
    handler: ToolHandler
    schema: dict[str, Any]
    requires_tab: bool = False  # Whether to call context.ensure_tab() before the handler
