"""Browser-wide tools: close the context, resize the viewport."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..server.types import ToolSpec
from .base import choice

if TYPE_CHECKING:
    from ..context import BrowserContext
    from ..response import Response

DEVICE_SIZES: dict[str, tuple[int, int]] = {
    "mobile": (375, 667),
    "tablet": (768, 1024),
    "desktop": (1280, 720),
}


async def handle_close(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    await context.close_browser_context()
    response.set_include_tabs()
    response.add_code("await page.close()")


async def handle_resize(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    device = choice(params, "device", tuple(DEVICE_SIZES), tool="browser_resize")
    width, height = DEVICE_SIZES[device]
    tab = context.current_tab_or_die()
    response.add_code(f"await page.setViewportSize({{ width: {width}, height: {height} }});")
    await tab.set_viewport(width, height)
    response.add_result(f"Resized viewport to {device} ({width}x{height})")


TOOLS = [
    ToolSpec(
        name="browser_close",
        handler=handle_close,
        schema={
            "name": "browser_close",
            "description": "Close every tab managed by this server.",
            "inputSchema": {"type": "object", "properties": {}},
        },
    ),
    ToolSpec(
        name="browser_resize",
        handler=handle_resize,
        requires_tab=True,
        schema={
            "name": "browser_resize",
            "description": "Resize the viewport: mobile (375x667), tablet (768x1024) or desktop (1280x720).",
            "inputSchema": {
                "type": "object",
                "properties": {"device": {"type": "string", "enum": list(DEVICE_SIZES)}},
                "required": ["device"],
            },
        },
    ),
]
