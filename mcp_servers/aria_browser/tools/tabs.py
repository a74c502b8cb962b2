"""Tab management tools: list, new, select, close."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..server.types import ToolSpec
from .base import SmartToolError, ensure_allowed_navigation, optional_int

if TYPE_CHECKING:
    from ..context import BrowserContext
    from ..response import Response


async def handle_tab_list(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    await context.ensure_tab()
    response.set_include_tabs()


async def handle_tab_new(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    url = params.get("url")
    if url:
        ensure_allowed_navigation(str(url), context.config)
    tab = await context.new_tab()
    if url:
        await tab.navigate(str(url))
        response.add_code(f"await page.goto('{url}');")
    response.set_include_snapshot()


async def handle_tab_select(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    index = optional_int(params, "index", tool="browser_tab_select")
    if index is None:
        raise SmartToolError(
            tool="browser_tab_select",
            action="validate",
            reason="Missing required parameter 'index'",
            suggestion="Pass the zero-based tab index from browser_tab_list",
        )
    try:
        await context.select_tab(index)
    except IndexError as exc:
        raise SmartToolError(
            tool="browser_tab_select",
            action="select",
            reason=str(exc),
            suggestion="Use browser_tab_list to see valid indexes",
        ) from exc
    response.set_include_snapshot()


async def handle_tab_close(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    index = optional_int(params, "index", tool="browser_tab_close")
    try:
        await context.close_tab(index)
    except IndexError as exc:
        raise SmartToolError(
            tool="browser_tab_close",
            action="close",
            reason=str(exc),
            suggestion="Use browser_tab_list to see valid indexes",
        ) from exc
    response.set_include_snapshot()


_INDEX_SCHEMA = {
    "type": "integer",
    "description": "The zero-based index of the tab (0 for first tab, 1 for second tab, etc.)",
}

TOOLS: list[ToolSpec] = [
    ToolSpec(
        name="browser_tab_list",
        handler=handle_tab_list,
        schema={
            "name": "browser_tab_list",
            "description": "List all open browser tabs with their index, title, URL and which one is current.",
            "inputSchema": {"type": "object", "properties": {}},
        },
    ),
    ToolSpec(
        name="browser_tab_new",
        handler=handle_tab_new,
        schema={
            "name": "browser_tab_new",
            "description": "Open a new tab, optionally navigating it to a URL. Returns a snapshot of the new tab.",
            "inputSchema": {
                "type": "object",
                "properties": {"url": {"type": "string", "description": "URL to open in the new tab"}},
            },
        },
    ),
    ToolSpec(
        name="browser_tab_select",
        handler=handle_tab_select,
        schema={
            "name": "browser_tab_select",
            "description": "Switch to a tab by index. Returns a snapshot of the selected tab.",
            "inputSchema": {"type": "object", "properties": {"index": _INDEX_SCHEMA}, "required": ["index"]},
        },
    ),
    ToolSpec(
        name="browser_tab_close",
        handler=handle_tab_close,
        schema={
            "name": "browser_tab_close",
            "description": "Close a tab by index, or the current tab when no index is given.",
            "inputSchema": {"type": "object", "properties": {"index": _INDEX_SCHEMA}},
        },
    ),
]
