"""Navigation tools: go to a URL, back/forward/reload."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..server.types import ToolSpec
from .base import choice, ensure_allowed_navigation, require_str

if TYPE_CHECKING:
    from ..context import BrowserContext
    from ..response import Response


async def handle_navigate_url(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    url = require_str(params, "url", tool="browser_navigate_url")
    ensure_allowed_navigation(url, context.config)
    tab = await context.ensure_tab()
    response.set_include_snapshot()
    response.add_code(f"await page.goto('{url}');")
    await tab.navigate(url)


async def handle_navigate_action(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    action = choice(params, "action", ("back", "forward", "reload"), tool="browser_navigate_action")
    tab = context.current_tab_or_die()
    if action == "back":
        await tab.go_back()
        response.add_code("await page.goBack();")
    elif action == "forward":
        await tab.go_forward()
        response.add_code("await page.goForward();")
    else:
        await tab.reload()
        response.add_code("await page.reload();")
    response.set_include_snapshot()


TOOLS: list[ToolSpec] = [
    ToolSpec(
        name="browser_navigate_url",
        handler=handle_navigate_url,
        schema={
            "name": "browser_navigate_url",
            "description": "Navigate the current tab to a URL and wait for the page to load.",
            "inputSchema": {
                "type": "object",
                "properties": {"url": {"type": "string", "description": "The URL to navigate to"}},
                "required": ["url"],
            },
        },
    ),
    ToolSpec(
        name="browser_navigate_action",
        handler=handle_navigate_action,
        requires_tab=True,
        schema={
            "name": "browser_navigate_action",
            "description": 'History navigation: "back", "forward" or "reload".',
            "inputSchema": {
                "type": "object",
                "properties": {"action": {"type": "string", "enum": ["back", "forward", "reload"]}},
                "required": ["action"],
            },
        },
    ),
]
