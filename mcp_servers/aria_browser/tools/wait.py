"""Wait tool: fixed delay and/or text appearing/disappearing."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

from ..server.types import ToolSpec
from .base import SmartToolError

if TYPE_CHECKING:
    from ..context import BrowserContext
    from ..response import Response

MAX_WAIT_SECONDS = 30.0


async def handle_wait_for(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    seconds = params.get("time")
    text = params.get("text")
    text_gone = params.get("textGone")
    if not seconds and not text and not text_gone:
        raise SmartToolError(
            tool="browser_wait_for",
            action="validate",
            reason="Either time, text or textGone must be provided",
            suggestion='Pass time=2 or text="Done"',
        )

    tab = context.current_tab_or_die()
    waited: list[str] = []
    if seconds:
        delay = min(MAX_WAIT_SECONDS, float(seconds))
        response.add_code(f"await new Promise(f => setTimeout(f, {seconds} * 1000));")
        await asyncio.sleep(delay)
        waited.append(f"{seconds} seconds")
    if text_gone:
        response.add_code(f"await page.getByText({json.dumps(text_gone)}).first().waitFor({{ state: 'hidden' }});")
        await tab.wait_for_text(str(text_gone), gone=True)
        waited.append(f'text "{text_gone}" to disappear')
    if text:
        response.add_code(f"await page.getByText({json.dumps(text)}).first().waitFor({{ state: 'visible' }});")
        await tab.wait_for_text(str(text))
        waited.append(f'text "{text}"')

    response.add_result(f"Waited for {', '.join(waited)}")
    response.set_include_snapshot()


TOOLS = [
    ToolSpec(
        name="browser_wait_for",
        handler=handle_wait_for,
        requires_tab=True,
        schema={
            "name": "browser_wait_for",
            "description": "Wait for a number of seconds, for text to appear, or for text to disappear.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "time": {"type": "number", "description": "The time to wait in seconds (max 30)"},
                    "text": {"type": "string", "description": "The text to wait for"},
                    "textGone": {"type": "string", "description": "The text to wait for to disappear"},
                },
            },
        },
    ),
]
