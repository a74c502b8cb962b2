"""Snapshot, click-by-ref and screenshot tools."""

from __future__ import annotations

from io import BytesIO
from typing import TYPE_CHECKING, Any

from PIL import Image

from ..response import ImageAttachment
from ..server.types import ToolSpec
from .base import choice, optional_int, require_str

if TYPE_CHECKING:
    from ..context import BrowserContext
    from ..response import Response

_ELEMENT_PROPERTIES: dict[str, Any] = {
    "element": {
        "type": "string",
        "description": "Human-readable element description used to obtain permission to interact with the element",
    },
    "ref": {"type": "string", "description": "Exact target element reference from the page snapshot"},
}


async def handle_snapshot(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    await context.ensure_tab()
    response.set_include_snapshot()


async def handle_click(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    ref = require_str(params, "ref", tool="browser_click")
    element = require_str(params, "element", tool="browser_click")
    button = choice(params, "button", ("left", "right", "middle"), tool="browser_click", default="left")
    double = bool(params.get("doubleClick"))
    tab = context.current_tab_or_die()

    response.set_include_snapshot()
    options = f"{{ button: '{button}' }}" if button != "left" else ""
    method = "dblclick" if double else "click"
    response.add_code(f"// {element}")
    response.add_code(f"await page.locator('aria-ref={ref}').{method}({options});")
    await tab.click(ref, button=button, click_count=2 if double else 1)
    await tab.wait_for_load(timeout=1.0)


def prepare_screenshot(png: bytes, *, fmt: str, quality: int | None, max_width: int) -> tuple[bytes, str]:
    """Downscale wide screenshots and re-encode as PNG or JPEG."""
    with Image.open(BytesIO(png)) as img:
        img.load()
        if max_width and img.width > max_width:
            height = max(1, round(img.height * max_width / img.width))
            img = img.resize((max_width, height), Image.Resampling.LANCZOS)
        buffer = BytesIO()
        if fmt == "jpeg":
            img.convert("RGB").save(buffer, format="JPEG", quality=quality or 80)
            return buffer.getvalue(), "image/jpeg"
        img.save(buffer, format="PNG")
        return buffer.getvalue(), "image/png"


async def handle_take_screenshot(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    fmt = choice(params, "type", ("png", "jpeg"), tool="browser_take_screenshot", default="png")
    quality = optional_int(params, "quality", tool="browser_take_screenshot")
    tab = context.current_tab_or_die()
    raw = await tab.screenshot()
    data, content_type = prepare_screenshot(raw, fmt=fmt, quality=quality, max_width=context.config.screenshot_max_width)
    response.add_code(f"await page.screenshot({{ type: '{fmt}' }});")
    response.add_result(f"Took the viewport screenshot ({content_type}, {len(data)} bytes)")
    response.add_image(ImageAttachment(data=data, content_type=content_type))


TOOLS = [
    ToolSpec(
        name="browser_snapshot",
        handler=handle_snapshot,
        schema={
            "name": "browser_snapshot",
            "description": "Capture the accessibility snapshot of the current page. Refs in it are used by other tools.",
            "inputSchema": {"type": "object", "properties": {}},
        },
    ),
    ToolSpec(
        name="browser_click",
        handler=handle_click,
        requires_tab=True,
        schema={
            "name": "browser_click",
            "description": "Click an element from the page snapshot (left/right/middle, optionally double).",
            "inputSchema": {
                "type": "object",
                "properties": {
                    **_ELEMENT_PROPERTIES,
                    "doubleClick": {"type": "boolean", "description": "Double click instead of a single click"},
                    "button": {"type": "string", "enum": ["left", "right", "middle"]},
                },
                "required": ["element", "ref"],
            },
        },
    ),
    ToolSpec(
        name="browser_take_screenshot",
        handler=handle_take_screenshot,
        requires_tab=True,
        schema={
            "name": "browser_take_screenshot",
            "description": "Take a screenshot of the current viewport.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "type": {"type": "string", "enum": ["png", "jpeg"], "default": "png"},
                    "quality": {"type": "integer", "minimum": 1, "maximum": 100},
                },
            },
        },
    ),
]
