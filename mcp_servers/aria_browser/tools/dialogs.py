"""Modal state tools: JS dialogs and intercepted file choosers."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..server.types import ToolSpec
from .base import SmartToolError

if TYPE_CHECKING:
    from ..context import BrowserContext
    from ..response import Response


async def handle_dialog(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    accept = bool(params.get("accept", True))
    prompt_text = params.get("promptText")
    tab = context.current_tab_or_die()
    response.set_include_snapshot()
    await tab.handle_dialog(accept, str(prompt_text) if prompt_text is not None else None)
    response.add_result(f"Dialog {'accepted' if accept else 'dismissed'}")


async def handle_file_upload(context: BrowserContext, params: dict[str, Any], response: Response) -> None:
    paths = params.get("paths")
    if not isinstance(paths, list) or not all(isinstance(p, str) and p for p in paths):
        raise SmartToolError(
            tool="browser_file_upload",
            action="validate",
            reason="'paths' must be a list of absolute file paths",
            suggestion='Pass paths=["/abs/path/file.txt"]',
        )
    missing = [p for p in paths if not Path(p).is_file()]
    if missing:
        raise SmartToolError(
            tool="browser_file_upload",
            action="validate",
            reason=f"File not found: {missing[0]}",
            suggestion="Use absolute paths to existing files",
            details={"missing": missing},
        )
    tab = context.current_tab_or_die()
    response.set_include_snapshot()
    await tab.upload_files(paths)
    response.add_code(f"await fileChooser.setFiles({paths!r});")
    response.add_result(f"Uploaded {len(paths)} file(s)")


TOOLS = [
    ToolSpec(
        name="browser_handle_dialog",
        handler=handle_dialog,
        requires_tab=True,
        schema={
            "name": "browser_handle_dialog",
            "description": "Accept or dismiss the open alert/confirm/prompt dialog.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "accept": {"type": "boolean", "description": "Accept (true) or dismiss (false) the dialog"},
                    "promptText": {"type": "string", "description": "Text to enter for prompt() dialogs"},
                },
                "required": ["accept"],
            },
        },
    ),
    ToolSpec(
        name="browser_file_upload",
        handler=handle_file_upload,
        requires_tab=True,
        schema={
            "name": "browser_file_upload",
            "description": "Answer the open file chooser with one or more local files.",
            "inputSchema": {
                "type": "object",
                "properties": {"paths": {"type": "array", "items": {"type": "string"}}},
                "required": ["paths"],
            },
        },
    ),
]
