"""
Per-call response accumulator.

Every tool handler writes into one ``Response``:
- result lines (narrative for the agent), optionally marked as errors
- code lines (a reproducible script fragment)
- image attachments
- intent flags: include a page snapshot, include the tab listing

After the handler returns, the registry awaits ``finish()``, which captures the
requested page state, and then serializes the response. A ``Response`` belongs to
exactly one call and is never shared, so its logs need no locking.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .server.types import TabHandle, TabProvider
    from .snapshot import TabSnapshot

logger = logging.getLogger("mcp.aria_browser.response")


@dataclass(frozen=True, slots=True)
class ImageAttachment:
    data: bytes
    content_type: str = "image/png"


class Response:
    """Append-only accumulator for one tool invocation."""

    def __init__(self, context: TabProvider, tool_name: str, tool_args: dict[str, Any] | None = None) -> None:
        self._context = context
        self.tool_name = tool_name
        self.tool_args: dict[str, Any] = dict(tool_args or {})
        self._result: list[str] = []
        self._code: list[str] = []
        self._images: list[ImageAttachment] = []
        self._is_error: bool | None = None
        self._include_snapshot = False
        self._include_tabs = False
        self._tab_snapshot: TabSnapshot | None = None
        self._finished = False

    # Writers

    def add_result(self, result: str) -> None:
        self._result.append(result)

    def add_error(self, error: str) -> None:
        self._result.append(error)
        self._is_error = True

    def add_code(self, code: str) -> None:
        self._code.append(code)

    def add_image(self, image: ImageAttachment) -> None:
        self._images.append(image)

    def set_include_snapshot(self) -> None:
        self._include_snapshot = True

    def set_include_tabs(self) -> None:
        self._include_tabs = True

    # Readers

    def is_error(self) -> bool | None:
        return self._is_error

    def result(self) -> str:
        return "\n".join(self._result)

    def result_lines(self) -> tuple[str, ...]:
        return tuple(self._result)

    def code(self) -> str:
        return "\n".join(self._code)

    def code_lines(self) -> tuple[str, ...]:
        return tuple(self._code)

    def images(self) -> tuple[ImageAttachment, ...]:
        return tuple(self._images)

    @property
    def include_snapshot(self) -> bool:
        return self._include_snapshot

    @property
    def include_tabs(self) -> bool:
        return self._include_tabs

    @property
    def finished(self) -> bool:
        return self._finished

    def tab_snapshot(self) -> TabSnapshot | None:
        return self._tab_snapshot

    # Post-action protocol

    async def finish(self) -> None:
        """Capture the requested page state and refresh tab titles.

        Snapshot capture and the per-tab title refreshes run concurrently, so a slow
        title refresh never holds up the capture. The capture races against modal
        dialogs inside ``Tab.capture_snapshot()``: a dialog that opens meanwhile ends
        up in the snapshot's modal states instead of blocking the call.

        Capture failures propagate. A title refresh failure is ignored only when the
        tab is gone from the context once the sweep is over; a refresh timeout keeps
        the previously cached title.
        """
        if self._finished:
            raise RuntimeError(f"Response for {self.tool_name} is already finished")
        self._finished = True

        tabs = list(self._context.tabs())
        capture = self._capture_current_tab() if self._include_snapshot and self._context.current_tab() else None

        refreshes = [self._refresh_title(tab) for tab in tabs]
        if capture is not None:
            snapshot, *outcomes = await asyncio.gather(capture, *refreshes, return_exceptions=True)
            if isinstance(snapshot, BaseException):
                raise snapshot
            self._tab_snapshot = snapshot
        else:
            outcomes = list(await asyncio.gather(*refreshes, return_exceptions=True))

        remaining = list(self._context.tabs())
        for tab, outcome in zip(tabs, outcomes):
            if not isinstance(outcome, BaseException):
                continue
            if not any(tab is other for other in remaining):
                logger.debug("title_refresh_skipped tool=%s reason=tab_gone error=%s", self.tool_name, outcome)
                continue
            raise outcome

    async def _capture_current_tab(self) -> TabSnapshot:
        return await self._context.current_tab_or_die().capture_snapshot()

    async def _refresh_title(self, tab: TabHandle) -> None:
        timeout = float(getattr(self._context.config, "title_refresh_timeout", 2.0))
        try:
            await asyncio.wait_for(tab.update_title(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("title_refresh_timeout tool=%s url=%s timeout=%.1fs", self.tool_name, tab.url(), timeout)


__all__ = ["ImageAttachment", "Response"]
