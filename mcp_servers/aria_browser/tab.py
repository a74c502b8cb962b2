"""
One browser tab (CDP page target).

A ``Tab`` tracks what the response engine needs between tool calls:
- modal states (JS dialogs, intercepted file choosers)
- console messages since the last main-frame navigation
- downloads started from the page
- the cached display title

and exposes the handful of page actions the tools use. All CDP traffic goes
through the tab's own ``CdpConnection``.
"""

from __future__ import annotations

import asyncio
import base64
import contextlib
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from .aria import render_aria_snapshot
from .http_client import HttpClientError
from .snapshot import (
    MODAL_DIALOG,
    MODAL_FILE_CHOOSER,
    ConsoleMessage,
    DownloadEntry,
    ModalState,
    TabSnapshot,
    dialog_modal_state,
    file_chooser_modal_state,
)
from .tools.base import SmartToolError

if TYPE_CHECKING:
    from .cdp import CdpConnection
    from .context import BrowserContext

logger = logging.getLogger("mcp.aria_browser.tab")

T = TypeVar("T")

_MAX_CONSOLE_MESSAGES = 200


class TabClosedError(HttpClientError):
    """The tab's target is gone (closed by the user or the browser)."""


async def _cancel_and_reap(task: asyncio.Future) -> None:
    """Cancel a race loser and wait for it; its own failure no longer matters."""
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError, HttpClientError):
        await task


def _remote_obj_to_str(obj: Any) -> str:
    """Best-effort conversion of CDP RemoteObject to short string."""
    if not isinstance(obj, dict):
        return str(obj)
    for k in ("value", "unserializableValue", "description"):
        if k in obj and obj.get(k) is not None:
            value = obj.get(k)
            return value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
    typ = obj.get("type")
    subtype = obj.get("subtype")
    return f"<{typ}{('/' + subtype) if subtype else ''}>"


def _stack_top(params: dict[str, Any]) -> tuple[str, int | None]:
    st = params.get("stackTrace")
    frames = st.get("callFrames") if isinstance(st, dict) else None
    if not isinstance(frames, list) or not frames or not isinstance(frames[0], dict):
        return "", None
    f0 = frames[0]
    url = f0.get("url") if isinstance(f0.get("url"), str) else ""
    line = f0.get("lineNumber") if isinstance(f0.get("lineNumber"), int) else None
    return url, line


class Tab:
    def __init__(self, context: BrowserContext, target_id: str, connection: CdpConnection, *, url: str = "") -> None:
        self.context = context
        self.target_id = target_id
        self.connection = connection
        self._url = url
        self._last_title = "about:blank"
        self._closed = False

        self._modal_states: list[ModalState] = []
        self._modal_changed = asyncio.Event()
        self._file_chooser_node: int | None = None

        self._console: list[ConsoleMessage] = []
        self._downloads: dict[str, DownloadEntry] = {}
        self._load_event = asyncio.Event()
        self._refs: dict[str, int] = {}

        connection.on("Page.javascriptDialogOpening", self._on_dialog_opening)
        connection.on("Page.javascriptDialogClosed", self._on_dialog_closed)
        connection.on("Page.fileChooserOpened", self._on_file_chooser)
        connection.on("Page.frameNavigated", self._on_frame_navigated)
        connection.on("Page.loadEventFired", lambda _params: self._load_event.set())
        connection.on("Page.downloadWillBegin", self._on_download_begin)
        connection.on("Page.downloadProgress", self._on_download_progress)
        connection.on("Runtime.consoleAPICalled", self._on_console)
        connection.on("Runtime.exceptionThrown", self._on_exception)
        connection.on("Inspector.detached", lambda _params: self._on_detached())
        connection.on_close(self._on_detached)

    async def initialize(self) -> None:
        """Enable the CDP domains the tab listens to."""
        await self.connection.send("Page.enable")
        await self.connection.send("Runtime.enable")
        await self.connection.send("Page.setInterceptFileChooserDialog", {"enabled": True})
        download_dir = Path(self.context.config.download_dir)
        download_dir.mkdir(parents=True, exist_ok=True)
        await self.connection.send("Page.setDownloadBehavior", {"behavior": "allow", "downloadPath": str(download_dir)})

    # Read side used by the response engine

    def last_title(self) -> str:
        return self._last_title

    def url(self) -> str:
        return self._url

    def is_current_tab(self) -> bool:
        return self.context.current_tab() is self

    @property
    def closed(self) -> bool:
        return self._closed

    def modal_states(self) -> list[ModalState]:
        return list(self._modal_states)

    async def update_title(self) -> None:
        info = await self._target_info()
        self._last_title = str(info.get("title") or "")
        self._url = str(info.get("url") or self._url)

    async def capture_snapshot(self) -> TabSnapshot:
        """Capture the tab state; a dialog opening meanwhile wins over the AX fetch."""
        aria = await self.race_against_modal_states(self._aria_snapshot)
        info = await self._target_info()
        self._url = str(info.get("url") or self._url)
        return TabSnapshot(
            url=self._url,
            title=str(info.get("title") or ""),
            aria_snapshot=aria or "",
            console_messages=tuple(self._console),
            downloads=tuple(self._downloads.values()),
            modal_states=tuple(self._modal_states),
        )

    async def race_against_modal_states(self, action: Callable[[], Awaitable[T]]) -> T | None:
        """Run ``action`` unless a modal state is (or becomes) active first.

        Returns ``None`` when a modal state won. Errors raised by ``action`` propagate.
        """
        if self._modal_states:
            return None
        self._modal_changed.clear()
        task = asyncio.ensure_future(action())
        waiter = asyncio.ensure_future(self._modal_changed.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await _cancel_and_reap(task)
            raise
        finally:
            waiter.cancel()
        if task.done():
            return task.result()
        await _cancel_and_reap(task)
        return None

    # Actions used by the tools

    async def navigate(self, url: str, *, timeout: float = 15.0) -> None:
        self._load_event.clear()
        res = await self._send("Page.navigate", {"url": url})
        error_text = res.get("errorText")
        if error_text:
            raise SmartToolError(
                tool="browser_navigate_url",
                action="navigate",
                reason=str(error_text),
                suggestion="Check the URL and that the site is reachable",
                details={"url": url},
            )
        await self.wait_for_load(timeout=timeout)

    async def wait_for_load(self, *, timeout: float = 15.0) -> None:
        async def _wait() -> None:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._load_event.wait(), timeout=timeout)

        await self.race_against_modal_states(_wait)

    async def go_back(self) -> None:
        await self._history_step(-1)

    async def go_forward(self) -> None:
        await self._history_step(1)

    async def _history_step(self, delta: int) -> None:
        history = await self._send("Page.getNavigationHistory")
        index = int(history.get("currentIndex", 0)) + delta
        entries = history.get("entries") or []
        if not 0 <= index < len(entries):
            raise SmartToolError(
                tool="browser_navigate_action",
                action="back" if delta < 0 else "forward",
                reason="No history entry in that direction",
                suggestion="Use browser_navigate_url instead",
            )
        self._load_event.clear()
        await self._send("Page.navigateToHistoryEntry", {"entryId": entries[index]["id"]})
        await self.wait_for_load()

    async def reload(self) -> None:
        self._load_event.clear()
        await self._send("Page.reload")
        await self.wait_for_load()

    def backend_node_for_ref(self, ref: str) -> int:
        node_id = self._refs.get(ref)
        if node_id is None:
            raise SmartToolError(
                tool="ref",
                action="resolve",
                reason=f"Ref {ref} not found in the current page snapshot",
                suggestion="Capture a new snapshot (browser_snapshot) and use a ref from it",
            )
        return node_id

    async def click(self, ref: str, *, button: str = "left", click_count: int = 1) -> None:
        node_id = self.backend_node_for_ref(ref)
        with contextlib.suppress(HttpClientError):
            await self._send("DOM.scrollIntoViewIfNeeded", {"backendNodeId": node_id})
        box = await self._send("DOM.getBoxModel", {"backendNodeId": node_id})
        quad = (box.get("model") or {}).get("content") or []
        if len(quad) < 8:
            raise SmartToolError(
                tool="browser_click",
                action="locate",
                reason=f"Element {ref} has no layout box",
                suggestion="The element may be hidden; capture a new snapshot",
            )
        x = sum(quad[0::2]) / 4
        y = sum(quad[1::2]) / 4
        await self._send("Input.dispatchMouseEvent", {"type": "mouseMoved", "x": x, "y": y})
        for count in range(1, click_count + 1):
            base = {"x": x, "y": y, "button": button, "clickCount": count}
            await self._send("Input.dispatchMouseEvent", {"type": "mousePressed", **base})
            await self._send("Input.dispatchMouseEvent", {"type": "mouseReleased", **base})

    async def screenshot(self, *, fmt: str = "png", quality: int | None = None) -> bytes:
        params: dict[str, Any] = {"format": fmt}
        if fmt == "jpeg" and quality is not None:
            params["quality"] = quality
        res = await self._send("Page.captureScreenshot", params)
        data = res.get("data")
        if not data:
            raise HttpClientError("Screenshot data is empty")
        return base64.b64decode(data)

    async def set_viewport(self, width: int, height: int) -> None:
        await self._send(
            "Emulation.setDeviceMetricsOverride",
            {"width": width, "height": height, "deviceScaleFactor": 0, "mobile": width < 600},
        )

    async def handle_dialog(self, accept: bool, prompt_text: str | None = None) -> None:
        if not any(m.type == MODAL_DIALOG for m in self._modal_states):
            raise SmartToolError(
                tool="browser_handle_dialog",
                action="handle",
                reason="No dialog visible",
                suggestion="Only call this tool when the response lists a dialog modal state",
            )
        params: dict[str, Any] = {"accept": accept}
        if prompt_text is not None:
            params["promptText"] = prompt_text
        await self._send("Page.handleJavaScriptDialog", params)
        self._clear_modal(MODAL_DIALOG)

    async def upload_files(self, paths: list[str]) -> None:
        if self._file_chooser_node is None:
            raise SmartToolError(
                tool="browser_file_upload",
                action="upload",
                reason="No file chooser visible",
                suggestion="Click the file input first; the chooser shows up as a modal state",
            )
        await self._send("DOM.setFileInputFiles", {"files": paths, "backendNodeId": self._file_chooser_node})
        self._file_chooser_node = None
        self._clear_modal(MODAL_FILE_CHOOSER)

    async def wait_for_text(self, text: str, *, gone: bool = False, timeout: float = 10.0) -> None:
        expression = f"document.body ? document.body.innerText.includes({json.dumps(text)}) : false"

        async def _poll() -> None:
            while True:
                res = await self._send("Runtime.evaluate", {"expression": expression, "returnByValue": True})
                found = bool((res.get("result") or {}).get("value"))
                if found != gone:
                    return
                await asyncio.sleep(0.1)

        try:
            await asyncio.wait_for(self.race_against_modal_states(_poll), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise SmartToolError(
                tool="browser_wait_for",
                action="wait",
                reason=f'Timed out after {timeout:.0f}s waiting for text "{text}" to {"disappear" if gone else "appear"}',
                suggestion="Increase the wait or check the page snapshot",
            ) from exc

    async def close(self) -> None:
        await self.connection.close()

    # Internals

    async def _send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if self._closed:
            raise TabClosedError(f"Tab {self.target_id} is closed")
        return await self.connection.send(method, params)

    async def _target_info(self) -> dict[str, Any]:
        res = await self._send("Target.getTargetInfo", {"targetId": self.target_id})
        info = res.get("targetInfo")
        return info if isinstance(info, dict) else {}

    async def _aria_snapshot(self) -> str:
        res = await self._send("Accessibility.getFullAXTree")
        nodes = res.get("nodes")
        rendered = render_aria_snapshot(nodes if isinstance(nodes, list) else [])
        self._refs = rendered.refs
        return rendered.text

    def _add_modal(self, state: ModalState) -> None:
        self._modal_states.append(state)
        self._modal_changed.set()

    def _clear_modal(self, modal_type: str) -> None:
        self._modal_states = [m for m in self._modal_states if m.type != modal_type]

    def _on_dialog_opening(self, params: dict[str, Any]) -> None:
        self._add_modal(dialog_modal_state(str(params.get("type") or "alert"), str(params.get("message") or "")))

    def _on_dialog_closed(self, _params: dict[str, Any]) -> None:
        self._clear_modal(MODAL_DIALOG)

    def _on_file_chooser(self, params: dict[str, Any]) -> None:
        node = params.get("backendNodeId")
        self._file_chooser_node = node if isinstance(node, int) else None
        self._add_modal(file_chooser_modal_state())

    def _on_frame_navigated(self, params: dict[str, Any]) -> None:
        frame = params.get("frame")
        if not isinstance(frame, dict) or frame.get("parentId"):
            return
        self._url = str(frame.get("url") or self._url)
        self._console.clear()
        self._refs = {}

    def _on_console(self, params: dict[str, Any]) -> None:
        level = params.get("type")
        level = "warning" if level == "warn" else (level if isinstance(level, str) else "log")
        args = params.get("args")
        text = " ".join(_remote_obj_to_str(a) for a in args) if isinstance(args, list) else ""
        url, line = _stack_top(params)
        self._push_console(ConsoleMessage(type=level, text=text, url=url, line=line))

    def _on_exception(self, params: dict[str, Any]) -> None:
        details = params.get("exceptionDetails")
        details = details if isinstance(details, dict) else {}
        text = details.get("text") or "Uncaught exception"
        exception = details.get("exception")
        if isinstance(exception, dict):
            text = exception.get("description") or exception.get("value") or text
        url = details.get("url") if isinstance(details.get("url"), str) else ""
        line = details.get("lineNumber") if isinstance(details.get("lineNumber"), int) else None
        self._push_console(ConsoleMessage(type="error", text=str(text), url=url, line=line))

    def _push_console(self, message: ConsoleMessage) -> None:
        self._console.append(message)
        if len(self._console) > _MAX_CONSOLE_MESSAGES:
            del self._console[: len(self._console) - _MAX_CONSOLE_MESSAGES]

    def _on_download_begin(self, params: dict[str, Any]) -> None:
        guid = str(params.get("guid") or "")
        name = str(params.get("suggestedFilename") or "download")
        output = str(Path(self.context.config.download_dir) / name)
        self._downloads[guid] = DownloadEntry(suggested_filename=name, output_file=output, finished=False)

    def _on_download_progress(self, params: dict[str, Any]) -> None:
        guid = str(params.get("guid") or "")
        entry = self._downloads.get(guid)
        if entry is None or params.get("state") != "completed":
            return
        self._downloads[guid] = DownloadEntry(
            suggested_filename=entry.suggested_filename, output_file=entry.output_file, finished=True
        )

    def _on_detached(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.info("tab_closed target=%s", self.target_id)
        self.context.on_tab_closed(self)


__all__ = ["Tab", "TabClosedError"]
