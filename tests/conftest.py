from __future__ import annotations

import asyncio
from typing import Any

import pytest

from mcp_servers.aria_browser.config import BrowserConfig
from mcp_servers.aria_browser.context import NoCurrentTabError
from mcp_servers.aria_browser.snapshot import TabSnapshot


class FakeTab:
    """In-memory tab: scripted title refreshes and snapshot captures, recorded actions."""

    def __init__(
        self,
        context: FakeContext,
        *,
        url: str = "about:blank",
        title: str = "",
        snapshot: TabSnapshot | None = None,
        next_title: str | None = None,
        title_delay: float = 0.0,
        title_error: Exception | None = None,
        capture_error: Exception | None = None,
        on_capture: Any = None,
        close_on_refresh: bool = False,
    ) -> None:
        self.context = context
        self._url = url
        self._title = title
        self.snapshot = snapshot
        self.next_title = next_title
        self.title_delay = title_delay
        self.title_error = title_error
        self.capture_error = capture_error
        self.on_capture = on_capture
        self.close_on_refresh = close_on_refresh
        self.calls: list[tuple[str, Any]] = []
        self.screenshot_bytes = b""

    # Read side

    def last_title(self) -> str:
        return self._title

    def url(self) -> str:
        return self._url

    def is_current_tab(self) -> bool:
        return self.context.current_tab() is self

    async def capture_snapshot(self) -> TabSnapshot:
        self.calls.append(("capture", None))
        await asyncio.sleep(0)
        if self.on_capture is not None:
            return self.on_capture(self)
        if self.capture_error is not None:
            raise self.capture_error
        return self.snapshot or TabSnapshot(url=self._url, title=self._title, aria_snapshot="")

    async def update_title(self) -> None:
        if self.title_delay:
            await asyncio.sleep(self.title_delay)
        if self.close_on_refresh:
            self.context.remove(self)
        if self.title_error is not None:
            raise self.title_error
        if self.next_title is not None:
            self._title = self.next_title

    # Actions

    async def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))
        self._url = url

    async def go_back(self) -> None:
        self.calls.append(("back", None))

    async def go_forward(self) -> None:
        self.calls.append(("forward", None))

    async def reload(self) -> None:
        self.calls.append(("reload", None))

    async def wait_for_load(self, *, timeout: float = 15.0) -> None:
        self.calls.append(("wait_for_load", timeout))

    async def click(self, ref: str, *, button: str = "left", click_count: int = 1) -> None:
        self.calls.append(("click", (ref, button, click_count)))

    async def screenshot(self, *, fmt: str = "png", quality: int | None = None) -> bytes:
        self.calls.append(("screenshot", fmt))
        return self.screenshot_bytes

    async def set_viewport(self, width: int, height: int) -> None:
        self.calls.append(("viewport", (width, height)))

    async def handle_dialog(self, accept: bool, prompt_text: str | None = None) -> None:
        self.calls.append(("dialog", (accept, prompt_text)))

    async def upload_files(self, paths: list[str]) -> None:
        self.calls.append(("upload", list(paths)))

    async def wait_for_text(self, text: str, *, gone: bool = False, timeout: float = 10.0) -> None:
        self.calls.append(("wait_for_text", (text, gone)))


class FakeContext:
    def __init__(self, config: BrowserConfig | None = None) -> None:
        self.config = config or BrowserConfig()
        self._tabs: list[FakeTab] = []
        self._current: FakeTab | None = None
        self.closed_all = False

    def add_tab(self, **kwargs: Any) -> FakeTab:
        tab = FakeTab(self, **kwargs)
        self._tabs.append(tab)
        self._current = tab
        return tab

    def remove(self, tab: FakeTab) -> None:
        if tab in self._tabs:
            self._tabs.remove(tab)
        if self._current is tab:
            self._current = self._tabs[-1] if self._tabs else None

    def tabs(self) -> list[FakeTab]:
        return list(self._tabs)

    def current_tab(self) -> FakeTab | None:
        return self._current

    def current_tab_or_die(self) -> FakeTab:
        if self._current is None:
            raise NoCurrentTabError()
        return self._current

    async def ensure_tab(self) -> FakeTab:
        if self._current is None:
            self.add_tab()
        return self.current_tab_or_die()

    async def new_tab(self, url: str | None = None) -> FakeTab:
        return self.add_tab(url=url or "about:blank")

    async def select_tab(self, index: int) -> FakeTab:
        if not 0 <= index < len(self._tabs):
            raise IndexError(f"Tab {index} not found")
        self._current = self._tabs[index]
        return self._current

    async def close_tab(self, index: int | None = None) -> str:
        tab = self.current_tab_or_die() if index is None else self._tabs[index]
        self.remove(tab)
        return tab.url()

    async def close_browser_context(self) -> None:
        self.closed_all = True
        for tab in list(self._tabs):
            self.remove(tab)


@pytest.fixture
def fake_context() -> FakeContext:
    return FakeContext()
