"""
Browser context: the process-wide list of tabs and the current-tab pointer.

The context attaches to an already running Chromium through its CDP HTTP
endpoints (``/json/...``) and opens one WebSocket per tab it manages. Tab
lifecycle (create/select/close) lives here; the response engine only reads
``tabs()`` / ``current_tab()``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

from .cdp import CdpConnection
from .config import BrowserConfig
from .http_client import HttpClientError, http_json
from .tab import Tab

logger = logging.getLogger("mcp.aria_browser.context")


class NoCurrentTabError(RuntimeError):
    def __init__(self) -> None:
        super().__init__('No open pages available. Use the "browser_navigate" tool to navigate to a page first.')


class BrowserContext:
    def __init__(self, config: BrowserConfig) -> None:
        self.config = config
        self._tabs: list[Tab] = []
        self._current: Tab | None = None

    def tabs(self) -> list[Tab]:
        return list(self._tabs)

    def current_tab(self) -> Tab | None:
        return self._current

    def current_tab_or_die(self) -> Tab:
        if self._current is None:
            raise NoCurrentTabError()
        return self._current

    async def ensure_tab(self) -> Tab:
        if self._current is None:
            await self.new_tab()
        return self.current_tab_or_die()

    async def new_tab(self, url: str | None = None) -> Tab:
        endpoint = self.config.http_url("/json/new?" + quote(url or "about:blank", safe=":/?&=#%"))
        target = await asyncio.to_thread(http_json, endpoint, method="PUT", timeout=self.config.cdp_timeout)
        if not isinstance(target, dict) or not target.get("webSocketDebuggerUrl"):
            raise HttpClientError(f"Unexpected /json/new reply: {target!r}")
        tab = await self._attach(target)
        self._current = tab
        logger.info("tab_new target=%s url=%s", tab.target_id, tab.url())
        return tab

    async def select_tab(self, index: int) -> Tab:
        tab = self._tab_at(index)
        await asyncio.to_thread(
            http_json, self.config.http_url(f"/json/activate/{tab.target_id}"), timeout=self.config.cdp_timeout
        )
        self._current = tab
        return tab

    async def close_tab(self, index: int | None = None) -> str:
        tab = self.current_tab_or_die() if index is None else self._tab_at(index)
        url = tab.url()
        await asyncio.to_thread(
            http_json, self.config.http_url(f"/json/close/{tab.target_id}"), timeout=self.config.cdp_timeout
        )
        await tab.close()
        self.on_tab_closed(tab)
        return url

    async def close_browser_context(self) -> None:
        for tab in list(self._tabs):
            try:
                await asyncio.to_thread(
                    http_json, self.config.http_url(f"/json/close/{tab.target_id}"), timeout=self.config.cdp_timeout
                )
            except HttpClientError as exc:
                logger.warning("tab_close_failed target=%s error=%s", tab.target_id, exc)
            await tab.close()
            self.on_tab_closed(tab)

    def on_tab_closed(self, tab: Tab) -> None:
        if tab in self._tabs:
            index = self._tabs.index(tab)
            self._tabs.remove(tab)
            if self._current is tab:
                self._current = self._tabs[min(index, len(self._tabs) - 1)] if self._tabs else None

    async def _attach(self, target: dict[str, Any]) -> Tab:
        conn = await CdpConnection.connect(str(target["webSocketDebuggerUrl"]), timeout=self.config.cdp_timeout)
        tab = Tab(self, str(target.get("id") or ""), conn, url=str(target.get("url") or ""))
        self._tabs.append(tab)
        try:
            await tab.initialize()
        except HttpClientError:
            await tab.close()
            self.on_tab_closed(tab)
            raise
        return tab

    def _tab_at(self, index: int) -> Tab:
        if not 0 <= index < len(self._tabs):
            raise IndexError(f"Tab {index} not found")
        return self._tabs[index]


__all__ = ["BrowserContext", "NoCurrentTabError"]
