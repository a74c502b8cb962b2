"""
Serialization of a finished ``Response`` into the outbound payload.

Field rules:
- ``tabs``: only when a snapshot or the tab listing was requested; a lone tab is
  not listed unless the listing was asked for explicitly.
- page section: a snapshot with open modal states yields ``modalStates`` only,
  otherwise the snapshot yields ``pageState`` (with the aria tree compacted).
- ``images``: base64 attachments, always empty when images are configured off.
- ``result`` / ``code``: the log lines, or ``None`` when nothing was logged.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from ..aria_filter import filter_empty_generic_elements
from ..config import IMAGE_RESPONSES_OMIT
from ..snapshot import ModalState, TabSnapshot

if TYPE_CHECKING:
    from ..response import Response
    from .types import TabHandle

NO_OPEN_TABS_MESSAGE = 'No open tabs. Use the "browser_navigate" tool to navigate to a page first.'
CONSOLE_MESSAGE_MAX_CHARS = 100


@dataclass(frozen=True, slots=True)
class TabListing:
    tabs: list[dict[str, Any]] = field(default_factory=list)
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.message is not None:
            out["message"] = self.message
        out["tabs"] = [dict(t) for t in self.tabs]
        return out


@dataclass(frozen=True, slots=True)
class PageStateView:
    url: str
    title: str
    aria_snapshot: str
    console_messages: list[str] = field(default_factory=list)
    downloads: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"url": self.url, "title": self.title, "ariaSnapshot": self.aria_snapshot}
        if self.console_messages:
            out["consoleMessages"] = list(self.console_messages)
        if self.downloads:
            out["downloads"] = [dict(d) for d in self.downloads]
        return out


@dataclass(frozen=True, slots=True)
class ModalStatesView:
    modal_states: tuple[ModalState, ...]

    def to_list(self) -> list[dict[str, Any]]:
        return [m.to_dict() for m in self.modal_states]


# Exactly one page section (or none) per payload.
PageView = Union[PageStateView, ModalStatesView, None]


@dataclass(frozen=True, slots=True)
class ResponsePayload:
    tool_name: str
    tool_args: dict[str, Any]
    is_error: bool | None
    result: list[str] | None
    code: list[str] | None
    tabs: TabListing | None
    page: PageView
    images: list[dict[str, str]]

    @property
    def page_state(self) -> PageStateView | None:
        return self.page if isinstance(self.page, PageStateView) else None

    @property
    def modal_states(self) -> tuple[ModalState, ...] | None:
        return self.page.modal_states if isinstance(self.page, ModalStatesView) else None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "toolName": self.tool_name,
            "toolArgs": self.tool_args,
        }
        if self.is_error is not None:
            out["isError"] = self.is_error
        out["result"] = list(self.result) if self.result is not None else None
        out["code"] = list(self.code) if self.code is not None else None
        out["tabs"] = self.tabs.to_dict() if self.tabs is not None else None

        page = self.page
        if page is None:
            out["pageState"] = None
            out["modalStates"] = None
        elif isinstance(page, PageStateView):
            out["pageState"] = page.to_dict()
            out["modalStates"] = None
        elif isinstance(page, ModalStatesView):
            out["pageState"] = None
            out["modalStates"] = page.to_list()
        else:
            raise TypeError(f"Unsupported page view: {type(page).__name__}")

        out["images"] = [dict(img) for img in self.images]
        return out


def trim_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def render_tabs(tabs: list[TabHandle], *, force: bool = False) -> TabListing | None:
    """Tab listing, or ``None`` for a single tab unless ``force`` is set."""
    if len(tabs) == 1 and not force:
        return None
    if not tabs:
        return TabListing(tabs=[], message=NO_OPEN_TABS_MESSAGE)
    return TabListing(
        tabs=[
            {
                "index": index,
                "title": tab.last_title(),
                "url": tab.url(),
                "isCurrent": tab.is_current_tab(),
            }
            for index, tab in enumerate(tabs)
        ]
    )


def render_page_view(snapshot: TabSnapshot | None, *, console_max_chars: int = CONSOLE_MESSAGE_MAX_CHARS) -> PageView:
    if snapshot is None:
        return None
    if snapshot.modal_states:
        return ModalStatesView(modal_states=tuple(snapshot.modal_states))
    return PageStateView(
        url=snapshot.url,
        title=snapshot.title,
        aria_snapshot=filter_empty_generic_elements(snapshot.aria_snapshot or ""),
        console_messages=[trim_text(str(m), console_max_chars) for m in snapshot.console_messages],
        downloads=[
            {"filename": d.suggested_filename, "outputFile": d.output_file, "finished": d.finished}
            for d in snapshot.downloads
        ],
    )


def encode_images(response: Response, *, image_responses: str) -> list[dict[str, str]]:
    if image_responses == IMAGE_RESPONSES_OMIT:
        return []
    return [
        {
            "type": "image",
            "data": base64.b64encode(image.data).decode("ascii"),
            "mimeType": image.content_type,
        }
        for image in response.images()
    ]


def serialize_response(
    response: Response,
    tabs: list[TabHandle],
    *,
    image_responses: str,
    console_max_chars: int = CONSOLE_MESSAGE_MAX_CHARS,
) -> ResponsePayload:
    """Render a finished response. Never raises for missing snapshot/tab data."""
    result = list(response.result_lines())
    code = list(response.code_lines())

    listing: TabListing | None = None
    if response.include_snapshot or response.include_tabs:
        listing = render_tabs(list(tabs or []), force=response.include_tabs)

    return ResponsePayload(
        tool_name=response.tool_name,
        tool_args=response.tool_args,
        is_error=response.is_error(),
        result=result or None,
        code=code or None,
        tabs=listing,
        page=render_page_view(response.tab_snapshot(), console_max_chars=console_max_chars),
        images=encode_images(response, image_responses=image_responses),
    )


__all__ = [
    "NO_OPEN_TABS_MESSAGE",
    "ModalStatesView",
    "PageStateView",
    "PageView",
    "ResponsePayload",
    "TabListing",
    "render_page_view",
    "render_tabs",
    "serialize_response",
    "trim_text",
]
