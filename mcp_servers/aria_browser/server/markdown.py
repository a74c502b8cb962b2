"""Markdown rendering of a response payload (MCP_RESPONSE_FORMAT=markdown)."""

from __future__ import annotations

from .payload import NO_OPEN_TABS_MESSAGE, PageStateView, ResponsePayload, TabListing


def render_tabs_markdown(listing: TabListing | None) -> list[str]:
    if listing is None:
        return []
    if not listing.tabs:
        return ["### Open tabs", listing.message or NO_OPEN_TABS_MESSAGE, ""]
    lines = ["### Open tabs"]
    for tab in listing.tabs:
        current = " (current)" if tab.get("isCurrent") else ""
        lines.append(f"- {tab.get('index')}:{current} [{tab.get('title', '')}] ({tab.get('url', '')})")
    lines.append("")
    return lines


def render_page_state_markdown(page: PageStateView) -> list[str]:
    lines: list[str] = []
    if page.console_messages:
        lines.append("### New console messages")
        lines.extend(f"- {message}" for message in page.console_messages)
        lines.append("")
    if page.downloads:
        lines.append("### Downloads")
        for entry in page.downloads:
            if entry.get("finished"):
                lines.append(f"- Downloaded file {entry.get('filename')} to {entry.get('outputFile')}")
            else:
                lines.append(f"- Downloading file {entry.get('filename')} ...")
        lines.append("")
    lines.append("### Page state")
    lines.append(f"- Page URL: {page.url}")
    lines.append(f"- Page Title: {page.title}")
    lines.append("- Page Snapshot:")
    lines.append("```yaml")
    lines.append(page.aria_snapshot)
    lines.append("```")
    return lines


def render_payload_markdown(payload: ResponsePayload) -> str:
    lines: list[str] = []
    if payload.result:
        lines.append("### Result")
        lines.extend(payload.result)
        lines.append("")
    if payload.code:
        lines.append("### Ran Playwright code")
        lines.append("```js")
        lines.extend(payload.code)
        lines.append("```")
        lines.append("")
    lines.extend(render_tabs_markdown(payload.tabs))

    modal_states = payload.modal_states
    if modal_states:
        lines.append("### Modal state")
        lines.extend(f'- [{m.description}]: can be handled by the "{m.cleared_by}" tool' for m in modal_states)
        lines.append("")
    elif payload.page_state is not None:
        lines.extend(render_page_state_markdown(payload.page_state))

    return "\n".join(lines).rstrip() + "\n"


__all__ = ["render_page_state_markdown", "render_payload_markdown", "render_tabs_markdown"]
