from __future__ import annotations


def _payload(**overrides):  # noqa: ANN003, ANN202
    from mcp_servers.aria_browser.server.payload import ResponsePayload

    fields = {
        "tool_name": "browser_snapshot",
        "tool_args": {},
        "is_error": None,
        "result": None,
        "code": None,
        "tabs": None,
        "page": None,
        "images": [],
    }
    fields.update(overrides)
    return ResponsePayload(**fields)


def test_page_state_section() -> None:
    from mcp_servers.aria_browser.server.markdown import render_payload_markdown
    from mcp_servers.aria_browser.server.payload import PageStateView

    page = PageStateView(url="https://a.example", title="A", aria_snapshot='- button "Go" [ref=e1]')
    text = render_payload_markdown(_payload(code=["await page.goto('https://a.example');"], page=page))

    assert "### Ran Playwright code\n```js\nawait page.goto('https://a.example');\n```" in text
    assert "- Page URL: https://a.example" in text
    assert "```yaml\n- button \"Go\" [ref=e1]\n```" in text
    assert "### Result" not in text


def test_modal_state_section_replaces_page_state() -> None:
    from mcp_servers.aria_browser.server.markdown import render_payload_markdown
    from mcp_servers.aria_browser.server.payload import ModalStatesView
    from mcp_servers.aria_browser.snapshot import dialog_modal_state

    page = ModalStatesView(modal_states=(dialog_modal_state("confirm", "Sure?"),))
    text = render_payload_markdown(_payload(page=page))

    assert '- ["confirm" dialog with message "Sure?"]: can be handled by the "browser_handle_dialog" tool' in text
    assert "### Page state" not in text


def test_tabs_and_result_sections() -> None:
    from mcp_servers.aria_browser.server.markdown import render_payload_markdown
    from mcp_servers.aria_browser.server.payload import NO_OPEN_TABS_MESSAGE, TabListing

    listing = TabListing(
        tabs=[
            {"index": 0, "title": "A", "url": "https://a.example", "isCurrent": False},
            {"index": 1, "title": "B", "url": "https://b.example", "isCurrent": True},
        ]
    )
    text = render_payload_markdown(_payload(result=["Done"], tabs=listing))
    assert text.startswith("### Result\nDone\n")
    assert "- 0: [A] (https://a.example)" in text
    assert "- 1: (current) [B] (https://b.example)" in text

    empty = render_payload_markdown(_payload(tabs=TabListing(tabs=[], message=NO_OPEN_TABS_MESSAGE)))
    assert NO_OPEN_TABS_MESSAGE in empty


def test_tool_result_markdown_and_json_modes() -> None:
    import json

    from mcp_servers.aria_browser.server.types import ToolResult

    payload = _payload(is_error=True, result=["Boom"], images=[{"type": "image", "data": "QQ==", "mimeType": "image/png"}])

    as_json = ToolResult.from_payload(payload)
    assert as_json.is_error
    body = json.loads(as_json.content[0].text)
    assert body["isError"] is True
    assert "images" not in body
    assert as_json.to_content_list()[1] == {"type": "image", "data": "QQ==", "mimeType": "image/png"}

    as_md = ToolResult.from_payload(payload, markdown=True)
    assert as_md.content[0].text.startswith("### Result\nBoom")
    assert len(as_md.content) == 2
