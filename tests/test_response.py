from __future__ import annotations

import asyncio

import pytest


def test_error_flag_is_unset_until_first_error(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response

    response = Response(fake_context, "browser_click", {"ref": "e1"})
    assert response.is_error() is None

    response.add_result("Clicked")
    assert response.is_error() is None

    response.add_error("Element not found")
    response.add_result("Recovered")
    assert response.is_error() is True
    assert response.result() == "Clicked\nElement not found\nRecovered"


def test_logs_keep_insertion_order(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import ImageAttachment, Response

    response = Response(fake_context, "browser_navigate_url")
    response.add_code("await page.goto('https://a.example');")
    response.add_code("await page.reload();")
    response.add_image(ImageAttachment(b"1"))
    response.add_image(ImageAttachment(b"2", "image/jpeg"))

    assert response.code_lines() == ("await page.goto('https://a.example');", "await page.reload();")
    assert response.code() == "await page.goto('https://a.example');\nawait page.reload();"
    assert [img.data for img in response.images()] == [b"1", b"2"]
    assert response.tool_args == {}


def test_intent_flags_are_idempotent(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response

    response = Response(fake_context, "browser_tab_list")
    assert not response.include_snapshot
    response.set_include_tabs()
    response.set_include_tabs()
    assert response.include_tabs
    assert not response.include_snapshot


def test_finish_captures_current_tab_when_requested(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response
    from mcp_servers.aria_browser.snapshot import TabSnapshot

    snap = TabSnapshot(url="https://a.example", title="A", aria_snapshot='- heading "A" [ref=e1]')
    tab = fake_context.add_tab(url="https://a.example", title="old", next_title="A", snapshot=snap)

    response = Response(fake_context, "browser_snapshot")
    response.set_include_snapshot()
    asyncio.run(response.finish())

    assert response.finished
    assert response.tab_snapshot() is snap
    assert tab.last_title() == "A"


def test_finish_without_snapshot_request_only_refreshes_titles(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response

    first = fake_context.add_tab(title="a", next_title="A")
    second = fake_context.add_tab(title="b", next_title="B")

    response = Response(fake_context, "browser_tab_list")
    response.set_include_tabs()
    asyncio.run(response.finish())

    assert response.tab_snapshot() is None
    assert [t.last_title() for t in (first, second)] == ["A", "B"]
    assert ("capture", None) not in second.calls


def test_finish_with_no_tabs_is_a_no_op(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response

    response = Response(fake_context, "browser_snapshot")
    response.set_include_snapshot()
    asyncio.run(response.finish())

    assert response.tab_snapshot() is None


def test_slow_title_refresh_keeps_previous_title(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response

    fake_context.config.title_refresh_timeout = 0.05
    slow = fake_context.add_tab(title="stale", next_title="fresh", title_delay=1.0)

    response = Response(fake_context, "browser_snapshot")
    response.set_include_snapshot()
    asyncio.run(response.finish())

    assert slow.last_title() == "stale"
    assert response.tab_snapshot() is not None


def test_dialog_during_capture_yields_modal_state(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response
    from mcp_servers.aria_browser.snapshot import TabSnapshot, dialog_modal_state

    def _capture(tab):  # noqa: ANN001, ANN202
        return TabSnapshot(
            url=tab.url(),
            title=tab.last_title(),
            aria_snapshot="",
            modal_states=(dialog_modal_state("alert", "hi"),),
        )

    fake_context.add_tab(url="https://a.example", on_capture=_capture)

    response = Response(fake_context, "browser_click")
    response.set_include_snapshot()
    asyncio.run(response.finish())

    snap = response.tab_snapshot()
    assert snap is not None and snap.blocked
    assert snap.modal_states[0].description == '"alert" dialog with message "hi"'
    assert snap.modal_states[0].cleared_by == "browser_handle_dialog"


def test_capture_failure_propagates(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response

    fake_context.add_tab(capture_error=RuntimeError("target crashed"))

    response = Response(fake_context, "browser_snapshot")
    response.set_include_snapshot()
    with pytest.raises(RuntimeError, match="target crashed"):
        asyncio.run(response.finish())


def test_refresh_failure_of_gone_tab_is_ignored(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response

    fake_context.add_tab(title="gone", title_error=ConnectionError("closed"), close_on_refresh=True)
    kept = fake_context.add_tab(title="kept", next_title="Kept")

    response = Response(fake_context, "browser_tab_list")
    response.set_include_tabs()
    asyncio.run(response.finish())

    assert fake_context.tabs() == [kept]
    assert kept.last_title() == "Kept"


def test_refresh_failure_of_live_tab_propagates(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response

    fake_context.add_tab(title_error=ConnectionError("protocol error"))

    response = Response(fake_context, "browser_tab_list")
    with pytest.raises(ConnectionError):
        asyncio.run(response.finish())


def test_finish_twice_raises(fake_context) -> None:  # noqa: ANN001
    from mcp_servers.aria_browser.response import Response

    response = Response(fake_context, "browser_tab_list")
    asyncio.run(response.finish())
    with pytest.raises(RuntimeError, match="already finished"):
        asyncio.run(response.finish())
