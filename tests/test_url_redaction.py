from __future__ import annotations


def test_redact_url_keeps_normal_query() -> None:
    from mcp_servers.aria_browser.server.redaction import redact_url

    url = "https://example.com/search?q=hello&sort=asc"
    assert redact_url(url) == url


def test_redact_url_redacts_sensitive_query_param_but_keeps_others() -> None:
    from mcp_servers.aria_browser.server.redaction import redact_url

    out = redact_url("https://example.com/?token=abc&q=hello")
    assert "q=hello" in out
    assert "token=abc" not in out
    assert "token=" in out and "redacted" in out


def test_redact_url_redacts_oauth_fragment_like_query_string() -> None:
    from mcp_servers.aria_browser.server.redaction import redact_url

    out = redact_url("https://example.com/callback#access_token=abc&state=1")
    assert "state=1" in out
    assert "access_token=abc" not in out
    assert "redacted" in out


def test_redact_url_drops_userinfo() -> None:
    from mcp_servers.aria_browser.server.redaction import redact_url

    assert redact_url("https://user:pw@example.com/a") == "https://example.com/a"


def test_redact_url_does_not_redact_author_like_keys() -> None:
    from mcp_servers.aria_browser.server.redaction import redact_url

    out = redact_url("https://example.com/?author=John&auth=abc&q=hello")
    assert "author=John" in out
    assert "q=hello" in out
    assert "auth=abc" not in out


def test_tool_arguments_hide_prompt_text_and_upload_paths() -> None:
    from mcp_servers.aria_browser.server.redaction import redact_tool_arguments

    safe = redact_tool_arguments(
        "browser_handle_dialog",
        {"accept": True, "promptText": "hunter2", "paths": ["/home/me/id.pdf"]},
    )
    assert safe["accept"] is True
    assert "hunter2" not in str(safe)
    assert "/home/me" not in str(safe)

    nav = redact_tool_arguments("browser_navigate_url", {"url": "https://a.example/?token=abc"})
    assert "token=abc" not in nav["url"]


def test_jsonrpc_log_redaction_omits_image_data() -> None:
    from mcp_servers.aria_browser.server.redaction import redact_jsonrpc_for_log

    msg = {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {"content": [{"type": "image", "data": "A" * 64, "mimeType": "image/png"}, {"type": "text", "text": "ok"}]},
    }
    safe = redact_jsonrpc_for_log(msg)
    assert safe["result"]["content"][0]["data"] == "<omitted image base64 len=64>"
    assert safe["result"]["content"][1] == {"type": "text", "text": "ok"}
    assert msg["result"]["content"][0]["data"] == "A" * 64
