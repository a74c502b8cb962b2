from __future__ import annotations

SIGN_IN_SNAPSHOT = "\n".join(
    [
        "- generic [ref=e1]: ",
        "  - generic [ref=e2]: ",
        "    - generic [ref=e3]: Sign in to Open WebUI",
        "    - generic [ref=e4]: ",
        "      - generic [ref=e5]: ",
        "        - generic [ref=e6]: ",
        "          - generic [ref=e7]: Email",
        '          - textbox "Email" [ref=e8]',
        "          - generic [ref=e9]: ",
        "            - generic [ref=e10]: ",
        "        - generic [ref=e11]: Password",
        '        - textbox "Password" [ref=e12]',
        "  - generic [ref=e13]: ",
        "    - generic [ref=e14]: ",
        "      - generic [ref=e15]: ",
        '  - button "Sign In" [ref=e16]',
        "- generic [ref=e17]: ",
        "  - generic [ref=e18]: ",
        "- footer [ref=e19]: Copyright 2024",
    ]
)


def test_sign_in_form_drops_only_empty_wrapper_chains() -> None:
    from mcp_servers.aria_browser.aria_filter import filter_empty_generic_elements

    out = filter_empty_generic_elements(SIGN_IN_SNAPSHOT)

    assert out == "\n".join(
        [
            "- generic [ref=e1]: ",
            "  - generic [ref=e2]: ",
            "    - generic [ref=e3]: Sign in to Open WebUI",
            "    - generic [ref=e4]: ",
            "      - generic [ref=e5]: ",
            "        - generic [ref=e6]: ",
            "          - generic [ref=e7]: Email",
            '          - textbox "Email" [ref=e8]',
            "        - generic [ref=e11]: Password",
            '        - textbox "Password" [ref=e12]',
            '  - button "Sign In" [ref=e16]',
            "- footer [ref=e19]: Copyright 2024",
        ]
    )


def test_empty_chain_before_sibling_is_removed() -> None:
    from mcp_servers.aria_browser.aria_filter import filter_empty_generic_elements

    snapshot = "\n".join(
        [
            "- generic [ref=e1]:",
            "  - generic [ref=e2]:",
            "    - generic [ref=e3]:",
            '- button "Click me" [ref=e4]',
        ]
    )
    assert filter_empty_generic_elements(snapshot) == '- button "Click me" [ref=e4]'


def test_compaction_is_idempotent() -> None:
    from mcp_servers.aria_browser.aria_filter import filter_empty_generic_elements

    once = filter_empty_generic_elements(SIGN_IN_SNAPSHOT)
    assert filter_empty_generic_elements(once) == once


def test_tree_without_wrappers_is_unchanged() -> None:
    from mcp_servers.aria_browser.aria_filter import filter_empty_generic_elements

    snapshot = '- heading "Title" [level=1] [ref=e1]\n- link "Home" [ref=e2]:\n  - /url: /'
    assert filter_empty_generic_elements(snapshot) == snapshot


def test_deep_text_keeps_every_ancestor_wrapper() -> None:
    from mcp_servers.aria_browser.aria_filter import filter_empty_generic_elements

    lines = [("  " * depth) + f"- generic [ref=e{depth}]:" for depth in range(6)]
    lines.append(("  " * 6) + "- text: deep")
    snapshot = "\n".join(lines)
    assert filter_empty_generic_elements(snapshot) == snapshot


def test_only_empty_wrappers_yields_empty_text() -> None:
    from mcp_servers.aria_browser.aria_filter import filter_empty_generic_elements

    snapshot = "- generic [ref=e1]:\n  - generic [ref=e2]:"
    assert filter_empty_generic_elements(snapshot) == ""
    assert filter_empty_generic_elements("") == ""


def test_blank_lines_are_kept_in_place() -> None:
    from mcp_servers.aria_browser.aria_filter import filter_empty_generic_elements

    snapshot = '- generic [ref=e1]:\n\n- button "OK" [ref=e2]\n'
    assert filter_empty_generic_elements(snapshot) == '\n- button "OK" [ref=e2]\n'


def test_wrapper_with_trailing_text_is_useful() -> None:
    from mcp_servers.aria_browser.aria_filter import filter_empty_generic_elements

    snapshot = "- generic [ref=e1]: Hello\n- generic [ref=e2]:"
    assert filter_empty_generic_elements(snapshot) == "- generic [ref=e1]: Hello"


def test_non_generic_container_is_always_kept() -> None:
    from mcp_servers.aria_browser.aria_filter import filter_empty_generic_elements

    snapshot = "- list [ref=e1]:\n  - generic [ref=e2]:"
    assert filter_empty_generic_elements(snapshot) == "- list [ref=e1]:"
