"""
Aria snapshot rendering from the CDP accessibility tree.

``Accessibility.getFullAXTree`` returns a flat node list with parent/child ids.
This module turns it into the indentation-structured text agents read:

    - heading "Sign in" [level=1] [ref=e2]
    - generic [ref=e3]:
      - textbox "Email" [ref=e4]
      - button "Next" [ref=e5]
    - text: Forgot password?

Ignored and presentational nodes are skipped and their children lifted one level.
Every rendered element gets a ``[ref=eN]`` handle, mapped to its backend DOM node
id so that tools can act on it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

_TEXT_ROLES = {"StaticText", "text"}
_SKIPPED_ROLES = {"InlineTextBox", "LineBreak"}
_LIFTED_ROLES = {"none", "presentation", "Ignored", "IgnoredRole"}
_ROOT_ROLES = {"RootWebArea", "WebArea"}
_GENERIC_ROLES = {"generic", "GenericContainer", "Section", "div"}

_FLAG_PROPS = ("checked", "disabled", "expanded", "pressed", "selected")


def _ax_value(value: Any) -> Any:
    """CDP AXValue is usually a dict with {type,value}. Return the underlying value."""
    if isinstance(value, dict) and "value" in value:
        return value.get("value")
    return value


def _norm_text(text: Any) -> str:
    return " ".join(str(text or "").split())


@dataclass
class AriaRender:
    text: str
    refs: dict[str, int] = field(default_factory=dict)


class _Tree:
    def __init__(self, nodes: list[dict[str, Any]]) -> None:
        self.nodes: dict[str, dict[str, Any]] = {}
        for node in nodes:
            if isinstance(node, dict) and node.get("nodeId") is not None:
                self.nodes[str(node["nodeId"])] = node

    def role(self, node: dict[str, Any]) -> str:
        return str(_ax_value(node.get("role")) or "")

    def children(self, node: dict[str, Any]) -> list[dict[str, Any]]:
        out = []
        for child_id in node.get("childIds") or []:
            child = self.nodes.get(str(child_id))
            if child is not None:
                out.append(child)
        return out

    def effective_children(self, node: dict[str, Any]) -> list[dict[str, Any]]:
        """Children with ignored/presentational wrappers flattened away."""
        out: list[dict[str, Any]] = []
        stack = list(reversed(self.children(node)))
        while stack:
            child = stack.pop()
            role = self.role(child)
            if role in _SKIPPED_ROLES:
                continue
            if child.get("ignored") or role in _LIFTED_ROLES:
                stack.extend(reversed(self.children(child)))
                continue
            out.append(child)
        return out

    def root(self) -> dict[str, Any] | None:
        for node in self.nodes.values():
            if not node.get("parentId"):
                return node
        return next(iter(self.nodes.values()), None)


def _props(node: dict[str, Any]) -> list[str]:
    out: list[str] = []
    values: dict[str, Any] = {}
    for prop in node.get("properties") or []:
        if isinstance(prop, dict) and isinstance(prop.get("name"), str):
            values[prop["name"]] = _ax_value(prop.get("value"))
    for name in _FLAG_PROPS:
        value = values.get(name)
        if value is True or value == "true":
            out.append(f"[{name}]")
        elif name in {"checked", "pressed"} and value == "mixed":
            out.append(f"[{name}=mixed]")
    level = values.get("level")
    if isinstance(level, int):
        out.append(f"[level={level}]")
    return out


def render_aria_snapshot(nodes: list[dict[str, Any]]) -> AriaRender:
    """Render ``Accessibility.getFullAXTree`` nodes as an aria snapshot."""
    tree = _Tree(nodes)
    root = tree.root()
    if root is None:
        return AriaRender(text="")

    refs: dict[str, int] = {}
    counter = 0
    lines: list[str] = []
    top = tree.effective_children(root) if tree.role(root) in _ROOT_ROLES else [root]
    stack: list[tuple[dict[str, Any], int]] = [(child, 0) for child in reversed(top)]

    while stack:
        node, depth = stack.pop()
        indent = "  " * depth
        role = tree.role(node)
        name = _norm_text(_ax_value(node.get("name")))

        if role in _TEXT_ROLES:
            if name:
                lines.append(f"{indent}- text: {name}")
            continue

        children = tree.effective_children(node)
        text_children = [c for c in children if tree.role(c) in _TEXT_ROLES]
        element_children = [c for c in children if tree.role(c) not in _TEXT_ROLES]

        counter += 1
        ref = f"e{counter}"
        backend_id = node.get("backendDOMNodeId")
        if isinstance(backend_id, int):
            refs[ref] = backend_id

        label = "generic" if role in _GENERIC_ROLES else (role or "generic")
        parts = [f"- {label}"]
        if name and label != "generic":
            parts.append(json.dumps(name, ensure_ascii=False))
        parts.extend(_props(node))
        parts.append(f"[ref={ref}]")
        head = indent + " ".join(parts)

        text_only = bool(text_children) and not element_children
        inline = ""
        if text_only:
            joined = _norm_text(" ".join(_norm_text(_ax_value(c.get("name"))) for c in text_children))
            if joined and joined != name:
                inline = joined
        elif label == "generic" and name and not children:
            inline = name

        value = _norm_text(_ax_value(node.get("value")))
        if not inline and value and label in {"textbox", "searchbox", "combobox", "spinbutton", "slider"}:
            inline = value

        nested = bool(children) and not inline and not text_only
        if inline:
            lines.append(f"{head}: {inline}")
        elif nested:
            lines.append(f"{head}:")
        else:
            lines.append(head)

        if nested:
            for child in reversed(children):
                stack.append((child, depth + 1))

    return AriaRender(text="\n".join(lines), refs=refs)


__all__ = ["AriaRender", "render_aria_snapshot"]
