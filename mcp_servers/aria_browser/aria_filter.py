"""
Compaction of aria snapshots.

Aria snapshots are indentation-structured YAML-like text. Layout wrappers show up
as ``- generic [ref=eN]:`` lines without text of their own; on real pages they
make up a large share of the tree. This module drops such wrappers when nothing
below them carries information, and keeps them (with their original indentation)
when something does.
"""

from __future__ import annotations

import re

_GENERIC_PREFIX = "- generic [ref="
_GENERIC_WITH_TEXT_RE = re.compile(r"^- generic \[ref=\w+\]:\s*(.+)$")


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def _is_bare_generic(stripped: str) -> bool:
    """True for a ``- generic [ref=..]`` line with no text after its label."""
    if not stripped.startswith(_GENERIC_PREFIX):
        return False
    match = _GENERIC_WITH_TEXT_RE.match(stripped)
    return not (match and match.group(1).strip())


def filter_empty_generic_elements(aria_snapshot: str) -> str:
    """Remove empty generic wrappers whose whole subtree is empty.

    A line is useful when it is non-blank and not a bare generic wrapper. A bare
    wrapper at depth D is useful when any following line deeper than D (up to the
    first non-blank line at depth <= D) is useful. Blank lines are always kept.
    Retained lines are returned byte-identical and in their original order.

    Usefulness is memoized per line index and evaluated from the last line
    backwards, so every wrapper only consults already-known answers for its
    descendants. The descendant scan of each wrapper is still linear in its
    subtree, so a fully nested tree of empty wrappers costs O(n^2); fine for
    single-page snapshots (hundreds to a few thousand lines), not for arbitrary
    input sizes.
    """
    lines = aria_snapshot.split("\n")
    useful = [False] * len(lines)

    for index in range(len(lines) - 1, -1, -1):
        line = lines[index]
        stripped = line.strip()
        if not stripped:
            continue
        if not _is_bare_generic(stripped):
            useful[index] = True
            continue

        depth = _indent(line)
        for next_index in range(index + 1, len(lines)):
            next_line = lines[next_index]
            next_depth = _indent(next_line)
            if next_depth <= depth and next_line.strip():
                break
            if next_depth > depth and useful[next_index]:
                useful[index] = True
                break

    kept = [line for line, keep in zip(lines, useful) if keep or not line.strip()]
    return "\n".join(kept)


__all__ = ["filter_empty_generic_elements"]
