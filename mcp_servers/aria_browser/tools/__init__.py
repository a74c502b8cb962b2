"""
Browser tools organized by domain.

Each module exports ``TOOLS``, a list of ``ToolSpec``:
- base: Common utilities, errors, parameter readers
- tabs: Tab management
- navigation: URL navigation and history
- snapshot: Page snapshot, click by ref, screenshots
- common: Close, viewport resize
- dialogs: JavaScript dialogs and file choosers
- wait: Delays and text waits
"""

from __future__ import annotations

from ..server.types import ToolSpec
from . import common, dialogs, navigation, snapshot, tabs, wait
from .base import SmartToolError, ensure_allowed_navigation

ALL_TOOLS: list[ToolSpec] = [
    *tabs.TOOLS,
    *navigation.TOOLS,
    *snapshot.TOOLS,
    *common.TOOLS,
    *dialogs.TOOLS,
    *wait.TOOLS,
]

__all__ = ["ALL_TOOLS", "SmartToolError", "ensure_allowed_navigation"]
