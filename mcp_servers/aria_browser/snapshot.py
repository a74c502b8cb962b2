"""
Captured tab state.

Value objects produced by ``Tab.capture_snapshot()`` and consumed by the payload
serializer. They are frozen: a new capture supersedes the previous one instead of
updating it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

MODAL_DIALOG = "dialog"
MODAL_FILE_CHOOSER = "fileChooser"


@dataclass(frozen=True, slots=True)
class ModalState:
    """A blocking dialog or file chooser that is open on a tab."""

    type: str
    description: str
    cleared_by: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "description": self.description, "clearedBy": self.cleared_by}


@dataclass(frozen=True, slots=True)
class ConsoleMessage:
    type: str
    text: str
    url: str = ""
    line: int | None = None

    def __str__(self) -> str:
        out = f"[{self.type.upper()}] {self.text}"
        if self.url:
            out += f" @ {self.url}"
            if self.line is not None:
                out += f":{self.line}"
        return out


@dataclass(frozen=True, slots=True)
class DownloadEntry:
    suggested_filename: str
    output_file: str
    finished: bool = False


@dataclass(frozen=True, slots=True)
class TabSnapshot:
    """Observable state of one tab at capture time."""

    url: str
    title: str
    aria_snapshot: str
    console_messages: tuple[ConsoleMessage, ...] = field(default_factory=tuple)
    downloads: tuple[DownloadEntry, ...] = field(default_factory=tuple)
    modal_states: tuple[ModalState, ...] = field(default_factory=tuple)

    @property
    def blocked(self) -> bool:
        return bool(self.modal_states)


def dialog_modal_state(dialog_type: str, message: str) -> ModalState:
    return ModalState(
        type=MODAL_DIALOG,
        description=f'"{dialog_type}" dialog with message "{message}"',
        cleared_by="browser_handle_dialog",
    )


def file_chooser_modal_state() -> ModalState:
    return ModalState(
        type=MODAL_FILE_CHOOSER,
        description="File chooser",
        cleared_by="browser_file_upload",
    )


__all__ = [
    "MODAL_DIALOG",
    "MODAL_FILE_CHOOSER",
    "ConsoleMessage",
    "DownloadEntry",
    "ModalState",
    "TabSnapshot",
    "dialog_modal_state",
    "file_chooser_modal_state",
]
