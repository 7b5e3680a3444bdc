"""Command-menu layout bound to the current view mode."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .entities import ViewCommand, ViewMode


@dataclass(frozen=True)
class MenuItem:
    command: ViewCommand
    label: str
    accelerator: Optional[str] = None


@dataclass(frozen=True)
class MenuSection:
    label: str
    items: Tuple[MenuItem, ...]


@dataclass(frozen=True)
class MenuLayout:
    mode: ViewMode
    sections: Tuple[MenuSection, ...]
    menubar_visible: bool

    def commands(self) -> Tuple[ViewCommand, ...]:
        return tuple(item.command for section in self.sections for item in section.items)


_DOCUMENT_SECTIONS: Tuple[MenuSection, ...] = (
    MenuSection(
        "File",
        (
            MenuItem(ViewCommand.OPEN_DOCUMENT, "Open…", "Ctrl+O"),
            MenuItem(ViewCommand.SAVE, "Save", "Ctrl+S"),
            MenuItem(ViewCommand.SAVE_AS, "Save As…", "Ctrl+Shift+S"),
            MenuItem(ViewCommand.PRINT, "Print…", "Ctrl+P"),
            MenuItem(ViewCommand.NAVIGATE_HOME, "Home"),
        ),
    ),
    MenuSection(
        "Edit",
        (
            MenuItem(ViewCommand.UNDO, "Undo", "Ctrl+Z"),
            MenuItem(ViewCommand.REDO, "Redo", "Ctrl+Y"),
        ),
    ),
)


def menu_for_mode(mode: ViewMode) -> MenuLayout:
    """Home hides the menu bar and exposes no document commands."""
    if mode is ViewMode.DOCUMENT:
        return MenuLayout(mode=mode, sections=_DOCUMENT_SECTIONS, menubar_visible=True)
    return MenuLayout(mode=mode, sections=(), menubar_visible=False)


__all__ = ["MenuItem", "MenuLayout", "MenuSection", "menu_for_mode"]
