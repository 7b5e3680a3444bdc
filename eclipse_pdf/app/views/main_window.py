"""
MainWindowView
--------------
The one top-level window. It stacks the home screen and the document screen,
rebuilds the menu bar from a ``MenuLayout`` and forwards view commands to
the document screen. No session logic lives here; all user intents leave
through constructor callbacks.
"""

from __future__ import annotations

import logging
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable, List, Optional, Tuple

from eclipse_pdf.domain.entities import DocumentReference, UnsavedChoice, UserIdentity, ViewCommand
from eclipse_pdf.domain.menu import MenuLayout

from .dialogs import TkCredentialPrompt, TkFilePicker, ask_unsaved
from .document_view import DocumentView
from .home_view import HomeView

OnVoid = Optional[Callable[[], None]]

# "Ctrl+Shift+S" -> "<Control-Shift-S>"
_MODIFIERS = {"ctrl": "Control", "shift": "Shift", "alt": "Alt", "cmd": "Command"}


def accelerator_to_sequence(accelerator: str) -> str:
    parts = accelerator.split("+")
    mods = [_MODIFIERS.get(part.strip().lower(), part.strip()) for part in parts[:-1]]
    key = parts[-1].strip()
    key = key.upper() if "Shift" in mods else key.lower()
    return "<" + "-".join([*mods, key]) + ">"


class MainWindowView(tk.Tk):
    """Top-level application window; also the ``ViewPort`` for navigation."""

    def __init__(
        self,
        *,
        on_command: Optional[Callable[[ViewCommand], None]] = None,
        on_close: OnVoid = None,
        on_sign_in: OnVoid = None,
        on_sign_out: OnVoid = None,
        on_upgrade: OnVoid = None,
        on_manage: OnVoid = None,
    ) -> None:
        super().__init__()
        self._log = logging.getLogger(__name__)
        self.title("Eclipse PDF")
        self.geometry("1024x720")
        self.minsize(640, 480)

        self._on_command = on_command
        self._bound: List[Tuple[tk.Misc, str]] = []
        self._picker = TkFilePicker(self)
        self._credentials = TkCredentialPrompt(self)
        self.protocol("WM_DELETE_WINDOW", lambda: on_close and on_close())

        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        self.home = HomeView(
            self,
            on_open=lambda: self._emit(ViewCommand.OPEN_DOCUMENT),
            on_sign_in=on_sign_in,
            on_sign_out=on_sign_out,
            on_upgrade=on_upgrade,
            on_manage=on_manage,
        )
        self.document_view = DocumentView(
            self,
            on_home=lambda: self._emit(ViewCommand.NAVIGATE_HOME),
            on_status=self.show_toast,
        )
        for frame in (self.home, self.document_view):
            frame.grid(row=0, column=0, sticky="nsew")

        self.status_var = tk.StringVar(value="")
        ttk.Label(self, textvariable=self.status_var, anchor="w").grid(
            row=1, column=0, sticky="ew", padx=8, pady=(0, 4)
        )
        self.home.tkraise()

    # ------------------------------------------------------------------
    # ViewPort
    # ------------------------------------------------------------------
    @property
    def view(self) -> "MainWindowView":
        return self

    def has_unsaved_changes(self) -> bool:
        return self.document_view.has_unsaved_changes()

    def save_current(self) -> None:
        self.document_view.save_current()

    def send_command(self, command: ViewCommand, document: Optional[DocumentReference] = None) -> None:
        if command is ViewCommand.OPEN_DOCUMENT and document is not None:
            self.document_view.load(document)
            self.document_view.tkraise()
            self.title(f"{document.name} - Eclipse PDF")
        elif command is ViewCommand.NAVIGATE_HOME:
            self.document_view.clear()
            self.home.tkraise()
            self.title("Eclipse PDF")
        elif command is ViewCommand.SAVE:
            try:
                self.document_view.save_current()
            except OSError as exc:
                self.show_toast(f"Save failed: {exc}")
            else:
                self.show_toast("Saved.")
        elif command is ViewCommand.SAVE_AS:
            self.document_view.save_as()
        elif command is ViewCommand.PRINT:
            self.document_view.print_document()
        elif command is ViewCommand.UNDO:
            self.document_view.undo()
        elif command is ViewCommand.REDO:
            self.document_view.redo()

    # ------------------------------------------------------------------
    # WindowHandle
    # ------------------------------------------------------------------
    def ask_unsaved(self, document: Optional[DocumentReference]) -> UnsavedChoice:
        return ask_unsaved(self, document)

    def pick_document(self) -> Optional[DocumentReference]:
        return self._picker.pick_document()

    def acquire_identity(self) -> Optional[UserIdentity]:
        return self._credentials.acquire()

    def apply_menu(self, layout: MenuLayout) -> None:
        for widget, sequence in self._bound:
            widget.unbind(sequence)
        self._bound.clear()

        if not layout.menubar_visible:
            self.configure(menu="")
            return

        menubar = tk.Menu(self)
        for section in layout.sections:
            submenu = tk.Menu(menubar, tearoff=False)
            for item in section.items:
                submenu.add_command(
                    label=item.label,
                    accelerator=item.accelerator or "",
                    command=lambda cmd=item.command: self._emit(cmd),
                )
                if item.accelerator:
                    self._bind_accelerator(accelerator_to_sequence(item.accelerator), item.command)
            menubar.add_cascade(label=section.label, menu=submenu)
        self.configure(menu=menubar)

    def show_trial(self, trial) -> None:
        self.home.set_banner(trial.banner_text)
        self.home.set_account(trial.account_text, signed_in=trial.signed_in)
        self.document_view.set_banner(trial.banner_text)

    def show_notice(self, title: str, message: str) -> None:
        messagebox.showinfo(title, message, parent=self)

    def raise_window(self) -> None:
        if self.state() in ("withdrawn", "iconic"):
            self.deiconify()
        self.lift()
        try:
            self.focus_force()
        except tk.TclError as exc:
            self._log.debug("focus_force failed: %s", exc)

    def show_toast(self, message: str, level: str = "info") -> None:
        """Lightweight user feedback in the status line."""
        self.status_var.set(message)

    # ------------------------------------------------------------------
    def _bind_accelerator(self, sequence: str, command: ViewCommand) -> None:
        # The notes Text gets its own binding so "break" stops its class
        # bindings (built-in undo/redo, Ctrl+O newline) from also firing.
        for widget in (self, self.document_view.text):
            widget.bind(sequence, lambda _e, cmd=command: self._emit(cmd) or "break")
            self._bound.append((widget, sequence))

    def _emit(self, command: ViewCommand) -> None:
        if self._on_command:
            self._on_command(command)


__all__ = ["MainWindowView", "accelerator_to_sequence"]
