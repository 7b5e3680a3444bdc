"""Document screen: PDF header, system-viewer hand-off and a notes editor.

Rendering is delegated to the platform viewer. The editable surface is a
plain-text notes pane saved beside the PDF as ``<name>.pdf.notes.txt``;
that is what Save, Undo/Redo and the unsaved-changes query act on.

``has_unsaved_changes`` and ``save_current`` may run on a worker thread, so
they only touch the Python-side copy of the notes, never Tk.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
import threading
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, ttk
from typing import Callable, Optional

from eclipse_pdf.domain.entities import DocumentReference

NOTES_SUFFIX = ".notes.txt"

OnVoid = Optional[Callable[[], None]]


def notes_path_for(document: DocumentReference) -> Path:
    path = document.path
    return path.with_name(path.name + NOTES_SUFFIX)


def open_externally(path: Path) -> None:
    if sys.platform.startswith("win"):
        os.startfile(str(path))  # type: ignore[attr-defined]
    elif sys.platform == "darwin":
        subprocess.Popen(["open", str(path)])
    else:
        opener = shutil.which("xdg-open")
        if not opener:
            raise RuntimeError("xdg-open not available")
        subprocess.Popen([opener, str(path)])


def print_file(path: Path) -> None:
    if sys.platform.startswith("win"):
        os.startfile(str(path), "print")  # type: ignore[attr-defined]
        return
    lpr = shutil.which("lpr")
    if not lpr:
        raise RuntimeError("No print command (lpr) available")
    subprocess.Popen([lpr, str(path)])


class DocumentView(ttk.Frame):
    """UI for one open document plus the thread-safe notes state."""

    def __init__(
        self,
        parent: tk.Misc,
        *,
        on_home: OnVoid = None,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> None:
        super().__init__(parent, padding=8)
        self._log = logging.getLogger(__name__)
        self._on_status = on_status
        self._lock = threading.Lock()
        self._document: Optional[DocumentReference] = None
        self._content = ""
        self._dirty = False
        self._loading = False

        self.rowconfigure(2, weight=1)
        self.columnconfigure(0, weight=1)

        header = ttk.Frame(self)
        header.grid(row=0, column=0, sticky="ew")
        header.columnconfigure(1, weight=1)
        ttk.Button(header, text="Home", command=on_home).grid(row=0, column=0, padx=(0, 8))
        self.title_var = tk.StringVar(value="")
        ttk.Label(header, textvariable=self.title_var, font=("TkDefaultFont", 12, "bold")).grid(
            row=0, column=1, sticky="w"
        )
        ttk.Button(header, text="Open in viewer", command=self._open_in_viewer).grid(row=0, column=2)

        self.banner_var = tk.StringVar(value="")
        ttk.Label(self, textvariable=self.banner_var).grid(row=1, column=0, sticky="w", pady=(4, 4))

        body = ttk.Frame(self)
        body.grid(row=2, column=0, sticky="nsew")
        body.rowconfigure(0, weight=1)
        body.columnconfigure(0, weight=1)
        self.text = tk.Text(body, wrap="word", undo=True, autoseparators=True)
        self.text.grid(row=0, column=0, sticky="nsew")
        scroll = ttk.Scrollbar(body, orient="vertical", command=self.text.yview)
        scroll.grid(row=0, column=1, sticky="ns")
        self.text.configure(yscrollcommand=scroll.set)
        self.text.bind("<<Modified>>", self._on_modified)

    # ------------------------------------------------------------------
    # Control-thread API
    # ------------------------------------------------------------------
    @property
    def document(self) -> Optional[DocumentReference]:
        return self._document

    def load(self, document: DocumentReference) -> None:
        notes = ""
        target = notes_path_for(document)
        try:
            if target.exists():
                notes = target.read_text(encoding="utf-8")
        except OSError as exc:
            self._log.warning("Could not read notes for %s: %s", document.name, exc)
        with self._lock:
            self._document = document
            self._content = notes
            self._dirty = False
        self.title_var.set(document.name)
        self._loading = True
        try:
            self.text.delete("1.0", "end")
            self.text.insert("1.0", notes)
            self.text.edit_reset()
            self.text.edit_modified(False)
        finally:
            self._loading = False

    def clear(self) -> None:
        with self._lock:
            self._document = None
            self._content = ""
            self._dirty = False
        self.title_var.set("")
        self._loading = True
        try:
            self.text.delete("1.0", "end")
            self.text.edit_reset()
            self.text.edit_modified(False)
        finally:
            self._loading = False

    def set_banner(self, text: str) -> None:
        self.banner_var.set(text)

    def save_as(self) -> None:
        document = self._document
        if document is None:
            return
        target = filedialog.asksaveasfilename(
            parent=self,
            title="Save notes as",
            initialfile=notes_path_for(document).name,
            defaultextension=".txt",
        )
        if not target:
            return
        with self._lock:
            content = self._content
        try:
            Path(target).write_text(content, encoding="utf-8")
        except OSError as exc:
            self._status(f"Save failed: {exc}")
            return
        self._status(f"Saved notes to {target}")

    def undo(self) -> None:
        try:
            self.text.edit_undo()
        except tk.TclError:
            pass  # nothing to undo

    def redo(self) -> None:
        try:
            self.text.edit_redo()
        except tk.TclError:
            pass  # nothing to redo

    def print_document(self) -> None:
        document = self._document
        if document is None:
            return
        try:
            print_file(document.path)
        except Exception as exc:
            self._status(f"Could not print: {exc}")

    # ------------------------------------------------------------------
    # Thread-safe state
    # ------------------------------------------------------------------
    def has_unsaved_changes(self) -> bool:
        with self._lock:
            return self._document is not None and self._dirty

    def save_current(self) -> None:
        with self._lock:
            document, content = self._document, self._content
        if document is None:
            return
        notes_path_for(document).write_text(content, encoding="utf-8")
        with self._lock:
            if self._document == document and self._content == content:
                self._dirty = False
        self._log.info("Saved notes for %s", document.name)

    # ------------------------------------------------------------------
    def _on_modified(self, _event=None) -> None:
        if not self.text.edit_modified():
            return
        content = self.text.get("1.0", "end-1c")
        self.text.edit_modified(False)
        if self._loading:
            return
        with self._lock:
            self._content = content
            self._dirty = True

    def _open_in_viewer(self) -> None:
        document = self._document
        if document is None:
            return
        try:
            open_externally(document.path)
        except Exception as exc:
            self._status(f"Could not open viewer: {exc}")

    def _status(self, text: str) -> None:
        if self._on_status:
            self._on_status(text)


__all__ = ["DocumentView", "notes_path_for", "open_externally", "print_file"]
