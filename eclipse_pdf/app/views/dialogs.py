"""Modal prompts used by the main window."""

from __future__ import annotations

import tkinter as tk
import uuid
from tkinter import filedialog, messagebox, simpledialog
from typing import Optional

from eclipse_pdf.domain.entities import DocumentReference, UnsavedChoice, UserIdentity

_PDF_FILETYPES = (("PDF documents", "*.pdf"), ("All files", "*.*"))


def ask_unsaved(parent: tk.Misc, document: Optional[DocumentReference]) -> UnsavedChoice:
    """Three-way Save / Discard / Cancel prompt."""
    name = document.name if document else "this document"
    answer = messagebox.askyesnocancel(
        "Unsaved changes",
        f"Save your changes to {name} before leaving?",
        icon=messagebox.WARNING,
        parent=parent,
    )
    if answer is None:
        return UnsavedChoice.CANCEL
    return UnsavedChoice.SAVE if answer else UnsavedChoice.DISCARD


class TkFilePicker:
    """``FilePickerPort`` backed by the native open dialog."""

    def __init__(self, parent: tk.Misc) -> None:
        self.parent = parent
        self.last_dir: Optional[str] = None

    def pick_document(self) -> Optional[DocumentReference]:
        path = filedialog.askopenfilename(
            parent=self.parent,
            title="Open PDF",
            filetypes=_PDF_FILETYPES,
            initialdir=self.last_dir or None,
        )
        if not path:
            return None
        ref = DocumentReference.from_path(path)
        self.last_dir = str(ref.path.parent)
        return ref


class TkCredentialPrompt:
    """``CredentialPort`` stand-in: asks for an e-mail and display name.

    The uid is derived from the e-mail so the same person maps to the same
    backend record on every device.
    """

    def __init__(self, parent: tk.Misc) -> None:
        self.parent = parent

    def acquire(self) -> Optional[UserIdentity]:
        email = simpledialog.askstring("Sign in", "E-mail address:", parent=self.parent)
        if not email or "@" not in email:
            return None
        email = email.strip().lower()
        name = simpledialog.askstring("Sign in", "Display name (optional):", parent=self.parent) or ""
        uid = uuid.uuid5(uuid.NAMESPACE_URL, f"mailto:{email}").hex
        return UserIdentity(uid=uid, email=email, display_name=name.strip())


__all__ = ["TkCredentialPrompt", "TkFilePicker", "ask_unsaved"]
