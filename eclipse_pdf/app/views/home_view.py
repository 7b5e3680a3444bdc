from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional

OnVoid = Optional[Callable[[], None]]


class HomeView(ttk.Frame):
    """Landing screen shown when no document is open."""

    def __init__(
        self,
        parent: tk.Misc,
        *,
        on_open: OnVoid = None,
        on_sign_in: OnVoid = None,
        on_sign_out: OnVoid = None,
        on_upgrade: OnVoid = None,
        on_manage: OnVoid = None,
    ) -> None:
        super().__init__(parent, padding=24)
        self._on_sign_in = on_sign_in
        self._on_sign_out = on_sign_out

        self.columnconfigure(0, weight=1)
        ttk.Label(self, text="Eclipse PDF", font=("TkDefaultFont", 20, "bold")).grid(
            row=0, column=0, pady=(24, 8)
        )
        self.banner_var = tk.StringVar(value="")
        ttk.Label(self, textvariable=self.banner_var).grid(row=1, column=0, pady=(0, 16))

        ttk.Button(self, text="Open PDF…", command=on_open).grid(row=2, column=0, pady=4)

        account = ttk.Frame(self)
        account.grid(row=3, column=0, pady=(24, 0))
        self.account_var = tk.StringVar(value="Not signed in")
        ttk.Label(account, textvariable=self.account_var).grid(row=0, column=0, columnspan=3, pady=(0, 6))
        self.btn_account = ttk.Button(account, text="Sign in", command=self._toggle_account)
        self.btn_account.grid(row=1, column=0, padx=4)
        ttk.Button(account, text="Upgrade", command=on_upgrade).grid(row=1, column=1, padx=4)
        ttk.Button(account, text="Manage subscription", command=on_manage).grid(row=1, column=2, padx=4)
        self._signed_in = False

    def set_banner(self, text: str) -> None:
        self.banner_var.set(text)

    def set_account(self, text: str, *, signed_in: bool) -> None:
        self._signed_in = signed_in
        self.account_var.set(text)
        self.btn_account.configure(text="Sign out" if signed_in else "Sign in")

    def _toggle_account(self) -> None:
        callback = self._on_sign_out if self._signed_in else self._on_sign_in
        if callback:
            callback()
