"""Home/Document view state and the guarded-transition protocol.

Every transition out of Document (back to Home, to another document, or
process exit) first resolves unsaved edits:

1. ask the view whether it has unsaved changes (errors and timeouts mean no),
2. no changes -> proceed,
3. changes -> ask the user: Save, Discard or Cancel,
4. Save -> run the view's save and wait for it; a failed save still proceeds,
5. Discard -> proceed without saving,
6. Cancel -> abort, state unchanged.

Committed transitions rebuild the menu layout for the destination mode.
All methods run on the control thread; only view calls are pushed to a
worker so they can be time-bounded.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, Optional

from eclipse_pdf.domain.entities import DocumentReference, UnsavedChoice, ViewCommand, ViewMode
from eclipse_pdf.domain.menu import MenuLayout, menu_for_mode
from eclipse_pdf.domain.ports import ViewPort

AskUnsaved = Callable[[Optional[DocumentReference]], UnsavedChoice]
PickDocument = Callable[[], Optional[DocumentReference]]
OpenGate = Callable[[DocumentReference], bool]
ModeListener = Callable[[ViewMode, ViewMode, Optional[DocumentReference]], None]
MenuListener = Callable[[MenuLayout], None]

VIEW_QUERY_TIMEOUT_S = 2.0
VIEW_SAVE_TIMEOUT_S = 30.0


class NavigationVM:
    """Owns ``mode``, the active document and the menu layout bound to them."""

    def __init__(
        self,
        *,
        view: ViewPort,
        ask_unsaved: AskUnsaved,
        pick_document: Optional[PickDocument] = None,
        can_open: Optional[OpenGate] = None,
        on_mode_changed: Optional[ModeListener] = None,
        on_menu_changed: Optional[MenuListener] = None,
        view_query_timeout_s: float = VIEW_QUERY_TIMEOUT_S,
        view_save_timeout_s: float = VIEW_SAVE_TIMEOUT_S,
        executor: Optional[Executor] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.view = view
        self.ask_unsaved = ask_unsaved
        self.pick_document = pick_document
        self.can_open = can_open
        self.on_mode_changed = on_mode_changed
        self.on_menu_changed = on_menu_changed
        self.view_query_timeout_s = view_query_timeout_s
        self.view_save_timeout_s = view_save_timeout_s
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="view-call")

        self.mode: ViewMode = ViewMode.HOME
        self.document: Optional[DocumentReference] = None
        self.menu: MenuLayout = menu_for_mode(ViewMode.HOME)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start(self, initial: Optional[DocumentReference] = None) -> ViewMode:
        """Enter the initial state: Document when a reference was resolved, else Home."""
        if initial is not None and self._may_open(initial):
            self._commit(ViewMode.DOCUMENT, initial)
        else:
            self._commit(ViewMode.HOME, None)
        return self.mode

    def open_document(self, ref: DocumentReference) -> bool:
        """Home -> Document unconditionally; Document -> Document guarded."""
        if not self._may_open(ref):
            return False
        if self.mode is ViewMode.DOCUMENT and not self.guard():
            return False
        self._commit(ViewMode.DOCUMENT, ref)
        return True

    def go_home(self) -> bool:
        if self.mode is ViewMode.HOME:
            return True
        if not self.guard():
            return False
        self._commit(ViewMode.HOME, None)
        return True

    def close_document(self) -> None:
        """Drop to Home without prompting; callers run ``guard()`` first."""
        if self.mode is ViewMode.DOCUMENT:
            self._commit(ViewMode.HOME, None)

    def request_exit(self) -> bool:
        """True when the process may exit; state is left as is either way."""
        return self.guard()

    def guard(self) -> bool:
        """Run the unsaved-changes protocol; True when the transition may proceed."""
        if self.mode is not ViewMode.DOCUMENT:
            return True
        if not self._query_unsaved():
            return True
        choice = self.ask_unsaved(self.document)
        if choice is UnsavedChoice.CANCEL:
            self._log.debug("Transition cancelled by user; staying on %s", self.document)
            return False
        if choice is UnsavedChoice.SAVE:
            self._save_best_effort()
        return True

    # ------------------------------------------------------------------
    # Menu commands
    # ------------------------------------------------------------------
    def handle_command(self, command: ViewCommand) -> None:
        if command is ViewCommand.OPEN_DOCUMENT:
            ref = self.pick_document() if self.pick_document else None
            if ref is not None:
                self.open_document(ref)
            return
        if command is ViewCommand.NAVIGATE_HOME:
            self.go_home()
            return
        if self.mode is not ViewMode.DOCUMENT:
            self._log.debug("Ignoring %s at Home", command.value)
            return
        self._notify_view(command, self.document)

    # ------------------------------------------------------------------
    def _may_open(self, ref: DocumentReference) -> bool:
        if self.can_open is None:
            return True
        return bool(self.can_open(ref))

    def _commit(self, mode: ViewMode, ref: Optional[DocumentReference]) -> None:
        previous = self.mode
        self.mode = mode
        self.document = ref
        self.menu = menu_for_mode(mode)
        if mode is ViewMode.DOCUMENT:
            self._notify_view(ViewCommand.OPEN_DOCUMENT, ref)
        else:
            self._notify_view(ViewCommand.NAVIGATE_HOME, None)
        self._log.info("View %s -> %s%s", previous.value, mode.value, f" ({ref.name})" if ref else "")
        if self.on_menu_changed:
            self.on_menu_changed(self.menu)
        if self.on_mode_changed:
            self.on_mode_changed(previous, mode, ref)

    def _notify_view(self, command: ViewCommand, ref: Optional[DocumentReference]) -> None:
        try:
            self.view.send_command(command, ref)
        except Exception as exc:
            self._log.warning("View rejected %s: %s", command.value, exc)

    def _call_bounded(self, fn: Callable[[], Any], timeout_s: float) -> Any:
        future = self._executor.submit(fn)
        return future.result(timeout=timeout_s)

    def _query_unsaved(self) -> bool:
        try:
            return bool(self._call_bounded(self.view.has_unsaved_changes, self.view_query_timeout_s))
        except Exception as exc:
            self._log.warning("Unsaved-changes query failed, assuming none: %r", exc)
            return False

    def _save_best_effort(self) -> None:
        try:
            self._call_bounded(self.view.save_current, self.view_save_timeout_s)
        except Exception as exc:
            # A late save keeps running; its outcome is ignored.
            self._log.warning("Save before leaving %s failed, continuing: %r", self.document, exc)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)


__all__ = ["NavigationVM", "VIEW_QUERY_TIMEOUT_S", "VIEW_SAVE_TIMEOUT_S"]
