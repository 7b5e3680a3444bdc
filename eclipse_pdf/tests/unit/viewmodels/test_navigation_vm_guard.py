from __future__ import annotations

import threading
from typing import List, Optional

from eclipse_pdf.domain.entities import DocumentReference, UnsavedChoice, ViewCommand, ViewMode
from eclipse_pdf.tests.unit.fakes import FakeView
from eclipse_pdf.viewmodels.navigation_vm import NavigationVM

DOC_A = DocumentReference("file:///tmp/a.pdf")
DOC_B = DocumentReference("file:///tmp/b.pdf")


class _Prompt:
    def __init__(self, choice: UnsavedChoice) -> None:
        self.choice = choice
        self.calls: List[Optional[DocumentReference]] = []

    def __call__(self, document: Optional[DocumentReference]) -> UnsavedChoice:
        self.calls.append(document)
        return self.choice


def _nav(view: FakeView, choice: UnsavedChoice = UnsavedChoice.DISCARD, **kwargs) -> tuple:
    prompt = _Prompt(choice)
    modes = []
    menus = []
    nav = NavigationVM(
        view=view,
        ask_unsaved=prompt,
        on_mode_changed=lambda prev, mode, doc: modes.append((prev, mode, doc)),
        on_menu_changed=menus.append,
        **kwargs,
    )
    return nav, prompt, modes, menus


def test_start_enters_document_when_resolved() -> None:
    view = FakeView()
    nav, _prompt, modes, menus = _nav(view)

    assert nav.start(DOC_A) is ViewMode.DOCUMENT
    assert nav.document == DOC_A
    assert view.commands == [(ViewCommand.OPEN_DOCUMENT, DOC_A)]
    assert modes == [(ViewMode.HOME, ViewMode.DOCUMENT, DOC_A)]
    assert menus[-1].menubar_visible is True


def test_start_without_document_is_home() -> None:
    nav, _prompt, _modes, menus = _nav(FakeView())

    assert nav.start(None) is ViewMode.HOME
    assert menus[-1].menubar_visible is False


def test_no_unsaved_changes_commits_without_prompt() -> None:
    view = FakeView(unsaved=False)
    nav, prompt, _modes, _menus = _nav(view)
    nav.start(DOC_A)

    assert nav.go_home() is True
    assert nav.mode is ViewMode.HOME
    assert prompt.calls == []
    assert view.commands[-1] == (ViewCommand.NAVIGATE_HOME, None)


def test_cancel_leaves_state_unchanged() -> None:
    view = FakeView(unsaved=True)
    nav, prompt, modes, _menus = _nav(view, UnsavedChoice.CANCEL)
    nav.start(DOC_A)

    assert nav.open_document(DOC_B) is False
    assert nav.go_home() is False
    assert nav.mode is ViewMode.DOCUMENT
    assert nav.document == DOC_A
    assert view.save_calls == 0
    assert len(prompt.calls) == 2
    assert len(modes) == 1


def test_discard_never_saves() -> None:
    view = FakeView(unsaved=True)
    nav, _prompt, _modes, _menus = _nav(view, UnsavedChoice.DISCARD)
    nav.start(DOC_A)

    assert nav.open_document(DOC_B) is True
    assert nav.document == DOC_B
    assert view.save_calls == 0


def test_save_runs_exactly_once_then_commits() -> None:
    view = FakeView(unsaved=True)
    nav, _prompt, _modes, _menus = _nav(view, UnsavedChoice.SAVE)
    nav.start(DOC_A)

    assert nav.go_home() is True
    assert nav.mode is ViewMode.HOME
    assert view.save_calls == 1


def test_failed_save_still_proceeds() -> None:
    view = FakeView(unsaved=True)
    view.save_error = OSError("read-only")
    nav, _prompt, _modes, _menus = _nav(view, UnsavedChoice.SAVE)
    nav.start(DOC_A)

    assert nav.go_home() is True
    assert nav.mode is ViewMode.HOME


def test_query_error_means_no_changes() -> None:
    view = FakeView(unsaved=True)
    view.query_error = RuntimeError("view crashed")
    nav, prompt, _modes, _menus = _nav(view, UnsavedChoice.CANCEL)
    nav.start(DOC_A)

    assert nav.go_home() is True
    assert prompt.calls == []


def test_hung_query_times_out_as_no_changes() -> None:
    release = threading.Event()
    view = FakeView(unsaved=True)
    view.has_unsaved_changes = lambda: release.wait(5) or True  # type: ignore[method-assign]
    nav, prompt, _modes, _menus = _nav(view, UnsavedChoice.CANCEL, view_query_timeout_s=0.05)
    nav.start(DOC_A)
    try:
        assert nav.go_home() is True
        assert prompt.calls == []
    finally:
        release.set()
        nav.shutdown()


def test_hung_save_is_abandoned() -> None:
    release = threading.Event()
    view = FakeView(unsaved=True)
    view.save_current = lambda: release.wait(5)  # type: ignore[method-assign]
    nav, _prompt, _modes, _menus = _nav(view, UnsavedChoice.SAVE, view_save_timeout_s=0.05)
    nav.start(DOC_A)
    try:
        assert nav.go_home() is True
        assert nav.mode is ViewMode.HOME
    finally:
        release.set()
        nav.shutdown()


def test_request_exit_guards_without_changing_mode() -> None:
    view = FakeView(unsaved=True)
    nav, _prompt, _modes, _menus = _nav(view, UnsavedChoice.CANCEL)
    nav.start(DOC_A)

    assert nav.request_exit() is False
    assert nav.mode is ViewMode.DOCUMENT


def test_home_to_document_is_unguarded() -> None:
    view = FakeView(unsaved=True)
    nav, prompt, _modes, _menus = _nav(view, UnsavedChoice.CANCEL)
    nav.start(None)

    assert nav.open_document(DOC_A) is True
    assert prompt.calls == []


def test_gate_blocks_opening() -> None:
    view = FakeView()
    nav, _prompt, _modes, _menus = _nav(view, can_open=lambda ref: False)

    assert nav.start(DOC_A) is ViewMode.HOME
    assert nav.open_document(DOC_B) is False
    assert nav.mode is ViewMode.HOME


def test_editing_commands_forwarded_only_in_document() -> None:
    view = FakeView()
    nav, _prompt, _modes, _menus = _nav(view)
    nav.start(None)
    nav.handle_command(ViewCommand.UNDO)
    assert view.commands == [(ViewCommand.NAVIGATE_HOME, None)]

    nav.open_document(DOC_A)
    nav.handle_command(ViewCommand.PRINT)
    assert view.commands[-1] == (ViewCommand.PRINT, DOC_A)


def test_open_command_uses_picker() -> None:
    view = FakeView()
    nav, _prompt, _modes, _menus = _nav(view, pick_document=lambda: DOC_B)
    nav.start(None)

    nav.handle_command(ViewCommand.OPEN_DOCUMENT)

    assert nav.document == DOC_B


def test_navigate_home_command() -> None:
    nav, _prompt, _modes, _menus = _nav(FakeView())
    nav.start(DOC_A)

    nav.handle_command(ViewCommand.NAVIGATE_HOME)

    assert nav.mode is ViewMode.HOME
