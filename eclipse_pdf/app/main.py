# eclipse_pdf/app/main.py
from __future__ import annotations

import logging
import os
import sys
from typing import List, Optional, Sequence

from .background import BackgroundRunner
from .controller import AppController
from .message_channel import MessageChannel, MessageKind
from .scheduler import TimerScheduler
from .session import SessionOrchestrator
from .views.main_window import MainWindowView
from ..domain.entities import DocumentReference, ViewCommand
from ..domain.launch_args import looks_like_document, normalize_arg, to_document_reference
from ..utils import logging as logging_utils
from ..utils.paths import default_data_dir, ensure_dir
from ..viewmodels.settings_vm import SettingsVM


def _documents_from_open_event(paths: Sequence[str]) -> List[DocumentReference]:
    refs: List[DocumentReference] = []
    for raw in paths:
        text = normalize_arg(raw)
        if text is None or not looks_like_document(text):
            continue
        ref = to_document_reference(text)
        if ref is not None:
            refs.append(ref)
    return refs


class App:
    """Bootstrap: build the window and hand it to the session orchestrator."""

    def __init__(self, orchestrator: SessionOrchestrator, channel: MessageChannel) -> None:
        self._log = logging.getLogger(__name__)
        self.orchestrator = orchestrator
        self.channel = channel
        self.win = MainWindowView(
            on_command=self._on_command,
            on_close=self._on_close,
            on_sign_in=orchestrator.sign_in,
            on_sign_out=orchestrator.sign_out,
            on_upgrade=lambda: orchestrator.open_billing("checkout"),
            on_manage=lambda: orchestrator.open_billing("portal"),
        )
        self.scheduler = TimerScheduler(self.win.after, self.win.after_cancel)
        if sys.platform == "darwin":
            self._install_mac_hooks()

    def _install_mac_hooks(self) -> None:
        """Route Finder "open with", dock reopen and Cmd-Q into the channel."""

        def _open_document(*paths: str) -> None:
            for ref in _documents_from_open_event(paths):
                self.channel.post(MessageKind.OPEN_DOCUMENT, ref)

        def _reopen(*_args: str) -> None:
            self.channel.post(MessageKind.REOPEN)

        def _quit(*_args: str) -> None:
            self.channel.post(MessageKind.QUIT)

        self.win.createcommand("::tk::mac::OpenDocument", _open_document)
        self.win.createcommand("::tk::mac::ReopenApplication", _reopen)
        self.win.createcommand("::tk::mac::Quit", _quit)

    def _on_command(self, command: ViewCommand) -> None:
        self.channel.post(MessageKind.MENU_COMMAND, command)

    def _on_close(self) -> None:
        self.orchestrator.request_close()

    def run(self) -> None:
        mode = self.orchestrator.attach_window(self.win, self.scheduler)
        self._log.info("Window ready in %s mode", mode.value)
        try:
            self.win.mainloop()
        finally:
            self.orchestrator.shutdown()
            try:
                self.win.destroy()
            except Exception as exc:
                self._log.debug("Window already destroyed: %s", exc)


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging_utils.configure_logging()
    log = logging.getLogger(__name__)
    argv = list(sys.argv if argv is None else argv)

    data_dir = ensure_dir(default_data_dir())
    settings_vm = SettingsVM()
    controller = AppController(settings_vm, data_dir=data_dir)
    controller.load_settings()
    level = logging_utils.configure_logging(
        debug=settings_vm.debug_logging, log_dir=data_dir / "logs"
    )
    log.debug("Log level %s, data dir %s", logging_utils.level_name(level), data_dir)

    channel = MessageChannel()
    runner = BackgroundRunner(channel)
    orchestrator = SessionOrchestrator(
        config=settings_vm.config,
        storage=controller.storage,
        backend=controller.backend,
        instance_port=controller.instance_port,
        channel=channel,
        runner=runner,
    )
    if not orchestrator.claim(argv, os.getcwd()):
        runner.shutdown(wait=True)
        return 0

    App(orchestrator, channel).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
