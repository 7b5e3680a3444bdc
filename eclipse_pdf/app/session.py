"""Process-level session orchestration.

``SessionOrchestrator`` sequences startup (resolve launch arguments, claim
the single-instance lock, attach the one window, enter Home or Document),
meters usage while a document is on screen, enforces the trial verdict and
routes every cross-thread event through the message channel.

Nothing here imports Tk: the window is reached through ``WindowHandle`` and
timers through ``TimerScheduler``, so the whole lifecycle runs against stubs
in tests.
"""

from __future__ import annotations

import logging
import sys
import webbrowser
from typing import Callable, Optional, Protocol, Sequence

from eclipse_pdf.app.background import BackgroundRunner
from eclipse_pdf.app.message_channel import Message, MessageChannel, MessageKind
from eclipse_pdf.app.scheduler import TimerScheduler
from eclipse_pdf.domain.entities import (
    DocumentReference,
    EntitlementVerdict,
    Session,
    UnsavedChoice,
    UserIdentity,
    ViewCommand,
    VerdictSource,
    ViewMode,
)
from eclipse_pdf.domain.launch_args import resolve_document
from eclipse_pdf.domain.menu import MenuLayout
from eclipse_pdf.domain.ports import BackendPort, InstancePort, StoragePort, UseCaseError, ViewPort
from eclipse_pdf.usecases.account import RequestBillingUrl, SignIn, SignOut, SyncUsage
from eclipse_pdf.usecases.identity_store import IdentityStore
from eclipse_pdf.usecases.resolve_entitlement import ResolveEntitlement
from eclipse_pdf.usecases.single_instance import SingleInstanceArbiter
from eclipse_pdf.usecases.usage_ledger import Clock, UsageLedger, local_now
from eclipse_pdf.viewmodels.navigation_vm import NavigationVM
from eclipse_pdf.viewmodels.settings_vm import SettingsConfig
from eclipse_pdf.viewmodels.trial_vm import TrialVM

TIMER_TICK = "usage-tick"
TIMER_ENTITLEMENT = "entitlement-check"
TIMER_PUMP = "channel-pump"

TRIAL_EXHAUSTED_TITLE = "Free trial used up"
TRIAL_EXHAUSTED_TEXT = (
    "You have used today's free reading time. Upgrade to premium or come back "
    "after the daily reset."
)


class WindowHandle(Protocol):
    """What the orchestrator needs from the one application window."""

    view: ViewPort

    def ask_unsaved(self, document: Optional[DocumentReference]) -> UnsavedChoice: ...
    def pick_document(self) -> Optional[DocumentReference]: ...
    def acquire_identity(self) -> Optional[UserIdentity]: ...
    def apply_menu(self, layout: MenuLayout) -> None: ...
    def show_trial(self, trial: TrialVM) -> None: ...
    def show_notice(self, title: str, message: str) -> None: ...
    def raise_window(self) -> None: ...
    def withdraw(self) -> None: ...
    def quit(self) -> None: ...


class SessionOrchestrator:
    """Owns the ``Session`` and wires ledger, resolver and navigation together."""

    def __init__(
        self,
        *,
        config: SettingsConfig,
        storage: StoragePort,
        backend: BackendPort,
        instance_port: InstancePort,
        channel: MessageChannel,
        runner: BackgroundRunner,
        platform: Optional[str] = None,
        clock: Clock = local_now,
        open_url: Callable[[str], object] = webbrowser.open,
        navigation_factory: Optional[Callable[..., NavigationVM]] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.config = config
        self.channel = channel
        self.runner = runner
        self.platform = platform or sys.platform
        self.open_url = open_url
        self._navigation_factory = navigation_factory or NavigationVM

        self.session = Session()
        self.ledger = UsageLedger(storage, clock=clock, cutoff_hour=config.day_cutoff_hour)
        self.identity_store = IdentityStore(storage)
        self.resolver = ResolveEntitlement(
            self.ledger,
            self.identity_store,
            backend,
            daily_limit_s=config.daily_limit_s,
        )
        self.arbiter = SingleInstanceArbiter(instance_port, self._on_forwarded)
        self.uc_sign_in = SignIn(self.identity_store, backend, fire=runner.fire)
        self.uc_sign_out = SignOut(self.identity_store)
        self.uc_sync_usage = SyncUsage(self.identity_store, backend)
        self.uc_billing = RequestBillingUrl(self.identity_store, backend)
        self.trial = TrialVM()

        self.navigation: Optional[NavigationVM] = None
        self.scheduler: Optional[TimerScheduler] = None
        self.startup_document: Optional[DocumentReference] = None
        self._entitlement_generation = 0
        self._shut_down = False

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------
    def claim(self, argv: Sequence[str], cwd: Optional[str] = None) -> bool:
        """Resolve the launch document, then try to become the primary instance.

        A False return means another instance now has the request and this
        process must exit without building a window.
        """
        self.startup_document = resolve_document(argv, platform=self.platform, cwd=cwd)
        if self.startup_document is not None:
            self._log.info("Launch document: %s", self.startup_document.path)
        return self.arbiter.claim(argv, cwd)

    def attach_window(self, window: WindowHandle, scheduler: TimerScheduler) -> ViewMode:
        """Bind the freshly built window, enter the initial mode and start timers."""
        self.session.window = window
        self.scheduler = scheduler
        self.trial.on_changed = window.show_trial
        self.trial.set_identity(self.identity_store.load())

        self.navigation = self._navigation_factory(
            view=window.view,
            ask_unsaved=window.ask_unsaved,
            pick_document=window.pick_document,
            can_open=self._may_open,
            on_mode_changed=self._on_mode_changed,
            on_menu_changed=window.apply_menu,
        )
        initial = self.startup_document
        pending = self.session.take_pending()
        mode = self.navigation.start(pending or initial)
        self.session.ready = True

        scheduler.every(TIMER_PUMP, self.config.channel_pump_ms, self.pump)
        self.check_entitlement()
        return mode

    def pump(self) -> int:
        return self.channel.drain(self.dispatch)

    # ------------------------------------------------------------------
    # Channel dispatch (control thread)
    # ------------------------------------------------------------------
    def dispatch(self, message: Message) -> None:
        kind = message.kind
        if kind is MessageKind.OPEN_DOCUMENT:
            self.deliver(message.payload)
        elif kind is MessageKind.SECOND_INSTANCE:
            argv, cwd = message.payload
            ref = resolve_document(argv, platform=self.platform, cwd=cwd)
            self._show_window()
            if ref is not None:
                self.deliver(ref)
        elif kind is MessageKind.REOPEN:
            self._show_window()
        elif kind is MessageKind.MENU_COMMAND:
            if self.navigation is not None:
                self.navigation.handle_command(ViewCommand(message.payload))
        elif kind in (MessageKind.TASK_RESULT, MessageKind.TASK_FAILED):
            callback = message.meta.get("callback")
            if callback is not None:
                callback(message.payload)
            elif kind is MessageKind.TASK_FAILED:
                self._log.warning("%s failed: %s", message.meta.get("label"), message.payload)
        elif kind is MessageKind.QUIT:
            self.request_close(quit_app=True)

    def deliver(self, ref: DocumentReference) -> None:
        """Open ``ref`` now, or keep it until the window is ready."""
        if not self.session.ready or self.navigation is None:
            self._log.debug("Window not ready; deferring %s", ref)
            self.session.defer(ref)
            return
        self._show_window()
        self.navigation.open_document(ref)

    def _on_forwarded(self, argv: Sequence[str], cwd: Optional[str]) -> None:
        # Listener thread: hand over only.
        self.channel.post(MessageKind.SECOND_INSTANCE, (list(argv), cwd))

    def _show_window(self) -> None:
        window = self.session.window
        if window is None:
            return
        self.session.resident = False
        window.raise_window()

    # ------------------------------------------------------------------
    # Metering and entitlement
    # ------------------------------------------------------------------
    def _on_mode_changed(
        self,
        previous: ViewMode,
        mode: ViewMode,
        document: Optional[DocumentReference],
    ) -> None:
        if mode is ViewMode.DOCUMENT:
            if previous is not ViewMode.DOCUMENT or not self.ledger.is_running:
                self._start_metering()
            self.check_entitlement()
        elif previous is ViewMode.DOCUMENT:
            self._stop_metering()

    def _start_metering(self) -> None:
        self.ledger.start()
        if self.scheduler is not None:
            self.scheduler.every(TIMER_TICK, self.config.tick_interval_ms, self._tick)
            self.scheduler.every(
                TIMER_ENTITLEMENT,
                self.config.entitlement_check_interval_ms,
                self.check_entitlement,
            )

    def _stop_metering(self) -> None:
        if self.scheduler is not None:
            self.scheduler.cancel(TIMER_TICK)
            self.scheduler.cancel(TIMER_ENTITLEMENT)
        if not self.ledger.is_running:
            return
        record = self.ledger.stop()
        self.runner.fire("sync_usage", self.uc_sync_usage, record)

    def _tick(self) -> None:
        self.ledger.tick()
        verdict = self.trial.verdict
        if verdict is None or verdict.source is VerdictSource.LOCAL:
            self.apply_verdict(self.resolver.local_verdict())

    def check_entitlement(self) -> None:
        """Resolve the verdict off the control thread and apply it when it lands.

        Only the most recent request is applied; answers from an earlier
        request (e.g. a premium lookup started before sign-out) are dropped.
        """
        self._entitlement_generation += 1
        generation = self._entitlement_generation
        self.runner.submit(
            "entitlement",
            self.resolver,
            lambda verdict: self._on_entitlement(generation, verdict),
            self._entitlement_failed,
        )

    def _on_entitlement(self, generation: int, verdict: EntitlementVerdict) -> None:
        if generation != self._entitlement_generation:
            self._log.debug("Dropping stale entitlement answer %d", generation)
            return
        self.apply_verdict(verdict)

    def _entitlement_failed(self, exc: BaseException) -> None:
        # Resolver already falls back internally; this only covers bugs.
        self._log.warning("Entitlement check failed: %s", exc)

    def apply_verdict(self, verdict: EntitlementVerdict) -> None:
        self.trial.set_verdict(verdict)
        nav = self.navigation
        if not verdict.exhausted or nav is None or nav.mode is not ViewMode.DOCUMENT:
            return
        self._log.info("Trial exhausted; leaving %s", nav.document)
        self._notice(TRIAL_EXHAUSTED_TITLE, TRIAL_EXHAUSTED_TEXT)
        # Cancel keeps the document; the next check tries again.
        nav.go_home()

    def _may_open(self, ref: DocumentReference) -> bool:
        verdict = self.trial.verdict
        if verdict is None:
            return True
        if verdict.source is VerdictSource.LOCAL:
            verdict = self.resolver.local_verdict()
            self.trial.set_verdict(verdict)
        if not verdict.exhausted:
            return True
        self._log.info("Blocked opening %s: trial exhausted", ref.name)
        self._notice(TRIAL_EXHAUSTED_TITLE, TRIAL_EXHAUSTED_TEXT)
        # A remote answer may have changed since (e.g. just upgraded).
        self.check_entitlement()
        return False

    def _notice(self, title: str, text: str) -> None:
        window = self.session.window
        if window is not None:
            window.show_notice(title, text)

    # ------------------------------------------------------------------
    # Account and billing
    # ------------------------------------------------------------------
    def sign_in(self) -> bool:
        window = self.session.window
        if window is None:
            return False
        identity = window.acquire_identity()
        if identity is None:
            return False
        if not self.uc_sign_in(identity):
            self._notice("Sign in", "Could not store your account on this device.")
            return False
        self.trial.set_identity(identity)
        self.check_entitlement()
        return True

    def sign_out(self) -> None:
        self.uc_sign_out()
        self.trial.set_identity(None)
        # Signed out means the local trial applies right away.
        self.apply_verdict(self.resolver.local_verdict())
        self.check_entitlement()

    def open_billing(self, kind: str = "checkout") -> None:
        self.runner.submit(
            f"billing:{kind}",
            lambda: self.uc_billing(kind),  # type: ignore[arg-type]
            self._open_billing_url,
            self._billing_failed,
        )

    def _open_billing_url(self, url: str) -> None:
        self._log.info("Opening billing page")
        self.open_url(url)

    def _billing_failed(self, exc: BaseException) -> None:
        message = exc.message if isinstance(exc, UseCaseError) else str(exc)
        self._log.warning("Billing request failed: %s", exc)
        self._notice("Billing", message)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------
    def request_close(self, *, quit_app: bool = False) -> bool:
        """Handle the window close button (or an explicit quit).

        Returns False when the user cancelled. On macOS closing the window
        only hides it unless ``quit_app`` is set.
        """
        nav = self.navigation
        if nav is not None and not nav.request_exit():
            return False
        window = self.session.window
        if self.platform == "darwin" and not quit_app and window is not None:
            if nav is not None:
                nav.close_document()
            window.withdraw()
            self.session.resident = True
            self._log.info("Window closed; staying resident")
            return True
        self.shutdown()
        if window is not None:
            window.quit()
        return True

    def shutdown(self) -> None:
        if self._shut_down:
            return
        self._shut_down = True
        self._stop_metering()
        if self.scheduler is not None:
            self.scheduler.cancel_all()
        self.channel.close()
        self.arbiter.release()
        self.runner.shutdown(wait=False)
        if self.navigation is not None:
            self.navigation.shutdown()
        self.session.ready = False
        self._log.info("Session closed")


__all__ = ["SessionOrchestrator", "WindowHandle"]
