"""Named repeating timers on top of a UI ``after`` callable.

The composition root passes Tk ``after`` and ``after_cancel`` so that every
periodic job (usage tick, entitlement re-check, channel pump) is tracked in
one place and cancelled together when the window goes away.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

ScheduleFn = Callable[[int, Callable[[], None]], str]
CancelFn = Callable[[str], None]


@dataclass
class TimerHandle:
    """Pending token for one named timer."""

    name: str
    token: str
    interval_ms: int


class TimerScheduler:
    """Manage named timers using a UI scheduler (for example Tk)."""

    def __init__(self, schedule: ScheduleFn, cancel: CancelFn) -> None:
        self._schedule = schedule
        self._cancel = cancel
        self._handles: Dict[str, TimerHandle] = {}
        self._log = logging.getLogger(__name__)

    def once(self, name: str, delay_ms: int, callback: Callable[[], None]) -> None:
        """Schedule or reschedule a single run of ``callback``."""
        delay = max(1, int(delay_ms))
        self.cancel(name)

        def _fire() -> None:
            self._handles.pop(name, None)
            callback()

        token = self._schedule(delay, _fire)
        self._handles[name] = TimerHandle(name=name, token=token, interval_ms=delay)

    def every(self, name: str, interval_ms: int, callback: Callable[[], None]) -> None:
        """Run ``callback`` every ``interval_ms`` until cancelled.

        The next run is armed before the callback executes so one failing run
        does not stop the series.
        """
        interval = max(1, int(interval_ms))
        self.cancel(name)

        def _fire() -> None:
            if name not in self._handles:
                return
            token = self._schedule(interval, _fire)
            self._handles[name] = TimerHandle(name=name, token=token, interval_ms=interval)
            try:
                callback()
            except Exception:
                self._log.exception("Timer %s callback failed", name)

        token = self._schedule(interval, _fire)
        self._handles[name] = TimerHandle(name=name, token=token, interval_ms=interval)

    def cancel(self, name: str) -> None:
        handle = self._handles.pop(name, None)
        if not handle:
            return
        try:
            self._cancel(handle.token)
        except Exception as exc:
            # Token may already have fired or the interpreter is gone.
            self._log.debug("Cancel of timer %s ignored: %s", name, exc)

    def cancel_all(self) -> None:
        for name in list(self._handles.keys()):
            self.cancel(name)

    def is_scheduled(self, name: str) -> bool:
        return name in self._handles

    def handle_for(self, name: str) -> Optional[TimerHandle]:
        return self._handles.get(name)


__all__ = ["TimerHandle", "TimerScheduler"]
