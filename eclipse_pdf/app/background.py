"""Worker pool for network calls that must not block the control thread."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from eclipse_pdf.app.message_channel import MessageChannel, MessageKind

ResultFn = Callable[[Any], None]
ErrorFn = Callable[[BaseException], None]


class BackgroundRunner:
    """Run callables on a small pool and route outcomes back via the channel.

    ``fire`` is for best-effort calls whose result nobody waits for; failures
    are logged and dropped. ``submit`` delivers the result (or error) to the
    control thread as a ``TASK_RESULT``/``TASK_FAILED`` message carrying the
    callbacks to run there.
    """

    def __init__(self, channel: MessageChannel, *, max_workers: int = 4) -> None:
        self.channel = channel
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="eclipse-bg")
        self._log = logging.getLogger(__name__)
        self._closed = False

    def fire(self, label: str, fn: Callable[..., Any], *args: Any) -> Optional[Future]:
        if self._closed:
            self._log.debug("Runner closed; dropping %s", label)
            return None

        def _run() -> None:
            try:
                fn(*args)
            except Exception as exc:
                self._log.warning("%s failed: %s", label, exc)

        return self._pool.submit(_run)

    def submit(
        self,
        label: str,
        fn: Callable[[], Any],
        on_result: ResultFn,
        on_error: Optional[ErrorFn] = None,
    ) -> Optional[Future]:
        if self._closed:
            self._log.debug("Runner closed; dropping %s", label)
            return None

        def _run() -> None:
            try:
                result = fn()
            except Exception as exc:
                self._log.debug("%s raised %r", label, exc)
                self.channel.post(MessageKind.TASK_FAILED, exc, label=label, callback=on_error)
                return
            self.channel.post(MessageKind.TASK_RESULT, result, label=label, callback=on_result)

        return self._pool.submit(_run)

    def shutdown(self, *, wait: bool = False) -> None:
        self._closed = True
        self._pool.shutdown(wait=wait)


__all__ = ["BackgroundRunner"]
