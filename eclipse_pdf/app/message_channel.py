"""Cross-thread hand-off into the control thread.

Listener and worker threads never touch Tk or session state. They ``post``
a message; the control thread drains the queue from a periodic pump and
dispatches each message in arrival order.
"""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class MessageKind(str, Enum):
    OPEN_DOCUMENT = "open-document"
    SECOND_INSTANCE = "second-instance"
    REOPEN = "reopen"
    MENU_COMMAND = "menu-command"
    TASK_RESULT = "task-result"
    TASK_FAILED = "task-failed"
    QUIT = "quit"


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    payload: Any = None
    meta: Dict[str, Any] = field(default_factory=dict)


Dispatch = Callable[[Message], None]


class MessageChannel:
    """Thread-safe FIFO between background threads and the control thread."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[Message]" = queue.Queue()
        self._log = logging.getLogger(__name__)
        self._closed = False

    def post(self, kind: MessageKind, payload: Any = None, **meta: Any) -> bool:
        """Enqueue a message; returns False once the channel is closed."""
        if self._closed:
            self._log.debug("Dropping %s after close", kind.value)
            return False
        self._queue.put(Message(kind=kind, payload=payload, meta=dict(meta)))
        return True

    def drain(self, dispatch: Dispatch, *, limit: Optional[int] = None) -> int:
        """Dispatch queued messages on the calling thread; return how many ran."""
        handled = 0
        while limit is None or handled < limit:
            try:
                message = self._queue.get_nowait()
            except queue.Empty:
                break
            handled += 1
            try:
                dispatch(message)
            except Exception:
                self._log.exception("Handling %s failed", message.kind.value)
        return handled

    def pending(self) -> List[Message]:
        """Snapshot of queued messages (diagnostics and tests)."""
        with self._queue.mutex:
            return list(self._queue.queue)

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


__all__ = ["Message", "MessageChannel", "MessageKind"]
