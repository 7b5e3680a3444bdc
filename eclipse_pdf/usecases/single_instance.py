from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from eclipse_pdf.domain.ports import InstancePort, InstanceRequestHandler


@dataclass
class SingleInstanceArbiter:
    """Decide whether this process owns the window.

    ``on_forwarded`` runs on the listener thread; it must only hand the raw
    arguments over to the control thread, which re-resolves them.
    """

    instance_port: InstancePort
    on_forwarded: InstanceRequestHandler

    def claim(self, argv: Sequence[str], cwd: Optional[str] = None) -> bool:
        """Return True for the primary; a secondary forwards ``argv`` and gets False."""
        log = logging.getLogger(__name__)
        try:
            acquired = self.instance_port.try_acquire()
        except OSError as exc:
            # Cannot create the lock at all (read-only data dir); run unguarded.
            log.warning("Single-instance lock unavailable, continuing as primary: %s", exc)
            return True

        if not acquired:
            delivered = self.instance_port.forward(list(argv), cwd)
            if delivered:
                log.info("Another instance is running; launch request forwarded")
            else:
                log.warning("Another instance holds the lock but did not answer")
            return False

        try:
            self.instance_port.serve(self.on_forwarded)
        except OSError as exc:
            log.warning("Could not listen for forwarded launches: %s", exc)
        return True

    def release(self) -> None:
        try:
            self.instance_port.close()
        except OSError as exc:
            logging.getLogger(__name__).warning("Releasing instance lock failed: %s", exc)


__all__ = ["SingleInstanceArbiter"]
