"""Daily usage counter with logical-day rollover.

The ledger is metered by a periodic tick while a document is on screen.
Every tick persists the whole record, so an abrupt exit loses at most one
tick interval of usage. A single lock serializes the read-modify-persist
sequence between the timer tick and ``stop()``.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from eclipse_pdf.domain.entities import UsageRecord
from eclipse_pdf.domain.ports import StoragePort
from eclipse_pdf.domain.trial_day import DEFAULT_CUTOFF_HOUR, logical_day_key, logical_day_start

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


class UsageLedger:
    """Persisted ``{dailySecondsUsed, lastResetDate}`` record plus a wall-clock anchor."""

    def __init__(
        self,
        storage: StoragePort,
        *,
        clock: Clock = local_now,
        cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self._storage = storage
        self._clock = clock
        self.cutoff_hour = cutoff_hour
        self._lock = threading.Lock()
        self._anchor: Optional[datetime] = None
        self._last_known: Optional[UsageRecord] = None

    @property
    def is_running(self) -> bool:
        return self._anchor is not None

    @property
    def anchor(self) -> Optional[datetime]:
        return self._anchor

    def load(self) -> UsageRecord:
        """Return the record for the current logical day.

        A stale day is zeroed in memory only; the reset reaches storage with
        the next write.
        """
        with self._lock:
            return self._load_locked(self._clock())

    def start(self) -> None:
        with self._lock:
            if self._anchor is None:
                self._anchor = self._clock()
                self._log.debug("Usage metering started at %s", self._anchor.isoformat())

    def tick(self) -> UsageRecord:
        """Book whole seconds since the anchor and re-anchor to now.

        Without an anchor nothing is booked.
        """
        with self._lock:
            return self._tick_locked()

    def stop(self) -> UsageRecord:
        """Final tick, then clear the anchor. Repeated calls are no-ops."""
        with self._lock:
            if self._anchor is None:
                return self._load_locked(self._clock())
            record = self._tick_locked()
            self._anchor = None
            self._log.debug("Usage metering stopped at %ss", record.daily_seconds_used)
            return record

    # ------------------------------------------------------------------
    def _tick_locked(self) -> UsageRecord:
        now = self._clock()
        record = self._load_locked(now)
        if self._anchor is None:
            return record
        # Seconds from before the current trial day belong to the old record.
        since = max(self._anchor, logical_day_start(now, self.cutoff_hour))
        elapsed = max(0, int((now - since).total_seconds()))
        updated = UsageRecord(
            daily_seconds_used=record.daily_seconds_used + elapsed,
            last_reset_date=record.last_reset_date,
        )
        self._persist_locked(updated)
        self._anchor = now
        return updated

    def _load_locked(self, now: datetime) -> UsageRecord:
        today = logical_day_key(now, self.cutoff_hour)
        try:
            payload = self._storage.load_usage()
        except Exception as exc:
            self._log.warning("Could not read usage ledger, using in-memory value: %s", exc)
            record = self._last_known or UsageRecord(0, today)
        else:
            record = UsageRecord.from_dict(payload) if payload else UsageRecord(0, today)

        if record.last_reset_date != today:
            self._log.info(
                "Trial day rolled over (%s -> %s); usage counter reset",
                record.last_reset_date or "none",
                today,
            )
            record = UsageRecord(0, today)
        self._last_known = record
        return record

    def _persist_locked(self, record: UsageRecord) -> None:
        self._last_known = record
        try:
            self._storage.save_usage(record.to_dict())
        except Exception as exc:
            self._log.warning("Could not persist usage ledger: %s", exc)


__all__ = ["Clock", "UsageLedger", "local_now"]
