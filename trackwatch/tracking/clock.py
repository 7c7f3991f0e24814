"""Reconcile the local wall clock with the time embedded in live feed batches."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from typing import Callable

logger = logging.getLogger("trackwatch.tracking.clock")

LocalClock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def from_epoch_seconds(value: float) -> datetime:
    """Convert a feed timestamp (epoch seconds) to an aware UTC datetime."""

    return datetime.fromtimestamp(value, tz=timezone.utc)


class ClockReconciler:
    """Track the offset between the local clock and the data source clock.

    The offset is local time minus source time. It starts at zero and is only
    recomputed from live batches; replayed history is intentionally in the
    past and must not move it.
    """

    def __init__(self, local_clock: LocalClock | None = None) -> None:
        self._local_clock = local_clock or utc_now
        self._offset = timedelta(0)

    @property
    def offset(self) -> timedelta:
        return self._offset

    def record_live_batch_time(self, source_time: datetime) -> timedelta:
        """Recompute the offset from a live batch timestamp and return it."""

        self._offset = self._local_clock() - source_time
        logger.debug("Clock offset now %.3f s", self._offset.total_seconds())
        return self._offset

    def now_in_source_frame(self) -> datetime:
        """Current time expressed in the data source's time frame."""

        return self._local_clock() - self._offset


__all__ = ["ClockReconciler", "LocalClock", "from_epoch_seconds", "utc_now"]
