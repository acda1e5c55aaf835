# src/refresh.py
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional

from reports.dashboard import get_dashboard_service
from reports.derived_metrics import DashboardView

logger = logging.getLogger(__name__)

Loader = Callable[[Optional[str]], DashboardView]


@dataclass(frozen=True)
class RefreshOutcome:
    sequence: int
    applied: bool
    view: DashboardView


class SnapshotRefresher:
    """
    Holds the dashboard currently on display and replaces it wholesale on refresh.

    Every refresh request takes a sequence number. Only the response to the
    highest number issued so far is installed; responses to superseded
    requests are discarded, so a slow stale load never overwrites a newer one.
    """

    def __init__(self, loader: Loader):
        self._loader = loader
        self._lock = threading.Lock()
        self._issued = 0
        self._applied = 0
        self._current: Optional[DashboardView] = None

    @property
    def current(self) -> Optional[DashboardView]:
        return self._current

    @property
    def issued_sequence(self) -> int:
        return self._issued

    @property
    def applied_sequence(self) -> int:
        return self._applied

    def begin(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def apply(self, sequence: int, view: DashboardView) -> bool:
        with self._lock:
            if sequence != self._issued or sequence <= self._applied:
                logger.info(
                    "Discarding stale dashboard from refresh #%d (latest issued #%d)",
                    sequence,
                    self._issued,
                )
                return False
            self._current = view
            self._applied = sequence
            return True

    async def refresh(self, window: Optional[str] = None) -> RefreshOutcome:
        sequence = self.begin()
        logger.debug("Refresh #%d requested for window %s", sequence, window)
        view = await asyncio.to_thread(self._loader, window)
        return RefreshOutcome(sequence=sequence, applied=self.apply(sequence, view), view=view)


@lru_cache(maxsize=1)
def get_refresher() -> SnapshotRefresher:
    return SnapshotRefresher(get_dashboard_service().load)
