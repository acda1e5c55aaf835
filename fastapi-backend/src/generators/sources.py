# src/generators/sources.py
"""
Metrics sources feed raw counts into the snapshot generator.

A source answers one question: given a reporting period, what are the monthly
counts, KPI values, category counts and resolution times for it? The
generator turns that reading into a validated ``MetricsSnapshot``.
"""
from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from pydantic import Field

from errors import DataUnavailable
from models import KpiSnapshot, LifecycleStatus, Severity, WireModel
from windows import ReportingPeriod


class MonthlyCounts(WireModel):
    incidents: int = Field(ge=0)
    resolved: int = Field(ge=0)
    change_requests: int = Field(ge=0)
    sla_compliance: float = Field(ge=0.0, le=100.0)


class ResolutionTarget(WireModel):
    avg_time: float = Field(ge=0.0)
    target: float = Field(ge=0.0)


class SourceReading(WireModel):
    monthly: Tuple[MonthlyCounts, ...]
    kpis: KpiSnapshot
    priority_counts: Dict[Severity, int]
    status_counts: Dict[LifecycleStatus, int]
    resolution_times: Dict[Severity, ResolutionTarget]


class MetricsSource(ABC):
    """Contract for anything that can supply raw metrics for a reporting period."""

    name = "abstract"

    @abstractmethod
    def read(self, period: ReportingPeriod) -> SourceReading:
        """
        Return raw metrics scoped to *period*.

        ``monthly`` must hold one entry per month of the period, oldest first.
        Implementations backed by remote systems raise ``DataUnavailable`` when
        the system cannot be reached.
        """


# Illustrative baseline catalogs of the dashboard mock.
BASELINE_KPIS: Dict[str, Any] = {
    "total_incidents": 1847,
    "open_incidents": 234,
    "resolved_incidents": 1613,
    "avg_resolution_time": 2.3,
    "sla_compliance": 89.2,
    "user_satisfaction": 4.2,
    "change_requests": 342,
    "pending_changes": 45,
}

BASELINE_PRIORITY_COUNTS: Dict[Severity, int] = {
    Severity.CRITICAL: 15,
    Severity.HIGH: 45,
    Severity.MEDIUM: 120,
    Severity.LOW: 54,
}

BASELINE_STATUS_COUNTS: Dict[LifecycleStatus, int] = {
    LifecycleStatus.OPEN: 89,
    LifecycleStatus.IN_PROGRESS: 145,
    LifecycleStatus.RESOLVED: 567,
    LifecycleStatus.CLOSED: 1046,
}

# severity -> (average hours, target hours)
BASELINE_RESOLUTION_TIMES: Dict[Severity, Tuple[float, float]] = {
    Severity.CRITICAL: (0.5, 1.0),
    Severity.HIGH: (2.1, 4.0),
    Severity.MEDIUM: (6.8, 8.0),
    Severity.LOW: (12.3, 24.0),
}

# half-open sampling ranges [low, high)
INCIDENT_RANGE = (150, 350)
RESOLVED_RANGE = (120, 300)
CHANGE_REQUEST_RANGE = (30, 80)
SLA_RANGE = (75, 95)


def _resolution_targets(times: Mapping[Severity, Tuple[float, float]]) -> Dict[Severity, ResolutionTarget]:
    return {sev: ResolutionTarget(avg_time=avg, target=target) for sev, (avg, target) in times.items()}


class SyntheticSource(MetricsSource):
    """
    Uniformly sampled monthly counts around fixed baseline catalogs.

    Pass *seed* (or a ready ``random.Random``) for reproducible series.
    """

    name = "synthetic"

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random(seed)

    def _sample_month(self) -> MonthlyCounts:
        return MonthlyCounts(
            incidents=self._rng.randrange(*INCIDENT_RANGE),
            resolved=self._rng.randrange(*RESOLVED_RANGE),
            change_requests=self._rng.randrange(*CHANGE_REQUEST_RANGE),
            sla_compliance=self._rng.randrange(*SLA_RANGE),
        )

    def read(self, period: ReportingPeriod) -> SourceReading:
        return SourceReading(
            monthly=tuple(self._sample_month() for _ in period.months),
            kpis=KpiSnapshot(**BASELINE_KPIS),
            priority_counts=dict(BASELINE_PRIORITY_COUNTS),
            status_counts=dict(BASELINE_STATUS_COUNTS),
            resolution_times=_resolution_targets(BASELINE_RESOLUTION_TIMES),
        )


class StaticSource(MetricsSource):
    """
    Replays fixed values. The most recent months of the period line up with
    the tail of *monthly*; a period longer than *monthly* is unavailable.
    """

    name = "static"

    def __init__(
        self,
        monthly: Sequence[MonthlyCounts],
        kpis: Optional[KpiSnapshot] = None,
        priority_counts: Optional[Mapping[Severity, int]] = None,
        status_counts: Optional[Mapping[LifecycleStatus, int]] = None,
        resolution_times: Optional[Mapping[Severity, Tuple[float, float]]] = None,
    ):
        self._monthly = tuple(monthly)
        self._kpis = KpiSnapshot(**BASELINE_KPIS) if kpis is None else kpis
        # None means baseline; an empty mapping is kept and fails downstream
        self._priority_counts = dict(BASELINE_PRIORITY_COUNTS if priority_counts is None else priority_counts)
        self._status_counts = dict(BASELINE_STATUS_COUNTS if status_counts is None else status_counts)
        self._resolution_times = dict(
            BASELINE_RESOLUTION_TIMES if resolution_times is None else resolution_times
        )

    def read(self, period: ReportingPeriod) -> SourceReading:
        needed = period.month_count
        if needed > len(self._monthly):
            raise DataUnavailable(
                f"static source holds {len(self._monthly)} months, {needed} requested"
            )
        return SourceReading(
            monthly=self._monthly[len(self._monthly) - needed:],
            kpis=self._kpis.model_copy(),
            priority_counts=dict(self._priority_counts),
            status_counts=dict(self._status_counts),
            resolution_times=_resolution_targets(self._resolution_times),
        )
