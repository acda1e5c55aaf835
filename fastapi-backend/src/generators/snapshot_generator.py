# src/generators/snapshot_generator.py
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Mapping, Optional, Tuple, Type

from pydantic import ValidationError

from errors import InvariantViolation
from generators.reporting_feed import ReportingFeedSource
from generators.sources import MetricsSource, MonthlyCounts, SourceReading, SyntheticSource
from models import (
    Category,
    LifecycleStatus,
    MetricsSnapshot,
    MonthlyPoint,
    ResolutionComparison,
    Severity,
)
from windows import DEFAULT_MAX_MONTHS, DEFAULT_WINDOW, DateLike, ReportingPeriod, resolve_window

logger = logging.getLogger(__name__)

Clock = Callable[[], date]

MONTH_LABEL_FORMAT = "%b %y"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def month_label(period: date) -> str:
    return period.strftime(MONTH_LABEL_FORMAT)


def _monthly_point(period: date, counts: MonthlyCounts) -> MonthlyPoint:
    return MonthlyPoint(
        period=period,
        month=month_label(period),
        incidents=counts.incidents,
        resolved=counts.resolved,
        change_requests=counts.change_requests,
        sla_compliance=counts.sla_compliance,
    )


def _categories(counts: Mapping[Enum, int], members: Type[Enum]) -> Tuple[Category, ...]:
    missing = [m.value for m in members if m not in counts]
    if missing:
        raise InvariantViolation(f"source reading has no {members.__name__} counts for {missing}")
    return tuple(
        Category(key=m.value, name=m.display_name, value=counts[m], color=m.color)
        for m in members
    )


def _resolution_times(reading: SourceReading) -> Tuple[ResolutionComparison, ...]:
    missing = [s.value for s in Severity if s not in reading.resolution_times]
    if missing:
        raise InvariantViolation(f"source reading has no resolution times for {missing}")
    return tuple(
        ResolutionComparison(
            severity=sev,
            category=sev.code,
            avg_time=reading.resolution_times[sev].avg_time,
            target_time=reading.resolution_times[sev].target,
        )
        for sev in Severity
    )


class SnapshotGenerator:
    """
    Produces one fresh ``MetricsSnapshot`` per call.

    The *source* supplies raw values and *clock* anchors named windows to the
    current month; both are injectable so snapshots can be pinned in tests.
    """

    def __init__(
        self,
        source: Optional[MetricsSource] = None,
        clock: Clock = utc_today,
        default_window: str = DEFAULT_WINDOW,
        max_window_months: int = DEFAULT_MAX_MONTHS,
    ):
        self.source = source or SyntheticSource()
        self.clock = clock
        self.default_window = default_window
        self.max_window_months = max_window_months

    def resolve_window(
        self,
        window: Optional[str] = None,
        *,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> ReportingPeriod:
        return resolve_window(
            window or self.default_window,
            self.clock(),
            start=start,
            end=end,
            max_months=self.max_window_months,
        )

    def generate_snapshot(
        self,
        window: Optional[str] = None,
        *,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> MetricsSnapshot:
        period = self.resolve_window(window, start=start, end=end)
        reading = self.source.read(period)

        months = period.months
        if len(reading.monthly) != len(months):
            raise InvariantViolation(
                f"{self.source.name} source returned {len(reading.monthly)} months for a "
                f"{len(months)}-month window"
            )

        try:
            snapshot = MetricsSnapshot(
                window=period.token,
                generated_at=datetime.now(timezone.utc),
                kpis=reading.kpis.model_copy(),
                monthly_trends=tuple(_monthly_point(p, c) for p, c in zip(months, reading.monthly)),
                priority_distribution=_categories(reading.priority_counts, Severity),
                status_distribution=_categories(reading.status_counts, LifecycleStatus),
                resolution_times=_resolution_times(reading),
            )
        except ValidationError as exc:
            raise InvariantViolation(f"{self.source.name} source produced an invalid snapshot: {exc}") from exc

        logger.debug(
            "Generated %s snapshot for %s (%d months, %s..%s)",
            self.source.name,
            period.token,
            len(months),
            snapshot.monthly_trends[0].month,
            snapshot.monthly_trends[-1].month,
        )
        return snapshot


def build_source(settings) -> MetricsSource:
    if settings.metrics_source == "feed":
        return ReportingFeedSource(settings.metrics_feed_url, timeout=settings.metrics_feed_timeout)
    return SyntheticSource(seed=settings.metrics_seed)


def build_generator(settings, clock: Clock = utc_today) -> SnapshotGenerator:
    return SnapshotGenerator(
        source=build_source(settings),
        clock=clock,
        default_window=settings.default_window,
        max_window_months=settings.max_window_months,
    )
