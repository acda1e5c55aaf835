# src/reports/derived_metrics.py
"""
Derived metrics computed from a ``MetricsSnapshot``.

All functions are pure: no I/O, no logging, no side effects. Malformed input
(negative counts, non-finite numbers, broken category sets) is a programming
or data-integrity defect and raises ``InvariantViolation``.

Formulas
--------
share        = value / sum(values) * 100 in tenths of a percent, apportioned by largest
               remainder so the shares add up to exactly 100.0; 0 for every key when
               the sum is 0
trend        = |current - previous| / previous * 100, direction up when current >= previous,
               (up, 0) when previous is 0
gap          = actual - target, labelled by metric kind
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Sequence, Tuple, Union

from errors import InvariantViolation
from models import Category, MetricsSnapshot, Severity, WireModel

DEFAULT_SLA_TARGET = 85.0
_TENTHS = 1000  # 100 % in tenths of a percent

Number = Union[int, float]

# monthly point attribute -> wire key of the trend
_TRENDED_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("incidents", "incidents"),
    ("resolved", "resolved"),
    ("change_requests", "changeRequests"),
    ("sla_compliance", "slaCompliance"),
)


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class GapKind(str, Enum):
    TIME = "time"  # lower is better
    COMPLIANCE = "compliance"  # higher is better


class Assessment(str, Enum):
    OVER_TARGET = "over_target"
    ON_TARGET = "on_target"
    UNDER_TARGET = "under_target"


class TrendIndicator(WireModel):
    direction: TrendDirection
    magnitude_percent: float


class ComplianceGap(WireModel):
    kind: GapKind
    actual: float
    target: float
    delta: float
    assessment: Assessment
    favorable: bool


class ResolutionGap(WireModel):
    severity: Severity
    category: str
    gap: ComplianceGap


class MonthlySlaGap(WireModel):
    month: str
    gap: ComplianceGap


class DashboardView(WireModel):
    snapshot: MetricsSnapshot
    sla_target: float
    priority_shares: Dict[str, float]
    status_shares: Dict[str, float]
    resolution_gaps: Tuple[ResolutionGap, ...]
    sla_gap: ComplianceGap
    monthly_sla_gaps: Tuple[MonthlySlaGap, ...]
    kpi_trends: Dict[str, TrendIndicator]


def _quantize(value: float, step: str) -> float:
    return float(Decimal(repr(value)).quantize(Decimal(step), rounding=ROUND_HALF_UP))


def _require_measure(value: Number, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvariantViolation(f"{label} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise InvariantViolation(f"{label} must be a finite non-negative number, got {value!r}")
    return float(value)


def percentage_share(categories: Sequence[Category]) -> Dict[str, float]:
    """Share of each category in the distribution total, keyed by category key."""
    if not categories:
        raise InvariantViolation("cannot compute shares of an empty distribution")
    keys = [c.key for c in categories]
    if len(set(keys)) != len(keys):
        raise InvariantViolation(f"distribution has duplicate categories: {keys}")
    for c in categories:
        if c.value < 0:
            raise InvariantViolation(f"category {c.key} has negative count {c.value}")

    total = sum(c.value for c in categories)
    if total == 0:
        return {c.key: 0.0 for c in categories}
    # floor every share to whole tenths, then hand the leftover tenths to the
    # largest remainders; ties go to the earlier category
    tenths = []
    remainders = []
    for c in categories:
        whole, rest = divmod(c.value * _TENTHS, total)
        tenths.append(whole)
        remainders.append(rest)
    leftover = _TENTHS - sum(tenths)
    for index in sorted(range(len(categories)), key=lambda i: -remainders[i])[:leftover]:
        tenths[index] += 1
    return {c.key: t / 10 for c, t in zip(categories, tenths)}


def trend_indicator(current: Number, previous: Number) -> TrendIndicator:
    """
    Direction and relative size of the change from *previous* to *current*.

    A zero baseline has no meaningful relative change and reads as ``up, 0``.
    """
    current = _require_measure(current, "current")
    previous = _require_measure(previous, "previous")
    if previous == 0:
        return TrendIndicator(direction=TrendDirection.UP, magnitude_percent=0.0)
    direction = TrendDirection.UP if current >= previous else TrendDirection.DOWN
    magnitude = abs(current - previous) / previous * 100
    return TrendIndicator(direction=direction, magnitude_percent=_quantize(magnitude, "0.1"))


def compliance_gap(actual: Number, target: Number, kind: Union[GapKind, str] = GapKind.TIME) -> ComplianceGap:
    """
    Signed ``actual - target`` delta with an explicit reading of its sign.

    A positive delta is over target: unfavorable for ``time`` metrics,
    favorable for ``compliance`` metrics.
    """
    try:
        kind = GapKind(kind)
    except ValueError as exc:
        raise InvariantViolation(f"unknown gap kind {kind!r}") from exc
    actual = _require_measure(actual, "actual")
    target = _require_measure(target, "target")

    delta = _quantize(actual - target, "0.01")
    if delta > 0:
        assessment = Assessment.OVER_TARGET
    elif delta < 0:
        assessment = Assessment.UNDER_TARGET
    else:
        assessment = Assessment.ON_TARGET

    if kind is GapKind.TIME:
        favorable = assessment is not Assessment.OVER_TARGET
    else:
        favorable = assessment is not Assessment.UNDER_TARGET
    return ComplianceGap(
        kind=kind,
        actual=actual,
        target=target,
        delta=delta,
        assessment=assessment,
        favorable=favorable,
    )


def kpi_trends(snapshot: MetricsSnapshot) -> Dict[str, TrendIndicator]:
    """Month-over-month trends from the last two points; empty for a single-month window."""
    if len(snapshot.monthly_trends) < 2:
        return {}
    previous, latest = snapshot.monthly_trends[-2], snapshot.monthly_trends[-1]
    return {
        key: trend_indicator(getattr(latest, attr), getattr(previous, attr))
        for attr, key in _TRENDED_FIELDS
    }


def enrich(snapshot: MetricsSnapshot, sla_target: float = DEFAULT_SLA_TARGET) -> DashboardView:
    if not 0 <= sla_target <= 100:
        raise InvariantViolation(f"SLA target {sla_target} lies outside [0, 100]")

    resolution_gaps = tuple(
        ResolutionGap(
            severity=r.severity,
            category=r.category,
            gap=compliance_gap(r.avg_time, r.target_time, GapKind.TIME),
        )
        for r in snapshot.resolution_times
    )
    monthly_sla_gaps = tuple(
        MonthlySlaGap(month=p.month, gap=compliance_gap(p.sla_compliance, sla_target, GapKind.COMPLIANCE))
        for p in snapshot.monthly_trends
    )
    return DashboardView(
        snapshot=snapshot,
        sla_target=sla_target,
        priority_shares=percentage_share(snapshot.priority_distribution),
        status_shares=percentage_share(snapshot.status_distribution),
        resolution_gaps=resolution_gaps,
        sla_gap=compliance_gap(snapshot.kpis.sla_compliance, sla_target, GapKind.COMPLIANCE),
        monthly_sla_gaps=monthly_sla_gaps,
        kpi_trends=kpi_trends(snapshot),
    )
