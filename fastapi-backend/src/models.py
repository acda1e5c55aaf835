# src/models.py
"""
Wire models for the ServiceNow analytics snapshot.

Every model is frozen and serializes with camelCase aliases, which are the
field names the dashboard front end reads. Validation errors raised here are
pydantic ``ValidationError``; callers that build snapshots from external data
translate them into ``errors.InvariantViolation``.
"""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, List, Sequence, Tuple

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def code(self) -> str:
        return SEVERITY_CATALOG[self][0]

    @property
    def display_name(self) -> str:
        return SEVERITY_CATALOG[self][1]

    @property
    def color(self) -> str:
        return SEVERITY_CATALOG[self][2]


class LifecycleStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @property
    def display_name(self) -> str:
        return STATUS_CATALOG[self][0]

    @property
    def color(self) -> str:
        return STATUS_CATALOG[self][1]


# severity -> (code, display name, colour token)
SEVERITY_CATALOG: Dict[Severity, Tuple[str, str, str]] = {
    Severity.CRITICAL: ("P1", "P1 - Critical", "#ef4444"),
    Severity.HIGH: ("P2", "P2 - High", "#f97316"),
    Severity.MEDIUM: ("P3", "P3 - Medium", "#eab308"),
    Severity.LOW: ("P4", "P4 - Low", "#22c55e"),
}

# status -> (display name, colour token)
STATUS_CATALOG: Dict[LifecycleStatus, Tuple[str, str]] = {
    LifecycleStatus.OPEN: ("Open", "#3b82f6"),
    LifecycleStatus.IN_PROGRESS: ("In Progress", "#8b5cf6"),
    LifecycleStatus.RESOLVED: ("Resolved", "#22c55e"),
    LifecycleStatus.CLOSED: ("Closed", "#6b7280"),
}


class Category(WireModel):
    key: str
    name: str
    value: int = Field(ge=0)
    color: str


class MonthlyPoint(WireModel):
    period: date
    month: str
    incidents: int = Field(ge=0)
    resolved: int = Field(ge=0)
    change_requests: int = Field(ge=0)
    sla_compliance: float = Field(ge=0.0, le=100.0)


class KpiSnapshot(WireModel):
    total_incidents: int = Field(ge=0)
    open_incidents: int = Field(ge=0)
    resolved_incidents: int = Field(ge=0)
    avg_resolution_time: float = Field(ge=0.0)
    sla_compliance: float = Field(ge=0.0, le=100.0)
    user_satisfaction: float = Field(ge=0.0, le=5.0)
    change_requests: int = Field(ge=0)
    pending_changes: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_counts(self) -> "KpiSnapshot":
        if self.open_incidents > self.total_incidents:
            raise ValueError("openIncidents exceeds totalIncidents")
        if self.resolved_incidents > self.total_incidents:
            raise ValueError("resolvedIncidents exceeds totalIncidents")
        if self.open_incidents + self.resolved_incidents > self.total_incidents:
            raise ValueError("openIncidents + resolvedIncidents exceeds totalIncidents")
        if self.pending_changes > self.change_requests:
            raise ValueError("pendingChanges exceeds changeRequests")
        return self


class ResolutionComparison(WireModel):
    severity: Severity
    category: str
    avg_time: float = Field(ge=0.0)
    target_time: float = Field(ge=0.0, alias="target")


def _check_closed_set(categories: Sequence[Category], members: Iterable[Enum], label: str) -> None:
    expected = [m.value for m in members]
    actual = [c.key for c in categories]
    if actual != expected:
        raise ValueError(f"{label} must list exactly {expected} in order, got {actual}")


class MetricsSnapshot(WireModel):
    window: str
    generated_at: datetime
    kpis: KpiSnapshot
    monthly_trends: Tuple[MonthlyPoint, ...]
    priority_distribution: Tuple[Category, ...]
    status_distribution: Tuple[Category, ...]
    resolution_times: Tuple[ResolutionComparison, ...]

    @model_validator(mode="after")
    def _check_shape(self) -> "MetricsSnapshot":
        if not self.monthly_trends:
            raise ValueError("monthlyTrends must hold at least one month")
        periods = [point.period for point in self.monthly_trends]
        for previous, current in zip(periods, periods[1:]):
            if current != previous + relativedelta(months=1):
                raise ValueError("monthlyTrends must be consecutive months, oldest first")
        _check_closed_set(self.priority_distribution, Severity, "priorityDistribution")
        _check_closed_set(self.status_distribution, LifecycleStatus, "statusDistribution")
        severities = [r.severity for r in self.resolution_times]
        if severities != list(Severity):
            raise ValueError("resolutionTimes must hold one entry per severity in order")
        return self

    @property
    def months(self) -> List[str]:
        return [point.month for point in self.monthly_trends]
