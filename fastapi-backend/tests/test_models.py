"""
tests/test_models.py

Snapshot model invariants and the camelCase wire contract.
"""

from __future__ import annotations

from typing import Any, Dict

import pytest
from pydantic import ValidationError

from generators.sources import BASELINE_KPIS
from models import KpiSnapshot, LifecycleStatus, MetricsSnapshot, Severity


def _kpis(**overrides: Any) -> Dict[str, Any]:
    return {**BASELINE_KPIS, **overrides}


class TestKpiSnapshot:
    def test_baseline_is_consistent(self) -> None:
        kpis = KpiSnapshot(**BASELINE_KPIS)
        assert kpis.open_incidents + kpis.resolved_incidents == kpis.total_incidents

    @pytest.mark.parametrize(
        "overrides",
        [
            {"open_incidents": 2000},
            {"resolved_incidents": 1900},
            {"open_incidents": 300, "resolved_incidents": 1613},
            {"pending_changes": 400},
            {"sla_compliance": 100.5},
            {"sla_compliance": -1.0},
            {"user_satisfaction": 5.1},
            {"avg_resolution_time": -0.1},
            {"total_incidents": -1},
        ],
    )
    def test_rejects_inconsistent_values(self, overrides: Dict[str, Any]) -> None:
        with pytest.raises(ValidationError):
            KpiSnapshot(**_kpis(**overrides))

    def test_is_frozen(self) -> None:
        kpis = KpiSnapshot(**BASELINE_KPIS)
        with pytest.raises(ValidationError):
            kpis.total_incidents = 1  # type: ignore[misc]

    def test_accepts_wire_names(self) -> None:
        kpis = KpiSnapshot.model_validate(
            {
                "totalIncidents": 10,
                "openIncidents": 3,
                "resolvedIncidents": 7,
                "avgResolutionTime": 1.5,
                "slaCompliance": 90,
                "userSatisfaction": 4,
                "changeRequests": 5,
                "pendingChanges": 1,
            }
        )
        assert kpis.resolved_incidents == 7


class TestEnumerations:
    def test_severity_catalog(self) -> None:
        assert [s.code for s in Severity] == ["P1", "P2", "P3", "P4"]
        assert Severity.CRITICAL.display_name == "P1 - Critical"
        assert Severity.LOW.color == "#22c55e"

    def test_status_catalog(self) -> None:
        assert [s.display_name for s in LifecycleStatus] == ["Open", "In Progress", "Resolved", "Closed"]
        assert LifecycleStatus.CLOSED.color == "#6b7280"


class TestMetricsSnapshotShape:
    def test_wire_contract(self, snapshot: MetricsSnapshot) -> None:
        data = snapshot.model_dump(mode="json", by_alias=True)
        assert set(data) == {
            "window",
            "generatedAt",
            "kpis",
            "monthlyTrends",
            "priorityDistribution",
            "statusDistribution",
            "resolutionTimes",
        }
        assert data["kpis"]["totalIncidents"] == 1847
        assert set(data["monthlyTrends"][0]) == {
            "period",
            "month",
            "incidents",
            "resolved",
            "changeRequests",
            "slaCompliance",
        }
        assert data["priorityDistribution"][0] == {
            "key": "critical",
            "name": "P1 - Critical",
            "value": 15,
            "color": "#ef4444",
        }
        assert data["resolutionTimes"][0] == {
            "severity": "critical",
            "category": "P1",
            "avgTime": 0.5,
            "target": 1.0,
        }

    def test_rejects_out_of_order_months(self, snapshot: MetricsSnapshot) -> None:
        data = snapshot.model_dump()
        data["monthly_trends"] = list(reversed(data["monthly_trends"]))
        with pytest.raises(ValidationError, match="consecutive months"):
            MetricsSnapshot.model_validate(data)

    def test_rejects_gap_in_months(self, snapshot: MetricsSnapshot) -> None:
        data = snapshot.model_dump()
        trends = list(data["monthly_trends"])
        del trends[5]
        data["monthly_trends"] = trends
        with pytest.raises(ValidationError):
            MetricsSnapshot.model_validate(data)

    def test_rejects_empty_trends(self, snapshot: MetricsSnapshot) -> None:
        data = snapshot.model_dump()
        data["monthly_trends"] = []
        with pytest.raises(ValidationError):
            MetricsSnapshot.model_validate(data)

    def test_rejects_incomplete_priority_set(self, snapshot: MetricsSnapshot) -> None:
        data = snapshot.model_dump()
        data["priority_distribution"] = data["priority_distribution"][:3]
        with pytest.raises(ValidationError, match="priorityDistribution"):
            MetricsSnapshot.model_validate(data)

    def test_rejects_extra_status(self, snapshot: MetricsSnapshot) -> None:
        data = snapshot.model_dump()
        cancelled = {"key": "cancelled", "name": "Cancelled", "value": 1, "color": "#000"}
        data["status_distribution"] = list(data["status_distribution"]) + [cancelled]
        with pytest.raises(ValidationError, match="statusDistribution"):
            MetricsSnapshot.model_validate(data)

    def test_rejects_reordered_resolution_times(self, snapshot: MetricsSnapshot) -> None:
        data = snapshot.model_dump()
        data["resolution_times"] = list(reversed(data["resolution_times"]))
        with pytest.raises(ValidationError):
            MetricsSnapshot.model_validate(data)

    def test_round_trip_validates(self, snapshot: MetricsSnapshot) -> None:
        assert MetricsSnapshot.model_validate(snapshot.model_dump()) == snapshot
