# src/reports/dashboard.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from generators.snapshot_generator import SnapshotGenerator, build_generator
from reports.derived_metrics import DEFAULT_SLA_TARGET, DashboardView, enrich
from settings import get_settings
from windows import DateLike

logger = logging.getLogger(__name__)


class DashboardService:
    """Generates a snapshot and enriches it with derived metrics for display."""

    def __init__(self, generator: SnapshotGenerator, sla_target: float = DEFAULT_SLA_TARGET):
        self.generator = generator
        self.sla_target = sla_target

    def load(
        self,
        window: Optional[str] = None,
        *,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> DashboardView:
        snapshot = self.generator.generate_snapshot(window, start=start, end=end)
        view = enrich(snapshot, sla_target=self.sla_target)
        logger.info(
            "Loaded dashboard for %s: %d months, SLA %.1f%% (%s)",
            snapshot.window,
            len(snapshot.monthly_trends),
            snapshot.kpis.sla_compliance,
            view.sla_gap.assessment.value,
        )
        return view


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    settings = get_settings()
    return DashboardService(build_generator(settings), sla_target=settings.sla_target)


# ---------------------------------------------------------------------------
# Chart rows, one list per dashboard card
# ---------------------------------------------------------------------------


def incident_trend_rows(view: DashboardView) -> List[Dict[str, Any]]:
    return [
        {
            "month": p.month,
            "incidents": p.incidents,
            "resolved": p.resolved,
            "changeRequests": p.change_requests,
        }
        for p in view.snapshot.monthly_trends
    ]


def sla_trend_rows(view: DashboardView) -> List[Dict[str, Any]]:
    return [
        {
            "month": p.month,
            "slaCompliance": p.sla_compliance,
            "target": view.sla_target,
            "delta": gap.gap.delta,
        }
        for p, gap in zip(view.snapshot.monthly_trends, view.monthly_sla_gaps)
    ]


def priority_rows(view: DashboardView) -> List[Dict[str, Any]]:
    return [
        {"name": c.name, "value": c.value, "color": c.color, "percent": view.priority_shares[c.key]}
        for c in view.snapshot.priority_distribution
    ]


def status_rows(view: DashboardView) -> List[Dict[str, Any]]:
    return [
        {"name": c.name, "value": c.value, "color": c.color, "percent": view.status_shares[c.key]}
        for c in view.snapshot.status_distribution
    ]


def resolution_rows(view: DashboardView) -> List[Dict[str, Any]]:
    return [
        {
            "category": r.category,
            "avgTime": r.avg_time,
            "target": r.target_time,
            "delta": g.gap.delta,
            "favorable": g.gap.favorable,
        }
        for r, g in zip(view.snapshot.resolution_times, view.resolution_gaps)
    ]
