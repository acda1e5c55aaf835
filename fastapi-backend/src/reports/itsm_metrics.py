# fastapi-backend/src/reports/itsm_metrics.py
# | Card Name                | Visual Type | Transport | Purpose / Data Shown                                   |
# | ------------------------ | ----------- | --------- | ------------------------------------------------------ |
# | IncidentTrendAreaCard    | area_chart  | http      | Monthly incidents / resolved / change requests         |
# | SlaComplianceLineCard    | line_chart  | http      | Monthly SLA compliance % against the SLA target        |
# | PriorityDistributionCard | pie_chart   | http      | Incident counts and share per priority (P1..P4)        |
# | ResolutionTimesBarCard   | bar_chart   | http      | Average vs target resolution hours per priority        |
# | StatusOverviewCard       | bar_chart   | http      | Incident counts and share per lifecycle status         |
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List

from cereon_sdk.fastapi import BaseCard, ChartCardRecord

from errors import MetricsError
from http_errors import raise_http
from reports.dashboard import (
    get_dashboard_service,
    incident_trend_rows,
    priority_rows,
    resolution_rows,
    sla_trend_rows,
    status_rows,
)
from reports.derived_metrics import DashboardView

logger = logging.getLogger(__name__)

REPORT_ID = "itsm_overview"


async def _load_view(ctx=None) -> DashboardView:
    params = (ctx or {}).get("params", {}) if ctx else {}
    window = params.get("window")
    return await asyncio.to_thread(get_dashboard_service().load, window)


async def _chart_records(cls, ctx, kind: str, rows_for: Callable[[DashboardView], List[Dict[str, Any]]]):
    try:
        view = await _load_view(ctx)
    except MetricsError as exc:
        raise_http(exc)
    payload = {
        "kind": kind,
        "report_id": cls.report_id,
        "card_id": cls.card_id,
        "data": {"data": rows_for(view)},
    }
    logger.debug("Card %s served %s window", cls.card_id, view.snapshot.window)
    return [cls.response_model(**payload)]


class IncidentTrendAreaCard(BaseCard[ChartCardRecord]):
    kind = "recharts:area"
    card_id = "incident_trends_area"
    report_id = REPORT_ID
    route_prefix = "/cards"
    response_model = ChartCardRecord
    transport = "http"

    @classmethod
    async def handler(cls, ctx=None) -> List[ChartCardRecord]:
        return await _chart_records(cls, ctx, "area", incident_trend_rows)


class SlaComplianceLineCard(BaseCard[ChartCardRecord]):
    kind = "recharts:line"
    card_id = "sla_compliance_line"
    report_id = REPORT_ID
    route_prefix = "/cards"
    response_model = ChartCardRecord
    transport = "http"

    @classmethod
    async def handler(cls, ctx=None) -> List[ChartCardRecord]:
        return await _chart_records(cls, ctx, "line", sla_trend_rows)


class PriorityDistributionCard(BaseCard[ChartCardRecord]):
    kind = "recharts:pie"
    card_id = "priority_distribution_pie"
    report_id = REPORT_ID
    route_prefix = "/cards"
    response_model = ChartCardRecord
    transport = "http"

    @classmethod
    async def handler(cls, ctx=None) -> List[ChartCardRecord]:
        return await _chart_records(cls, ctx, "pie", priority_rows)


class ResolutionTimesBarCard(BaseCard[ChartCardRecord]):
    kind = "recharts:bar"
    card_id = "resolution_times_bar"
    report_id = REPORT_ID
    route_prefix = "/cards"
    response_model = ChartCardRecord
    transport = "http"

    @classmethod
    async def handler(cls, ctx=None) -> List[ChartCardRecord]:
        return await _chart_records(cls, ctx, "bar", resolution_rows)


class StatusOverviewCard(BaseCard[ChartCardRecord]):
    kind = "recharts:bar"
    card_id = "status_overview_bar"
    report_id = REPORT_ID
    route_prefix = "/cards"
    response_model = ChartCardRecord
    transport = "http"

    @classmethod
    async def handler(cls, ctx=None) -> List[ChartCardRecord]:
        # horizontal bars: one per lifecycle status
        return await _chart_records(cls, ctx, "bar-horizontal", status_rows)
