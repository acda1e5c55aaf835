"""
tests/test_sources.py

Synthetic, static and HTTP reporting-feed metrics sources. The feed is
exercised against httpx.MockTransport; nothing leaves the process.
"""

from __future__ import annotations

from typing import Any, Dict

import httpx
import pytest

from conftest import ANCHOR, make_monthly
from errors import DataUnavailable, InvariantViolation
from generators.reporting_feed import ReportingFeedSource
from generators.sources import (
    BASELINE_PRIORITY_COUNTS,
    CHANGE_REQUEST_RANGE,
    INCIDENT_RANGE,
    RESOLVED_RANGE,
    SLA_RANGE,
    StaticSource,
    SyntheticSource,
)
from models import Severity
from windows import resolve_window


def _feed_payload(months: int) -> Dict[str, Any]:
    return {
        "monthly": [
            {"incidents": 210, "resolved": 180, "changeRequests": 44, "slaCompliance": 88.5}
            for _ in range(months)
        ],
        "kpis": {
            "totalIncidents": 500,
            "openIncidents": 40,
            "resolvedIncidents": 450,
            "avgResolutionTime": 3.1,
            "slaCompliance": 87.0,
            "userSatisfaction": 4.4,
            "changeRequests": 120,
            "pendingChanges": 12,
        },
        "priorityCounts": {"critical": 4, "high": 20, "medium": 60, "low": 16},
        "statusCounts": {"open": 30, "in_progress": 10, "resolved": 150, "closed": 310},
        "resolutionTimes": {
            "critical": {"avgTime": 0.8, "target": 1},
            "high": {"avgTime": 3.5, "target": 4},
            "medium": {"avgTime": 9.0, "target": 8},
            "low": {"avgTime": 20.0, "target": 24},
        },
    }


def _feed(handler) -> ReportingFeedSource:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ReportingFeedSource("http://feed.test/api/", client=client)


# ---------------------------------------------------------------------------
# SyntheticSource
# ---------------------------------------------------------------------------


class TestSyntheticSource:
    def test_one_reading_per_month(self) -> None:
        reading = SyntheticSource(seed=1).read(resolve_window("12m", ANCHOR))
        assert len(reading.monthly) == 12

    def test_samples_stay_in_ranges(self) -> None:
        reading = SyntheticSource(seed=7).read(resolve_window("12m", ANCHOR))
        for month in reading.monthly:
            assert INCIDENT_RANGE[0] <= month.incidents < INCIDENT_RANGE[1]
            assert RESOLVED_RANGE[0] <= month.resolved < RESOLVED_RANGE[1]
            assert CHANGE_REQUEST_RANGE[0] <= month.change_requests < CHANGE_REQUEST_RANGE[1]
            assert SLA_RANGE[0] <= month.sla_compliance < SLA_RANGE[1]
            assert float(month.sla_compliance).is_integer()

    def test_same_seed_same_series(self) -> None:
        period = resolve_window("6m", ANCHOR)
        assert SyntheticSource(seed=3).read(period).monthly == SyntheticSource(seed=3).read(period).monthly

    def test_baseline_catalogs(self) -> None:
        reading = SyntheticSource(seed=0).read(resolve_window("1m", ANCHOR))
        assert reading.kpis.total_incidents == 1847
        assert reading.priority_counts == BASELINE_PRIORITY_COUNTS
        assert reading.resolution_times[Severity.CRITICAL].avg_time == 0.5
        assert reading.resolution_times[Severity.LOW].target == 24.0


# ---------------------------------------------------------------------------
# StaticSource
# ---------------------------------------------------------------------------


class TestStaticSource:
    def test_trailing_months_align_with_window_end(self) -> None:
        source = StaticSource(make_monthly(12))
        reading = source.read(resolve_window("3m", ANCHOR))
        assert [m.incidents for m in reading.monthly] == [290, 300, 310]

    def test_short_history_is_unavailable(self) -> None:
        source = StaticSource(make_monthly(2))
        with pytest.raises(DataUnavailable, match="2 months"):
            source.read(resolve_window("3m", ANCHOR))

    def test_custom_counts(self) -> None:
        counts = {sev: 0 for sev in Severity}
        reading = StaticSource(make_monthly(1), priority_counts=counts).read(resolve_window("1m", ANCHOR))
        assert set(reading.priority_counts.values()) == {0}

    def test_empty_mappings_are_kept(self) -> None:
        source = StaticSource(make_monthly(1), priority_counts={}, status_counts={}, resolution_times={})
        reading = source.read(resolve_window("1m", ANCHOR))
        assert reading.priority_counts == {}
        assert reading.status_counts == {}
        assert reading.resolution_times == {}


# ---------------------------------------------------------------------------
# ReportingFeedSource
# ---------------------------------------------------------------------------


class TestReportingFeedSource:
    def test_reads_scoped_window(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=_feed_payload(3))

        reading = _feed(handler).read(resolve_window("3m", ANCHOR))
        assert seen == {"path": "/api/metrics", "params": {"start": "2026-08", "end": "2026-10"}}
        assert len(reading.monthly) == 3
        assert reading.kpis.open_incidents == 40
        assert reading.resolution_times[Severity.MEDIUM].avg_time == 9.0

    def test_connection_error_is_data_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DataUnavailable):
            _feed(handler).read(resolve_window("3m", ANCHOR))

    def test_server_error_is_data_unavailable(self) -> None:
        with pytest.raises(DataUnavailable):
            _feed(lambda request: httpx.Response(503)).read(resolve_window("3m", ANCHOR))

    def test_invalid_json_is_invariant_violation(self) -> None:
        feed = _feed(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(InvariantViolation, match="invalid JSON"):
            feed.read(resolve_window("3m", ANCHOR))

    def test_inconsistent_kpis_are_invariant_violation(self) -> None:
        payload = _feed_payload(3)
        payload["kpis"]["openIncidents"] = 100  # 100 + 450 > 500
        feed = _feed(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(InvariantViolation, match="malformed"):
            feed.read(resolve_window("3m", ANCHOR))

    def test_negative_counts_are_invariant_violation(self) -> None:
        payload = _feed_payload(3)
        payload["monthly"][1]["incidents"] = -5
        feed = _feed(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(InvariantViolation):
            feed.read(resolve_window("3m", ANCHOR))
