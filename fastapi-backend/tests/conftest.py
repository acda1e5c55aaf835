"""
Shared fixtures: a pinned clock and deterministic metrics sources.

ANCHOR pins "today" to 2026-10-18, so the default 12-month window runs from
Nov 25 through Oct 26.
"""

from __future__ import annotations

from datetime import date
from typing import List

import pytest

from generators.snapshot_generator import SnapshotGenerator
from generators.sources import MonthlyCounts, StaticSource, SyntheticSource
from models import MetricsSnapshot
from reports.dashboard import DashboardService

ANCHOR = date(2026, 10, 18)


def make_monthly(n: int = 12) -> List[MonthlyCounts]:
    """Linear series: incidents 200..310, resolved 150..205, changes 40..51, SLA 80..91."""
    return [
        MonthlyCounts(
            incidents=200 + 10 * i,
            resolved=150 + 5 * i,
            change_requests=40 + i,
            sla_compliance=80 + i,
        )
        for i in range(n)
    ]


@pytest.fixture()
def static_source() -> StaticSource:
    return StaticSource(make_monthly())


@pytest.fixture()
def static_generator(static_source: StaticSource) -> SnapshotGenerator:
    return SnapshotGenerator(source=static_source, clock=lambda: ANCHOR)


@pytest.fixture()
def seeded_generator() -> SnapshotGenerator:
    return SnapshotGenerator(source=SyntheticSource(seed=42), clock=lambda: ANCHOR)


@pytest.fixture()
def snapshot(static_generator: SnapshotGenerator) -> MetricsSnapshot:
    return static_generator.generate_snapshot()


@pytest.fixture()
def dashboard_service(static_generator: SnapshotGenerator) -> DashboardService:
    return DashboardService(static_generator)
