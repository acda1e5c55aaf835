# src/generators/reporting_feed.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from errors import DataUnavailable, InvariantViolation
from generators.sources import MetricsSource, SourceReading
from windows import ReportingPeriod

logger = logging.getLogger(__name__)


class ReportingFeedSource(MetricsSource):
    """
    Reads metrics from an HTTP reporting feed.

    ``GET {base_url}/metrics?start=YYYY-MM&end=YYYY-MM`` must answer with a JSON
    document shaped like ``SourceReading`` (camelCase or snake_case keys).
    Failures are not retried here; retry policy belongs to the caller.
    """

    name = "feed"

    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        self._url = f"{base_url.rstrip('/')}/metrics"
        self._timeout = timeout
        self._client = client

    def _fetch(self, params: Dict[str, str]) -> Any:
        if self._client is not None:
            r = self._client.get(self._url, params=params)
            r.raise_for_status()
            return r.json()
        with httpx.Client(timeout=self._timeout) as client:
            r = client.get(self._url, params=params)
            r.raise_for_status()
            return r.json()

    def read(self, period: ReportingPeriod) -> SourceReading:
        params = {"start": f"{period.start:%Y-%m}", "end": f"{period.end:%Y-%m}"}
        try:
            payload = self._fetch(params)
        except httpx.HTTPError as exc:
            logger.warning("Reporting feed %s failed for %s: %s", self._url, period.token, exc)
            raise DataUnavailable(f"reporting feed unavailable: {exc}") from exc
        except ValueError as exc:
            raise InvariantViolation(f"reporting feed returned invalid JSON: {exc}") from exc

        try:
            return SourceReading.model_validate(payload)
        except ValidationError as exc:
            raise InvariantViolation(f"reporting feed returned malformed metrics: {exc}") from exc
