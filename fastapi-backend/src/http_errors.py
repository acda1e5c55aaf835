# src/http_errors.py
"""Translation of metrics failures into HTTP responses for routes and cards."""
from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import HTTPException

from errors import DataUnavailable, InvalidWindow, MetricsError

logger = logging.getLogger(__name__)


def raise_http(exc: MetricsError) -> NoReturn:
    if isinstance(exc, InvalidWindow):
        logger.warning("Rejected reporting window: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if isinstance(exc, DataUnavailable):
        logger.error("Metrics source unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="metrics source unavailable") from exc
    logger.exception("Metrics data failed validation: %s", exc)
    raise HTTPException(status_code=500, detail="metrics data failed validation") from exc
