# fastapi-backend/src/main.py
import asyncio
import logging
from typing import Optional
from contextlib import asynccontextmanager

import uvicorn
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi import Depends, FastAPI, HTTPException

from settings import get_settings
from cards import ALL_DASHBOARD_CARDS
from errors import MetricsError
from http_errors import raise_http
from refresh import SnapshotRefresher, get_refresher
from reports.dashboard import DashboardService, get_dashboard_service


settings = get_settings()

LOG_LEVEL = (settings.log_level or "INFO").upper()
HOST = settings.host
PORT = int(settings.port)

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        logger.info("Starting application...")
        try:
            for CardCls in ALL_DASHBOARD_CARDS:
                try:
                    CardCls(app).as_route(app=app)
                    logger.info(
                        "Registered card route: %s/%s", CardCls.route_prefix, CardCls.card_id
                    )
                except Exception as e:
                    logger.exception(
                        "Failed to register route for %s: %s",
                        getattr(CardCls, "card_id", repr(CardCls)),
                        e,
                    )
        except Exception:
            logger.exception("Unexpected error while registering dashboard card routes")

        logger.info("Application startup complete")
        yield
    finally:
        logger.info("Application shutdown complete")


app = FastAPI(
    title="ServiceNow Analytics Server",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins or ["*"],
    allow_credentials=bool(settings.cors_allow_credentials),
    allow_methods=settings.cors_allow_methods or ["*"],
    allow_headers=settings.cors_allow_headers or ["*"],
)


@app.get("/", response_class=JSONResponse)
async def root():
    return JSONResponse({"ok": True, "service": "servicenow-analytics-server"})


@app.get("/health", response_class=JSONResponse)
async def health():
    """
    Lightweight health endpoint. It does not reach the metrics source; call
    /snapshot for an end-to-end check.
    """
    try:
        return JSONResponse({"ok": True, "metricsSource": settings.metrics_source})
    except Exception as exc:
        logger.exception("Health check failed: %s", exc)
        raise HTTPException(status_code=500, detail="health check failed")


@app.get("/snapshot", response_class=JSONResponse)
async def snapshot(
    window: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    service: DashboardService = Depends(get_dashboard_service),
):
    """Fresh enriched dashboard for the requested reporting window."""
    try:
        view = await asyncio.to_thread(lambda: service.load(window, start=start, end=end))
    except MetricsError as exc:
        raise_http(exc)
    return JSONResponse(view.model_dump(mode="json", by_alias=True))


@app.post("/snapshot/refresh", response_class=JSONResponse)
async def refresh_snapshot(
    window: Optional[str] = None,
    refresher: SnapshotRefresher = Depends(get_refresher),
):
    try:
        outcome = await refresher.refresh(window)
    except MetricsError as exc:
        raise_http(exc)
    return JSONResponse(
        {
            "sequence": outcome.sequence,
            "applied": outcome.applied,
            "dashboard": outcome.view.model_dump(mode="json", by_alias=True),
        }
    )


@app.get("/snapshot/current", response_class=JSONResponse)
async def current_snapshot(refresher: SnapshotRefresher = Depends(get_refresher)):
    view = refresher.current
    if view is None:
        raise HTTPException(status_code=404, detail="no snapshot has been loaded yet")
    return JSONResponse(
        {
            "sequence": refresher.applied_sequence,
            "dashboard": view.model_dump(mode="json", by_alias=True),
        }
    )


if __name__ == "__main__":
    logger.info("Starting %s on %s:%d", app.title, HOST, PORT)
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())
