"""Main application entry point for the room availability service.

This module defines the FastAPI application, configures logging, owns the
process-wide room catalog and wires the refresh coordinator and the query
service around it.

Endpoints:
  - ``/api/all``: free intervals from now on for every matching room.
  - ``/api/lite/{hour_offset}``: room status ``hour_offset`` hours from now.
  - ``/healthz``: health check with the outcome of the last refresh pass.

The catalog is refreshed from the planning feeds by a background scheduler
started with the application. Queries never wait for a refresh; they answer
from whatever state the last successful feeds produced.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .catalog import RoomCatalog
from .config import settings
from .errors import ReferenceClockError
from .queries import AvailabilityService, name_matcher
from .refresh import RefreshCoordinator

logger = logging.getLogger("room_availability")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

catalog = RoomCatalog()
coordinator = RefreshCoordinator(catalog)
service = AvailabilityService(catalog)
room_filter = name_matcher(settings.room_name_pattern)


def _utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def _iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


@asynccontextmanager
async def lifespan(app: FastAPI):
    coordinator.start()
    try:
        yield
    finally:
        coordinator.shutdown()


app = FastAPI(title="Room Availability Service", lifespan=lifespan)

# The API is consumed by browser front ends on other origins, so CORS is on
# by default. Set ENABLE_CORS=no to drop the middleware.
if settings.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )


@app.get("/api/all")
def api_all() -> Dict[str, List[List[int]]]:
    """Return free intervals for every matching room with known bookings."""
    free = service.list_all_free(room_filter)
    return {name: [[start, end] for start, end in slots] for name, slots in free.items()}


@app.get("/api/lite/{hour_offset}")
def api_lite(hour_offset: int) -> List[Dict[str, Any]]:
    """Return room status at now shifted by ``hour_offset`` whole hours."""
    now = _utcnow()
    reference = int(now.timestamp()) + hour_offset * 3600
    try:
        statuses = service.get_status_at(room_filter, reference, now=now)
    except ReferenceClockError as exc:
        logger.error("Error computing room status: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
    return [s.model_dump() for s in statuses]


@app.get("/healthz")
def healthz() -> Dict[str, Any]:
    """Health check endpoint for monitoring."""
    report = coordinator.last_report
    last_error = None
    if report is not None and report.failures:
        last_error = f"{len(report.failures)} feed(s) failed: " + ", ".join(sorted(report.failures))
    return {
        "ok": True,
        "time": _iso(_utcnow()),
        "rooms": len(catalog),
        "lastRefresh": _iso(report.finished_at) if report is not None and report.finished_at else None,
        "lastError": last_error,
    }
