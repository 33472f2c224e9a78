"""Root API router with health endpoints and module mounting."""

import os
import platform
import time
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from inkwell import __version__
from inkwell.core.database import Database, get_database
from inkwell.modules import discover_modules


STARTED_AT = time.monotonic()


class HomeResponse(BaseModel):
    """Service greeting."""

    message: str
    version: str
    timestamp: datetime


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str


def _uptime() -> float:
    return round(time.monotonic() - STARTED_AT, 3)


def _now() -> str:
    return datetime.now(UTC).isoformat()


# Create root API router
api_router = APIRouter()

# Health check endpoints (no /api/v1 prefix)
health_router = APIRouter(tags=["health"])

DatabaseHandle = Annotated[Database, Depends(get_database)]


@health_router.get(
    "/",
    response_model=HomeResponse,
    summary="Service greeting",
)
async def home() -> HomeResponse:
    """Home endpoint."""
    return HomeResponse(
        message="Hello World!",
        version=__version__,
        timestamp=datetime.now(UTC),
    )


@health_router.get(
    "/health",
    summary="Health check",
    description="Returns 200 when the database is reachable, 503 otherwise.",
)
async def health(database: DatabaseHandle) -> JSONResponse:
    """Health check endpoint."""
    healthy = await database.ping()
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "OK" if healthy else "SERVICE_UNAVAILABLE",
            "timestamp": _now(),
            "services": {"database": "healthy" if healthy else "unhealthy"},
            "uptime": _uptime(),
        },
    )


@health_router.get(
    "/health/detailed",
    summary="Detailed health check",
    description="Health check with process information.",
)
async def health_detailed(database: DatabaseHandle) -> JSONResponse:
    """Detailed health check endpoint."""
    healthy = await database.ping()
    system: dict[str, Any] = {
        "uptime": _uptime(),
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "pid": os.getpid(),
    }
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "OK" if healthy else "SERVICE_UNAVAILABLE",
            "timestamp": _now(),
            "services": {"database": "healthy" if healthy else "unhealthy"},
            "system": system,
        },
    )


@health_router.get(
    "/health/live",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Kubernetes liveness probe. Returns 200 if the process is running.",
)
async def liveness() -> HealthResponse:
    """Liveness probe endpoint."""
    return HealthResponse(status="alive")


# Create versioned API router
v1_router = APIRouter(prefix="/api/v1")

# Mount discovered module routers
for module_router in discover_modules():
    v1_router.include_router(module_router)

# Include routers in main api_router
api_router.include_router(health_router)
api_router.include_router(v1_router)
