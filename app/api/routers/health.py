"""
Health check endpoints for monitoring and orchestration (K8s, Docker, etc.)

- /health, /health/live: liveness, no dependencies touched
- /health/db: booking storage check (skipped with in-memory repositories)
- /health/ready: storage plus hotel supplier wiring and circuit state
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pybreaker import STATE_OPEN
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_session, get_supplier_gateway
from app.application.interfaces.supplier_gateway import HotelSupplierGateway
from app.infrastructure.gateways.ratehawk_gateway import RateHawkGateway

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "hotel-bookings-api"


async def _database_status(session: AsyncSession | None) -> str:
    """'skipped' in in-memory mode, otherwise 'healthy' or 'unhealthy'."""
    if session is None:
        return "skipped"
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
    except Exception as e:
        logger.error("Booking database health check failed", exc_info=e)
        return "unhealthy"
    return "healthy"


def _supplier_status(gateway: HotelSupplierGateway) -> dict[str, Any]:
    if isinstance(gateway, RateHawkGateway):
        return {"mode": "ratehawk", "circuit": gateway.circuit_state}
    return {"mode": "sandbox", "circuit": None}


@router.get("/health")
async def health_check():
    """
    Basic liveness check.

    Returns 200 OK if the application is running.
    """
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/live")
async def health_check_live():
    """Alias for /health for Kubernetes liveness checks."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/db")
async def health_check_db(session: AsyncSession | None = Depends(get_session)):
    """
    Booking storage check.

    Reservations live in memory when USE_IN_MEMORY is set, so there is no
    database to query and the check reports 'skipped'. Returns 503 if the
    database does not answer.
    """
    status = await _database_status(session)
    body = {
        "status": status,
        "component": "database",
        "storage": "in_memory" if session is None else "sql",
    }
    if status == "unhealthy":
        body["error"] = "Database connection failed"
        return JSONResponse(status_code=503, content=body)
    return body


@router.get("/health/ready")
async def health_check_ready(
    session: AsyncSession | None = Depends(get_session),
    gateway: HotelSupplierGateway = Depends(get_supplier_gateway),
):
    """
    Readiness check.

    503 only when the booking database is down; an open supplier circuit
    reports 'degraded' with 200.
    """
    supplier = _supplier_status(gateway)
    health_status: dict[str, Any] = {
        "status": "ready",
        "checks": {
            "database": await _database_status(session),
            "supplier": supplier,
        },
    }

    if health_status["checks"]["database"] == "unhealthy":
        health_status["status"] = "not_ready"
        return JSONResponse(status_code=503, content=health_status)

    if supplier["circuit"] == STATE_OPEN:
        logger.warning("Readiness check: supplier circuit open")
        health_status["status"] = "degraded"

    return health_status
