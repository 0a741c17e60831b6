"""
Health check endpoint for monitoring.

Reports 200 when the database answers ``SELECT 1`` and 503 otherwise,
so a load balancer can take an instance without a database out of rotation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_database_status

router = APIRouter(tags=["Health"])

SERVICE_NAME = "eligibility-search"


@router.get("/health")
def health_check(database_ok: bool = Depends(get_database_status)):
    body = {
        "status": "ok" if database_ok else "degraded",
        "service": SERVICE_NAME,
        "database": "ok" if database_ok else "unavailable",
    }
    return JSONResponse(status_code=200 if database_ok else 503, content=body)
