"""
Health check endpoints
"""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from datetime import datetime
from typing import Any, Dict

from ..db import check_db_connection

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns:
        dict: Health status and timestamp
    """
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/ready", status_code=status.HTTP_200_OK)
def readiness_check():
    """
    Readiness check endpoint with database status.

    Returns 503 with the same body when the database is unreachable.
    """
    db_connected = check_db_connection()

    response = {
        "status": "ready" if db_connected else "not_ready",
        "database": "connected" if db_connected else "disconnected",
        "timestamp": datetime.utcnow().isoformat()
    }

    if not db_connected:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response)
    return response
