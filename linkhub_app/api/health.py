from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from linkhub_app.config import settings
from linkhub_app.dependencies import get_storage
from linkhub_app.storage.strategies import StorageStrategy

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(storage: StorageStrategy = Depends(get_storage)):
    """Liveness plus a ping of the configured store"""
    timestamp = datetime.now(timezone.utc).isoformat()

    if storage.ping():
        return {
            "success": True,
            "status": "healthy",
            "timestamp": timestamp,
            "database": "connected",
            "environment": settings.environment,
        }

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "success": False,
            "status": "unhealthy",
            "timestamp": timestamp,
            "database": "disconnected",
        },
    )
