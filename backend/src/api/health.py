"""Health check and metrics endpoints"""

import asyncio
from fastapi import APIRouter, Response, status
from datetime import datetime, timezone
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from src.database import AsyncSessionLocal
from src.services.redis_service import RedisService
from src.services.s3_service import S3Service

router = APIRouter(tags=["Health"])

VERSION = "1.0.0"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/health", status_code=status.HTTP_200_OK)
async def basic_health_check():
    """
    Basic health check endpoint (no authentication required)

    Returns simple health status and timestamp
    """
    return {
        "status": "healthy",
        "timestamp": utc_timestamp()
    }


@router.get("/api/v1/health", status_code=status.HTTP_200_OK)
async def detailed_health_check():
    """
    Detailed health check with service dependency status (no authentication required)

    Checks connectivity to:
    - Database (override store and profiles)
    - Redis (token revocation)
    - S3 (bulk photo export)
    """
    services = {}
    overall_status = "healthy"

    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar_one()
        services["database"] = "connected"
    except Exception as e:
        services["database"] = f"disconnected: {str(e)}"
        overall_status = "degraded"

    try:
        await RedisService.ping()
        services["redis"] = "connected"
    except Exception as e:
        services["redis"] = f"disconnected: {str(e)}"
        overall_status = "degraded"

    try:
        s3_service = S3Service()
        await asyncio.to_thread(s3_service.check_bucket)
        services["s3"] = "connected"
    except Exception as e:
        services["s3"] = f"disconnected: {str(e)}"
        overall_status = "degraded"

    return {
        "status": overall_status,
        "version": VERSION,
        "timestamp": utc_timestamp(),
        "services": services
    }


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus text exposition"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
