"""
Health check endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
import redis.asyncio as redis

from config import settings, validate_security_settings
from database import engine
from models.idea import Idea

router = APIRouter()


async def _probe_database() -> Dict[str, Any]:
    async with engine.connect() as conn:
        catalog_size = (await conn.execute(select(func.count()).select_from(Idea))).scalar()
    return {"database": "up", "dialect": engine.dialect.name, "catalog_size": int(catalog_size or 0)}


async def _probe_rate_limit_backend() -> str:
    client = redis.from_url(settings.REDIS_URL)
    try:
        await client.ping()
    finally:
        await client.aclose()
    return "redis"


@router.get("/health")
async def health_check():
    """
    Database reachability and catalog size.
    Redis only backs rate limiting; when it is down quotas fall back to
    in-process counters and the service stays healthy.
    """
    health_status: Dict[str, Any] = {"status": "healthy", "api": "up", "database": "unknown"}

    try:
        health_status.update(await _probe_database())
    except Exception as e:
        health_status["database"] = f"down: {str(e)}"
        health_status["status"] = "degraded"

    try:
        health_status["rate_limit_backend"] = await _probe_rate_limit_backend()
    except Exception as e:
        health_status["rate_limit_backend"] = "local"
        health_status["redis"] = f"down: {str(e)}"

    return health_status


@router.get("/health/ready")
async def readiness_check():
    """Not ready while the default JWT secret is configured."""
    try:
        validate_security_settings()
    except ValueError as exc:
        return JSONResponse(status_code=503, content={"ready": False, "reason": str(exc)})
    return {"ready": True}


@router.get("/health/live")
async def liveness_check():
    return {"alive": True}
