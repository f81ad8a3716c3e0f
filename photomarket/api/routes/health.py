"""Health check endpoints."""
from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from photomarket.core.database import engine
from photomarket.core.redis import redis_client

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
    redis: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Redis is reported as ``disabled`` when no REDIS_URL is configured.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception:
        db_status = "unhealthy"

    if not redis_client.configured:
        redis_status = "disabled"
    elif await redis_client.ping():
        redis_status = "healthy"
    else:
        redis_status = "unavailable"

    status = "healthy" if db_status == "healthy" else "unhealthy"

    return HealthResponse(
        status=status,
        database=db_status,
        redis=redis_status
    )
