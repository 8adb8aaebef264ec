"""
Health check endpoints.

/health is the liveness probe and touches nothing. /ready also confirms the
binders table is reachable, so it fails until init_db has run.
"""

from importlib.metadata import version as pkg_version
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardbinder.db.database import get_session
from cardbinder.models.db import BinderDB

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str | None = None
    database: str | None = None
    binders: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not check dependencies."""
    return HealthResponse(status="healthy", version=pkg_version("cardbinder"))


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the database or the binders table is unavailable.
    """
    try:
        result = await session.execute(select(func.count()).select_from(BinderDB))
    except SQLAlchemyError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")

    return HealthResponse(status="ready", database="connected", binders=result.scalar_one())
