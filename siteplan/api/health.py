"""Health check endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from siteplan import __version__
from siteplan.api.deps import get_session
from siteplan.models.site import SiteRecord
from siteplan.schemas.common import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(CamelModel):
    status: str
    version: str
    database: str
    site_count: int | None = None


@router.get("/api/health", response_model=HealthResponse)
async def health_check(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """Report service and database status.

    Counting sites exercises the schema as well as the connection, so a
    database without tables reports ``degraded``.
    """
    try:
        site_count = await session.scalar(select(func.count()).select_from(SiteRecord))
    except SQLAlchemyError:
        logger.warning("Health check database query failed", exc_info=True)
        return HealthResponse(status="degraded", version=__version__, database="error")

    return HealthResponse(
        status="ok",
        version=__version__,
        database="ok",
        site_count=site_count,
    )
