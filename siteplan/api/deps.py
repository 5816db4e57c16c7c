"""Shared API dependencies: settings, DB session, site lookup."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from siteplan.config import Settings
from siteplan.schemas.site import Site
from siteplan.services.site_service import get_site


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


async def get_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """Get a database session."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def require_site(
    site_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Site:
    """Resolve the ``site_id`` path parameter. Raises 404 if the site does not exist."""
    site = await get_site(session, site_id)
    if site is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Site not found")
    return site
