"""Site API endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from siteplan.api.deps import get_session, require_site
from siteplan.schemas.content_page import DeleteResponse
from siteplan.schemas.site import Site, SiteCreate, SiteUpdate
from siteplan.services.site_service import create_site, delete_site, list_sites, update_site

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sites", tags=["sites"])


@router.get("", response_model=list[Site])
async def list_sites_endpoint(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[Site]:
    """List all sites, newest first."""
    return await list_sites(session)


@router.post("", response_model=Site, status_code=201)
async def create_site_endpoint(
    body: SiteCreate,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Site:
    """Create a new site."""
    site = await create_site(session, body)
    await session.commit()
    return site


@router.get("/{site_id}", response_model=Site)
async def get_site_endpoint(
    site: Annotated[Site, Depends(require_site)],
) -> Site:
    """Get a site by ID."""
    return site


@router.put("/{site_id}", response_model=Site)
async def update_site_endpoint(
    site_id: str,
    body: SiteUpdate,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Site:
    """Update a site."""
    site = await update_site(session, site_id, body)
    if site is None:
        raise HTTPException(status_code=404, detail="Site not found")
    await session.commit()
    return site


@router.delete("/{site_id}", response_model=DeleteResponse)
async def delete_site_endpoint(
    site_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a site with its sitemap and content pages."""
    deleted = await delete_site(session, site_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Site not found")
    await session.commit()
    return DeleteResponse(id=site_id)
