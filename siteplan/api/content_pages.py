"""Content page API endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from siteplan.api.deps import get_session, require_site
from siteplan.schemas.content_page import (
    ContentPage,
    ContentPageCreate,
    ContentPageUpdate,
    ContentStatus,
    DeleteResponse,
)
from siteplan.schemas.site import Site
from siteplan.services.content_page_service import (
    create_content_page,
    delete_content_page,
    get_content_page,
    list_content_pages,
    update_content_page,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sites/{site_id}/content-pages", tags=["content-pages"])


@router.get("", response_model=list[ContentPage])
async def list_content_pages_endpoint(
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
    status: Annotated[ContentStatus | None, Query()] = None,
) -> list[ContentPage]:
    """List a site's content pages, optionally filtered by status."""
    return await list_content_pages(session, site.id, status)


@router.post("", response_model=ContentPage, status_code=201)
async def create_content_page_endpoint(
    body: ContentPageCreate,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ContentPage:
    """Create a content page. A URL already used on the site is answered with 409."""
    page = await create_content_page(session, site.id, body)
    await session.commit()
    return page


@router.get("/{page_id}", response_model=ContentPage)
async def get_content_page_endpoint(
    page_id: str,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ContentPage:
    """Get a content page by ID."""
    page = await get_content_page(session, site.id, page_id)
    if page is None:
        raise HTTPException(status_code=404, detail="Content page not found")
    return page


@router.put("/{page_id}", response_model=ContentPage)
async def update_content_page_endpoint(
    page_id: str,
    body: ContentPageUpdate,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ContentPage:
    """Replace a content page's fields."""
    page = await update_content_page(session, site.id, page_id, body)
    if page is None:
        raise HTTPException(status_code=404, detail="Content page not found")
    await session.commit()
    return page


@router.delete("/{page_id}", response_model=DeleteResponse)
async def delete_content_page_endpoint(
    page_id: str,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a content page. Sitemap nodes linking to it are left in place."""
    deleted = await delete_content_page(session, site.id, page_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Content page not found")
    await session.commit()
    return DeleteResponse(id=page_id)
