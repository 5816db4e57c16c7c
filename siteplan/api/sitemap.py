"""Sitemap API endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from siteplan.api.deps import get_session, require_site
from siteplan.schemas.content_page import DeleteResponse
from siteplan.schemas.site import Site
from siteplan.schemas.sitemap import (
    LinkContentPage,
    Sitemap,
    SitemapEditResponse,
    SitemapMove,
    SitemapPageCreate,
    SitemapPageUpdate,
    SitemapUpdate,
)
from siteplan.services.content_page_service import get_content_page
from siteplan.services.sitemap_service import (
    add_page,
    delete_page,
    delete_sitemap,
    edit_page,
    get_sitemap,
    link_content_page,
    move_page_in_sitemap,
    save_sitemap,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sites/{site_id}/sitemap", tags=["sitemap"])


@router.get("", response_model=Sitemap)
async def get_sitemap_endpoint(
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Sitemap:
    """Get the site's sitemap, creating an empty one if none exists yet."""
    sitemap = await get_sitemap(session, site.id)
    await session.commit()
    return sitemap


@router.put("", response_model=Sitemap)
async def replace_sitemap_endpoint(
    body: SitemapUpdate,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Sitemap:
    """Replace the whole page tree (last write wins)."""
    sitemap = await save_sitemap(session, site.id, body.pages)
    await session.commit()
    return sitemap


@router.delete("", response_model=DeleteResponse)
async def delete_sitemap_endpoint(
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete the site's sitemap. A fresh empty one is created on next read."""
    deleted = await delete_sitemap(session, site.id)
    await session.commit()
    return DeleteResponse(id=site.id, deleted=deleted)


@router.post("/pages", response_model=SitemapEditResponse, status_code=201)
async def add_page_endpoint(
    body: SitemapPageCreate,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SitemapEditResponse:
    """Add a page to the tree, at the root or relative to a target page."""
    result = await add_page(session, site.id, body)
    if result is None:
        raise HTTPException(status_code=404, detail="Target page not found")
    await session.commit()
    sitemap, page = result
    return SitemapEditResponse(sitemap=sitemap, page=page)


@router.patch("/pages/{page_id}", response_model=SitemapEditResponse)
async def edit_page_endpoint(
    page_id: str,
    body: SitemapPageUpdate,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SitemapEditResponse:
    """Edit a page's title, URL or content link."""
    changes = {
        field: value
        for field, value in body.model_dump(include=body.model_fields_set).items()
        if value is not None or field == "content_page_id"
    }
    result = await edit_page(session, site.id, page_id, changes)
    if result is None:
        raise HTTPException(status_code=404, detail="Sitemap page not found")
    await session.commit()
    sitemap, page = result
    return SitemapEditResponse(sitemap=sitemap, page=page)


@router.delete("/pages/{page_id}", response_model=Sitemap)
async def delete_page_endpoint(
    page_id: str,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Sitemap:
    """Delete a page and everything below it."""
    sitemap = await delete_page(session, site.id, page_id)
    if sitemap is None:
        raise HTTPException(status_code=404, detail="Sitemap page not found")
    await session.commit()
    return sitemap


@router.post("/move", response_model=Sitemap)
async def move_page_endpoint(
    body: SitemapMove,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Sitemap:
    """Move a page before, after or into another page.

    Unknown page ids are ignored; moving a page into its own subtree is
    rejected with 422.
    """
    sitemap = await move_page_in_sitemap(session, site.id, body)
    await session.commit()
    return sitemap


@router.post("/link", response_model=SitemapEditResponse, status_code=201)
async def link_content_page_endpoint(
    body: LinkContentPage,
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SitemapEditResponse:
    """Add a sitemap page for an existing content page."""
    content_page = await get_content_page(session, site.id, body.content_page_id)
    if content_page is None:
        raise HTTPException(status_code=404, detail="Content page not found")
    result = await link_content_page(session, site.id, content_page, body)
    if result is None:
        raise HTTPException(status_code=404, detail="Target page not found")
    await session.commit()
    sitemap, page, already_linked = result
    return SitemapEditResponse(sitemap=sitemap, page=page, already_linked=already_linked)
