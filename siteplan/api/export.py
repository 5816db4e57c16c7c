"""Export API endpoints: preview statistics and file downloads."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from siteplan.api.deps import get_session, get_settings, require_site
from siteplan.config import Settings
from siteplan.schemas.content_page import ContentPage
from siteplan.schemas.export import (
    ExportData,
    ExportPreview,
    ExportSiteSummary,
)
from siteplan.schemas.site import Site
from siteplan.schemas.sitemap import Sitemap
from siteplan.services.content_page_service import list_content_pages
from siteplan.services.datetime_service import now_utc
from siteplan.services.export_service import (
    empty_export_stats,
    export_filename,
    generate_export_data,
    get_export_stats,
    site_export_url,
)
from siteplan.services.sitemap_service import get_sitemap
from siteplan.services.sitemap_tree import find_dangling_links
from siteplan.services.wxr_service import (
    generate_json,
    generate_site_archive_json,
    generate_wxr,
)

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("wxr", "json", "backup")

router = APIRouter(prefix="/api/sites/{site_id}/export", tags=["export"])


async def _load_site_content(
    session: AsyncSession, site: Site
) -> tuple[Sitemap, list[ContentPage]]:
    sitemap = await get_sitemap(session, site.id)
    content_pages = await list_content_pages(session, site.id)
    await session.commit()
    logger.debug(
        "Loaded %d root pages and %d content pages for export of site %s",
        len(sitemap.pages),
        len(content_pages),
        site.id,
    )
    return sitemap, content_pages


def _build_export(
    site: Site, sitemap: Sitemap, content_pages: list[ContentPage], settings: Settings
) -> ExportData:
    return generate_export_data(
        sitemap.pages,
        content_pages,
        site.name,
        site_export_url(site, settings.default_site_url),
        description=settings.export_description,
        language=settings.export_language,
        author=settings.export_author,
    )


@router.get("", response_model=ExportPreview)
async def export_preview(
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ExportPreview:
    """Summarize what an export of the site would contain."""
    sitemap, content_pages = await _load_site_content(session, site)
    has_sitemap = bool(sitemap.pages)
    if has_sitemap:
        stats = get_export_stats(_build_export(site, sitemap, content_pages, settings))
    else:
        stats = empty_export_stats()
    dangling = find_dangling_links(sitemap.pages, {cp.id for cp in content_pages})
    return ExportPreview(
        site=ExportSiteSummary(
            id=site.id,
            name=site.name,
            url=site.production_url or site.dev_url,
        ),
        stats=stats,
        has_sitemap=has_sitemap,
        has_content=bool(content_pages),
        dangling_links=len(dangling),
    )


@router.get("/download")
async def export_download(
    site: Annotated[Site, Depends(require_site)],
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    export_format: Annotated[str, Query(alias="format")] = "wxr",
) -> Response:
    """Download the site as a WXR file, WordPress-shaped JSON, or a raw JSON backup."""
    if export_format not in EXPORT_FORMATS:
        raise HTTPException(status_code=400, detail="Unsupported export format")

    sitemap, content_pages = await _load_site_content(session, site)

    if export_format == "backup":
        body = generate_site_archive_json(site, sitemap, content_pages, now_utc())
        filename = export_filename(site.name, "export", "json")
        media_type = "application/json"
    else:
        export_data = _build_export(site, sitemap, content_pages, settings)
        if export_format == "wxr":
            body = generate_wxr(export_data, settings.export_generator)
            filename = export_filename(site.name, "wordpress_export", "xml")
            media_type = "application/xml"
        else:
            body = generate_json(export_data)
            filename = export_filename(site.name, "wordpress_export", "json")
            media_type = "application/json"

    logger.info("Exported site %s as %s (%s)", site.id, export_format, filename)
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
