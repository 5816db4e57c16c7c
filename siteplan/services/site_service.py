"""Site service: CRUD over site records."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from siteplan.models.site import ContentPageRecord, SiteRecord, SitemapRecord
from siteplan.schemas.site import Site
from siteplan.services.datetime_service import ensure_utc, now_utc

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from siteplan.schemas.site import SiteCreate, SiteUpdate

logger = logging.getLogger(__name__)


def site_from_record(record: SiteRecord) -> Site:
    """Convert an ORM row to its API schema."""
    return Site(
        id=record.id,
        name=record.name,
        dev_url=record.dev_url,
        production_url=record.production_url,
        notes=record.notes,
        created_at=ensure_utc(record.created_at),
        updated_at=ensure_utc(record.updated_at),
    )


async def list_sites(session: AsyncSession) -> list[Site]:
    """List all sites, newest first."""
    stmt = select(SiteRecord).order_by(SiteRecord.created_at.desc())
    result = await session.execute(stmt)
    return [site_from_record(r) for r in result.scalars().all()]


async def get_site(session: AsyncSession, site_id: str) -> Site | None:
    """Get a single site by ID."""
    record = await session.get(SiteRecord, site_id)
    if record is None:
        return None
    return site_from_record(record)


async def create_site(session: AsyncSession, data: SiteCreate) -> Site:
    """Create a site."""
    now = now_utc()
    record = SiteRecord(
        name=data.name,
        dev_url=data.dev_url,
        production_url=data.production_url,
        notes=data.notes,
        created_at=now,
        updated_at=now,
    )
    session.add(record)
    await session.flush()
    logger.info("Created site %s (%s)", record.id, record.name)
    return site_from_record(record)


async def update_site(session: AsyncSession, site_id: str, data: SiteUpdate) -> Site | None:
    """Update a site's fields. Returns None if not found."""
    record = await session.get(SiteRecord, site_id)
    if record is None:
        return None
    record.name = data.name
    record.dev_url = data.dev_url
    record.production_url = data.production_url
    record.notes = data.notes
    record.updated_at = now_utc()
    await session.flush()
    return site_from_record(record)


async def delete_site(session: AsyncSession, site_id: str) -> bool:
    """Delete a site together with its sitemap and content pages.

    Returns False if not found.
    """
    record = await session.get(SiteRecord, site_id)
    if record is None:
        return False

    await session.execute(delete(SitemapRecord).where(SitemapRecord.site_id == site_id))
    await session.execute(delete(ContentPageRecord).where(ContentPageRecord.site_id == site_id))
    await session.delete(record)
    await session.flush()
    logger.info("Deleted site %s", site_id)
    return True
