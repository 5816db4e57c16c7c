"""Content page service: CRUD over content page records.

Content pages live independently of the sitemap. Deleting one leaves any
sitemap nodes that reference it in place (their link dangles).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from siteplan.exceptions import DuplicateUrlError
from siteplan.models.site import ContentPageRecord
from siteplan.schemas.content_page import ContentPage
from siteplan.services.datetime_service import ensure_utc, now_utc

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from siteplan.schemas.content_page import ContentPageWrite, ContentStatus

logger = logging.getLogger(__name__)


def content_page_from_record(record: ContentPageRecord) -> ContentPage:
    """Convert an ORM row to its API schema."""
    return ContentPage(
        id=record.id,
        site_id=record.site_id,
        title=record.title,
        url=record.url,
        meta_description=record.meta_description,
        content=record.content,
        content_html=record.content_html,
        status="published" if record.status == "published" else "draft",
        created_at=ensure_utc(record.created_at),
        updated_at=ensure_utc(record.updated_at),
    )


async def list_content_pages(
    session: AsyncSession,
    site_id: str,
    status: ContentStatus | None = None,
) -> list[ContentPage]:
    """List a site's content pages, newest first, optionally filtered by status."""
    stmt = select(ContentPageRecord).where(ContentPageRecord.site_id == site_id)
    if status is not None:
        stmt = stmt.where(ContentPageRecord.status == status)
    stmt = stmt.order_by(ContentPageRecord.created_at.desc())
    result = await session.execute(stmt)
    return [content_page_from_record(r) for r in result.scalars().all()]


async def _get_record(
    session: AsyncSession, site_id: str, page_id: str
) -> ContentPageRecord | None:
    record = await session.get(ContentPageRecord, page_id)
    if record is None or record.site_id != site_id:
        return None
    return record


async def get_content_page(
    session: AsyncSession, site_id: str, page_id: str
) -> ContentPage | None:
    """Get a single content page of a site."""
    record = await _get_record(session, site_id, page_id)
    if record is None:
        return None
    return content_page_from_record(record)


async def _ensure_url_available(
    session: AsyncSession, site_id: str, url: str, exclude_id: str | None = None
) -> None:
    """Raise DuplicateUrlError if another page of the site already uses url."""
    stmt = select(ContentPageRecord.id).where(
        ContentPageRecord.site_id == site_id, ContentPageRecord.url == url
    )
    if exclude_id is not None:
        stmt = stmt.where(ContentPageRecord.id != exclude_id)
    result = await session.execute(stmt.limit(1))
    if result.first() is not None:
        raise DuplicateUrlError(url)


async def _flush_checked(session: AsyncSession, url: str) -> None:
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateUrlError(url) from exc


async def create_content_page(
    session: AsyncSession, site_id: str, data: ContentPageWrite
) -> ContentPage:
    """Create a content page.

    Raises DuplicateUrlError if the site already has a page at that URL.
    """
    await _ensure_url_available(session, site_id, data.url)
    now = now_utc()
    record = ContentPageRecord(
        site_id=site_id,
        title=data.title,
        url=data.url,
        meta_description=data.meta_description,
        content=data.content,
        content_html=data.content_html,
        status=data.status,
        created_at=now,
        updated_at=now,
    )
    session.add(record)
    await _flush_checked(session, data.url)
    logger.info("Created content page %s for site %s", record.id, site_id)
    return content_page_from_record(record)


async def update_content_page(
    session: AsyncSession, site_id: str, page_id: str, data: ContentPageWrite
) -> ContentPage | None:
    """Replace a content page's fields. Returns None if not found.

    Raises DuplicateUrlError if another page of the site uses the new URL.
    """
    record = await _get_record(session, site_id, page_id)
    if record is None:
        return None
    await _ensure_url_available(session, site_id, data.url, exclude_id=page_id)
    record.title = data.title
    record.url = data.url
    record.meta_description = data.meta_description
    record.content = data.content
    record.content_html = data.content_html
    record.status = data.status
    record.updated_at = now_utc()
    await _flush_checked(session, data.url)
    return content_page_from_record(record)


async def delete_content_page(session: AsyncSession, site_id: str, page_id: str) -> bool:
    """Delete a content page. Returns False if not found.

    Sitemap nodes linked to the page are not touched.
    """
    record = await _get_record(session, site_id, page_id)
    if record is None:
        return False
    await session.delete(record)
    await session.flush()
    logger.info("Deleted content page %s of site %s", page_id, site_id)
    return True
