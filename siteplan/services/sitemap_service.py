"""Sitemap service: persistence of the page tree and edits composed from the mutator.

The tree is read, edited with the pure functions in ``tree_mutator`` and
written back whole. Concurrent edits are last-write-wins.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import delete, select

from siteplan.exceptions import InternalServerError, InvalidMoveError
from siteplan.models.site import SitemapRecord
from siteplan.schemas.sitemap import Sitemap, SitemapPage
from siteplan.services.datetime_service import ensure_utc, now_utc
from siteplan.services.sitemap_tree import (
    create_sitemap_page,
    find_page,
    has_linked_content,
    validate_unique_ids,
)
from siteplan.services.tree_mutator import (
    insert_page,
    move_page,
    remove_page,
    renumber_order,
    update_page,
    would_create_cycle,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from siteplan.schemas.content_page import ContentPage
    from siteplan.schemas.sitemap import LinkContentPage, SitemapMove, SitemapPageCreate

logger = logging.getLogger(__name__)

_PAGES_ADAPTER: TypeAdapter[list[SitemapPage]] = TypeAdapter(list[SitemapPage])


def load_pages(raw: str) -> list[SitemapPage]:
    """Parse the stored JSON tree."""
    return _PAGES_ADAPTER.validate_json(raw)


def dump_pages(pages: Sequence[SitemapPage]) -> str:
    """Serialize a tree for storage (camelCase keys)."""
    return _PAGES_ADAPTER.dump_json(list(pages), by_alias=True).decode("utf-8")


def sitemap_from_record(record: SitemapRecord) -> Sitemap:
    """Convert an ORM row to its API schema.

    Raises InternalServerError if the stored tree cannot be parsed.
    """
    try:
        pages = load_pages(record.pages)
    except ValidationError as exc:
        raise InternalServerError(f"Corrupt sitemap for site {record.site_id}: {exc}") from exc
    return Sitemap(
        id=record.id,
        site_id=record.site_id,
        pages=pages,
        created_at=ensure_utc(record.created_at),
        updated_at=ensure_utc(record.updated_at),
    )


async def _get_record(session: AsyncSession, site_id: str) -> SitemapRecord | None:
    stmt = select(SitemapRecord).where(SitemapRecord.site_id == site_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_sitemap(session: AsyncSession, site_id: str) -> Sitemap:
    """Get a site's sitemap, creating an empty one on first read."""
    record = await _get_record(session, site_id)
    if record is None:
        now = now_utc()
        record = SitemapRecord(site_id=site_id, pages="[]", created_at=now, updated_at=now)
        session.add(record)
        await session.flush()
        logger.info("Created empty sitemap for site %s", site_id)
    return sitemap_from_record(record)


async def save_sitemap(
    session: AsyncSession, site_id: str, pages: Sequence[SitemapPage]
) -> Sitemap:
    """Replace a site's page tree.

    ``order`` and ``parent_id`` are rewritten from the tree structure before
    storing. Raises ValueError if a page id occurs twice.
    """
    validate_unique_ids(pages)
    normalized = renumber_order(pages)
    now = now_utc()
    record = await _get_record(session, site_id)
    if record is None:
        record = SitemapRecord(site_id=site_id, created_at=now)
        session.add(record)
    record.pages = dump_pages(normalized)
    record.updated_at = now
    await session.flush()
    return sitemap_from_record(record)


async def delete_sitemap(session: AsyncSession, site_id: str) -> bool:
    """Delete a site's sitemap. Returns False if it did not exist."""
    result = await session.execute(delete(SitemapRecord).where(SitemapRecord.site_id == site_id))
    await session.flush()
    return bool(result.rowcount)


async def add_page(
    session: AsyncSession, site_id: str, body: SitemapPageCreate
) -> tuple[Sitemap, SitemapPage] | None:
    """Add a new node. Returns None if the requested target does not exist."""
    sitemap = await get_sitemap(session, site_id)
    if body.target_id and find_page(sitemap.pages, body.target_id) is None:
        return None
    page = create_sitemap_page(
        body.title,
        body.url,
        parent_id=body.target_id if body.position == "child" else None,
        content_page_id=body.content_page_id,
    )
    pages = insert_page(sitemap.pages, page, body.target_id, body.position)
    saved = await save_sitemap(session, site_id, pages)
    return saved, find_page(saved.pages, page.id) or page


async def edit_page(
    session: AsyncSession, site_id: str, page_id: str, changes: Mapping[str, Any]
) -> tuple[Sitemap, SitemapPage] | None:
    """Edit a node's title, url or content link. Returns None if not found."""
    sitemap = await get_sitemap(session, site_id)
    if find_page(sitemap.pages, page_id) is None:
        return None
    pages = update_page(sitemap.pages, page_id, changes)
    saved = await save_sitemap(session, site_id, pages)
    edited = find_page(saved.pages, page_id)
    if edited is None:
        return None
    return saved, edited


async def delete_page(session: AsyncSession, site_id: str, page_id: str) -> Sitemap | None:
    """Delete a node and all of its descendants. Returns None if not found."""
    sitemap = await get_sitemap(session, site_id)
    if find_page(sitemap.pages, page_id) is None:
        return None
    return await save_sitemap(session, site_id, remove_page(sitemap.pages, page_id))


async def move_page_in_sitemap(
    session: AsyncSession, site_id: str, body: SitemapMove
) -> Sitemap:
    """Move a subtree relative to another node.

    Unknown ids leave the sitemap unchanged. Raises InvalidMoveError if the
    target is the dragged page or one of its descendants.
    """
    sitemap = await get_sitemap(session, site_id)
    if find_page(sitemap.pages, body.dragged_id) is not None and would_create_cycle(
        sitemap.pages, body.dragged_id, body.target_id
    ):
        raise InvalidMoveError(body.dragged_id, body.target_id)
    pages = move_page(sitemap.pages, body.dragged_id, body.target_id, body.position)
    if pages == sitemap.pages:
        return sitemap
    return await save_sitemap(session, site_id, pages)


async def link_content_page(
    session: AsyncSession,
    site_id: str,
    content_page: ContentPage,
    body: LinkContentPage,
) -> tuple[Sitemap, SitemapPage, bool] | None:
    """Add a node for an existing content page.

    Returns ``(sitemap, page, already_linked)``; ``already_linked`` reports
    that another node references the same content page, which is allowed
    but usually worth a warning. Returns None if the target does not exist.
    """
    sitemap = await get_sitemap(session, site_id)
    if body.target_id and find_page(sitemap.pages, body.target_id) is None:
        return None
    already_linked = has_linked_content(sitemap.pages, content_page.id)
    if already_linked:
        logger.warning(
            "Content page %s is already linked in the sitemap of site %s",
            content_page.id,
            site_id,
        )
    page = create_sitemap_page(
        content_page.title,
        content_page.url,
        parent_id=body.target_id if body.position == "child" else None,
        content_page_id=content_page.id,
    )
    pages = insert_page(sitemap.pages, page, body.target_id, body.position)
    saved = await save_sitemap(session, site_id, pages)
    return saved, find_page(saved.pages, page.id) or page, already_linked
