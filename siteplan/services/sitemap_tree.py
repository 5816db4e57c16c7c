"""Sitemap tree queries: read-only traversal over the page forest."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from siteplan.schemas.sitemap import SitemapPage
from siteplan.services.datetime_service import now_utc

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator, Sequence


def create_sitemap_page(
    title: str,
    url: str,
    parent_id: str | None = None,
    content_page_id: str | None = None,
) -> SitemapPage:
    """Create a detached sitemap node with a fresh id."""
    now = now_utc()
    return SitemapPage(
        id=str(uuid.uuid4()),
        title=title,
        url=url,
        content_page_id=content_page_id,
        children=[],
        parent_id=parent_id,
        order=0,
        created_at=now,
        updated_at=now,
    )


def iter_pages(
    pages: Sequence[SitemapPage], depth: int = 0
) -> Iterator[tuple[SitemapPage, int]]:
    """Yield ``(page, depth)`` for every node in pre-order."""
    for page in pages:
        yield page, depth
        yield from iter_pages(page.children, depth + 1)


def find_page(pages: Sequence[SitemapPage], page_id: str) -> SitemapPage | None:
    """Find a node anywhere in the forest. Returns None if absent."""
    for page in pages:
        if page.id == page_id:
            return page
        found = find_page(page.children, page_id)
        if found is not None:
            return found
    return None


def has_linked_content(pages: Sequence[SitemapPage], content_page_id: str) -> bool:
    """Return True if any node references the given content page."""
    for page in pages:
        if page.content_page_id == content_page_id:
            return True
        if has_linked_content(page.children, content_page_id):
            return True
    return False


def count_pages(pages: Sequence[SitemapPage]) -> int:
    """Count all nodes in the forest."""
    return sum(1 for _ in iter_pages(pages))


def is_descendant(pages: Sequence[SitemapPage], ancestor_id: str, candidate_id: str) -> bool:
    """Return True if candidate_id lies strictly inside the subtree of ancestor_id."""
    ancestor = find_page(pages, ancestor_id)
    if ancestor is None:
        return False
    return find_page(ancestor.children, candidate_id) is not None


def find_dangling_links(
    pages: Sequence[SitemapPage], content_page_ids: Collection[str]
) -> list[SitemapPage]:
    """List nodes whose content_page_id names no existing content page.

    Deleting a content page leaves referencing nodes in place; this only
    reports them.
    """
    return [
        page
        for page, _depth in iter_pages(pages)
        if page.content_page_id is not None and page.content_page_id not in content_page_ids
    ]


def collect_ids(pages: Sequence[SitemapPage]) -> list[str]:
    """Return all node ids in pre-order (duplicates included)."""
    return [page.id for page, _depth in iter_pages(pages)]


def validate_unique_ids(pages: Sequence[SitemapPage]) -> None:
    """Fail fast on a structurally corrupt tree.

    Raises ValueError if a node id occurs more than once in the forest.
    """
    seen: set[str] = set()
    for page_id in collect_ids(pages):
        if page_id in seen:
            raise ValueError(f"Duplicate sitemap page id: {page_id}")
        seen.add(page_id)
