"""Sitemap tree edits as pure functions.

Every function returns a new forest and leaves its input untouched, so
callers can compare the old and new trees for change detection. Subtrees
that an edit does not touch are shared between the two. A missing page or
target id is never an error: the result is simply equal to the input.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from siteplan.services.datetime_service import now_utc
from siteplan.services.sitemap_tree import find_page, is_descendant

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from siteplan.schemas.sitemap import PagePosition, SitemapPage

logger = logging.getLogger(__name__)

_POSITIONS = ("before", "after", "child")
EDITABLE_FIELDS = frozenset({"title", "url", "content_page_id"})


def _remove(pages: Sequence[SitemapPage], page_id: str) -> list[SitemapPage] | None:
    """Return the forest without page_id, or None if it was not found."""
    for index, page in enumerate(pages):
        if page.id == page_id:
            return [*pages[:index], *pages[index + 1 :]]
    for index, page in enumerate(pages):
        children = _remove(page.children, page_id)
        if children is not None:
            updated = list(pages)
            updated[index] = page.model_copy(update={"children": children})
            return updated
    return None


def remove_page(pages: Sequence[SitemapPage], page_id: str) -> list[SitemapPage]:
    """Remove a page and its whole subtree from anywhere in the forest."""
    result = _remove(pages, page_id)
    return list(pages) if result is None else result


def _insert(
    pages: Sequence[SitemapPage],
    page: SitemapPage,
    target_id: str,
    position: PagePosition,
) -> list[SitemapPage] | None:
    """Return the forest with page placed relative to target_id, or None."""
    for index, candidate in enumerate(pages):
        if candidate.id != target_id:
            continue
        updated = list(pages)
        if position == "before":
            updated.insert(index, page)
        elif position == "after":
            updated.insert(index + 1, page)
        else:
            updated[index] = candidate.model_copy(
                update={"children": [*candidate.children, page]}
            )
        return updated
    for index, candidate in enumerate(pages):
        children = _insert(candidate.children, page, target_id, position)
        if children is not None:
            updated = list(pages)
            updated[index] = candidate.model_copy(update={"children": children})
            return updated
    return None


def insert_page(
    pages: Sequence[SitemapPage],
    page: SitemapPage,
    target_id: str | None = None,
    position: PagePosition = "after",
) -> list[SitemapPage]:
    """Insert a page before, after, or as the last child of target_id.

    Without a target the page is appended to the root level, whatever the
    position. An unknown target leaves the forest unchanged.

    Raises ValueError for an unknown position.
    """
    if position not in _POSITIONS:
        raise ValueError(f"Invalid position: {position!r}")
    if not target_id:
        return [*pages, page]
    result = _insert(pages, page, target_id, position)
    if result is None:
        logger.debug("Insert target %s not found; sitemap unchanged", target_id)
        return list(pages)
    return result


def would_create_cycle(pages: Sequence[SitemapPage], dragged_id: str, target_id: str) -> bool:
    """Check whether placing dragged_id relative to target_id is impossible.

    True when the target is the dragged page itself or lies inside its
    subtree: removing the dragged subtree would also remove the target.
    """
    if dragged_id == target_id:
        return True
    return is_descendant(pages, dragged_id, target_id)


def move_page(
    pages: Sequence[SitemapPage],
    dragged_id: str,
    target_id: str,
    position: PagePosition,
) -> list[SitemapPage]:
    """Move a page (with its subtree) before, after, or into target_id.

    Equivalent to removing the dragged subtree and inserting the captured
    copy at the target. Moves onto the page's own subtree are rejected and
    leave the forest unchanged; use ``would_create_cycle`` to tell a
    rejection apart from a no-op.
    """
    if position not in _POSITIONS:
        raise ValueError(f"Invalid position: {position!r}")
    dragged = find_page(pages, dragged_id)
    if dragged is None:
        logger.warning("Dragged page not found: %s", dragged_id)
        return list(pages)
    if would_create_cycle(pages, dragged_id, target_id):
        logger.warning(
            "Rejected move of %s into its own subtree (target %s)", dragged_id, target_id
        )
        return list(pages)
    if find_page(pages, target_id) is None:
        logger.warning("Move target not found: %s", target_id)
        return list(pages)

    without_dragged = remove_page(pages, dragged_id)
    return insert_page(without_dragged, dragged, target_id, position)


def _replace(
    pages: Sequence[SitemapPage],
    page_id: str,
    transform: Callable[[SitemapPage], SitemapPage],
) -> list[SitemapPage] | None:
    for index, page in enumerate(pages):
        if page.id == page_id:
            updated = list(pages)
            updated[index] = transform(page)
            return updated
        children = _replace(page.children, page_id, transform)
        if children is not None:
            updated = list(pages)
            updated[index] = page.model_copy(update={"children": children})
            return updated
    return None


def update_page(
    pages: Sequence[SitemapPage],
    page_id: str,
    changes: Mapping[str, Any],
) -> list[SitemapPage]:
    """Edit a page's title, url, or content link and bump its updated_at.

    Only the edited node is touched; an unknown id leaves the forest
    unchanged. Raises ValueError for fields that are not editable.
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
    if not changes:
        return list(pages)

    def _apply(page: SitemapPage) -> SitemapPage:
        return page.model_copy(update={**changes, "updated_at": now_utc()})

    result = _replace(pages, page_id, _apply)
    return list(pages) if result is None else result


def renumber_order(
    pages: Sequence[SitemapPage], parent_id: str | None = None
) -> list[SitemapPage]:
    """Sync the informational ``order`` and ``parent_id`` fields with containment.

    ``order`` becomes the sibling index and ``parent_id`` the id of the
    containing node (None at the root). Timestamps are not touched.
    """
    return [
        page.model_copy(
            update={
                "order": index,
                "parent_id": parent_id,
                "children": renumber_order(page.children, page.id),
            }
        )
        for index, page in enumerate(pages)
    ]
