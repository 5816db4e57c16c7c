"""Export assembly: flatten a sitemap tree and its content into WordPress posts."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Literal

from siteplan.schemas.export import ExportData, ExportPost, ExportSiteInfo, ExportStats
from siteplan.services.datetime_service import format_iso, now_utc

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from siteplan.schemas.content_page import ContentPage
    from siteplan.schemas.site import Site
    from siteplan.schemas.sitemap import SitemapPage

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Exported from Content Entry System"
DEFAULT_LANGUAGE = "en-US"
DEFAULT_AUTHOR = "admin"
DEFAULT_SITE_URL = "https://example.com"

_FILENAME_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def generate_slug(url: str) -> str:
    """Derive a WordPress post_name from a site-relative URL.

    Strips one leading and one trailing slash; the site root becomes "home".
    """
    return url.removeprefix("/").removesuffix("/") or "home"


def site_export_url(site: Site, default: str = DEFAULT_SITE_URL) -> str:
    """Pick the URL a site is exported under: production, then dev, then default."""
    return site.production_url or site.dev_url or default


def export_filename(site_name: str, suffix: str, extension: str) -> str:
    """Build a download filename, replacing non-alphanumeric characters with ``_``."""
    return f"{_FILENAME_UNSAFE.sub('_', site_name)}_{suffix}.{extension}"


def _content_fields(content_page: ContentPage | None) -> tuple[str, str, str | None]:
    """Return (content_html, excerpt, meta_description) for a node's content page.

    A missing or malformed page yields empty strings so that one bad page
    cannot abort the export of the rest of the site.
    """
    if content_page is None:
        return "", "", None
    html = content_page.content_html
    if html is not None and not isinstance(html, str):
        logger.warning("Ignoring malformed HTML for content page %s", content_page.id)
        html = None
    meta = content_page.meta_description
    if meta is not None and not isinstance(meta, str):
        logger.warning("Ignoring malformed meta description for content page %s", content_page.id)
        meta = None
    return html or "", meta or "", meta


def _post_status(content_page: ContentPage | None) -> Literal["publish", "draft"]:
    return "publish" if content_page and content_page.status == "published" else "draft"


def generate_export_data(
    pages: Sequence[SitemapPage],
    content_pages: Sequence[ContentPage],
    site_name: str,
    site_url: str,
    *,
    description: str = DEFAULT_DESCRIPTION,
    language: str = DEFAULT_LANGUAGE,
    author: str = DEFAULT_AUTHOR,
    export_date: datetime | None = None,
) -> ExportData:
    """Convert a sitemap tree plus content pages into a flat, ordered post list.

    Posts are emitted in pre-order and numbered from 1 in that order, so a
    parent's id is always assigned before its children refer to it via
    ``parent_id``. ``menu_order`` is the position among siblings. Nodes
    without a (resolvable) content page become empty drafts.
    """
    content_by_id = {cp.id: cp for cp in content_pages}
    posts: list[ExportPost] = []

    def _process(level: Sequence[SitemapPage], parent_id: int | None) -> None:
        for index, page in enumerate(level):
            content_page = (
                content_by_id.get(page.content_page_id) if page.content_page_id else None
            )
            content, excerpt, meta_description = _content_fields(content_page)
            post = ExportPost(
                id=len(posts) + 1,
                title=page.title,
                content=content,
                excerpt=excerpt,
                status=_post_status(content_page),
                type="page",
                slug=generate_slug(page.url),
                date=format_iso(content_page.updated_at if content_page else page.updated_at),
                author=author,
                parent_id=parent_id,
                menu_order=index,
                meta_description=meta_description,
            )
            posts.append(post)
            if page.children:
                _process(page.children, post.id)

    _process(pages, None)

    return ExportData(
        site=ExportSiteInfo(
            name=site_name,
            url=site_url,
            description=description,
            language=language,
            export_date=format_iso(export_date or now_utc()),
        ),
        posts=posts,
        categories=[],
        tags=[],
    )


def get_export_stats(export_data: ExportData) -> ExportStats:
    """Count pages by status and by whether they carry any content."""
    page_posts = [p for p in export_data.posts if p.type == "page"]
    return ExportStats(
        total_pages=len(page_posts),
        published_pages=sum(1 for p in page_posts if p.status == "publish"),
        draft_pages=sum(1 for p in page_posts if p.status == "draft"),
        pages_with_content=sum(1 for p in export_data.posts if p.content.strip()),
        export_date=export_data.site.export_date,
    )


def empty_export_stats() -> ExportStats:
    """Stats for a site with nothing to export."""
    return ExportStats(export_date=format_iso(now_utc()))
