"""Tests for sitemap persistence and edits."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from siteplan.exceptions import InternalServerError, InvalidMoveError
from siteplan.models.site import SitemapRecord
from siteplan.schemas.site import SiteCreate
from siteplan.schemas.sitemap import LinkContentPage, SitemapMove, SitemapPageCreate
from siteplan.services.site_service import create_site
from siteplan.services.sitemap_service import (
    add_page,
    delete_page,
    delete_sitemap,
    dump_pages,
    edit_page,
    get_sitemap,
    link_content_page,
    load_pages,
    move_page_in_sitemap,
    save_sitemap,
)
from tests.factories import make_content_page, make_page, shape

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


@pytest.fixture
async def site_id(db_session: AsyncSession) -> str:
    site = await create_site(db_session, SiteCreate(name="Acme"))
    await db_session.commit()
    return site.id


class TestPageStorage:
    def test_dump_uses_camel_case(self) -> None:
        raw = dump_pages([make_page("a", content_page_id="cp1")])
        assert '"contentPageId":"cp1"' in raw
        assert '"createdAt"' in raw

    def test_load_reads_dump(self) -> None:
        pages = [make_page("a", [make_page("b")])]
        assert load_pages(dump_pages(pages)) == pages

    async def test_corrupt_tree_is_internal_error(
        self, db_session: AsyncSession, site_id: str
    ) -> None:
        db_session.add(SitemapRecord(site_id=site_id, pages="{not json"))
        await db_session.flush()
        with pytest.raises(InternalServerError):
            await get_sitemap(db_session, site_id)


class TestGetAndSave:
    async def test_lazy_create(self, db_session: AsyncSession, site_id: str) -> None:
        first = await get_sitemap(db_session, site_id)
        second = await get_sitemap(db_session, site_id)
        assert first.pages == []
        assert first.id == second.id

    async def test_save_renumbers(self, db_session: AsyncSession, site_id: str) -> None:
        saved = await save_sitemap(
            db_session, site_id, [make_page("a", [make_page("b"), make_page("c")])]
        )
        b, c = saved.pages[0].children
        assert (b.parent_id, b.order) == ("a", 0)
        assert (c.parent_id, c.order) == ("a", 1)

        reloaded = await get_sitemap(db_session, site_id)
        assert reloaded.pages == saved.pages

    async def test_save_rejects_duplicate_ids(
        self, db_session: AsyncSession, site_id: str
    ) -> None:
        with pytest.raises(ValueError, match="Duplicate sitemap page id: a"):
            await save_sitemap(db_session, site_id, [make_page("a", [make_page("a")])])

    async def test_delete(self, db_session: AsyncSession, site_id: str) -> None:
        await get_sitemap(db_session, site_id)
        assert await delete_sitemap(db_session, site_id) is True
        assert await delete_sitemap(db_session, site_id) is False


class TestEdits:
    async def test_add_page_as_child(self, db_session: AsyncSession, site_id: str) -> None:
        await save_sitemap(db_session, site_id, [make_page("a")])
        result = await add_page(
            db_session,
            site_id,
            SitemapPageCreate(title="About", url="/about", target_id="a", position="child"),
        )
        assert result is not None
        sitemap, page = result
        assert page.parent_id == "a"
        assert sitemap.pages[0].children[0].id == page.id

    async def test_add_page_with_missing_target(
        self, db_session: AsyncSession, site_id: str
    ) -> None:
        result = await add_page(
            db_session, site_id, SitemapPageCreate(title="X", url="/x", target_id="nope")
        )
        assert result is None

    async def test_edit_page(self, db_session: AsyncSession, site_id: str) -> None:
        await save_sitemap(db_session, site_id, [make_page("a")])
        result = await edit_page(db_session, site_id, "a", {"title": "Home"})
        assert result is not None
        assert result[1].title == "Home"
        assert await edit_page(db_session, site_id, "nope", {"title": "X"}) is None

    async def test_delete_page(self, db_session: AsyncSession, site_id: str) -> None:
        await save_sitemap(db_session, site_id, [make_page("a", [make_page("b")]), make_page("c")])
        sitemap = await delete_page(db_session, site_id, "a")
        assert sitemap is not None
        assert shape(sitemap.pages) == ["c"]
        assert await delete_page(db_session, site_id, "a") is None

    async def test_move(self, db_session: AsyncSession, site_id: str) -> None:
        await save_sitemap(db_session, site_id, [make_page("a"), make_page("b")])
        sitemap = await move_page_in_sitemap(
            db_session, site_id, SitemapMove(dragged_id="b", target_id="a", position="before")
        )
        assert shape(sitemap.pages) == ["b", "a"]
        assert [p.order for p in sitemap.pages] == [0, 1]

    async def test_cyclic_move_raises(self, db_session: AsyncSession, site_id: str) -> None:
        await save_sitemap(db_session, site_id, [make_page("a", [make_page("b")])])
        with pytest.raises(InvalidMoveError) as exc_info:
            await move_page_in_sitemap(
                db_session, site_id, SitemapMove(dragged_id="a", target_id="b", position="child")
            )
        assert exc_info.value.dragged_id == "a"
        assert shape((await get_sitemap(db_session, site_id)).pages) == [("a", ["b"])]

    async def test_noop_move_keeps_timestamp(
        self, db_session: AsyncSession, site_id: str
    ) -> None:
        saved = await save_sitemap(db_session, site_id, [make_page("a")])
        sitemap = await move_page_in_sitemap(
            db_session, site_id, SitemapMove(dragged_id="x", target_id="a", position="after")
        )
        assert sitemap.updated_at == saved.updated_at

    async def test_link_content_page(self, db_session: AsyncSession, site_id: str) -> None:
        content = make_content_page("cp1")
        first = await link_content_page(
            db_session, site_id, content, LinkContentPage(content_page_id="cp1")
        )
        assert first is not None
        sitemap, page, already_linked = first
        assert already_linked is False
        assert page.title == content.title
        assert page.url == content.url
        assert page.content_page_id == "cp1"

        second = await link_content_page(
            db_session, site_id, content, LinkContentPage(content_page_id="cp1")
        )
        assert second is not None
        assert second[2] is True
        assert len(second[0].pages) == 2
