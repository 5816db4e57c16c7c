"""Property-based tests for sitemap tree edits."""

from __future__ import annotations

from collections import Counter

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from siteplan.schemas.sitemap import PagePosition, SitemapPage
from siteplan.services.sitemap_tree import collect_ids, count_pages, find_page, iter_pages
from siteplan.services.tree_mutator import (
    insert_page,
    move_page,
    remove_page,
    renumber_order,
    would_create_cycle,
)
from tests.factories import make_page

PROPERTY_SETTINGS = settings(
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

_POSITION = st.sampled_from(["before", "after", "child"])


@st.composite
def _forests(draw: st.DrawFn, min_size: int = 1, max_size: int = 12) -> list[SitemapPage]:
    """Draw a forest with unique ids ``p0..pN``.

    Each node after the first picks an earlier node as parent (or the root),
    which keeps the structure acyclic.
    """
    size = draw(st.integers(min_value=min_size, max_value=max_size))
    parents: list[int | None] = [None]
    parents.extend(
        draw(st.one_of(st.none(), st.integers(min_value=0, max_value=i - 1)))
        for i in range(1, size)
    )

    def _build(parent: int | None) -> list[SitemapPage]:
        return [make_page(f"p{i}", _build(i)) for i in range(size) if parents[i] == parent]

    return _build(None)


def _parent_map(pages: list[SitemapPage]) -> dict[str, str | None]:
    result: dict[str, str | None] = {}

    def _walk(level: list[SitemapPage], parent_id: str | None) -> None:
        for page in level:
            result[page.id] = parent_id
            _walk(page.children, page.id)

    _walk(pages, None)
    return result


class TestRemoveProperties:
    @PROPERTY_SETTINGS
    @given(data=st.data(), pages=_forests())
    def test_removes_exactly_the_subtree(
        self, data: st.DataObject, pages: list[SitemapPage]
    ) -> None:
        page_id = data.draw(st.sampled_from(collect_ids(pages)))
        subtree = find_page(pages, page_id)
        assert subtree is not None

        result = remove_page(pages, page_id)

        assert set(collect_ids(result)) == set(collect_ids(pages)) - set(collect_ids([subtree]))

    @PROPERTY_SETTINGS
    @given(data=st.data(), pages=_forests())
    def test_remove_is_idempotent(self, data: st.DataObject, pages: list[SitemapPage]) -> None:
        page_id = data.draw(st.sampled_from(collect_ids(pages)))
        once = remove_page(pages, page_id)
        assert remove_page(once, page_id) == once

    @PROPERTY_SETTINGS
    @given(pages=_forests())
    def test_removing_unknown_id_keeps_forest(self, pages: list[SitemapPage]) -> None:
        assert remove_page(pages, "missing") == pages


class TestInsertProperties:
    @PROPERTY_SETTINGS
    @given(data=st.data(), pages=_forests())
    def test_insert_then_remove_restores_forest(
        self, data: st.DataObject, pages: list[SitemapPage]
    ) -> None:
        target_id = data.draw(st.sampled_from(collect_ids(pages)))
        position: PagePosition = data.draw(_POSITION)
        new_page = make_page("new")

        inserted = insert_page(pages, new_page, target_id, position)

        assert count_pages(inserted) == count_pages(pages) + 1
        assert find_page(inserted, "new") == new_page
        assert remove_page(inserted, "new") == pages

    @PROPERTY_SETTINGS
    @given(data=st.data(), pages=_forests())
    def test_child_insert_lands_last_under_target(
        self, data: st.DataObject, pages: list[SitemapPage]
    ) -> None:
        target_id = data.draw(st.sampled_from(collect_ids(pages)))
        inserted = insert_page(pages, make_page("new"), target_id, "child")
        target = find_page(inserted, target_id)
        assert target is not None
        assert target.children[-1].id == "new"


class TestMoveProperties:
    @PROPERTY_SETTINGS
    @given(data=st.data(), pages=_forests(min_size=2))
    def test_move_preserves_every_page(
        self, data: st.DataObject, pages: list[SitemapPage]
    ) -> None:
        ids = collect_ids(pages)
        dragged_id = data.draw(st.sampled_from(ids))
        target_id = data.draw(st.sampled_from(ids))
        position: PagePosition = data.draw(_POSITION)

        result = move_page(pages, dragged_id, target_id, position)

        assert Counter(p.id for p, _ in iter_pages(result)) == Counter(ids)

    @PROPERTY_SETTINGS
    @given(data=st.data(), pages=_forests(min_size=2))
    def test_cyclic_moves_are_rejected_and_others_relocate(
        self, data: st.DataObject, pages: list[SitemapPage]
    ) -> None:
        ids = collect_ids(pages)
        dragged_id = data.draw(st.sampled_from(ids))
        target_id = data.draw(st.sampled_from(ids))

        result = move_page(pages, dragged_id, target_id, "child")

        if would_create_cycle(pages, dragged_id, target_id):
            assert result == pages
        else:
            assert _parent_map(result)[dragged_id] == target_id

    @PROPERTY_SETTINGS
    @given(data=st.data(), pages=_forests(min_size=2))
    def test_moved_subtree_is_unchanged(
        self, data: st.DataObject, pages: list[SitemapPage]
    ) -> None:
        ids = collect_ids(pages)
        dragged_id = data.draw(st.sampled_from(ids))
        target_id = data.draw(st.sampled_from(ids))
        position: PagePosition = data.draw(_POSITION)

        result = move_page(pages, dragged_id, target_id, position)

        assert find_page(result, dragged_id) == find_page(pages, dragged_id)


class TestRenumberProperties:
    @PROPERTY_SETTINGS
    @given(pages=_forests())
    def test_parent_ids_match_containment(self, pages: list[SitemapPage]) -> None:
        result = renumber_order(pages)
        parents = _parent_map(result)
        for page, _depth in iter_pages(result):
            assert page.parent_id == parents[page.id]
            for index, child in enumerate(page.children):
                assert child.order == index


class TestLookupProperties:
    @PROPERTY_SETTINGS
    @given(pages=_forests())
    def test_find_page_resolves_every_id(self, pages: list[SitemapPage]) -> None:
        for page_id in collect_ids(pages):
            found = find_page(pages, page_id)
            assert found is not None
            assert found.id == page_id
