"""Sitemap tree schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from siteplan.schemas.common import CamelModel
from siteplan.services.datetime_service import now_utc

PagePosition = Literal["before", "after", "child"]


class SitemapPage(CamelModel):
    """A node of the sitemap tree.

    ``children`` is the authoritative containment; ``parent_id`` and
    ``order`` are informational hints kept in sync by ``renumber_order``.
    ``content_page_id`` is a weak reference and may dangle.
    """

    id: str
    title: str
    url: str
    content_page_id: str | None = None
    children: list[SitemapPage] = Field(default_factory=list)
    parent_id: str | None = None
    order: int = 0
    created_at: datetime = Field(default_factory=now_utc)
    updated_at: datetime = Field(default_factory=now_utc)


class Sitemap(CamelModel):
    """The per-site forest of page nodes."""

    id: str
    site_id: str
    pages: list[SitemapPage] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SitemapUpdate(CamelModel):
    """Request to replace the whole page tree."""

    pages: list[SitemapPage]


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be empty or whitespace-only")
    return v


class SitemapPageCreate(CamelModel):
    """Request to add a new node to the tree."""

    title: str = Field(min_length=1, max_length=500)
    url: str = Field(min_length=1, max_length=2000)
    content_page_id: str | None = None
    target_id: str | None = None
    position: PagePosition = "after"

    @field_validator("title", "url")
    @classmethod
    def strip_text(cls, v: str) -> str:
        _ = cls
        return _strip_required(v)


class SitemapPageUpdate(CamelModel):
    """Request to edit a node's own fields.

    Omitted fields are left untouched; ``content_page_id`` may be set to
    null explicitly to unlink the node.
    """

    title: str | None = Field(default=None, min_length=1, max_length=500)
    url: str | None = Field(default=None, min_length=1, max_length=2000)
    content_page_id: str | None = None

    @field_validator("title", "url")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        _ = cls
        return None if v is None else _strip_required(v)


class SitemapMove(CamelModel):
    """Request to move a subtree relative to a target node."""

    dragged_id: str = Field(min_length=1)
    target_id: str = Field(min_length=1)
    position: PagePosition


class LinkContentPage(CamelModel):
    """Request to add a sitemap node pointing at an existing content page."""

    content_page_id: str = Field(min_length=1)
    target_id: str | None = None
    position: PagePosition = "child"


class SitemapEditResponse(CamelModel):
    """Result of a single tree edit."""

    sitemap: Sitemap
    page: SitemapPage | None = None
    already_linked: bool = False
