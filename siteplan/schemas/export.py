"""WordPress export schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from siteplan.schemas.common import CamelModel

ExportFormat = Literal["wxr", "json", "backup"]


class ExportPost(CamelModel):
    """A normalized WordPress post record produced by the export assembler."""

    id: int
    title: str
    content: str = ""
    excerpt: str = ""
    status: Literal["publish", "draft", "private"] = "draft"
    type: Literal["post", "page"] = "page"
    slug: str
    date: str
    author: str = "admin"
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    parent_id: int | None = None
    menu_order: int = 0
    meta_description: str | None = None


class ExportTerm(CamelModel):
    """A category or tag definition."""

    id: int
    name: str
    slug: str
    description: str = ""


class ExportSiteInfo(CamelModel):
    """Channel-level site metadata."""

    name: str
    url: str
    description: str
    language: str
    export_date: str


class ExportData(CamelModel):
    """A complete export: site metadata plus the flat post list."""

    site: ExportSiteInfo
    posts: list[ExportPost] = Field(default_factory=list)
    categories: list[ExportTerm] = Field(default_factory=list)
    tags: list[ExportTerm] = Field(default_factory=list)


class ExportStats(CamelModel):
    """Summary counts for an assembled export."""

    total_pages: int = Field(default=0, ge=0)
    published_pages: int = Field(default=0, ge=0)
    draft_pages: int = Field(default=0, ge=0)
    pages_with_content: int = Field(default=0, ge=0)
    export_date: str


class ExportSiteSummary(CamelModel):
    """Site identity shown in an export preview."""

    id: str
    name: str
    url: str


class ExportPreview(CamelModel):
    """Export preview: what a download would contain."""

    site: ExportSiteSummary
    stats: ExportStats
    has_sitemap: bool
    has_content: bool
    dangling_links: int = Field(default=0, ge=0)
