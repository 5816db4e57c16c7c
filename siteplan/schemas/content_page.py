"""Content page schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from siteplan.schemas.common import CamelModel

ContentStatus = Literal["draft", "published"]


class ContentPage(CamelModel):
    """An independently stored rich-text page.

    ``content`` is the editor's serialized JSON payload and is never
    interpreted here; ``content_html`` is its rendering, produced by the
    editor on the client.
    """

    id: str
    site_id: str
    title: str
    url: str
    meta_description: str | None = None
    content: str | None = None
    content_html: str | None = None
    status: ContentStatus = "draft"
    created_at: datetime
    updated_at: datetime


class ContentPageWrite(CamelModel):
    """Request body shared by content page create and update."""

    title: str = Field(min_length=1, max_length=500)
    url: str = Field(min_length=1, max_length=2000)
    meta_description: str | None = Field(default=None, max_length=1000)
    content: str | None = Field(default=None, max_length=2_000_000)
    content_html: str | None = Field(default=None, max_length=2_000_000)
    status: ContentStatus = "draft"

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        _ = cls
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("url")
    @classmethod
    def normalize_url(cls, v: str) -> str:
        """Strip whitespace and ensure the URL starts with ``/``."""
        _ = cls
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        return v if v.startswith("/") else f"/{v}"

    @field_validator("meta_description")
    @classmethod
    def strip_meta_description(cls, v: str | None) -> str | None:
        _ = cls
        if v is None:
            return None
        return v.strip() or None


class ContentPageCreate(ContentPageWrite):
    """Request to create a content page."""


class ContentPageUpdate(ContentPageWrite):
    """Request to replace a content page's fields."""


class DeleteResponse(CamelModel):
    """Response after deleting a resource."""

    id: str
    deleted: bool = True
