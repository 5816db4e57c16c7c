"""Site schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from siteplan.schemas.common import CamelModel


class Site(CamelModel):
    """A WordPress-bound site."""

    id: str
    name: str
    dev_url: str = ""
    production_url: str = ""
    notes: str = ""
    created_at: datetime
    updated_at: datetime


class SiteWrite(CamelModel):
    """Request body shared by site create and update."""

    name: str = Field(min_length=1, max_length=200)
    dev_url: str = Field(default="", max_length=2000)
    production_url: str = Field(default="", max_length=2000)
    notes: str = Field(default="", max_length=20_000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        _ = cls
        v = v.strip()
        if not v:
            raise ValueError("Site name is required")
        return v

    @field_validator("dev_url", "production_url", "notes", mode="before")
    @classmethod
    def strip_optional(cls, v: object) -> object:
        _ = cls
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


class SiteCreate(SiteWrite):
    """Request to create a site."""


class SiteUpdate(SiteWrite):
    """Request to update a site."""
