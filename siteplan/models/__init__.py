"""SQLAlchemy ORM models for SitePlan."""

from siteplan.models.base import Base
from siteplan.models.site import ContentPageRecord, SiteRecord, SitemapRecord

__all__ = [
    "Base",
    "ContentPageRecord",
    "SiteRecord",
    "SitemapRecord",
]
