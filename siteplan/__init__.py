"""SitePlan: sitemap planning and WordPress export for client sites."""

__version__ = "0.1.0"
