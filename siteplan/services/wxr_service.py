"""Export serializers: WordPress eXtended RSS (WXR 1.2) and JSON."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from xml.sax.saxutils import escape

from siteplan.services.datetime_service import (
    format_iso,
    format_rfc1123,
    format_wp_date,
    parse_datetime,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from siteplan.schemas.content_page import ContentPage
    from siteplan.schemas.export import ExportData, ExportPost
    from siteplan.schemas.site import Site
    from siteplan.schemas.sitemap import Sitemap

DEFAULT_GENERATOR = "Content Entry System WordPress Exporter"
WXR_VERSION = "1.2"
# Yoast SEO stores the meta description under this postmeta key
META_DESCRIPTION_KEY = "_yoast_wpseo_metadesc"

_XML_ENTITIES = {'"': "&quot;", "'": "&#39;"}

_RSS_OPEN = """\
<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
  xmlns:excerpt="http://wordpress.org/export/1.2/excerpt/"
  xmlns:content="http://purl.org/rss/1.0/modules/content/"
  xmlns:wfw="http://wellformedweb.org/CommentAPI/"
  xmlns:dc="http://purl.org/dc/elements/1.1/"
  xmlns:wp="http://wordpress.org/export/1.2/">
"""


def escape_xml(text: str) -> str:
    """Escape ``& < > " '`` for use in XML element content or attributes."""
    return escape(text, _XML_ENTITIES)


def wrap_cdata(text: str) -> str:
    """Wrap text in a CDATA section without escaping it.

    An embedded ``]]>`` would end the section early, so it is split across
    two adjacent sections; XML parsers join them back into the original text.
    """
    return f"<![CDATA[{text.replace(']]>', ']]]]><![CDATA[>')}]]>"


def _item_xml(post: ExportPost) -> str:
    """Render one ``<item>`` block."""
    date = parse_datetime(post.date)
    wp_date = format_wp_date(date)
    slug = escape_xml(post.slug)
    if post.meta_description:
        postmeta = (
            "    <wp:postmeta>\n"
            f"      <wp:meta_key>{META_DESCRIPTION_KEY}</wp:meta_key>\n"
            f"      <wp:meta_value>{wrap_cdata(post.meta_description)}</wp:meta_value>\n"
            "    </wp:postmeta>"
        )
    else:
        postmeta = ""
    lines = [
        "  <item>",
        f"    <title>{escape_xml(post.title)}</title>",
        f"    <link>{slug}</link>",
        f"    <pubDate>{format_rfc1123(date)}</pubDate>",
        f"    <dc:creator>{wrap_cdata(post.author)}</dc:creator>",
        f'    <guid isPermaLink="false">{slug}</guid>',
        "    <description></description>",
        f"    <content:encoded>{wrap_cdata(post.content)}</content:encoded>",
        f"    <excerpt:encoded>{wrap_cdata(post.excerpt)}</excerpt:encoded>",
        f"    <wp:post_id>{post.id}</wp:post_id>",
        f"    <wp:post_date>{wp_date}</wp:post_date>",
        f"    <wp:post_date_gmt>{wp_date}</wp:post_date_gmt>",
        "    <wp:comment_status>closed</wp:comment_status>",
        "    <wp:ping_status>closed</wp:ping_status>",
        f"    <wp:post_name>{slug}</wp:post_name>",
        f"    <wp:status>{post.status}</wp:status>",
        f"    <wp:post_parent>{post.parent_id or 0}</wp:post_parent>",
        f"    <wp:menu_order>{post.menu_order}</wp:menu_order>",
        f"    <wp:post_type>{post.type}</wp:post_type>",
        "    <wp:post_password></wp:post_password>",
        "    <wp:is_sticky>0</wp:is_sticky>",
        postmeta,
        "  </item>",
    ]
    return "\n".join(lines)


def generate_wxr(export_data: ExportData, generator: str = DEFAULT_GENERATOR) -> str:
    """Render an export as a complete WXR document.

    Channel text and per-item plain fields are entity-escaped; post content,
    excerpt, creator and meta values are wrapped in CDATA instead.
    """
    site = export_data.site
    site_url = escape_xml(site.url)
    channel = [
        "<channel>",
        f"  <title>{escape_xml(site.name)}</title>",
        f"  <link>{site_url}</link>",
        f"  <description>{escape_xml(site.description)}</description>",
        f"  <pubDate>{format_rfc1123(parse_datetime(site.export_date))}</pubDate>",
        f"  <language>{escape_xml(site.language)}</language>",
        f"  <wp:wxr_version>{WXR_VERSION}</wp:wxr_version>",
        f"  <wp:base_site_url>{site_url}</wp:base_site_url>",
        f"  <wp:base_blog_url>{site_url}</wp:base_blog_url>",
        "",
        f"  <generator>{escape_xml(generator)}</generator>",
        "",
        "\n".join(_item_xml(post) for post in export_data.posts),
        "",
        "</channel>",
        "</rss>",
    ]
    return _RSS_OPEN + "\n" + "\n".join(channel)


def generate_json(export_data: ExportData) -> str:
    """Render an export as 2-space indented JSON with camelCase keys.

    Unset optional fields (a root page's ``parentId``, a missing
    ``metaDescription``) are omitted; ``ExportData.model_validate_json``
    reads the output back into an equal structure.
    """
    return export_data.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def generate_site_archive_json(
    site: Site,
    sitemap: Sitemap,
    content_pages: Sequence[ContentPage],
    exported_at: datetime,
) -> str:
    """Render a raw backup of a site: metadata, tree and content pages as stored."""
    archive = {
        "site": site.model_dump(mode="json", by_alias=True),
        "sitemap": sitemap.model_dump(mode="json", by_alias=True),
        "contentPages": [cp.model_dump(mode="json", by_alias=True) for cp in content_pages],
        "exportedAt": format_iso(exported_at),
    }
    return json.dumps(archive, indent=2, ensure_ascii=False)
