"""Integration tests for the export endpoints."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from httpx import AsyncClient

WP_NS = "{http://wordpress.org/export/1.2/}"


async def _populated_site(client: AsyncClient) -> dict[str, Any]:
    """Site "Acme Co." with Home > About (published, linked) and an unlinked Contact."""
    site = (
        await client.post(
            "/api/sites", json={"name": "Acme Co.", "productionUrl": "https://acme.test"}
        )
    ).json()
    site_id = site["id"]
    content = (
        await client.post(
            f"/api/sites/{site_id}/content-pages",
            json={
                "title": "About",
                "url": "/about-us/",
                "contentHtml": "<p>We & you</p>",
                "metaDescription": "About Acme",
                "status": "published",
            },
        )
    ).json()
    home = (
        await client.post(f"/api/sites/{site_id}/sitemap/pages", json={"title": "Home", "url": "/"})
    ).json()["page"]
    await client.post(
        f"/api/sites/{site_id}/sitemap/link",
        json={"contentPageId": content["id"], "targetId": home["id"], "position": "child"},
    )
    await client.post(
        f"/api/sites/{site_id}/sitemap/pages", json={"title": "Contact", "url": "/contact"}
    )
    return site


class TestExportPreview:
    async def test_empty_site(self, client: AsyncClient) -> None:
        site = (await client.post("/api/sites", json={"name": "Empty"})).json()
        resp = await client.get(f"/api/sites/{site['id']}/export")
        assert resp.status_code == 200
        data = resp.json()
        assert data["hasSitemap"] is False
        assert data["hasContent"] is False
        assert data["stats"]["totalPages"] == 0
        assert data["site"]["url"] == ""

    async def test_populated_site(self, client: AsyncClient) -> None:
        site = await _populated_site(client)
        data = (await client.get(f"/api/sites/{site['id']}/export")).json()
        assert data["hasSitemap"] is True
        assert data["hasContent"] is True
        assert data["site"]["url"] == "https://acme.test"
        assert data["stats"]["totalPages"] == 3
        assert data["stats"]["publishedPages"] == 1
        assert data["stats"]["draftPages"] == 2
        assert data["stats"]["pagesWithContent"] == 1
        assert data["danglingLinks"] == 0

    async def test_counts_dangling_links(self, client: AsyncClient) -> None:
        site = await _populated_site(client)
        pages = (await client.get(f"/api/sites/{site['id']}/content-pages")).json()
        await client.delete(f"/api/sites/{site['id']}/content-pages/{pages[0]['id']}")

        data = (await client.get(f"/api/sites/{site['id']}/export")).json()
        assert data["danglingLinks"] == 1
        assert data["stats"]["publishedPages"] == 0

    async def test_unknown_site(self, client: AsyncClient) -> None:
        resp = await client.get("/api/sites/nope/export")
        assert resp.status_code == 404


class TestExportDownload:
    async def test_wxr_download(self, client: AsyncClient) -> None:
        site = await _populated_site(client)
        resp = await client.get(f"/api/sites/{site['id']}/export/download")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/xml")
        assert (
            resp.headers["content-disposition"]
            == 'attachment; filename="Acme_Co__wordpress_export.xml"'
        )

        root = ET.fromstring(resp.text)
        items = root.findall("channel/item")
        assert [item.findtext("title") for item in items] == ["Home", "About", "Contact"]
        about = items[1]
        assert about.findtext(f"{WP_NS}post_parent") == items[0].findtext(f"{WP_NS}post_id")
        assert about.findtext(f"{WP_NS}post_name") == "about-us"
        assert about.findtext(f"{WP_NS}status") == "publish"
        assert root.findtext("channel/link") == "https://acme.test"

    async def test_json_download(self, client: AsyncClient) -> None:
        site = await _populated_site(client)
        resp = await client.get(
            f"/api/sites/{site['id']}/export/download", params={"format": "json"}
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert "Acme_Co__wordpress_export.json" in resp.headers["content-disposition"]

        data = json.loads(resp.text)
        assert [post["slug"] for post in data["posts"]] == ["home", "about-us", "contact"]
        assert data["posts"][1]["parentId"] == 1
        assert data["posts"][1]["metaDescription"] == "About Acme"
        assert data["site"]["url"] == "https://acme.test"

    async def test_backup_download(self, client: AsyncClient) -> None:
        site = await _populated_site(client)
        resp = await client.get(
            f"/api/sites/{site['id']}/export/download", params={"format": "backup"}
        )
        assert resp.status_code == 200
        assert "Acme_Co__export.json" in resp.headers["content-disposition"]
        data = json.loads(resp.text)
        assert data["site"]["id"] == site["id"]
        assert len(data["sitemap"]["pages"]) == 2
        assert len(data["contentPages"]) == 1

    @pytest.mark.parametrize("export_format", ["csv", "WXR", ""])
    async def test_unsupported_format(self, client: AsyncClient, export_format: str) -> None:
        site = (await client.post("/api/sites", json={"name": "Acme"})).json()
        resp = await client.get(
            f"/api/sites/{site['id']}/export/download", params={"format": export_format}
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Unsupported export format"

    async def test_empty_site_exports_empty_channel(self, client: AsyncClient) -> None:
        site = (await client.post("/api/sites", json={"name": "Empty"})).json()
        resp = await client.get(f"/api/sites/{site['id']}/export/download")
        root = ET.fromstring(resp.text)
        assert root.findall("channel/item") == []
        assert root.findtext("channel/link") == "https://example.com"
