# tests/test_seo.py
from datetime import date

from remen_abs.repositories.product_repo import ProductRepository
from remen_abs.services.sitemap_service import (
    DISALLOWED_PATHS,
    STATIC_ROUTES,
    SitemapService,
    SitemapUrl,
)


def test_render_escapes_and_prefixes_base_url():
    service = SitemapService(ProductRepository(), "https://www.remen-abs.com/")
    xml = service.render_sitemap(
        [SitemapUrl(loc="/products?brand=BMW&page=2", changefreq="weekly", priority=0.8, lastmod=date(2024, 3, 5))]
    )

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<loc>https://www.remen-abs.com/products?brand=BMW&amp;page=2</loc>" in xml
    assert "<lastmod>2024-03-05</lastmod>" in xml
    assert "<priority>0.8</priority>" in xml


def test_sitemap_lists_static_routes_and_products(client, make_product):
    product = make_product()

    res = client.get("/sitemap.xml")

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("application/xml")
    assert res.text.count("<url>") == len(STATIC_ROUTES) + 1
    assert f"/products/{product.id}</loc>" in res.text


def test_robots_points_at_sitemap(client):
    res = client.get("/robots.txt")

    assert res.status_code == 200
    assert "Sitemap: https://www.remen-abs.com/sitemap.xml" in res.text
    assert "Disallow: /admin" in res.text


def test_non_ascii_queries_are_percent_encoded():
    service = SitemapService(ProductRepository(), "https://www.remen-abs.com")
    xml = service.render_sitemap(
        [SitemapUrl(loc="/products?brand=벤츠", changefreq="weekly", priority=0.8)]
    )

    assert "<loc>https://www.remen-abs.com/products?brand=%EB%B2%A4%EC%B8%A0</loc>" in xml
    assert "벤츠" not in xml


def test_sitemap_skips_paths_hidden_from_crawlers():
    for loc, _, _ in STATIC_ROUTES:
        path = loc.split("?")[0]
        assert not any(
            path == hidden or path.startswith(hidden + "/") for hidden in DISALLOWED_PATHS
        ), loc
