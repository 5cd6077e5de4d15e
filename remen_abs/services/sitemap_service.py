# remen_abs/services/sitemap_service.py
import logging
from dataclasses import dataclass
from datetime import date
from urllib.parse import quote
from xml.sax.saxutils import escape

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from remen_abs.repositories.product_repo import ProductRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SitemapUrl:
    loc: str
    changefreq: str
    priority: float
    lastmod: date | None = None


STATIC_ROUTES: tuple[tuple[str, str, float], ...] = (
    ("/", "weekly", 1.0),
    ("/about", "monthly", 0.8),
    ("/products", "weekly", 0.9),
    ("/products?brand=렉서스", "weekly", 0.8),
    ("/products?brand=벤츠", "weekly", 0.8),
    ("/products?brand=BMW", "weekly", 0.8),
    ("/products?brand=아우디", "weekly", 0.8),
    ("/remanufacturing", "monthly", 0.7),
    ("/order-history", "daily", 0.6),
    ("/contact", "monthly", 0.7),
    ("/privacy", "yearly", 0.4),
    ("/terms", "yearly", 0.4),
    ("/refund-policy", "yearly", 0.4),
)

# Never indexed: transactional and back-office pages. None of these may
# appear in STATIC_ROUTES.
DISALLOWED_PATHS = ("/admin", "/cart", "/checkout", "/order-complete", "/profile")


class SitemapService:
    """
    Builds sitemap.xml (static pages + one entry per product) and robots.txt.
    """

    def __init__(self, product_repo: ProductRepository, base_url: str):
        self.product_repo = product_repo
        self.base_url = base_url.rstrip("/")

    def collect_urls(self, session: Session, today: date | None = None) -> list[SitemapUrl]:
        today = today or date.today()
        urls = [
            SitemapUrl(loc=loc, changefreq=freq, priority=prio, lastmod=today)
            for loc, freq, prio in STATIC_ROUTES
        ]

        # A failing catalog query still yields the static sitemap.
        try:
            rows = self.product_repo.list_ids(session)
        except SQLAlchemyError:
            logger.exception("Could not list products for sitemap")
            rows = []

        for product_id, created_at in rows:
            urls.append(
                SitemapUrl(
                    loc=f"/products/{product_id}",
                    changefreq="weekly",
                    priority=0.8,
                    lastmod=created_at.date() if created_at else today,
                )
            )
        return urls

    def render_sitemap(self, urls: list[SitemapUrl]) -> str:
        entries = []
        for url in urls:
            loc = self.base_url + quote(url.loc, safe="/?=&")
            lines = ["  <url>", f"    <loc>{escape(loc)}</loc>"]
            if url.lastmod is not None:
                lines.append(f"    <lastmod>{url.lastmod.isoformat()}</lastmod>")
            lines.append(f"    <changefreq>{url.changefreq}</changefreq>")
            lines.append(f"    <priority>{url.priority:.1f}</priority>")
            lines.append("  </url>")
            entries.append("\n".join(lines))

        return "\n".join(
            [
                '<?xml version="1.0" encoding="UTF-8"?>',
                '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
                *entries,
                "</urlset>",
            ]
        )

    def build_sitemap(self, session: Session) -> str:
        return self.render_sitemap(self.collect_urls(session))

    def build_robots(self) -> str:
        lines = ["User-agent: *", "Allow: /"]
        lines += [f"Disallow: {path}" for path in DISALLOWED_PATHS]
        lines += ["", f"Sitemap: {self.base_url}/sitemap.xml", ""]
        return "\n".join(lines)
