# remen_abs/routers/seo.py
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response
from sqlmodel import Session

from remen_abs.core.config import get_settings
from remen_abs.database import get_session
from remen_abs.repositories.product_repo import ProductRepository
from remen_abs.services.sitemap_service import SitemapService

settings = get_settings()

router = APIRouter(tags=["SEO"])

service = SitemapService(ProductRepository(), settings.SITE_BASE_URL)


@router.get("/sitemap.xml", include_in_schema=False)
def sitemap(session: Session = Depends(get_session)):
    return Response(content=service.build_sitemap(session), media_type="application/xml")


@router.get("/robots.txt", response_class=PlainTextResponse, include_in_schema=False)
def robots():
    return service.build_robots()
