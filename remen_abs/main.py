# remen_abs/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from remen_abs.core.config import get_settings
from remen_abs.core.cors import StorefrontCORSMiddleware
from remen_abs.core.errors import register_exception_handlers
from remen_abs.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from remen_abs.models import user as _user_models  # noqa: F401
from remen_abs.models import product as _product_models  # noqa: F401
from remen_abs.models import cart as _cart_models  # noqa: F401
from remen_abs.models import order as _order_models  # noqa: F401
from remen_abs.models import inquiry as _inquiry_models  # noqa: F401
from remen_abs.models import analytics as _analytics_models  # noqa: F401

# Routers
from remen_abs.routers.admin_stats import router as admin_stats_router
from remen_abs.routers.analytics import router as analytics_router
from remen_abs.routers.cart import CART_FUNCTIONS, router as cart_router
from remen_abs.routers.inquiries import router as inquiries_router
from remen_abs.routers.orders import router as orders_router
from remen_abs.routers.products import router as products_router
from remen_abs.routers.seo import router as seo_router
from remen_abs.routers.users import router as users_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception:
        logger.exception("Startup: DB connection FAILED")
        raise
    yield
    logger.info("Shutdown complete.")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# Cart functions are called from any origin; the rest of the API only
# from the storefront and admin origins.
app.add_middleware(
    StorefrontCORSMiddleware,
    open_paths=[settings.API_PREFIX + path for path in CART_FUNCTIONS],
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Storefront API under /api
app.include_router(cart_router, prefix=settings.API_PREFIX)
app.include_router(products_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)
app.include_router(users_router, prefix=settings.API_PREFIX)
app.include_router(inquiries_router, prefix=settings.API_PREFIX)
app.include_router(analytics_router, prefix=settings.API_PREFIX)
app.include_router(admin_stats_router, prefix=settings.API_PREFIX)

# Crawlers look for these at the site root
app.include_router(seo_router)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "remen-abs-store"}
