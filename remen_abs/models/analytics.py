# remen_abs/models/analytics.py
from datetime import datetime

from sqlmodel import SQLModel, Field

from remen_abs.models.cart import utcnow

# Counter buckets. Time buckets are keyed by hour/day/week/month,
# "pages" by path, "totals" by the names below.
TOTALS = "totals"
PAGES = "pages"
TOTAL_VISITORS = "totalVisitors"
TOTAL_PAGE_VIEWS = "totalPageViews"


class AnalyticsCounter(SQLModel, table=True):
    """
    One visit counter, e.g. (daily, 2024-03-05) or (pages, /products).

    Rows are only ever bumped by a single upsert statement, so concurrent
    page views never overwrite each other's increments.
    """

    __tablename__ = "analytics_counters"

    bucket: str = Field(primary_key=True, max_length=16)
    key: str = Field(primary_key=True, max_length=500)

    count: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
