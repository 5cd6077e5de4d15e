# remen_abs/routers/analytics.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from remen_abs.core.auth import require_admin
from remen_abs.database import get_session
from remen_abs.repositories.analytics_repo import AnalyticsRepository
from remen_abs.schemas.analytics import (
    PageViewAck,
    PageViewCreate,
    SeriesRange,
    VisitorSeries,
    VisitorStatsRead,
)
from remen_abs.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])

repo = AnalyticsRepository()
service = AnalyticsService(repo)


@router.post("/page-views", response_model=PageViewAck)
def track_page_view(
    payload: PageViewCreate,
    session: Session = Depends(get_session),
):
    """
    Count a page view. Always answers ok; `recorded` tells whether the
    counters were written.
    """
    recorded = service.track_page_view(session, payload.path, payload.title)
    return PageViewAck(recorded=recorded)


@router.get(
    "/visitors",
    response_model=VisitorStatsRead,
    dependencies=[Depends(require_admin)],
)
def get_visitor_stats(session: Session = Depends(get_session)):
    return service.get_visitor_stats(session)


@router.get(
    "/visitors/series",
    response_model=VisitorSeries,
    dependencies=[Depends(require_admin)],
)
def get_visitor_series(
    range_: SeriesRange = Query(default="daily", alias="range"),
    session: Session = Depends(get_session),
):
    """
    Zero-filled chart series: 24 hours, 30 days, 12 weeks or 12 months.
    """
    return service.get_series(session, range_)
