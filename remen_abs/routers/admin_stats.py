# remen_abs/routers/admin_stats.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from remen_abs.core.auth import require_admin
from remen_abs.database import get_session
from remen_abs.repositories.analytics_repo import AnalyticsRepository
from remen_abs.repositories.inquiry_repo import InquiryRepository
from remen_abs.repositories.stats_repo import StatsRepository
from remen_abs.schemas.stats import AdminDashboardStats
from remen_abs.services.analytics_service import AnalyticsService
from remen_abs.services.stats_service import StatsService

router = APIRouter(prefix="/admin/stats", tags=["Admin Stats"])

service = StatsService(
    StatsRepository(),
    InquiryRepository(),
    AnalyticsService(AnalyticsRepository()),
)


@router.get(
    "",
    response_model=AdminDashboardStats,
    dependencies=[Depends(require_admin)],
)
def get_admin_dashboard_stats(
    latest: int = Query(default=5, ge=1, le=50),
    session: Session = Depends(get_session),
):
    """
    Aggregated statistics for the admin dashboard.

    Revenue counts only paid orders (not pending, payment_pending,
    cancelled or refunded).
    """
    return service.get_admin_dashboard_stats(session=session, latest_n_orders=latest)
