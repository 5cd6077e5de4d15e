# remen_abs/services/stats_service.py
from sqlmodel import Session

from remen_abs.repositories.inquiry_repo import InquiryRepository
from remen_abs.repositories.stats_repo import StatsRepository
from remen_abs.schemas.stats import AdminDashboardStats, LatestOrderSummary
from remen_abs.services.analytics_service import AnalyticsService


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics.
    """

    def __init__(
        self,
        repo: StatsRepository,
        inquiry_repo: InquiryRepository,
        analytics: AnalyticsService,
    ):
        self.repo = repo
        self.inquiry_repo = inquiry_repo
        self.analytics = analytics

    def get_admin_dashboard_stats(
        self,
        session: Session,
        latest_n_orders: int = 5,
    ) -> AdminDashboardStats:
        total_customers = self.repo.count_customers(session)
        total_orders = self.repo.count_orders(session)
        total_revenue = self.repo.total_revenue(session)

        orders_by_status = {
            status: int(count or 0)
            for status, count in self.repo.orders_by_status(session)
        }

        latest_orders = [
            LatestOrderSummary(
                id=o.id,
                order_number=o.order_number,
                created_at=o.created_at,
                user_id=o.user_id,
                customer_name=(o.customer or {}).get("name"),
                final_amount=o.final_amount,
                status=o.status,
            )
            for o in self.repo.latest_orders(session, limit=latest_n_orders)
        ]

        return AdminDashboardStats(
            total_customers=total_customers,
            total_orders=total_orders,
            total_revenue=total_revenue,
            orders_by_status=orders_by_status,
            latest_orders=latest_orders,
            total_visitors=self.analytics.get_total_visitors(session),
            pending_inquiries=self.inquiry_repo.count_by_status(session, "pending"),
        )
