# remen_abs/repositories/stats_repo.py
from sqlalchemy import func
from sqlmodel import Session, select

from remen_abs.models.order import Order
from remen_abs.models.user import User

# Orders in these states have not brought in money.
UNPAID_STATUSES = ("pending", "payment_pending", "cancelled", "refunded")


class StatsRepository:
    """
    Read-only aggregated queries for admin dashboard.
    """

    def count_customers(self, session: Session) -> int:
        stmt = select(func.count()).select_from(User).where(User.role == "user")
        # SQLModel's Session.exec() -> ScalarResult -> use .one()
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_orders(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Order)
        value = session.exec(stmt).one()
        return int(value or 0)

    def total_revenue(self, session: Session) -> int:
        """
        Sum of final_amount over paid orders.
        """
        stmt = (
            select(func.coalesce(func.sum(Order.final_amount), 0))
            .where(Order.status.not_in(UNPAID_STATUSES))
        )
        value = session.exec(stmt).one()
        return int(value or 0)

    def orders_by_status(self, session: Session) -> list[tuple[str, int]]:
        stmt = (
            select(Order.status, func.count(Order.id))
            .group_by(Order.status)
            .order_by(Order.status)
        )
        return list(session.exec(stmt).all())

    def latest_orders(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[Order]:
        """
        Latest N orders by created_at (any status).
        """
        stmt = (
            select(Order)
            .order_by(Order.created_at.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())
