# remen_abs/repositories/order_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from remen_abs.models.order import Order


class OrderRepository:
    """
    Data access layer for orders.

    NOTE:
      - No commits here; checkout moves an order through several states
        and the service decides when each step is durable.
    """

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Order]:
        stmt = select(Order)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def save(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def delete(self, session: Session, order: Order) -> None:
        session.delete(order)
        session.flush()

    def count_with_number_prefix(self, session: Session, prefix: str) -> int:
        stmt = select(func.count()).select_from(Order).where(
            Order.order_number.startswith(prefix)
        )
        return int(session.exec(stmt).one() or 0)
