# remen_abs/schemas/stats.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel

from remen_abs.schemas.order import OrderStatus


class LatestOrderSummary(SQLModel):
    """
    Lightweight info for last N orders.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    order_number: str
    created_at: datetime
    user_id: uuid.UUID
    customer_name: str | None
    final_amount: int
    status: OrderStatus


class AdminDashboardStats(SQLModel):
    """
    Full payload for admin dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    total_customers: int
    total_orders: int
    total_revenue: int
    orders_by_status: dict[str, int]
    latest_orders: list[LatestOrderSummary]
    total_visitors: int
    pending_inquiries: int
