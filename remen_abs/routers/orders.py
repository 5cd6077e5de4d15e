# remen_abs/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from remen_abs.core.auth import require_auth, require_admin
from remen_abs.core.config import get_settings
from remen_abs.database import get_session
from remen_abs.models.user import User
from remen_abs.repositories.cart_repo import CartRepository
from remen_abs.repositories.order_repo import OrderRepository
from remen_abs.repositories.product_repo import ProductRepository
from remen_abs.schemas.order import (
    OrderCreate,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderSummary,
)
from remen_abs.services.cart_service import CartService
from remen_abs.services.order_service import OrderService
from remen_abs.services.payment_service import build_payment_manager

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])

service = OrderService(
    OrderRepository(),
    CartService(CartRepository()),
    ProductRepository(),
    build_payment_manager(settings.PAYMENT_PROVIDER),
)


# -------- User-facing endpoints --------


@router.post(
    "/checkout",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Turn the checked lines of the current user's cart into a paid order.

    - 400 when nothing is checked
    - 402 when the payment is declined or cannot be verified
      (the order is kept as 'payment_pending')
    """
    return service.checkout(session, current_user, payload)


@router.get(
    "/me",
    response_model=list[OrderSummary],
)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    skip: int = 0,
    limit: int = 50,
):
    """
    The authenticated user's order history, newest first.
    """
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.get(
    "/me/{order_id}",
    response_model=OrderRead,
)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return service.get_user_order(session, current_user.id, order_id)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[OrderSummary],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    status_filter: OrderStatus | None = None,
):
    return service.list_all_orders(session, skip, limit, status_filter)


@router.get(
    "/{order_id}",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_order_admin(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Move an order along its lifecycle (admin only).

      pending           -> payment_pending, payment_completed, cancelled
      payment_pending   -> payment_completed, cancelled
      payment_completed -> processing, cancelled, refunded
      processing        -> shipped, cancelled, refunded
      shipped           -> delivered

    delivered, cancelled and refunded are final.
    """
    return service.update_status(session, order_id, payload)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_order(session, order_id)
    return None
