# remen_abs/services/order_service.py
import html
import logging
import math
import smtplib
import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from remen_abs.core.email_client import send_email
from remen_abs.models.cart import utcnow
from remen_abs.models.order import Order
from remen_abs.models.user import User
from remen_abs.repositories.order_repo import OrderRepository
from remen_abs.repositories.product_repo import ProductRepository
from remen_abs.schemas.order import (
    OrderCreate,
    OrderLine,
    OrderRead,
    OrderStatusUpdate,
    OrderSummary,
    PaymentInfo,
)
from remen_abs.services.cart_service import CartService
from remen_abs.services.payment_service import (
    PaymentRequest,
    PaymentServiceManager,
    PaymentVerification,
    get_provider_for_method,
)

logger = logging.getLogger(__name__)

# method -> (flat fee, free-shipping threshold on subtotal)
SHIPPING_RATES: dict[str, tuple[int, int | None]] = {
    "standard": (3000, 50000),
    "express": (5000, 100000),
    "pickup": (0, None),
}
DEFAULT_SHIPPING_FEE = 3000

COUPON_CODE = "WELCOME10"
COUPON_RATE = 0.10

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"payment_pending", "payment_completed", "cancelled"},
    "payment_pending": {"payment_completed", "cancelled"},
    "payment_completed": {"processing", "cancelled", "refunded"},
    "processing": {"shipped", "cancelled", "refunded"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
    "refunded": set(),
}

Mailer = Callable[..., None]


def calculate_shipping_fee(method: str, subtotal: int) -> int:
    rate = SHIPPING_RATES.get(method)
    if rate is None:
        return DEFAULT_SHIPPING_FEE
    fee, free_from = rate
    if free_from is not None and subtotal >= free_from:
        return 0
    return fee


def calculate_discount(subtotal: int, coupon_code: str | None = None) -> int:
    if coupon_code == COUPON_CODE:
        return math.floor(subtotal * COUPON_RATE)
    return 0


class OrderService:
    """
    Order assembly and lifecycle.

    Responsibilities:
      - snapshot the checked cart lines into an immutable order
      - compute shipping fee, discount and final amount
      - drive the payment gateway and verify the result server-side
      - best-effort follow-ups after payment: sold-out marking, cart
        clearing, confirmation email (none of them undo the order)
      - enforce the status state machine (admin)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_service: CartService,
        product_repo: ProductRepository,
        payments: PaymentServiceManager,
        mailer: Mailer = send_email,
    ):
        self.order_repo = order_repo
        self.cart_service = cart_service
        self.product_repo = product_repo
        self.payments = payments
        self.mailer = mailer

    # -------- Checkout --------

    def checkout(
        self,
        session: Session,
        user: User,
        payload: OrderCreate,
    ) -> OrderRead:
        """
        Convert the checked lines of the user's cart into a paid order.

        Steps:
          1. Load checked cart lines; error if none.
          2. Freeze lines (orderPrice = priceAtAdd) and compute amounts.
          3. Persist the order as 'pending'.
          4. Request payment (idempotency key = order id) and verify it.
             Failure -> order stays 'payment_pending', 402.
          5. Mark 'payment_completed'.
          6. Follow-ups (best-effort).
        """
        user_key = str(user.id)

        # 1) Checked lines
        cart_lines = self.cart_service.checked_items(session, user_key)
        if not cart_lines:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No items selected for checkout",
            )

        # 2) Snapshot + amounts
        lines = [
            OrderLine(
                sku=ci.sku,
                name=ci.name or "Unknown Product",
                brand=ci.brand or "Unknown Brand",
                model=ci.model or "Unknown Model",
                image_url=ci.image_url or "",
                quantity=ci.qty,
                order_price=ci.price_at_add,
            )
            for ci in cart_lines
        ]
        subtotal = sum(line.order_price * line.quantity for line in lines)
        shipping_fee = calculate_shipping_fee(payload.shipping.method, subtotal)
        discount_amount = calculate_discount(subtotal, payload.coupon_code)
        final_amount = subtotal + shipping_fee - discount_amount

        provider = get_provider_for_method(payload.payment_method)

        # 3) Persist as pending
        order = Order(
            order_number=self._next_order_number(session),
            user_id=user.id,
            status="pending",
            customer=payload.customer.model_dump(mode="json"),
            shipping=payload.shipping.model_dump(mode="json"),
            payment=PaymentInfo(
                method=payload.payment_method,
                amount=final_amount,
                pg_provider=provider,
            ).model_dump(mode="json"),
            items=[line.model_dump(mode="json") for line in lines],
            total_amount=subtotal,
            shipping_fee=shipping_fee,
            discount_amount=discount_amount,
            final_amount=final_amount,
        )
        order = self.order_repo.save(session, order)
        session.commit()
        logger.info(
            "Order %s created for user %s: %d line(s), final=%d",
            order.order_number,
            user_key,
            len(lines),
            final_amount,
        )

        # 4) Payment
        gateway = self.payments.gateway(provider)
        response = gateway.request_payment(
            PaymentRequest(
                idempotency_key=str(order.id),
                order_number=order.order_number,
                amount=final_amount,
                method=payload.payment_method,
                customer_name=payload.customer.name,
                customer_email=payload.customer.email,
                customer_phone=payload.customer.phone,
                items=[
                    {"name": line.name, "price": line.order_price, "quantity": line.quantity}
                    for line in lines
                ],
            )
        )

        verified = False
        if response.success and response.transaction_id:
            verified = gateway.verify_payment(
                PaymentVerification(
                    order_id=str(order.id),
                    transaction_id=response.transaction_id,
                    amount=final_amount,
                    method=payload.payment_method,
                    provider=provider,
                )
            )

        if not verified:
            reason = response.error_message or "Payment could not be verified"
            self._set_payment(order, status="failed", transaction_id=response.transaction_id)
            order.status = "payment_pending"
            self._save(session, order)
            logger.warning("Payment failed for order %s: %s", order.order_number, reason)
            raise HTTPException(
                status_code=status.HTTP_402_PAYMENT_REQUIRED,
                detail=f"Payment failed: {reason}",
            )

        # 5) Paid
        self._set_payment(
            order,
            status="completed",
            transaction_id=response.transaction_id,
            paid_at=datetime.now(timezone.utc).isoformat(),
        )
        order.status = "payment_completed"
        self._save(session, order)

        # 6) Follow-ups
        self._mark_sold_out(session, lines)
        self._clear_cart(session, user_key)
        self.send_confirmation_email(order)

        return OrderRead.model_validate(order)

    # -------- User-facing queries --------

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderSummary]:
        """
        Order history for the user, newest first.

        A failing query is logged and reads as an empty history.
        """
        try:
            orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        except SQLAlchemyError:
            logger.exception("Could not load order history for %s", user_id)
            return []
        return [self._summary(o) for o in orders]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderRead:
        """
        404 if the order does not exist or belongs to someone else.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return OrderRead.model_validate(order)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status_filter: str | None = None,
    ) -> list[OrderSummary]:
        orders = self.order_repo.list_all(session, skip, limit, status=status_filter)
        return [self._summary(o) for o in orders]

    def get_order_admin(self, session: Session, order_id: uuid.UUID) -> OrderRead:
        return OrderRead.model_validate(self._get_order(session, order_id))

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Admin-only status change following ALLOWED_TRANSITIONS.

        Cancelling or refunding a paid order also asks the gateway to
        cancel/refund; a gateway refusal is logged, the status still moves.
        """
        order = self._get_order(session, order_id)
        current = order.status
        new = payload.status

        if payload.tracking_number is not None:
            order.tracking_number = payload.tracking_number

        if current != new:
            if new not in ALLOWED_TRANSITIONS.get(current, set()):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid status transition: {current} -> {new}",
                )
            self._settle_payment(order, new)
            order.status = new

        self._save(session, order)
        logger.info("Order %s status %s -> %s", order.order_number, current, new)
        return OrderRead.model_validate(order)

    def delete_order(self, session: Session, order_id: uuid.UUID) -> None:
        order = self._get_order(session, order_id)
        self.order_repo.delete(session, order)
        session.commit()

    # -------- Confirmation email --------

    def send_confirmation_email(self, order: Order) -> bool:
        """
        Best-effort order confirmation. Returns whether the mail went out.
        """
        to_email = (order.customer or {}).get("email")
        if not to_email:
            return False

        text_body, html_body = render_confirmation(order)
        try:
            self.mailer(
                to_email=to_email,
                subject=f"[Remen ABS] Order {order.order_number} confirmed",
                text_body=text_body,
                html_body=html_body,
            )
        except (RuntimeError, smtplib.SMTPException, OSError):
            logger.exception("Confirmation email failed for order %s", order.order_number)
            return False
        return True

    # -------- Helpers --------

    def _get_order(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _save(self, session: Session, order: Order) -> None:
        order.updated_at = utcnow()
        self.order_repo.save(session, order)
        session.commit()
        session.refresh(order)

    def _next_order_number(self, session: Session) -> str:
        prefix = datetime.now().strftime("%Y%m%d")
        seq = self.order_repo.count_with_number_prefix(session, prefix) + 1
        return f"{prefix}-{seq:03d}"

    @staticmethod
    def _set_payment(order: Order, **changes) -> None:
        payment = dict(order.payment or {})
        payment.update(changes)
        order.payment = payment

    def _settle_payment(self, order: Order, new_status: str) -> None:
        payment = order.payment or {}
        transaction_id = payment.get("transaction_id")
        if payment.get("status") != "completed" or not transaction_id:
            return

        gateway = self.payments.gateway(payment.get("pg_provider"))
        if new_status == "refunded":
            done = gateway.refund_payment(transaction_id, order.final_amount, "admin refund")
            settled = "refunded"
        elif new_status == "cancelled":
            done = gateway.cancel_payment(transaction_id, "order cancelled")
            settled = "cancelled"
        else:
            return

        if done:
            self._set_payment(order, status=settled)
        else:
            logger.warning(
                "Gateway did not confirm %s for order %s (%s)",
                settled,
                order.order_number,
                transaction_id,
            )

    def _mark_sold_out(self, session: Session, lines: list[OrderLine]) -> None:
        for line in lines:
            try:
                product = self.product_repo.get_by_id(session, uuid.UUID(line.sku))
                if product is None:
                    logger.warning("Ordered sku %s is not in the catalog", line.sku)
                    continue
                product.sold_out = True
                product.in_stock = False
                self.product_repo.update(session, product)
            except ValueError:
                logger.warning("Ordered sku %s is not a product id", line.sku)
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Could not mark %s as sold out", line.sku)

    def _clear_cart(self, session: Session, user_key: str) -> None:
        try:
            self.cart_service.clear_cart(session, cart_id=user_key, user_id=user_key)
        except SQLAlchemyError:
            logger.exception("Could not clear cart of %s after checkout", user_key)

    @staticmethod
    def _summary(order: Order) -> OrderSummary:
        return OrderSummary(
            id=order.id,
            order_number=order.order_number,
            status=order.status,
            final_amount=order.final_amount,
            item_count=sum(int(it.get("quantity", 0)) for it in order.items),
            created_at=order.created_at,
        )


def render_confirmation(order: Order) -> tuple[str, str]:
    """
    Plain-text and HTML bodies for the confirmation email.
    """
    lines_txt = [
        f"- {it['name']} ({it['brand']} {it['model']}) x{it['quantity']}: {it['order_price']:,} KRW"
        for it in order.items
    ]
    text_body = "\n".join(
        [
            f"Thank you for your order {order.order_number}.",
            "",
            *lines_txt,
            "",
            f"Subtotal: {order.total_amount:,} KRW",
            f"Shipping: {order.shipping_fee:,} KRW",
            f"Discount: -{order.discount_amount:,} KRW",
            f"Total: {order.final_amount:,} KRW",
        ]
    )

    rows = "".join(
        f"<tr><td>{html.escape(it['name'])}</td><td>{it['quantity']}</td><td>{it['order_price']:,}</td></tr>"
        for it in order.items
    )
    html_body = (
        f"<h2>Order {order.order_number} confirmed</h2>"
        f"<table><tr><th>Item</th><th>Qty</th><th>Price</th></tr>{rows}</table>"
        f"<p>Total: <b>{order.final_amount:,} KRW</b></p>"
    )
    return text_body, html_body
