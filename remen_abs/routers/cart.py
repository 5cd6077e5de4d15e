# remen_abs/routers/cart.py
"""
Cart functions.

Each operation is a stateless POST endpoint named after the storefront
call (`/api/getCart`, `/api/addItem`, ...). Bodies always carry the
guest `cartId`; adding `userId` (plus a matching bearer token) targets
the signed-in user's cart instead.

  - OPTIONS -> 204 preflight answer, from any origin
  - any other method -> 405
  - missing body field -> 400
"""
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from remen_abs.core.auth import ensure_cart_owner, get_current_user
from remen_abs.core.cors import OPEN_CORS_HEADERS
from remen_abs.database import get_session
from remen_abs.models.user import User
from remen_abs.repositories.cart_repo import CartRepository
from remen_abs.schemas.cart import (
    AddItemRequest,
    CartRequest,
    CartResponse,
    MergeCartRequest,
    MessageResponse,
    RemoveItemRequest,
    UpdateItemRequest,
    UserCartRequest,
)
from remen_abs.services.cart_service import CartService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cart"])

cart_repo = CartRepository()
service = CartService(cart_repo)

CART_FUNCTIONS = (
    "/getCart",
    "/getUserCart",
    "/addItem",
    "/updateItem",
    "/removeItem",
    "/clearCart",
    "/mergeCartOnSignIn",
)


def preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=OPEN_CORS_HEADERS)


for _path in CART_FUNCTIONS:
    router.add_api_route(
        _path,
        preflight,
        methods=["OPTIONS"],
        include_in_schema=False,
    )


@router.post("/getCart", response_model=CartResponse)
def get_cart(
    payload: CartRequest,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
):
    """
    Return the cart; an unknown cart comes back empty (never 404).
    """
    ensure_cart_owner(current_user, payload.user_id)
    logger.info("getCart cartId=%s userId=%s", payload.cart_id, payload.user_id)
    cart = service.get_cart(session, payload.cart_id, payload.user_id)
    return CartResponse(cart=cart)


@router.post("/getUserCart", response_model=CartResponse)
def get_user_cart(
    payload: UserCartRequest,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
):
    """
    Return the signed-in user's cart (userId required).
    """
    ensure_cart_owner(current_user, payload.user_id)
    logger.info("getUserCart userId=%s", payload.user_id)
    cart = service.get_cart(session, payload.cart_id, payload.user_id)
    return CartResponse(cart=cart)


@router.post("/addItem", response_model=MessageResponse)
def add_item(
    payload: AddItemRequest,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
):
    """
    Add a product line, or raise its quantity when the sku is already there.
    """
    ensure_cart_owner(current_user, payload.user_id)
    logger.info(
        "addItem cartId=%s userId=%s sku=%s qty=%d",
        payload.cart_id,
        payload.user_id,
        payload.sku,
        payload.qty,
    )
    return MessageResponse(message=service.add_item(session, payload))


@router.post("/updateItem", response_model=MessageResponse)
def update_item(
    payload: UpdateItemRequest,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
):
    """
    Update qty and/or checked flag; qty <= 0 deletes the line.
    """
    ensure_cart_owner(current_user, payload.user_id)
    logger.info(
        "updateItem cartId=%s userId=%s sku=%s qty=%s checked=%s",
        payload.cart_id,
        payload.user_id,
        payload.sku,
        payload.qty,
        payload.checked,
    )
    return MessageResponse(message=service.update_item(session, payload))


@router.post("/removeItem", response_model=MessageResponse)
def remove_item(
    payload: RemoveItemRequest,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
):
    ensure_cart_owner(current_user, payload.user_id)
    logger.info(
        "removeItem cartId=%s userId=%s sku=%s",
        payload.cart_id,
        payload.user_id,
        payload.sku,
    )
    message = service.remove_item(
        session,
        cart_id=payload.cart_id,
        sku=payload.sku,
        user_id=payload.user_id,
    )
    return MessageResponse(message=message)


@router.post("/clearCart", response_model=MessageResponse)
def clear_cart(
    payload: CartRequest,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
):
    ensure_cart_owner(current_user, payload.user_id)
    logger.info("clearCart cartId=%s userId=%s", payload.cart_id, payload.user_id)
    message = service.clear_cart(session, payload.cart_id, payload.user_id)
    return MessageResponse(message=message)


@router.post("/mergeCartOnSignIn", response_model=MessageResponse)
def merge_cart_on_sign_in(
    payload: MergeCartRequest,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
):
    """
    Fold the guest cart into the user's cart and delete the guest cart.
    """
    ensure_cart_owner(current_user, payload.user_id)
    logger.info("mergeCartOnSignIn cartId=%s userId=%s", payload.cart_id, payload.user_id)
    message = service.merge_on_sign_in(session, payload.cart_id, payload.user_id)
    return MessageResponse(message=message)
