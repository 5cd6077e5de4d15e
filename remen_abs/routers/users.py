# remen_abs/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from remen_abs.core.auth import require_auth, require_admin
from remen_abs.database import get_session
from remen_abs.models.user import User
from remen_abs.repositories.user_repo import UserRepository
from remen_abs.schemas.user import Role, UserRead, UserUpdate, UserRoleUpdate
from remen_abs.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.

    The row is created on first sight of a valid Supabase JWT, with a
    default name derived from the email and role="user".
    """
    return service.get_me(current_user)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update the authenticated user's name and/or phone.
    """
    return service.update_me(session, current_user, payload)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    role: Role | None = None,
):
    return service.list_users(session, skip, limit, role)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_user(session, user_id)


@router.patch(
    "/{user_id}/role",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
):
    """
    Update a user's role (admin only). Allowed roles: user, admin.
    """
    return service.update_role(session, user_id, payload)
