# remen_abs/services/user_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from remen_abs.models.user import User
from remen_abs.repositories.user_repo import UserRepository
from remen_abs.schemas.user import UserUpdate, UserRoleUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for customer and admin profiles.

    The profile row itself is provisioned in `get_current_user` the first
    time a Supabase token is seen; this service only edits it.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        return current_user

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update; only `name` and `phone` are editable.
        """
        changes = payload.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is not None:
            current_user.name = changes["name"]
        if "phone" in changes:
            current_user.phone = changes["phone"]

        return self.repo.update(session, current_user)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        role: str | None = None,
    ) -> list[User]:
        return self.repo.list_users(session, skip=skip, limit=limit, role=role)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def update_role(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change a user's role. Role values are checked by the schema (Literal).
        """
        user = self.get_user(session, user_id)
        previous = user.role
        user.role = payload.role
        user = self.repo.update(session, user)
        logger.info("User %s role %s -> %s", user.id, previous, user.role)
        return user
