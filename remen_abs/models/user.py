# remen_abs/models/user.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from remen_abs.models.cart import utcnow


class User(SQLModel, table=True):
    """
    Customer / admin profile.

    Identity:
      - id: MUST match Supabase auth.users.id (UUID from JWT "sub")

    Role:
      - "user" | "admin"
      - guests have no row; they only own a guest cart via the cartId cookie.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from Supabase auth.users",
    )

    name: str = Field(
        max_length=50,
        description="Display name; first part of email by default",
    )

    phone: str | None = Field(default=None, max_length=30)

    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    created_at: datetime = Field(default_factory=utcnow)
