# remen_abs/models/inquiry.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from remen_abs.models.cart import utcnow


class Inquiry(SQLModel, table=True):
    """
    Repair / purchase inquiry left through the contact form.
    """

    __tablename__ = "inquiries"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(max_length=50)
    email: str = Field(max_length=255)
    phone: str = Field(max_length=30)
    car_brand: str = Field(max_length=50)
    car_model: str = Field(max_length=100)
    message: str

    # pending | processing | completed
    status: str = Field(default="pending", index=True)

    created_at: datetime = Field(default_factory=utcnow)
