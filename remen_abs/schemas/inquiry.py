# remen_abs/schemas/inquiry.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

InquiryStatus = Literal["pending", "processing", "completed"]


class InquiryCreate(SQLModel):
    """
    Contact form payload (public, no login needed).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=50)
    email: EmailStr
    phone: str = Field(max_length=30)
    car_brand: str = Field(max_length=50)
    car_model: str = Field(max_length=100)
    message: str = Field(max_length=2000)

    @field_validator("name", "phone", "car_brand", "car_model", "message")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class InquiryRead(SQLModel):
    id: uuid.UUID
    name: str
    email: str
    phone: str
    car_brand: str
    car_model: str
    message: str
    status: InquiryStatus
    created_at: datetime


class InquiryStatusUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    status: InquiryStatus
