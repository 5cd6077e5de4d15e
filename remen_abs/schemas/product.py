# remen_abs/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class InspectionResults(SQLModel):
    """
    Bench test results recorded for a remanufactured module.
    """

    model_config = ConfigDict(populate_by_name=True)

    brake_test: str = Field(default="", alias="brakeTest")
    abs_test: str = Field(default="", alias="absTest")
    pressure_test: str = Field(default="", alias="pressureTest")
    electrical_test: str = Field(default="", alias="electricalTest")


class ProductCreate(SQLModel):
    """
    Payload for listing a new module (admin).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=200)
    brand: str = Field(max_length=50)
    model: str = Field(max_length=100)
    year: str | None = Field(default=None, max_length=20)
    price: int = Field(gt=0)
    description: str = ""
    features: list[str] = []
    image_url: str = ""
    image_urls: list[str] = []
    in_stock: bool = True
    rating: float = Field(default=0, ge=0, le=5)
    inspection_results: InspectionResults | None = None

    @field_validator("name", "brand", "model")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=200)
    brand: str | None = Field(default=None, max_length=50)
    model: str | None = Field(default=None, max_length=100)
    year: str | None = None
    price: int | None = Field(default=None, gt=0)
    description: str | None = None
    features: list[str] | None = None
    image_url: str | None = None
    image_urls: list[str] | None = None
    in_stock: bool | None = None
    sold_out: bool | None = None
    rating: float | None = Field(default=None, ge=0, le=5)
    inspection_results: InspectionResults | None = None

    @field_validator("name", "brand", "model")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductRead(SQLModel):
    id: uuid.UUID
    name: str
    brand: str
    model: str
    year: str | None = None
    price: int
    description: str
    features: list[str]
    image_url: str
    image_urls: list[str]
    in_stock: bool
    sold_out: bool
    rating: float
    inspection_results: InspectionResults | None = None
    created_at: datetime
