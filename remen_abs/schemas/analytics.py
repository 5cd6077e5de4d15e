# remen_abs/schemas/analytics.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

SeriesRange = Literal["hourly", "daily", "weekly", "monthly"]


class PageViewCreate(SQLModel):
    """
    Beacon sent by the storefront on every route change.
    """

    model_config = ConfigDict(extra="forbid")

    path: str = Field(max_length=500)
    title: str | None = Field(default=None, max_length=200)

    @field_validator("path")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("path cannot be empty")
        return v


class PageViewAck(SQLModel):
    ok: bool = True
    recorded: bool


class VisitorStatsRead(SQLModel):
    total_visitors: int = 0
    hourly: dict[str, int] = {}
    daily: dict[str, int] = {}
    weekly: dict[str, int] = {}
    monthly: dict[str, int] = {}
    total_page_views: int = 0
    pages: dict[str, int] = {}
    last_updated: datetime | None = None


class SeriesPoint(SQLModel):
    key: str
    label: str
    visitors: int


class VisitorSeries(SQLModel):
    range: SeriesRange
    points: list[SeriesPoint]
