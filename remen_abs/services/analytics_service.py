# remen_abs/services/analytics_service.py
import logging
import math
from datetime import date, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from remen_abs.models.analytics import PAGES, TOTALS, TOTAL_PAGE_VIEWS, TOTAL_VISITORS
from remen_abs.repositories.analytics_repo import AnalyticsRepository
from remen_abs.schemas.analytics import (
    SeriesPoint,
    SeriesRange,
    VisitorSeries,
    VisitorStatsRead,
)

logger = logging.getLogger(__name__)

BUCKETS = ("hourly", "daily", "weekly", "monthly")


def week_key(day: date) -> str:
    """
    `YYYY-Www`, weeks counted from the Sunday-started week holding Jan 1.
    """
    start = date(day.year, 1, 1)
    days = (day - start).days
    start_weekday = (start.weekday() + 1) % 7  # Sunday = 0
    week_number = math.ceil((days + start_weekday + 1) / 7)
    return f"{day.year}-W{week_number:02d}"


def month_key(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def bucket_keys(now: datetime) -> dict[str, str]:
    return {
        "hourly": f"{now.hour:02d}",
        "daily": now.date().isoformat(),
        "weekly": week_key(now.date()),
        "monthly": month_key(now.year, now.month),
    }


class AnalyticsService:
    """
    Visit counters.

    Every page view bumps one hour/day/week/month bucket, the visitor
    total, the page-view total and the counter for its path. Counter
    writes are best-effort: a failure is logged and never reaches the
    visitor.
    """

    def __init__(self, repo: AnalyticsRepository):
        self.repo = repo

    def track_page_view(
        self,
        session: Session,
        path: str,
        title: str | None = None,
        now: datetime | None = None,
    ) -> bool:
        now = now or datetime.now()
        keys = bucket_keys(now)

        try:
            for bucket in BUCKETS:
                self.repo.increment(session, bucket, keys[bucket])
            self.repo.increment(session, TOTALS, TOTAL_VISITORS)
            self.repo.increment(session, TOTALS, TOTAL_PAGE_VIEWS)
            self.repo.increment(session, PAGES, path)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Could not record page view for %s", path)
            return False

        logger.debug("Page view %s (%s)", path, title or "")
        return True

    def get_visitor_stats(self, session: Session) -> VisitorStatsRead:
        totals = self.repo.get_bucket(session, TOTALS)
        return VisitorStatsRead(
            total_visitors=totals.get(TOTAL_VISITORS, 0),
            hourly=self.repo.get_bucket(session, "hourly"),
            daily=self.repo.get_bucket(session, "daily"),
            weekly=self.repo.get_bucket(session, "weekly"),
            monthly=self.repo.get_bucket(session, "monthly"),
            total_page_views=totals.get(TOTAL_PAGE_VIEWS, 0),
            pages=self.repo.get_bucket(session, PAGES),
            last_updated=self.repo.last_updated(session),
        )

    def get_total_visitors(self, session: Session) -> int:
        return self.repo.get_count(session, TOTALS, TOTAL_VISITORS)

    def get_series(
        self,
        session: Session,
        range_: SeriesRange,
        today: datetime | None = None,
    ) -> VisitorSeries:
        stats = self.get_visitor_stats(session)
        today = today or datetime.now()
        formatters = {
            "hourly": format_hourly,
            "daily": format_daily,
            "weekly": format_weekly,
            "monthly": format_monthly,
        }
        counters = getattr(stats, range_)
        return VisitorSeries(range=range_, points=formatters[range_](counters, today))


def format_hourly(counters: dict[str, int], today: datetime) -> list[SeriesPoint]:
    return [
        SeriesPoint(key=f"{h:02d}", label=f"{h:02d}:00", visitors=counters.get(f"{h:02d}", 0))
        for h in range(24)
    ]


def format_daily(counters: dict[str, int], today: datetime) -> list[SeriesPoint]:
    points = []
    for i in range(29, -1, -1):
        day = today.date() - timedelta(days=i)
        key = day.isoformat()
        points.append(
            SeriesPoint(key=key, label=f"{day.month}/{day.day}", visitors=counters.get(key, 0))
        )
    return points


def format_weekly(counters: dict[str, int], today: datetime) -> list[SeriesPoint]:
    points = []
    for i in range(11, -1, -1):
        day = today.date() - timedelta(days=7 * i)
        key = week_key(day)
        points.append(
            SeriesPoint(key=key, label=f"{day.month}/{day.day}", visitors=counters.get(key, 0))
        )
    return points


def format_monthly(counters: dict[str, int], today: datetime) -> list[SeriesPoint]:
    points = []
    for i in range(11, -1, -1):
        index = today.year * 12 + (today.month - 1) - i
        key = month_key(index // 12, index % 12 + 1)
        points.append(SeriesPoint(key=key, label=key, visitors=counters.get(key, 0)))
    return points
