# remen_abs/repositories/analytics_repo.py
from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, select

from remen_abs.models.analytics import AnalyticsCounter
from remen_abs.models.cart import utcnow


class AnalyticsRepository:
    """
    Access to the visit counters.

    NOTE:
      - `increment` does not commit; all counters of a page view are
        written together by the service.
    """

    def increment(self, session: Session, bucket: str, key: str) -> None:
        """
        INSERT ... ON CONFLICT DO UPDATE SET count = count + 1.
        """
        now = utcnow()
        dialect = session.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        table = AnalyticsCounter.__table__

        stmt = insert(table).values(
            bucket=bucket, key=key, count=1, created_at=now, updated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.bucket, table.c.key],
            set_={"count": table.c.count + 1, "updated_at": now},
        )
        session.exec(stmt)

    def get_bucket(self, session: Session, bucket: str) -> dict[str, int]:
        rows = session.exec(
            select(AnalyticsCounter.key, AnalyticsCounter.count).where(
                AnalyticsCounter.bucket == bucket
            )
        ).all()
        return {key: count for key, count in rows}

    def get_count(self, session: Session, bucket: str, key: str) -> int:
        counter = session.get(AnalyticsCounter, (bucket, key))
        return counter.count if counter else 0

    def last_updated(self, session: Session):
        return session.exec(select(func.max(AnalyticsCounter.updated_at))).one()
