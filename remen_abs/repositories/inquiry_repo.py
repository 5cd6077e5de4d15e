# remen_abs/repositories/inquiry_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from remen_abs.models.inquiry import Inquiry


class InquiryRepository:
    def get_by_id(self, session: Session, inquiry_id: uuid.UUID) -> Inquiry | None:
        return session.get(Inquiry, inquiry_id)

    def list_inquiries(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Inquiry]:
        stmt = select(Inquiry)
        if status is not None:
            stmt = stmt.where(Inquiry.status == status)
        stmt = stmt.order_by(Inquiry.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def count_by_status(self, session: Session, status: str) -> int:
        stmt = select(func.count()).select_from(Inquiry).where(Inquiry.status == status)
        return int(session.exec(stmt).one() or 0)

    def save(self, session: Session, inquiry: Inquiry) -> Inquiry:
        session.add(inquiry)
        session.commit()
        session.refresh(inquiry)
        return inquiry
