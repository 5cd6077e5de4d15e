# remen_abs/services/inquiry_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from remen_abs.models.inquiry import Inquiry
from remen_abs.repositories.inquiry_repo import InquiryRepository
from remen_abs.schemas.inquiry import InquiryCreate, InquiryStatusUpdate

logger = logging.getLogger(__name__)


class InquiryService:
    """
    Repair and purchase inquiries from the contact form.

    New inquiries always start as 'pending'; admins move them to
    'processing' and 'completed'.
    """

    def __init__(self, repo: InquiryRepository):
        self.repo = repo

    def submit(self, session: Session, payload: InquiryCreate) -> Inquiry:
        inquiry = Inquiry(**payload.model_dump(), status="pending")
        inquiry = self.repo.save(session, inquiry)
        logger.info(
            "Inquiry %s received (%s %s)",
            inquiry.id,
            inquiry.car_brand,
            inquiry.car_model,
        )
        return inquiry

    def list_inquiries(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status_filter: str | None = None,
    ) -> list[Inquiry]:
        return self.repo.list_inquiries(session, skip, limit, status=status_filter)

    def update_status(
        self,
        session: Session,
        inquiry_id: uuid.UUID,
        payload: InquiryStatusUpdate,
    ) -> Inquiry:
        inquiry = self.repo.get_by_id(session, inquiry_id)
        if not inquiry:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Inquiry not found",
            )
        inquiry.status = payload.status
        return self.repo.save(session, inquiry)
