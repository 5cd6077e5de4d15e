# remen_abs/routers/inquiries.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from remen_abs.core.auth import require_admin
from remen_abs.database import get_session
from remen_abs.repositories.inquiry_repo import InquiryRepository
from remen_abs.schemas.inquiry import (
    InquiryCreate,
    InquiryRead,
    InquiryStatus,
    InquiryStatusUpdate,
)
from remen_abs.services.inquiry_service import InquiryService

router = APIRouter(prefix="/inquiries", tags=["Inquiries"])

repo = InquiryRepository()
service = InquiryService(repo)


@router.post(
    "",
    response_model=InquiryRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_inquiry(
    payload: InquiryCreate,
    session: Session = Depends(get_session),
):
    """
    Leave a repair / purchase inquiry. Open to guests.
    """
    return service.submit(session, payload)


@router.get(
    "",
    response_model=list[InquiryRead],
    dependencies=[Depends(require_admin)],
)
def list_inquiries(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    status_filter: InquiryStatus | None = None,
):
    """
    All inquiries, newest first (admin only).
    """
    return service.list_inquiries(session, skip, limit, status_filter)


@router.patch(
    "/{inquiry_id}/status",
    response_model=InquiryRead,
    dependencies=[Depends(require_admin)],
)
def update_inquiry_status(
    inquiry_id: uuid.UUID,
    payload: InquiryStatusUpdate,
    session: Session = Depends(get_session),
):
    return service.update_status(session, inquiry_id, payload)
